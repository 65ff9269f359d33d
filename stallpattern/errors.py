"""Error types for the stall pattern model."""


class ParseError(ValueError):
    """A trace record could not be parsed.

    Raised for a non-integer sequence id or a pattern character outside
    ``'='`` / ``'*'``.  Fails only the offending record.
    """

    def __init__(self, record: str, reason: str) -> None:
        self.record = record
        self.reason = reason
        super().__init__(f"{reason}: {record!r}")


class InvalidTarget(ValueError):
    """Generation targets rejected before any candidate is produced."""

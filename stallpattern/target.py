"""Generation targets for synthetic stall patterns."""

import math
from typing import Optional, Sequence, Tuple, Union

from stallpattern.errors import InvalidTarget
from stallpattern.statistics import GREATER, UNIT


# Sentinel: do not constrain candidates on their structural signature.
NO_STRUCTURE = "NONE"

SIGNATURE_SEPARATOR = ":"


def parse_signature(text: str) -> Optional[Tuple[str, ...]]:
    """Parse ``"U:G:U"`` into a signature tuple.

    ``"NONE"`` (or an empty string) yields ``None``.
    """
    text = text.strip()
    if not text or text == NO_STRUCTURE:
        return None
    symbols = tuple(s.strip() for s in text.split(SIGNATURE_SEPARATOR))
    for symbol in symbols:
        if symbol not in (UNIT, GREATER):
            raise InvalidTarget(f"unknown structure symbol {symbol!r} in {text!r}")
    return symbols


def signature_to_text(signature: Optional[Sequence[str]]) -> str:
    if signature is None:
        return NO_STRUCTURE
    return SIGNATURE_SEPARATOR.join(signature)


class GenerationTarget:
    """Statistics a batch of synthetic playouts should realise.

    Parameters
    ----------
    stall_ratio : float
        Target fraction of stalled seconds, in [0, 1).  0 requests traces
        without any stall.
    stall_duration : float
        Target mean stall duration in seconds.  Must be > 0 unless
        ``stall_ratio`` is 0.
    length : int
        Exact number of played seconds every accepted trace must have.
    count : int
        Number of playouts requested.
    seed : int
        Master seed the whole candidate batch derives from.
    structure : str or sequence of str
        Required structural signature (``"U:G"`` text or a sequence of
        symbols), or ``"NONE"`` for no constraint.
    """

    def __init__(
        self,
        stall_ratio: float,
        stall_duration: float,
        length: int,
        count: int,
        seed: int,
        structure: Union[str, Sequence[str], None] = NO_STRUCTURE,
    ) -> None:
        if not math.isfinite(stall_ratio) or not 0.0 <= stall_ratio < 1.0:
            raise InvalidTarget(f"stall_ratio must be in [0, 1), got {stall_ratio}")
        if not math.isfinite(stall_duration):
            raise InvalidTarget(f"stall_duration must be finite, got {stall_duration}")
        if stall_ratio > 0 and not stall_duration > 0:
            raise InvalidTarget(
                f"stall_duration must be > 0 when stalls are requested, got {stall_duration}"
            )
        if length <= 0:
            raise InvalidTarget(f"length must be positive, got {length}")
        if count < 0:
            raise InvalidTarget(f"count must be non-negative, got {count}")

        self.stall_ratio = float(stall_ratio)
        self.stall_duration = float(stall_duration)
        self.length = int(length)
        self.count = int(count)
        self.seed = int(seed)

        if structure is None or isinstance(structure, str):
            self.structure = parse_signature(structure or NO_STRUCTURE)
        else:
            self.structure = parse_signature(SIGNATURE_SEPARATOR.join(structure))

    @property
    def structure_text(self) -> str:
        return signature_to_text(self.structure)

    def __repr__(self) -> str:
        return (
            f"GenerationTarget(stall_ratio={self.stall_ratio}, "
            f"stall_duration={self.stall_duration}, length={self.length}, "
            f"count={self.count}, seed={self.seed}, structure={self.structure_text!r})"
        )

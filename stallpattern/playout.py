"""Playout traces for the stall pattern model.

A playout is a second-by-second record of what the viewer saw: every second
is either *played* (``=``) or *stalled* (``*``).  The textual record form is::

    <id>: <pattern>

e.g. ``"7: =====**====="``.  Play and stall totals are always derived from the
pattern so they can never drift out of step with it.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Tuple

from stallpattern.errors import ParseError


class State(Enum):
    """Playback state of one second of a trace."""

    PLAY = "="
    STALL = "*"

    @property
    def symbol(self) -> str:
        return self.value


_SYMBOLS = {state.value: state for state in State}


class Playout:
    """Immutable trace of play/stall seconds.

    Parameters
    ----------
    sequence_id : int
        Identifier of the trace within its batch.
    pattern : iterable of State
        Per-second states in temporal order.
    """

    def __init__(self, sequence_id: int, pattern: Iterable[State]) -> None:
        states = tuple(pattern)
        stall_time = sum(1 for s in states if s is State.STALL)
        self._sequence_id = int(sequence_id)
        self._pattern = states
        self._stall_time = stall_time
        self._video_duration = len(states) - stall_time

    @property
    def sequence_id(self) -> int:
        return self._sequence_id

    @property
    def pattern(self) -> Tuple[State, ...]:
        return self._pattern

    @property
    def video_duration(self) -> int:
        """Number of played seconds."""
        return self._video_duration

    @property
    def stall_time(self) -> int:
        """Number of stalled seconds."""
        return self._stall_time

    @property
    def total_time(self) -> int:
        return len(self._pattern)

    def pattern_text(self) -> str:
        return "".join(s.symbol for s in self._pattern)

    def with_id(self, sequence_id: int) -> Playout:
        """Return a copy of this playout under a different id."""
        return Playout(sequence_id, self._pattern)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Playout):
            return NotImplemented
        return self._sequence_id == other._sequence_id and self._pattern == other._pattern

    def __hash__(self) -> int:
        return hash((self._sequence_id, self._pattern))

    def __len__(self) -> int:
        return len(self._pattern)

    def __str__(self) -> str:
        return f"{self._sequence_id}: {self.pattern_text()}"

    def __repr__(self) -> str:
        return (
            f"Playout({self._sequence_id}, duration={self._video_duration}, "
            f"stall={self._stall_time})"
        )


def parse(text: str) -> Playout:
    """Parse a ``"<id>: <pattern>"`` record into a :class:`Playout`.

    Raises
    ------
    ParseError
        If the record has no colon, the id is not an integer, or the pattern
        contains a character other than ``'='`` and ``'*'``.
    """
    head, sep, body = text.partition(":")
    if not sep:
        raise ParseError(text, "missing ':' separator")
    digits = head.strip()
    if not digits.lstrip("-").isdigit():
        raise ParseError(text, "sequence id is not an integer")
    try:
        sequence_id = int(digits)
    except ValueError:
        raise ParseError(text, "sequence id is not an integer") from None

    states = []
    for char in body.strip():
        state = _SYMBOLS.get(char)
        if state is None:
            raise ParseError(text, f"unexpected pattern character {char!r}")
        states.append(state)
    return Playout(sequence_id, states)


def from_pattern(sequence_id: int, pattern: Iterable[State]) -> Playout:
    """Build a playout straight from a state sequence (generator path)."""
    return Playout(sequence_id, pattern)

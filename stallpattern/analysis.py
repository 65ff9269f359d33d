"""Batch analytics over recorded playout traces.

Input is newline-delimited ``"<id>: <pattern>"`` records; an empty line ends
the input.  Malformed records are logged and skipped, and records failing
:func:`~stallpattern.statistics.is_sane` are dropped.
"""

import logging
from typing import Iterable, Iterator, List

from stallpattern.errors import ParseError
from stallpattern.playout import Playout, parse
from stallpattern.statistics import SANE_MIN_VIDEO_DURATION, format_stats, is_sane


logger = logging.getLogger(__name__)


def read_playouts(lines: Iterable[str]) -> Iterator[Playout]:
    """Parse records until the first empty line, skipping malformed ones."""
    for lineno, line in enumerate(lines, start=1):
        line = line.rstrip("\r\n")
        if not line.strip():
            break
        try:
            yield parse(line)
        except ParseError as exc:
            logger.warning("skipping record on line %d: %s", lineno, exc)


def admissible_playouts(
    lines: Iterable[str],
    min_video_duration: int = SANE_MIN_VIDEO_DURATION,
) -> Iterator[Playout]:
    """Yield only the parsed playouts that pass the admissibility check."""
    for playout in read_playouts(lines):
        if is_sane(playout, min_video_duration):
            yield playout
        else:
            logger.debug(
                "dropping playout %d (duration=%d, stall=%d)",
                playout.sequence_id, playout.video_duration, playout.stall_time,
            )


def analyze_lines(
    lines: Iterable[str],
    min_video_duration: int = SANE_MIN_VIDEO_DURATION,
) -> List[str]:
    """Return one tab-separated stats row per admissible record."""
    return [format_stats(p) for p in admissible_playouts(lines, min_video_duration)]

"""Run-length statistics for playout traces.

Every metric here is a pure function of a playout's pattern.  The pattern is
cut into maximal same-state *runs*; stall runs are the stall events a viewer
experiences and play runs are the gaps between them.

From the aggregate numbers a two-state Markov ("Gilbert") model is recovered
by inverting its stationary distribution and mean sojourn time::

    sr = stall_time / (video_duration + stall_time)
    p  = (sr / (1 - sr)) / mean_stall_duration      # Play -> Stall
    q  = 1 / mean_stall_duration                    # Stall -> Play
"""

import math
from itertools import groupby
from typing import List, Sequence, Tuple

import numpy as np

from stallpattern.playout import Playout, State


# Admissibility floor for analytics: traces must play for longer than this.
SANE_MIN_VIDEO_DURATION = 30

UNIT = "U"
GREATER = "G"


# ---------------------------------------------------------------------------
# Run extraction
# ---------------------------------------------------------------------------

def runs(pattern: Sequence[State]) -> List[Tuple[State, ...]]:
    """Split *pattern* into maximal runs of identical adjacent states."""
    return [tuple(group) for _, group in groupby(pattern)]


def stall_events(pattern: Sequence[State]) -> List[Tuple[State, ...]]:
    return [run for run in runs(pattern) if run[0] is State.STALL]


def play_events(pattern: Sequence[State]) -> List[Tuple[State, ...]]:
    return [run for run in runs(pattern) if run[0] is State.PLAY]


def stall_durations(pattern: Sequence[State]) -> List[int]:
    return [len(run) for run in stall_events(pattern)]


def stall_times(playout: Playout) -> List[Tuple[int, int]]:
    """Return ``(start_second, duration)`` for each stall event.

    Start seconds are 1-indexed; events are in temporal order.
    """
    events = []
    position = 1
    for run in runs(playout.pattern):
        if run[0] is State.STALL:
            events.append((position, len(run)))
        position += len(run)
    return events


# ---------------------------------------------------------------------------
# Aggregate statistics
# ---------------------------------------------------------------------------

def stall_stats(pattern: Sequence[State]) -> Tuple[float, float, float]:
    """Mean and population std-dev of stall durations, and mean play-run length.

    Returns
    -------
    tuple of float
        ``(mean_stall_duration, stall_duration_stddev, mean_inter_stall_gap)``

    Raises
    ------
    ValueError
        If the pattern has no stall run or no play run; guard with
        :func:`is_sane` first.
    """
    stalls = [len(run) for run in stall_events(pattern)]
    plays = [len(run) for run in play_events(pattern)]
    if not stalls:
        raise ValueError("pattern has no stall events")
    if not plays:
        raise ValueError("pattern has no play events")
    return (
        float(np.mean(stalls)),
        float(np.std(stalls)),
        float(np.mean(plays)),
    )


def mean_stall_duration(pattern: Sequence[State]) -> float:
    """Mean stall-run length, or 0.0 for a pattern without stalls."""
    stalls = stall_durations(pattern)
    if not stalls:
        return 0.0
    return float(np.mean(stalls))


def stall_ratio(playout: Playout) -> float:
    """Fraction of all seconds spent stalled."""
    if playout.total_time == 0:
        return 0.0
    return playout.stall_time / playout.total_time


def is_sane(playout: Playout, min_video_duration: int = SANE_MIN_VIDEO_DURATION) -> bool:
    """Admissibility predicate of the analytics path."""
    return (
        playout.video_duration > 0
        and playout.video_duration > min_video_duration
        and playout.stall_time > 0
    )


def gilbert_params(playout: Playout) -> Tuple[float, float]:
    """Recover the Gilbert ``(p, q)`` transition probabilities of a trace.

    A mean stall duration of zero is floored to 1 to avoid dividing by zero.
    """
    sr = stall_ratio(playout)
    sd = mean_stall_duration(playout.pattern)
    if sd <= 0:
        sd = 1.0
    p = (sr / (1 - sr)) / sd
    q = 1 / sd
    return p, q


# ---------------------------------------------------------------------------
# Structure
# ---------------------------------------------------------------------------

def stall_structure(playout: Playout) -> List[int]:
    """Each stall duration as a multiple of the shortest one (rounded up)."""
    durations = stall_durations(playout.pattern)
    if not durations:
        return []
    shortest = min(durations)
    return [math.ceil(d / shortest) for d in durations]


def abstract_structure(playout: Playout) -> Tuple[str, ...]:
    """Structural signature: ``U`` for each shortest stall, ``G`` for longer ones."""
    durations = stall_durations(playout.pattern)
    if not durations:
        return ()
    shortest = min(durations)
    return tuple(UNIT if d == shortest else GREATER for d in durations)


# ---------------------------------------------------------------------------
# Output projection
# ---------------------------------------------------------------------------

def stats_record(playout: Playout) -> tuple:
    """Return the 9-field statistics projection of an admissible playout.

    Fields: id, duration, total stall time, stall ratio (stall over played
    seconds), mean stall duration, stall duration std-dev, mean inter-stall
    time, Gilbert p, Gilbert q.
    """
    mean_stall, stddev, mean_gap = stall_stats(playout.pattern)
    p, q = gilbert_params(playout)
    return (
        playout.sequence_id,
        playout.video_duration,
        playout.stall_time,
        playout.stall_time / playout.video_duration,
        mean_stall,
        stddev,
        mean_gap,
        p,
        q,
    )


def format_stats(playout: Playout) -> str:
    """Tab separated form of :func:`stats_record`."""
    return "\t".join(str(field) for field in stats_record(playout))

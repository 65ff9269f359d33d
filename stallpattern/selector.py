"""Rejection filter selecting synthetic playouts that match a target.

Candidates are consumed in seed order; the first ``k`` that pass every
acceptance criterion are kept.  The search stops at ``k`` accepted or after
``candidate_cap`` candidates, whichever comes first, so an unachievable target
returns a short (possibly empty) result instead of searching forever.
"""

import logging
from collections import Counter
from itertools import islice
from typing import Iterable, List, Optional, Tuple

from stallpattern.playout import Playout, State
from stallpattern.statistics import abstract_structure, mean_stall_duration, stall_ratio
from stallpattern.target import GenerationTarget


logger = logging.getLogger(__name__)

CANDIDATE_CAP = 50_000
RATIO_TOLERANCE = 0.1
DURATION_TOLERANCE = 0.1

# Rejection reasons, in the order they are checked.
STALLS_PRESENT = "stalls_present"
STALL_RATIO = "stall_ratio"
STALL_DURATION = "stall_duration"
TRAILING_STALL = "trailing_stall"
STRUCTURE = "structure"
VIDEO_DURATION = "video_duration"


class SelectionResult:
    """Outcome of one selection run.

    ``accepted`` holds the playouts that passed, in seed order.  A result with
    fewer playouts than ``requested`` is a partial success, not an error.
    """

    def __init__(
        self,
        accepted: List[Playout],
        requested: int,
        examined: int,
        rejections: Counter,
    ) -> None:
        self.accepted = accepted
        self.requested = requested
        self.examined = examined
        self.rejections = rejections

    @property
    def complete(self) -> bool:
        return len(self.accepted) >= self.requested

    @property
    def shortfall(self) -> int:
        return max(0, self.requested - len(self.accepted))

    def __len__(self) -> int:
        return len(self.accepted)

    def __repr__(self) -> str:
        return (
            f"SelectionResult(accepted={len(self.accepted)}/{self.requested}, "
            f"examined={self.examined})"
        )


class CandidateSelector:
    """Accept/reject candidates against a :class:`GenerationTarget`.

    Parameters
    ----------
    candidate_cap : int
        Maximum number of candidates examined per selection (default 50 000).
    ratio_tolerance : float
        Absolute tolerance on the realised stall ratio (default 0.1).
    duration_tolerance : float
        Relative tolerance on the realised mean stall duration (default 0.1).
    """

    def __init__(
        self,
        candidate_cap: int = CANDIDATE_CAP,
        ratio_tolerance: float = RATIO_TOLERANCE,
        duration_tolerance: float = DURATION_TOLERANCE,
    ) -> None:
        if candidate_cap < 0:
            raise ValueError("candidate_cap must be >= 0")
        self.candidate_cap = candidate_cap
        self.ratio_tolerance = ratio_tolerance
        self.duration_tolerance = duration_tolerance

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def rejection_reason(self, playout: Playout, target: GenerationTarget) -> Optional[str]:
        """Return the first criterion *playout* fails, or ``None`` if it passes."""
        realized_ratio = stall_ratio(playout)

        if target.stall_ratio == 0:
            return None if realized_ratio == 0 else STALLS_PRESENT

        if abs(target.stall_ratio - realized_ratio) >= self.ratio_tolerance:
            return STALL_RATIO

        realized_duration = mean_stall_duration(playout.pattern)
        deviation = abs(target.stall_duration - realized_duration) / target.stall_duration
        if deviation > self.duration_tolerance:
            return STALL_DURATION

        if playout.pattern and playout.pattern[-1] is State.STALL:
            return TRAILING_STALL

        if target.structure is not None and abstract_structure(playout) != target.structure:
            return STRUCTURE

        if playout.video_duration != target.length:
            return VIDEO_DURATION

        return None

    def accepts(self, playout: Playout, target: GenerationTarget) -> bool:
        return self.rejection_reason(playout, target) is None

    def select(
        self,
        k: int,
        target: GenerationTarget,
        candidates: Iterable[Tuple[int, Playout]],
    ) -> SelectionResult:
        """Keep the first *k* accepted ``(seed_index, playout)`` candidates.

        At most ``candidate_cap`` candidates are pulled from *candidates*.
        """
        accepted: List[Playout] = []
        rejections: Counter = Counter()
        examined = 0

        if k > 0:
            for _, playout in islice(candidates, self.candidate_cap):
                examined += 1
                reason = self.rejection_reason(playout, target)
                if reason is None:
                    accepted.append(playout)
                    if len(accepted) >= k:
                        break
                else:
                    rejections[reason] += 1

        result = SelectionResult(accepted, k, examined, rejections)
        logger.debug("rejections for %r: %s", target, dict(rejections))
        if result.complete:
            logger.info("accepted %d/%d after %d candidates", len(accepted), k, examined)
        else:
            logger.warning(
                "only %d/%d candidates accepted within %d examined",
                len(accepted), k, examined,
            )
        return result

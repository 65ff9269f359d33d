"""Two-state Markov (Gilbert) synthesis of playout candidates.

The chain moves between PLAY and STALL with::

    P(PLAY -> STALL) = p = (sr / (1 - sr)) / sd
    P(STALL -> PLAY) = q = 1 / sd

where ``sr`` is the target stall ratio and ``sd`` the target mean stall
duration.  Each candidate draws from its own ``numpy`` generator seeded with
one integer; the per-candidate seeds are themselves drawn from a generator
seeded with the batch's master seed, so a whole batch is reproducible from a
single number.
"""

import math
from typing import Iterator, Tuple

import numpy as np

from stallpattern.playout import Playout, State, from_pattern
from stallpattern.target import GenerationTarget


# Per-candidate seeds are drawn from [0, SEED_UPPER_BOUND).
SEED_UPPER_BOUND = 2 ** 31 - 1


def calibrate_stall_ratio(stall_ratio: float) -> float:
    """Empirical correction applied to a requested stall ratio: ``r * (1 + r)``."""
    return stall_ratio * (1 + stall_ratio)


def transition_probabilities(stall_ratio: float, stall_duration: float) -> Tuple[float, float]:
    """Return ``(p, q)`` for a target ratio and mean stall duration.

    Durations <= 0 are floored to 1.  Ratios at or above 1 give a negative
    ``p``; such a chain never leaves PLAY.
    """
    if stall_duration <= 0:
        stall_duration = 1.0
    p = (stall_ratio / (1 - stall_ratio)) / stall_duration
    q = 1 / stall_duration
    return p, q


def length_budget(target: GenerationTarget) -> int:
    """Total candidate length: the played seconds plus the expected stall seconds."""
    ratio = calibrate_stall_ratio(target.stall_ratio)
    return target.length + math.ceil(ratio * target.length)


class GilbertChain:
    """Seeded two-state Markov chain emitting one :class:`State` per step.

    The chain always starts in PLAY.  Each step emits the current state and
    then draws one uniform value ``u`` in [0, 1): PLAY stays PLAY iff
    ``u >= p``, STALL stays STALL iff ``u >= q``.

    Parameters
    ----------
    p : float
        PLAY -> STALL transition probability.
    q : float
        STALL -> PLAY transition probability.
    seed : int or None
        Random seed for reproducibility.
    """

    def __init__(self, p: float, q: float, seed: int = None) -> None:
        self.p = p
        self.q = q
        self._seed = seed
        self._rng = np.random.default_rng(seed)
        self.state = State.PLAY

    def step(self) -> State:
        """Emit the current state and advance the chain by one second."""
        current = self.state
        u = self._rng.random()
        if current is State.PLAY:
            self.state = State.PLAY if u >= self.p else State.STALL
        else:
            self.state = State.STALL if u >= self.q else State.PLAY
        return current

    def reset(self, seed: int = None) -> None:
        """Return to PLAY and restart the random stream."""
        if seed is not None:
            self._seed = seed
        self._rng = np.random.default_rng(self._seed)
        self.state = State.PLAY


def generate(
    stall_ratio: float,
    stall_duration: float,
    budget: int,
    seed: int,
) -> Iterator[State]:
    """Lazily yield exactly *budget* states of one synthetic candidate."""
    p, q = transition_probabilities(stall_ratio, stall_duration)
    chain = GilbertChain(p, q, seed=seed)
    for _ in range(budget):
        yield chain.step()


def candidate_seeds(master_seed: int, count: int) -> Iterator[int]:
    """Yield *count* per-candidate seeds derived from *master_seed*."""
    rng = np.random.default_rng(master_seed)
    for _ in range(count):
        yield int(rng.integers(0, SEED_UPPER_BOUND))


def candidate_stream(target: GenerationTarget, cap: int) -> Iterator[Tuple[int, Playout]]:
    """Yield ``(seed_index, playout)`` candidates for *target*, at most *cap* of them.

    Candidates are built with the calibrated stall ratio and the
    over-provisioned :func:`length_budget`.  Each playout's id is its 1-based
    position in the stream.
    """
    ratio = calibrate_stall_ratio(target.stall_ratio)
    budget = length_budget(target)
    for index, seed in enumerate(candidate_seeds(target.seed, cap)):
        states = generate(ratio, target.stall_duration, budget, seed)
        yield index, from_pattern(index + 1, states)

"""Synthetic stall pattern generation.

Ties :func:`~stallpattern.markov.candidate_stream` and
:class:`~stallpattern.selector.CandidateSelector` into a single run.

Example usage::

    from stallpattern.generation import PatternGeneration
    from stallpattern.target import GenerationTarget

    target = GenerationTarget(stall_ratio=0.1, stall_duration=3, length=100,
                              count=10, seed=42)
    run = PatternGeneration(target)
    result = run.run()
    run.print_report(result)
"""

from __future__ import annotations

from stallpattern.markov import (
    calibrate_stall_ratio,
    candidate_stream,
    length_budget,
    transition_probabilities,
)
from stallpattern.selector import CandidateSelector, SelectionResult
from stallpattern.target import GenerationTarget


class PatternGeneration:
    """Rejection-sampling search for playouts matching *target*.

    Parameters
    ----------
    target : GenerationTarget
        Requested statistics, count and master seed.
    selector_kwargs : dict or None
        Keyword arguments forwarded to
        :class:`~stallpattern.selector.CandidateSelector`.
    """

    def __init__(self, target: GenerationTarget, selector_kwargs: dict = None) -> None:
        self.target = target
        self.selector = CandidateSelector(**(selector_kwargs or {}))

    @property
    def transition_probabilities(self):
        """Gilbert ``(p, q)`` the candidates are drawn with."""
        return transition_probabilities(
            calibrate_stall_ratio(self.target.stall_ratio), self.target.stall_duration
        )

    @property
    def length_budget(self) -> int:
        return length_budget(self.target)

    def run(self) -> SelectionResult:
        """Search the seeded candidate stream and return the selection."""
        candidates = candidate_stream(self.target, self.selector.candidate_cap)
        return self.selector.select(self.target.count, self.target, candidates)

    def print_report(self, result: SelectionResult) -> None:
        """Print a human-readable summary of a generation run."""
        p, q = self.transition_probabilities
        sep = "-" * 52
        print(sep)
        print(" Stall Pattern Generation – Report")
        print(sep)
        rows = [
            ("Target stall ratio",           f"{self.target.stall_ratio:.3f}"),
            ("Target stall duration (s)",    f"{self.target.stall_duration:.2f}"),
            ("Target play duration (s)",     f"{self.target.length}"),
            ("Structure",                    self.target.structure_text),
            ("Candidate length (s)",         f"{self.length_budget}"),
            ("Gilbert p",                    f"{p:.4f}"),
            ("Gilbert q",                    f"{q:.4f}"),
            ("Candidates examined",          f"{result.examined}"),
            ("Patterns accepted",            f"{len(result.accepted)}/{result.requested}"),
        ]
        for label, value in rows:
            print(f"  {label:<36} {value}")
        for reason, count in sorted(result.rejections.items()):
            print(f"  {'Rejected (' + reason + ')':<36} {count}")
        print(sep)

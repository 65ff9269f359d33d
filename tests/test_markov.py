"""Tests for stallpattern.markov module."""

import pytest
from stallpattern.markov import (
    GilbertChain,
    calibrate_stall_ratio,
    candidate_seeds,
    candidate_stream,
    generate,
    length_budget,
    transition_probabilities,
)
from stallpattern.playout import State
from stallpattern.target import GenerationTarget


def test_calibration_inflates_ratio():
    assert calibrate_stall_ratio(0.1) == pytest.approx(0.11)
    assert calibrate_stall_ratio(0.0) == 0.0


def test_transition_probabilities():
    p, q = transition_probabilities(0.2, 2.0)
    assert p == pytest.approx(0.125)
    assert q == pytest.approx(0.5)


def test_non_positive_duration_is_floored():
    assert transition_probabilities(0.5, 0.0) == pytest.approx((1.0, 1.0))
    assert transition_probabilities(0.5, -3.0) == pytest.approx((1.0, 1.0))


def test_generate_yields_exact_budget():
    states = list(generate(0.1, 3.0, 250, seed=0))
    assert len(states) == 250
    assert all(isinstance(s, State) for s in states)


def test_generate_starts_in_play():
    for seed in range(10):
        first = next(generate(0.5, 1.0, 5, seed=seed))
        assert first is State.PLAY


def test_generate_is_lazy():
    stream = generate(0.1, 3.0, 10 ** 9, seed=1)
    assert next(stream) is State.PLAY


def test_deterministic_with_same_seed():
    a = list(generate(0.2, 2.0, 300, seed=99))
    b = list(generate(0.2, 2.0, 300, seed=99))
    assert a == b


def test_different_seeds_differ():
    a = list(generate(0.2, 2.0, 300, seed=1))
    b = list(generate(0.2, 2.0, 300, seed=2))
    assert a != b


def test_zero_ratio_never_stalls():
    assert set(generate(0.0, 3.0, 500, seed=3)) == {State.PLAY}


def test_ratio_above_one_never_stalls():
    # p is negative, so PLAY is never left
    assert set(generate(1.71, 0.001, 50, seed=4)) == {State.PLAY}


def test_certain_transitions_alternate():
    chain = GilbertChain(p=1.0, q=1.0, seed=5)
    states = [chain.step() for _ in range(6)]
    assert states == [State.PLAY, State.STALL] * 3


def test_chain_reset_replays_stream():
    chain = GilbertChain(p=0.3, q=0.4, seed=6)
    first = [chain.step() for _ in range(40)]
    chain.reset()
    assert chain.state is State.PLAY
    assert [chain.step() for _ in range(40)] == first


def test_candidate_seeds_reproducible():
    seeds = list(candidate_seeds(42, 20))
    assert len(seeds) == 20
    assert seeds == list(candidate_seeds(42, 20))
    assert seeds != list(candidate_seeds(43, 20))
    assert all(isinstance(s, int) and s >= 0 for s in seeds)


def test_length_budget_over_provisions():
    target = GenerationTarget(0.25, 3, 100, 1, 0)
    # calibrated ratio 0.3125 -> 32 expected stall seconds
    assert length_budget(target) == 132
    assert length_budget(GenerationTarget(0.0, 0, 80, 1, 0)) == 80


def test_candidate_stream_ids_follow_seed_order():
    target = GenerationTarget(0.25, 3, 100, 1, 7)
    candidates = list(candidate_stream(target, cap=5))
    assert [index for index, _ in candidates] == [0, 1, 2, 3, 4]
    assert [p.sequence_id for _, p in candidates] == [1, 2, 3, 4, 5]
    assert all(len(p) == 132 for _, p in candidates)


def test_candidate_stream_respects_cap():
    target = GenerationTarget(0.1, 3, 20, 1, 7)
    assert len(list(candidate_stream(target, cap=3))) == 3

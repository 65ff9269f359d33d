"""Tests for stallpattern.statistics module."""

import pytest
from stallpattern.markov import transition_probabilities
from stallpattern.playout import State, parse
from stallpattern import statistics as st


def _trace(pattern: str, sequence_id: int = 1):
    return parse(f"{sequence_id}: {pattern}")


# Five 2-second stalls after 8-second play runs: 40 played, 10 stalled.
SANE_PATTERN = ("=" * 8 + "**") * 5


def test_runs_partition_pattern_in_order():
    playout = _trace("==***=*====**")
    stalls = st.stall_events(playout.pattern)
    plays = st.play_events(playout.pattern)
    assert sum(len(r) for r in stalls) + sum(len(r) for r in plays) == len(playout)
    joined = "".join(s.symbol for run in st.runs(playout.pattern) for s in run)
    assert joined == playout.pattern_text()
    assert [len(r) for r in stalls] == [3, 1, 2]
    assert [len(r) for r in plays] == [2, 1, 4]


def test_stall_times_are_one_indexed():
    playout = _trace("=" * 9 + "*" * 5 + "=" * 31)
    assert playout.video_duration == 40
    assert st.stall_times(playout) == [(10, 5)]
    assert st.abstract_structure(playout) == ("U",)


def test_stall_times_leading_stall():
    assert st.stall_times(_trace("**==*=")) == [(1, 2), (5, 1)]


def test_short_trace_is_not_sane():
    playout = _trace("===*======")
    assert playout.stall_time > 0
    assert not st.is_sane(playout)


def test_trace_without_stalls_is_not_sane():
    assert not st.is_sane(_trace("=" * 60))


def test_sane_threshold_is_configurable():
    playout = _trace("=====*=====")
    assert not st.is_sane(playout)
    assert st.is_sane(playout, min_video_duration=5)


def test_stall_stats_population_stddev():
    mean_stall, stddev, mean_gap = st.stall_stats(_trace("=====****===**=====").pattern)
    assert mean_stall == pytest.approx(3.0)
    assert stddev == pytest.approx(1.0)
    assert mean_gap == pytest.approx(13 / 3)


def test_stall_stats_requires_stall_events():
    with pytest.raises(ValueError):
        st.stall_stats(_trace("=" * 10).pattern)


def test_gilbert_params_of_sane_trace():
    playout = _trace(SANE_PATTERN)
    p, q = st.gilbert_params(playout)
    assert p == pytest.approx(0.125)
    assert q == pytest.approx(0.5)
    assert 0 < p <= 1 and 0 < q <= 1


def test_gilbert_params_match_synthesis_formula():
    playout = _trace("=" * 12 + "***" + "=" * 20 + "*" + "=" * 5 + "**")
    p, q = st.gilbert_params(playout)
    mean_stall = st.mean_stall_duration(playout.pattern)
    assert transition_probabilities(st.stall_ratio(playout), mean_stall) == pytest.approx((p, q))


def test_gilbert_params_floor_duration_without_stalls():
    p, q = st.gilbert_params(_trace("=" * 40))
    assert p == 0.0
    assert q == 1.0


def test_equal_stalls_are_all_unit():
    playout = _trace("==**===**====**=")
    assert st.abstract_structure(playout) == ("U", "U", "U")
    assert st.stall_structure(playout) == [1, 1, 1]


def test_longer_stall_is_greater():
    playout = _trace("=****==**=")
    assert st.abstract_structure(playout) == ("G", "U")
    assert st.stall_structure(playout) == [2, 1]


def test_stall_structure_rounds_up():
    assert st.stall_structure(_trace("=*****==**=")) == [3, 1]


def test_structure_of_trace_without_stalls_is_empty():
    assert st.abstract_structure(_trace("=====")) == ()
    assert st.stall_structure(_trace("=====")) == []


def test_stats_record_fields():
    record = st.stats_record(_trace(SANE_PATTERN, sequence_id=4))
    assert len(record) == 9
    assert record[:3] == (4, 40, 10)
    assert record[3] == pytest.approx(0.25)     # stall over played seconds
    assert record[4] == pytest.approx(2.0)
    assert record[5] == pytest.approx(0.0)
    assert record[6] == pytest.approx(8.0)
    assert record[7] == pytest.approx(0.125)
    assert record[8] == pytest.approx(0.5)


def test_format_stats_is_tab_separated():
    line = st.format_stats(_trace(SANE_PATTERN, sequence_id=4))
    fields = line.split("\t")
    assert len(fields) == 9
    assert fields[:3] == ["4", "40", "10"]
    assert float(fields[8]) == pytest.approx(0.5)


def test_stall_ratio_of_empty_trace():
    assert st.stall_ratio(parse("1: ")) == 0.0
    assert st.mean_stall_duration(()) == 0.0
    assert st.runs([State.PLAY]) == [(State.PLAY,)]


def test_trace_without_played_seconds_is_never_sane():
    assert not st.is_sane(_trace("***"), min_video_duration=-1)

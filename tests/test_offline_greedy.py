import pytest

from astrasim.common import ComType, InterDimensionScheduling
from astrasim.offline_greedy import (
    DimElapsedTime,
    OfflineGreedy,
    SharedSchedule,
    dimension_bandwidths,
)

GREEDY = InterDimensionScheduling.OFFLINE_GREEDY
FLEX = InterDimensionScheduling.OFFLINE_GREEDY_FLEX


def make_planner(sys_id=0, schedule=None):
    return OfflineGreedy(sys_id, [4, 2], [100.0, 50.0], schedule)


def test_dimension_bandwidths_unbroken():
    table = [10.0, 20.0, 30.0]
    assert dimension_bandwidths(lambda dim: table[dim], 3, -1) == table


def test_dimension_bandwidths_broken_dimension_repeats():
    table = [10.0, 20.0]
    result = dimension_bandwidths(lambda dim: table[dim], 3, 0)
    assert result == [table[0], table[0], table[1]]


def test_dim_elapsed_time_ordering():
    assert DimElapsedTime(0, 1.0) < DimElapsedTime(1, 2.0)
    assert not DimElapsedTime(0, 2.0) < DimElapsedTime(1, 1.0)


def test_mismatched_lengths_rejected():
    with pytest.raises(ValueError):
        OfflineGreedy(0, [4, 2], [1.0])


def test_chunk_size_round_trip_reduce_scatter():
    planner = make_planner()
    entry = DimElapsedTime(0)
    chunk = 1048576 * 4
    planner._add_load(entry, 0, chunk, ComType.REDUCE_SCATTER)
    size = planner.get_chunk_size_from_elapsed_time(
        entry.elapsed_time, entry, ComType.REDUCE_SCATTER
    )
    assert size == chunk


def test_chunk_size_zero_elapsed_is_zero():
    planner = make_planner()
    assert planner.get_chunk_size_from_elapsed_time(
        0.0, DimElapsedTime(1), ComType.ALL_GATHER
    ) == 0


def test_first_chunk_uses_natural_order():
    planner = make_planner()
    order, remaining = planner.get_chunk_scheduling(
        1, 4096, 1024, [True, True], GREEDY, ComType.REDUCE_SCATTER
    )
    assert order == [0, 1]
    assert remaining == 4096 - 1024
    assert all(dim.elapsed_time > 0 for dim in planner.dim_elapsed_time)


def test_second_chunk_starts_on_less_loaded_dimension():
    planner = make_planner()
    planner.get_chunk_scheduling(1, 4096, 1024, [True, True], GREEDY, ComType.REDUCE_SCATTER)
    order, remaining = planner.get_chunk_scheduling(
        2, 3072, 1024, [True, True], GREEDY, ComType.REDUCE_SCATTER
    )
    assert order == [1, 0]
    assert remaining == 3072 - 1024


def test_all_reduce_planned_as_reduce_scatter():
    first = make_planner()
    second = make_planner()
    a = first.get_chunk_scheduling(1, 4096, 1024, [True, True], GREEDY, ComType.ALL_REDUCE)
    b = second.get_chunk_scheduling(1, 4096, 1024, [True, True], GREEDY, ComType.REDUCE_SCATTER)
    assert a == b
    assert [d.elapsed_time for d in first.dim_elapsed_time] == pytest.approx(
        [d.elapsed_time for d in second.dim_elapsed_time]
    )


def test_all_gather_first_chunk():
    planner = make_planner()
    order, remaining = planner.get_chunk_scheduling(
        1, 4096, 1024, [True, True], GREEDY, ComType.ALL_GATHER
    )
    assert order == [0, 1]
    assert remaining == 4096 - 1024


def test_reset_loads_clears_and_renumbers():
    planner = make_planner()
    planner.get_chunk_scheduling(1, 4096, 1024, [True, True], GREEDY, ComType.REDUCE_SCATTER)
    planner.get_chunk_scheduling(2, 3072, 1024, [True, True], GREEDY, ComType.REDUCE_SCATTER)
    planner.reset_loads()
    assert [d.elapsed_time for d in planner.dim_elapsed_time] == [0.0, 0.0]
    assert [d.dim_num for d in planner.dim_elapsed_time] == [0, 1]


def test_schedule_shared_between_planners_and_released():
    shared = SharedSchedule()
    leader = make_planner(0, shared)
    follower = make_planner(1, shared)
    follower_result = follower.get_chunk_scheduling(
        7, 4096, 1024, [True, True], GREEDY, ComType.REDUCE_SCATTER
    )
    assert 7 in shared.chunk_schedule
    leader_result = leader.get_chunk_scheduling(
        7, 4096, 1024, [True, True], GREEDY, ComType.REDUCE_SCATTER
    )
    assert leader_result == follower_result
    assert shared.chunk_schedule == {}
    assert shared.schedule_consumer == {}
    assert shared.global_chunk_size == {}
    assert all(d.elapsed_time == 0.0 for d in follower.dim_elapsed_time)


def test_missing_leader_raises():
    planner = make_planner(1)
    with pytest.raises(LookupError):
        planner.get_chunk_scheduling(1, 4096, 1024, [True, True], GREEDY, ComType.REDUCE_SCATTER)


def test_flex_small_chunk_records_schedule_and_appends_skipped():
    planner = make_planner()
    order, remaining = planner.get_chunk_scheduling(
        3, 4096, 1024, [False, True], FLEX, ComType.REDUCE_SCATTER
    )
    assert planner.schedule.chunk_schedule[3] == [0, 1]
    assert order == [0, 1, 0]
    assert remaining == 4096 - 1024
    assert planner.schedule.global_chunk_size[3] == 1024


def test_flex_all_involved():
    planner = make_planner()
    order, remaining = planner.get_chunk_scheduling(
        4, 512, 1024, [True, True], FLEX, ComType.REDUCE_SCATTER
    )
    assert order == [0, 1]
    assert remaining == 0
    assert planner.schedule.global_chunk_size[4] == 512


def test_uninvolved_dimension_gets_no_load():
    planner = make_planner()
    planner.get_chunk_scheduling(1, 4096, 1024, [False, True], GREEDY, ComType.REDUCE_SCATTER)
    loads = {d.dim_num: d.elapsed_time for d in planner.dim_elapsed_time}
    assert loads[0] == 0.0
    assert loads[1] > 0.0
"""Offline greedy planning of the order in which chunks visit dimensions."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from astrasim.common import ComType, InterDimensionScheduling

logger = logging.getLogger(__name__)

_MIB = 1048576


@dataclass
class DimElapsedTime:
    """The load accumulated so far on one dimension."""

    dim_num: int
    elapsed_time: float = 0.0

    def __lt__(self, other: DimElapsedTime) -> bool:
        return self.elapsed_time < other.elapsed_time


@dataclass
class SharedSchedule:
    """Chunk schedules shared by the planners of all NPUs in a system."""

    chunk_schedule: dict[int, list[int]] = field(default_factory=dict)
    schedule_consumer: dict[int, int] = field(default_factory=dict)
    global_chunk_size: dict[int, int] = field(default_factory=dict)
    planners: dict[int, OfflineGreedy] = field(default_factory=dict)

    def register(self, planner: OfflineGreedy) -> None:
        """Add the planner of one NPU to the system."""
        self.planners[planner.sys_id] = planner

    @property
    def leader(self) -> OfflineGreedy:
        """The planner of NPU 0, which computes schedules for everyone."""
        try:
            return self.planners[0]
        except KeyError:
            raise LookupError("no planner is registered for NPU 0") from None


def dimension_bandwidths(
    bw_at_dimension: Callable[[int], float], dim_count: int, dim_to_break: int
) -> list[float]:
    """Bandwidth of each logical dimension.

    When a physical dimension is broken in two (``dim_to_break`` is not -1),
    the dimensions after it take the bandwidth of the physical dimension
    one below them.
    """
    if dim_to_break == -1:
        return [bw_at_dimension(dim) for dim in range(dim_count)]
    return [
        bw_at_dimension(dim - 1 if dim > dim_to_break else dim)
        for dim in range(dim_count)
    ]


class OfflineGreedy:
    """Chooses, per chunk, the order of dimensions that balances their loads."""

    def __init__(
        self,
        sys_id: int,
        dim_size: Sequence[int],
        dim_bw: Sequence[float],
        schedule: SharedSchedule | None = None,
    ) -> None:
        if len(dim_size) != len(dim_bw):
            raise ValueError(
                f"{len(dim_size)} dimension sizes but {len(dim_bw)} bandwidths"
            )
        self.sys_id = sys_id
        self.dim_size = list(dim_size)
        self.dim_bw = list(dim_bw)
        self.dim_elapsed_time = [DimElapsedTime(dim) for dim in range(len(self.dim_size))]
        self.schedule = schedule if schedule is not None else SharedSchedule()
        self.schedule.register(self)
        if sys_id == 0:
            logger.info(
                "Themis is configured with the following parameters: "
                "Dim size: %s BW per dim: %s",
                ", ".join(str(size) for size in self.dim_size),
                ", ".join(str(bw) for bw in self.dim_bw),
            )

    def reset_loads(self) -> None:
        """Clear all loads and renumber the dimensions in list order."""
        for dim_num, dim in enumerate(self.dim_elapsed_time):
            dim.elapsed_time = 0.0
            dim.dim_num = dim_num

    def get_chunk_size_from_elapsed_time(
        self, elapsed_time: float, dim: DimElapsedTime, comm_type: ComType
    ) -> int:
        """The chunk size whose transfer on ``dim`` takes ``elapsed_time``."""
        size = self.dim_size[dim.dim_num]
        ratio = self.dim_bw[dim.dim_num] / self.dim_bw[0]
        if comm_type is ComType.REDUCE_SCATTER:
            share = (size - 1) / size
        else:
            share = float(size - 1)
        return int(((elapsed_time * ratio) / share) * _MIB)

    def get_chunk_scheduling(
        self,
        chunk_id: int,
        remaining_data_size: int,
        recommended_chunk_size: int,
        dimensions_involved: Sequence[bool],
        inter_dim_scheduling: InterDimensionScheduling,
        comm_type: ComType,
    ) -> tuple[list[int], int]:
        """Return the dimension order for a chunk and the data left afterwards."""
        shared = self.schedule
        if chunk_id in shared.chunk_schedule:
            consumers = shared.schedule_consumer.get(chunk_id, 0) + 1
            shared.schedule_consumer[chunk_id] = consumers
            remaining = remaining_data_size - shared.global_chunk_size.get(chunk_id, 0)
            if consumers == len(shared.planners):
                result = shared.chunk_schedule.pop(chunk_id)
                shared.schedule_consumer.pop(chunk_id, None)
                shared.global_chunk_size.pop(chunk_id, None)
                return result, remaining
            return list(shared.chunk_schedule[chunk_id]), remaining
        if self.sys_id != 0:
            return shared.leader.get_chunk_scheduling(
                chunk_id,
                remaining_data_size,
                recommended_chunk_size,
                dimensions_involved,
                inter_dim_scheduling,
                comm_type,
            )
        return self._plan(
            chunk_id,
            remaining_data_size,
            recommended_chunk_size,
            dimensions_involved,
            inter_dim_scheduling,
            comm_type,
        )

    def _active(self, dim_num: int, involved: Sequence[bool]) -> bool:
        return bool(involved[dim_num]) and self.dim_size[dim_num] != 1

    def _store(self, chunk_id: int, result: list[int]) -> None:
        self.schedule.chunk_schedule[chunk_id] = list(result)
        self.schedule.schedule_consumer[chunk_id] = 1

    def _add_load(
        self, entry: DimElapsedTime, dim_num: int, chunk_size: int, comm_type: ComType
    ) -> int:
        size = self.dim_size[dim_num]
        ratio = self.dim_bw[dim_num] / self.dim_bw[0]
        if comm_type is ComType.REDUCE_SCATTER:
            entry.elapsed_time += ((chunk_size / _MIB) * ((size - 1) / size)) / ratio
            return chunk_size // size
        entry.elapsed_time += ((chunk_size / _MIB) * (size - 1)) / ratio
        return chunk_size * size

    def _size_to_balance(
        self,
        dims: list[DimElapsedTime],
        pointer: int,
        dim: DimElapsedTime,
        involved: Sequence[bool],
        comm_type: ComType,
    ) -> int:
        if comm_type is ComType.REDUCE_SCATTER:
            difference = abs(dims[-1].elapsed_time - dim.elapsed_time)
            return self.get_chunk_size_from_elapsed_time(
                difference, dim, ComType.REDUCE_SCATTER
            )
        last = len(dims) - 1
        while not self._active(dims[last].dim_num, involved):
            last -= 1
        difference = abs(dims[last].elapsed_time - dim.elapsed_time)
        size = self.get_chunk_size_from_elapsed_time(
            difference, dims[last], ComType.ALL_GATHER
        )
        last -= 1
        while pointer <= last:
            if self._active(dims[last].dim_num, involved):
                size //= self.dim_size[dims[last].dim_num]
            last -= 1
        return size

    def _spread_load(
        self, chunk_size: int, involved: Sequence[bool], comm_type: ComType
    ) -> list[int]:
        """Put the chunk on every dimension in natural order; return skipped ones."""
        dims = self.dim_elapsed_time
        first: dict[int, DimElapsedTime] = {}
        for entry in dims:
            first.setdefault(entry.dim_num, entry)
        reordered = [
            first[dim_num] if dim_num in first else dataclasses.replace(dims[0])
            for dim_num in range(len(dims))
        ]
        if comm_type is ComType.ALL_GATHER:
            reordered.reverse()
        self.dim_elapsed_time = reordered
        skipped = []
        for dim_num, entry in enumerate(reordered):
            if not self._active(dim_num, involved):
                skipped.append(dim_num)
                continue
            chunk_size = self._add_load(entry, dim_num, chunk_size, comm_type)
        return skipped

    def _plan(
        self,
        chunk_id: int,
        remaining: int,
        recommended_chunk_size: int,
        involved: Sequence[bool],
        scheduling: InterDimensionScheduling,
        comm_type: ComType,
    ) -> tuple[list[int], int]:
        shared = self.schedule
        if comm_type is ComType.ALL_REDUCE:
            comm_type = ComType.REDUCE_SCATTER
        dims = sorted(self.dim_elapsed_time, key=lambda entry: entry.elapsed_time)
        if comm_type is ComType.ALL_GATHER:
            dims.reverse()
        self.dim_elapsed_time = dims

        result: list[int] = []
        chunk_size = recommended_chunk_size
        calculated = False
        if scheduling is InterDimensionScheduling.OFFLINE_GREEDY:
            taken = min(remaining, chunk_size)
            shared.global_chunk_size[chunk_id] = taken
            remaining -= taken

        for pointer, dim in enumerate(dims):
            if not self._active(dim.dim_num, involved):
                result.append(dim.dim_num)
                continue
            if not calculated and scheduling in (
                InterDimensionScheduling.OFFLINE_GREEDY_FLEX,
                InterDimensionScheduling.OFFLINE_GREEDY,
            ):
                calculated = True
                estimate = self._size_to_balance(dims, pointer, dim, involved, comm_type)
                if scheduling is InterDimensionScheduling.OFFLINE_GREEDY_FLEX:
                    if estimate < recommended_chunk_size:
                        taken = min(remaining, recommended_chunk_size)
                        shared.global_chunk_size[chunk_id] = taken
                        remaining -= taken
                        result = list(range(len(dims)))
                        self._store(chunk_id, result)
                        result.extend(self._spread_load(taken, involved, comm_type))
                        return result, remaining
                    chunk_size = estimate
                    taken = min(remaining, chunk_size)
                    shared.global_chunk_size[chunk_id] = taken
                    remaining -= taken
                elif estimate < recommended_chunk_size // 16:
                    result = list(range(len(dims)))
                    self._store(chunk_id, result)
                    self._spread_load(chunk_size, involved, comm_type)
                    return result, remaining
            result.append(dim.dim_num)
            chunk_size = self._add_load(dim, dim.dim_num, chunk_size, comm_type)

        self._store(chunk_id, result)
        return result, remaining
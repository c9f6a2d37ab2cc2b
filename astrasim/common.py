"""Shared enumerations, request records and callback interfaces."""

from __future__ import annotations

import dataclasses
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum

Tick = int

CLOCK_PERIOD = 1
FREQ = 1275 * 1000 * 1000


class TimeType(IntEnum):
    SE = 0
    MS = 1
    US = 2
    NS = 3
    FS = 4


class ReqType(IntEnum):
    UINT8 = 0
    BFLOAT16 = 1
    FP32 = 2


class ComType(IntEnum):
    NONE = 0
    REDUCE_SCATTER = 1
    ALL_GATHER = 2
    ALL_REDUCE = 3
    ALL_TO_ALL = 4
    ALL_REDUCE_ALL_TO_ALL = 5


class CollectiveOptimization(IntEnum):
    BASELINE = 0
    LOCAL_BW_AWARE = 1


class CollectiveImplType(IntEnum):
    RING = 0
    ONE_RING = 1
    DIRECT = 2
    ONE_DIRECT = 3
    ALL_TO_ALL = 4
    DOUBLE_BINARY_TREE_LOCAL_ALL_TO_ALL = 5
    LOCAL_RING_NODE_A2A_GLOBAL_DBT = 6
    HIERARCHICAL_RING = 7
    DOUBLE_BINARY_TREE = 8
    HALVING_DOUBLING = 9
    ONE_HALVING_DOUBLING = 10


class CollectiveBarrier(IntEnum):
    BLOCKING = 0
    NON_BLOCKING = 1


class SchedulingPolicy(IntEnum):
    LIFO = 0
    FIFO = 1
    EXPLICIT = 2
    NONE = 3


class IntraDimensionScheduling(IntEnum):
    FIFO = 0
    RG = 1
    SMALLEST_FIRST = 2
    LESS_REMAINING_PHASE_FIRST = 3


class InterDimensionScheduling(IntEnum):
    ASCENDING = 0
    ONLINE_GREEDY = 1
    ROUND_ROBIN = 2
    OFFLINE_GREEDY = 3
    OFFLINE_GREEDY_FLEX = 4


class InjectionPolicy(IntEnum):
    INFINITE = 0
    AGGRESSIVE = 1
    SEMI_AGGRESSIVE = 2
    EXTRA_AGGRESSIVE = 3
    NORMAL = 4


class PacketRouting(IntEnum):
    HARDWARE = 0
    SOFTWARE = 1


class BusType(IntEnum):
    BOTH = 0
    SHARED = 1
    MEM = 2


class StreamState(IntEnum):
    CREATED = 0
    TRANSFERRING = 1
    READY = 2
    EXECUTING = 3
    ZOMBIE = 4
    DEAD = 5


class EventType(IntEnum):
    CALL_EVENTS = 0
    GENERAL = 1
    RENDEZVOUS_SEND = 2
    RENDEZVOUS_RECV = 3
    PACKET_RECEIVED = 4
    PACKET_SENT = 5
    REC_FINISHED = 6
    SEND_FINISHED = 7
    PROCESSING_FINISHED = 8
    NPU_TO_MA = 9
    MA_TO_NPU = 10
    CONSIDER_PROCESS = 11
    CONSIDER_RETIRE = 12
    CONSIDER_SEND_BACK = 13
    STREAM_INIT = 14
    COMM_PROCESSING_FINISHED = 15
    COLLECTIVE_COMMUNICATION_FINISHED = 16
    COMP_FINISHED = 17
    MEM_LOAD_FINISHED = 18
    MEM_STORE_FINISHED = 19


@dataclass
class TimeSpec:
    """A point or span of simulated time in a given resolution."""

    time_res: TimeType
    time_val: float


@dataclass
class SimRequest:
    """Parameters of a simulated send or receive."""

    src_rank: int = 0
    dst_rank: int = 0
    tag: int = 0
    req_type: ReqType = ReqType.UINT8
    req_count: int = 0
    vnet: int = 0
    layer_num: int = 0


@dataclass
class MetaData:
    """Metadata attached to a simulated message."""

    timestamp: TimeSpec = field(default_factory=lambda: TimeSpec(TimeType.SE, 0.0))


class CallData:
    """Base class for data passed along with an event."""


@dataclass
class IntData(CallData):
    """Event data carrying a single integer."""

    data: int


class Callable(ABC):
    """Something that can be notified of an event."""

    @abstractmethod
    def call(self, event: EventType, data: CallData | None) -> None:
        """Handle ``event`` with its accompanying ``data``."""


@dataclass
class CollectiveImpl:
    """The implementation chosen for collectives on one dimension."""

    type: CollectiveImplType

    def clone(self) -> CollectiveImpl:
        return dataclasses.replace(self)


@dataclass
class DirectCollectiveImpl(CollectiveImpl):
    """A direct collective implementation with an injection window."""

    direct_collective_window: int

    def clone(self) -> DirectCollectiveImpl:
        return dataclasses.replace(self)
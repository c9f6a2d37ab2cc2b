"""Interfaces to the memory and network backends, and result records."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any
from collections.abc import Callable as CallableType

from astrasim.common import SimRequest, TimeSpec


class TensorLocationType(IntEnum):
    LOCAL_MEMORY = 0
    REMOTE_MEMORY = 1


class AstraMemoryAPI(ABC):
    """A memory backend that serves tensor loads and stores."""

    @abstractmethod
    def set_sys(self, sys_id: int, sys: Any) -> None:
        """Attach the system with identifier ``sys_id``."""

    @abstractmethod
    def issue(self, tensor_loc: TensorLocationType, tensor_size: int, wlhd: Any) -> None:
        """Issue a memory request for a tensor of ``tensor_size`` bytes."""

    @abstractmethod
    def get_local_mem_runtime(self, tensor_size: int) -> int:
        """Return the time taken to access ``tensor_size`` bytes locally."""


class BackendType(IntEnum):
    NOT_SPECIFIED = 0
    GARNET = 1
    NS3 = 2
    ANALYTICAL = 3


MessageHandler = CallableType[[Any], None]


class AstraNetworkAPI(ABC):
    """A network backend that moves messages between ranks."""

    def __init__(self, rank: int) -> None:
        self.rank = rank

    @abstractmethod
    def sim_send(
        self,
        buffer: Any,
        count: int,
        req_type: int,
        dst: int,
        tag: int,
        request: SimRequest,
        msg_handler: MessageHandler,
        fun_arg: Any,
    ) -> int:
        """Send ``count`` bytes to ``dst``."""

    @abstractmethod
    def sim_recv(
        self,
        buffer: Any,
        count: int,
        req_type: int,
        src: int,
        tag: int,
        request: SimRequest,
        msg_handler: MessageHandler,
        fun_arg: Any,
    ) -> int:
        """Receive ``count`` bytes from ``src``."""

    @abstractmethod
    def schedule(self, delta: TimeSpec, fun: MessageHandler, fun_arg: Any) -> None:
        """Call ``fun(fun_arg)`` after ``delta``."""

    def get_backend_type(self) -> BackendType:
        return BackendType.NOT_SPECIFIED

    def sim_comm_get_rank(self) -> int:
        return self.rank

    def sim_comm_set_rank(self, rank: int) -> int:
        self.rank = rank
        return self.rank

    @abstractmethod
    def sim_get_time(self) -> TimeSpec:
        """Return the current simulated time."""

    def get_bw_at_dimension(self, dim: int) -> float:
        """Bandwidth of dimension ``dim``; -1 when the backend does not know."""
        return -1.0


@dataclass
class LayerData:
    """Per-layer compute and communication totals."""

    layer_name: str = ""
    total_forward_pass_compute: float = 0.0
    total_weight_grad_compute: float = 0.0
    total_input_grad_compute: float = 0.0
    total_waiting_for_fwd_comm: float = 0.0
    total_waiting_for_wg_comm: float = 0.0
    total_waiting_for_ig_comm: float = 0.0
    total_fwd_comm: float = 0.0
    total_weight_grad_comm: float = 0.0
    total_input_grad_comm: float = 0.0
    # (phase number, latency) pairs
    avg_queuing_delay: list[tuple[int, float]] = field(default_factory=list)
    avg_network_message_delay: list[tuple[int, float]] = field(default_factory=list)


@dataclass
class AstraSimDataAPI:
    """Summary of a finished simulation run."""

    run_name: str = ""
    layers_stats: list[LayerData] = field(default_factory=list)
    avg_chunk_latency_per_logical_dimension: list[float] = field(default_factory=list)
    workload_finished_time: float = 0.0
    total_compute: float = 0.0
    total_exposed_comm: float = 0.0
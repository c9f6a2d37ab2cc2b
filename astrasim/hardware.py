"""Bookkeeping of in-flight work on an NPU's hardware resources."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class NodeType(Enum):
    INVALID_NODE = auto()
    MEM_LOAD_NODE = auto()
    MEM_STORE_NODE = auto()
    COMP_NODE = auto()
    COMM_SEND_NODE = auto()
    COMM_RECV_NODE = auto()
    COMM_COLL_NODE = auto()


_MEMORY_NODES = frozenset({NodeType.MEM_LOAD_NODE, NodeType.MEM_STORE_NODE})
_COMM_NODES = frozenset(
    {NodeType.COMM_SEND_NODE, NodeType.COMM_RECV_NODE, NodeType.COMM_COLL_NODE}
)


@dataclass
class HardwareResource:
    """Counts in-flight memory, compute and communication operations."""

    num_npus: int
    num_in_flight_mem_reqs: int = 0
    num_in_flight_comps: int = 0
    num_in_flight_comms: int = 0

    def _adjust(self, node_type: NodeType, step: int) -> None:
        if node_type in _MEMORY_NODES:
            self.num_in_flight_mem_reqs += step
        elif node_type is NodeType.COMP_NODE:
            self.num_in_flight_comps += step
        elif node_type in _COMM_NODES:
            self.num_in_flight_comms += step

    def occupy(self, node_type: NodeType) -> None:
        self._adjust(node_type, 1)

    def release(self, node_type: NodeType) -> None:
        self._adjust(node_type, -1)

    def is_available(self, node_type: NodeType) -> bool:
        """Only compute nodes are limited, by the number of NPUs."""
        return not (
            node_type is NodeType.COMP_NODE and self.num_in_flight_comps >= self.num_npus
        )
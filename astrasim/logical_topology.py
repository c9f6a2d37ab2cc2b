"""Abstract logical topologies and the tree node they are built from."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum

from astrasim.common import ComType


class LogicalTopology(ABC):
    """A logical arrangement of NPUs over one or more dimensions."""

    def get_topology(self) -> LogicalTopology:
        """Return the topology to use for the next collective."""
        return self

    @abstractmethod
    def get_num_of_dimensions(self) -> int:
        """Number of logical dimensions."""

    @abstractmethod
    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        """Number of nodes taking part in ``dimension``."""

    @abstractmethod
    def get_basic_topology_at_dimension(
        self, dimension: int, com_type: ComType
    ) -> BasicLogicalTopology | None:
        """The one-dimensional topology serving ``com_type`` on ``dimension``."""


class BasicTopology(IntEnum):
    RING = 0
    BINARY_TREE = 1


class BasicLogicalTopology(LogicalTopology):
    """A single-dimension topology such as a ring or a binary tree."""

    def __init__(self, basic_topology: BasicTopology) -> None:
        self.basic_topology = basic_topology

    def get_num_of_dimensions(self) -> int:
        return 1

    def get_basic_topology_at_dimension(
        self, dimension: int, com_type: ComType
    ) -> BasicLogicalTopology:
        return self


class ComplexLogicalTopology(LogicalTopology):
    """A topology composed of several basic topologies, one per dimension."""


@dataclass(eq=False)
class Node:
    """A compute node placed in a tree."""

    id: int
    parent: Node | None = field(default=None, repr=False)
    left_child: Node | None = None
    right_child: Node | None = None
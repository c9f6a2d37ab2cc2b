"""Ring-shaped logical topology."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum

from astrasim.logical_topology import BasicLogicalTopology, BasicTopology

logger = logging.getLogger(__name__)


class Direction(Enum):
    CLOCKWISE = 0
    ANTICLOCKWISE = 1


class Dimension(Enum):
    LOCAL = 0
    VERTICAL = 1
    HORIZONTAL = 2
    NA = 3


_DIMENSION_NAMES = {
    Dimension.VERTICAL: "vertical",
    Dimension.HORIZONTAL: "horizontal",
}


class RingTopology(BasicLogicalTopology):
    """NPUs arranged in a ring, stepped through clockwise or anticlockwise."""

    def __init__(
        self,
        dimension: Dimension,
        node_id: int,
        total_nodes_in_ring: int,
        index_in_ring: int,
        offset: int,
    ) -> None:
        self._setup(dimension, node_id, total_nodes_in_ring, index_in_ring, offset)
        if node_id == 0:
            logger.info(
                "ring of node 0, id: %d dimension: %s total nodes in ring: %d "
                "index in ring: %d offset: %d",
                node_id,
                self.name,
                total_nodes_in_ring,
                index_in_ring,
                offset,
            )
        self._id_to_index[node_id] = index_in_ring
        self._index_to_id[index_in_ring] = node_id
        current = node_id
        for _ in range(total_nodes_in_ring - 1):
            current = self._receiver_homogeneous(current, Direction.CLOCKWISE, offset)

    @classmethod
    def from_npus(
        cls, dimension: Dimension, node_id: int, npus: Iterable[int]
    ) -> RingTopology:
        """Build a ring over an explicit list of NPU identifiers."""
        members = list(npus)
        ring = cls.__new__(cls)
        ring._setup(dimension, node_id, len(members), -1, -1)
        for index, npu in enumerate(members):
            ring._id_to_index[npu] = index
            ring._index_to_id[index] = npu
            if npu == node_id:
                ring.index_in_ring = index
        logger.info(
            "custom ring, id: %d dimension: %s total nodes in ring: %d index in ring: %d",
            node_id,
            ring.name,
            ring.total_nodes_in_ring,
            ring.index_in_ring,
        )
        if ring.index_in_ring < 0:
            raise ValueError(f"node {node_id} is not among the ring's NPUs")
        return ring

    def _setup(
        self,
        dimension: Dimension,
        node_id: int,
        total_nodes_in_ring: int,
        index_in_ring: int,
        offset: int,
    ) -> None:
        super().__init__(BasicTopology.RING)
        self.name = _DIMENSION_NAMES.get(dimension, "local")
        self.node_id = node_id
        self.total_nodes_in_ring = total_nodes_in_ring
        self.index_in_ring = index_in_ring
        self.dimension = dimension
        self.offset = offset
        self._id_to_index: dict[int, int] = {}
        self._index_to_id: dict[int, int] = {}

    def _index_of(self, node_id: int) -> int:
        try:
            return self._id_to_index[node_id]
        except KeyError:
            raise KeyError(f"node {node_id} is not in this ring") from None

    def _receiver_homogeneous(self, node_id: int, direction: Direction, offset: int) -> int:
        index = self._index_of(node_id)
        if direction is Direction.CLOCKWISE:
            receiver = node_id + offset
            if index == self.total_nodes_in_ring - 1:
                receiver -= self.total_nodes_in_ring * offset
                index = 0
            else:
                index += 1
        else:
            receiver = node_id - offset
            if index == 0:
                receiver += self.total_nodes_in_ring * offset
                index = self.total_nodes_in_ring - 1
            else:
                index -= 1
        if receiver < 0:
            raise ValueError(
                f"negative receiver {receiver} in {self.name} ring of node {self.node_id} "
                f"(index {index}, node id {node_id}, offset {offset}, "
                f"index in ring {self.index_in_ring})"
            )
        self._id_to_index[receiver] = index
        self._index_to_id[index] = receiver
        return receiver

    def _step(self, node_id: int, forward: bool) -> int:
        index = self._index_of(node_id)
        step = 1 if forward else -1
        return self._index_to_id[(index + step) % self.total_nodes_in_ring]

    def get_receiver(self, node_id: int, direction: Direction) -> int:
        """The node that ``node_id`` sends to in ``direction``."""
        return self._step(node_id, direction is Direction.CLOCKWISE)

    def get_sender(self, node_id: int, direction: Direction) -> int:
        """The node that ``node_id`` receives from in ``direction``."""
        return self._step(node_id, direction is Direction.ANTICLOCKWISE)

    def get_nodes_in_ring(self) -> int:
        return self.total_nodes_in_ring

    def is_enabled(self) -> bool:
        """True when this ring's first member is node 0."""
        if self.offset <= 0:
            raise ValueError("ring has no positive offset")
        return self.node_id - self.index_in_ring * self.offset == 0

    def get_dimension(self) -> Dimension:
        return self.dimension

    def get_index_in_ring(self) -> int:
        return self.index_in_ring

    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        return self.get_nodes_in_ring()
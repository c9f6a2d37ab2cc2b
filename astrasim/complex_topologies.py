"""Multi-dimensional logical topologies built from rings and binary trees."""

from __future__ import annotations

import math
from collections.abc import Sequence

from astrasim.binary_tree import BinaryTree, TreeType
from astrasim.common import CollectiveImpl, CollectiveImplType, ComType
from astrasim.logical_topology import (
    BasicLogicalTopology,
    ComplexLogicalTopology,
    LogicalTopology,
)
from astrasim.ring_topology import Dimension, RingTopology

_PER_DIMENSION_RINGS = frozenset(
    {
        CollectiveImplType.RING,
        CollectiveImplType.DIRECT,
        CollectiveImplType.HALVING_DOUBLING,
    }
)
_WHOLE_SYSTEM_RINGS = frozenset(
    {
        CollectiveImplType.ONE_RING,
        CollectiveImplType.ONE_DIRECT,
        CollectiveImplType.ONE_HALVING_DOUBLING,
    }
)


class DoubleBinaryTreeTopology(ComplexLogicalTopology):
    """Two complementary binary trees used alternately."""

    def __init__(self, node_id: int, total_tree_nodes: int, start: int, stride: int) -> None:
        self.dbmax = BinaryTree(node_id, TreeType.ROOT_MAX, total_tree_nodes, start, stride)
        self.dbmin = BinaryTree(node_id, TreeType.ROOT_MIN, total_tree_nodes, start, stride)
        self.counter = 0

    def get_topology(self) -> BinaryTree:
        """Return the max-rooted and min-rooted trees in turn."""
        tree = self.dbmax if self.counter % 2 == 0 else self.dbmin
        self.counter += 1
        return tree

    def get_basic_topology_at_dimension(
        self, dimension: int, com_type: ComType
    ) -> BasicLogicalTopology | None:
        if dimension != 0:
            return None
        return self.get_topology().get_basic_topology_at_dimension(0, com_type)

    def get_num_of_dimensions(self) -> int:
        return 1

    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        return self.dbmin.get_num_of_nodes_in_dimension(0)


class GeneralComplexTopology(ComplexLogicalTopology):
    """One topology per dimension, chosen by that dimension's collective implementation."""

    def __init__(
        self,
        node_id: int,
        dimension_size: Sequence[int],
        collective_impl: Sequence[CollectiveImpl],
    ) -> None:
        sizes = list(dimension_size)
        impls = list(collective_impl)
        if len(impls) > len(sizes):
            raise ValueError(
                f"{len(impls)} collective implementations given for {len(sizes)} dimensions"
            )
        self.dimension_topology: list[LogicalTopology] = []
        offset = 1
        last_dim = len(impls) - 1
        for dim, (impl, size) in enumerate(zip(impls, sizes)):
            if impl.type in _PER_DIMENSION_RINGS:
                self.dimension_topology.append(
                    RingTopology(
                        Dimension.NA,
                        node_id,
                        size,
                        (node_id % (offset * size)) // offset,
                        offset,
                    )
                )
            elif impl.type in _WHOLE_SYSTEM_RINGS:
                total_npus = math.prod(sizes)
                self.dimension_topology.append(
                    RingTopology(Dimension.NA, node_id, total_npus, node_id % total_npus, 1)
                )
                return
            elif impl.type is CollectiveImplType.DOUBLE_BINARY_TREE:
                if dim == last_dim:
                    start = node_id % offset
                else:
                    start = (node_id - node_id % (offset * size)) + node_id % offset
                self.dimension_topology.append(
                    DoubleBinaryTreeTopology(node_id, size, start, offset)
                )
            offset *= size

    def _topology_at(self, dimension: int) -> LogicalTopology:
        if not 0 <= dimension < len(self.dimension_topology):
            raise IndexError(
                f"dim: {dimension} requested! but max dim is: "
                f"{len(self.dimension_topology) - 1}"
            )
        return self.dimension_topology[dimension]

    def get_num_of_dimensions(self) -> int:
        return len(self.dimension_topology)

    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        return self._topology_at(dimension).get_num_of_nodes_in_dimension(0)

    def get_basic_topology_at_dimension(
        self, dimension: int, com_type: ComType
    ) -> BasicLogicalTopology | None:
        return self._topology_at(dimension).get_basic_topology_at_dimension(0, com_type)


class LocalRingGlobalBinaryTree(ComplexLogicalTopology):
    """A local ring, an empty middle dimension and a global tree or ring."""

    def __init__(
        self,
        node_id: int,
        local_dim: int,
        tree_type: TreeType,
        total_tree_nodes: int,
        start: int,
        stride: int,
    ) -> None:
        self.local_dimension = RingTopology(
            Dimension.LOCAL, node_id, local_dim, node_id % local_dim, 1
        )
        self.global_dimension_all_reduce = BinaryTree(
            node_id, tree_type, total_tree_nodes, start, stride
        )
        self.global_dimension_other = RingTopology(
            Dimension.HORIZONTAL,
            node_id,
            total_tree_nodes,
            node_id // local_dim,
            local_dim,
        )

    def get_num_of_dimensions(self) -> int:
        return 3

    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        if dimension == 0:
            return self.local_dimension.get_num_of_nodes_in_dimension(0)
        if dimension == 1:
            return 1
        if dimension == 2:
            return self.global_dimension_all_reduce.get_num_of_nodes_in_dimension(0)
        return -1

    def get_basic_topology_at_dimension(
        self, dimension: int, com_type: ComType
    ) -> BasicLogicalTopology | None:
        if dimension == 0:
            return self.local_dimension
        if dimension == 2:
            if com_type is ComType.ALL_REDUCE:
                return self.global_dimension_all_reduce
            return self.global_dimension_other
        return None


class LocalRingNodeA2AGlobalDBT(ComplexLogicalTopology):
    """Local ring, node-level ring and a global double binary tree or ring."""

    def __init__(
        self,
        node_id: int,
        local_dim: int,
        node_dim: int,
        total_tree_nodes: int,
        start: int,
        stride: int,
    ) -> None:
        self.global_dimension_all_reduce = DoubleBinaryTreeTopology(
            node_id, total_tree_nodes, start, stride
        )
        self.global_dimension_other = RingTopology(
            Dimension.VERTICAL,
            node_id,
            total_tree_nodes,
            node_id // (local_dim * node_dim),
            local_dim * node_dim,
        )
        self.local_dimension = RingTopology(
            Dimension.LOCAL, node_id, local_dim, node_id % local_dim, 1
        )
        self.node_dimension = RingTopology(
            Dimension.HORIZONTAL,
            node_id,
            node_dim,
            (node_id % (local_dim * node_dim)) // local_dim,
            local_dim,
        )

    def get_num_of_dimensions(self) -> int:
        return 3

    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        if dimension == 0:
            return self.local_dimension.get_num_of_nodes_in_dimension(0)
        if dimension == 1:
            return self.node_dimension.get_num_of_nodes_in_dimension(0)
        if dimension == 2:
            return self.global_dimension_other.get_num_of_nodes_in_dimension(0)
        return -1

    def get_basic_topology_at_dimension(
        self, dimension: int, com_type: ComType
    ) -> BasicLogicalTopology | None:
        if dimension == 0:
            return self.local_dimension
        if dimension == 1:
            return self.node_dimension
        if dimension == 2:
            if com_type is ComType.ALL_REDUCE:
                return self.global_dimension_all_reduce.get_basic_topology_at_dimension(
                    2, com_type
                )
            return self.global_dimension_other
        return None


class Torus3D(ComplexLogicalTopology):
    """Three rings: local, vertical and horizontal."""

    def __init__(self, node_id: int, total_nodes: int, local_dim: int, vertical_dim: int) -> None:
        horizontal_dim = total_nodes // (vertical_dim * local_dim)
        self.local_dimension = RingTopology(
            Dimension.LOCAL, node_id, local_dim, node_id % local_dim, 1
        )
        self.vertical_dimension = RingTopology(
            Dimension.VERTICAL,
            node_id,
            vertical_dim,
            node_id // (local_dim * horizontal_dim),
            local_dim * horizontal_dim,
        )
        self.horizontal_dimension = RingTopology(
            Dimension.HORIZONTAL,
            node_id,
            horizontal_dim,
            (node_id // local_dim) % horizontal_dim,
            local_dim,
        )

    def get_num_of_dimensions(self) -> int:
        return 3

    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        if dimension == 0:
            return self.local_dimension.get_num_of_nodes_in_dimension(0)
        if dimension == 1:
            return self.vertical_dimension.get_num_of_nodes_in_dimension(0)
        if dimension == 2:
            return self.horizontal_dimension.get_num_of_nodes_in_dimension(0)
        return -1

    def get_basic_topology_at_dimension(
        self, dimension: int, com_type: ComType
    ) -> BasicLogicalTopology | None:
        if dimension == 0:
            return self.local_dimension
        if dimension == 1:
            return self.vertical_dimension
        if dimension == 2:
            return self.horizontal_dimension
        return None
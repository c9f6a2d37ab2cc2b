"""Binary-tree logical topology with in-order numbered nodes."""

from __future__ import annotations

from enum import Enum

from astrasim.logical_topology import BasicLogicalTopology, BasicTopology, Node


class TreeType(Enum):
    ROOT_MAX = 0
    ROOT_MIN = 1


class TreeNodeType(Enum):
    LEAF = 0
    ROOT = 1
    INTERMEDIATE = 2


_TYPE_WORDS = {
    TreeNodeType.ROOT: "Root",
    TreeNodeType.INTERMEDIATE: "Intermediate",
    TreeNodeType.LEAF: "Leaf",
}


class BinaryTree(BasicLogicalTopology):
    """A tree whose root holds the largest or the smallest identifier."""

    def __init__(
        self,
        node_id: int,
        tree_type: TreeType,
        total_tree_nodes: int,
        start: int,
        stride: int,
    ) -> None:
        super().__init__(BasicTopology.BINARY_TREE)
        self.node_id = node_id
        self.total_tree_nodes = total_tree_nodes
        self.start = start
        self.tree_type = tree_type
        self.stride = stride
        self.node_list: dict[int, Node] = {}

        depth = 1
        remaining = total_tree_nodes
        while remaining > 1:
            depth += 1
            remaining //= 2

        self.tree = Node(-1)
        subtree = self._initialize_tree(depth - 1, self.tree)
        if tree_type is TreeType.ROOT_MIN:
            self.tree.right_child = subtree
        else:
            self.tree.left_child = subtree
        self._number(self.tree)

    def _initialize_tree(self, depth: int, parent: Node) -> Node:
        node = Node(-1, parent)
        if depth > 1:
            node.left_child = self._initialize_tree(depth - 1, node)
            node.right_child = self._initialize_tree(depth - 1, node)
        return node

    def _number(self, root: Node) -> None:
        """Give identifiers to nodes in in-order, from ``start`` by ``stride``."""
        next_id = self.start
        stack: list[Node] = []
        node: Node | None = root
        while stack or node is not None:
            while node is not None:
                stack.append(node)
                node = node.left_child
            node = stack.pop()
            node.id = next_id
            self.node_list[next_id] = node
            next_id += self.stride
            node = node.right_child

    def _node(self, node_id: int) -> Node:
        try:
            return self.node_list[node_id]
        except KeyError:
            raise KeyError(f"node {node_id} is not in this tree") from None

    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        return self.total_tree_nodes

    def get_parent_id(self, node_id: int) -> int:
        parent = self._node(node_id).parent
        return parent.id if parent is not None else -1

    def get_left_child_id(self, node_id: int) -> int:
        child = self._node(node_id).left_child
        return child.id if child is not None else -1

    def get_right_child_id(self, node_id: int) -> int:
        child = self._node(node_id).right_child
        return child.id if child is not None else -1

    def get_node_type(self, node_id: int) -> TreeNodeType:
        node = self._node(node_id)
        if node.parent is None:
            return TreeNodeType.ROOT
        if node.left_child is None and node.right_child is None:
            return TreeNodeType.LEAF
        return TreeNodeType.INTERMEDIATE

    def describe(self, node: Node) -> str:
        """Describe ``node`` and its subtree, one line per node in pre-order."""
        lines = []
        pending = [node]
        while pending:
            current = pending.pop()
            text = f"I am node: {current.id}"
            if current.left_child is not None:
                text += f" and my left child is: {current.left_child.id}"
            if current.right_child is not None:
                text += f" and my right child is: {current.right_child.id}"
            if current.parent is not None:
                text += f" and my parent is: {current.parent.id}"
            text += f" and I am {_TYPE_WORDS[self.get_node_type(current.id)]} "
            lines.append(text + "\n")
            for child in (current.right_child, current.left_child):
                if child is not None:
                    pending.append(child)
        return "".join(lines)
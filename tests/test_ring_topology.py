import pytest

from astrasim.common import ComType
from astrasim.logical_topology import BasicTopology
from astrasim.ring_topology import Dimension, Direction, RingTopology


def _walk(ring, start, direction):
    visited = [start]
    current = start
    for _ in range(ring.get_nodes_in_ring() - 1):
        current = ring.get_receiver(current, direction)
        visited.append(current)
    return visited


def test_strided_ring_members():
    ring = RingTopology(Dimension.HORIZONTAL, 5, 4, 1, 2)
    first = 5 - 1 * 2
    expected = {first + k * 2 for k in range(4)}
    assert set(_walk(ring, 5, Direction.CLOCKWISE)) == expected
    assert ring.get_receiver(5, Direction.CLOCKWISE) == 5 + 2


def test_wraparound_returns_to_start():
    ring = RingTopology(Dimension.LOCAL, 0, 4, 0, 1)
    last = _walk(ring, 0, Direction.CLOCKWISE)[-1]
    assert ring.get_receiver(last, Direction.CLOCKWISE) == 0
    assert ring.get_sender(0, Direction.CLOCKWISE) == last


@pytest.mark.parametrize("direction", list(Direction))
def test_sender_inverts_receiver(direction):
    ring = RingTopology(Dimension.VERTICAL, 6, 5, 2, 3)
    for node in _walk(ring, 6, Direction.CLOCKWISE):
        assert ring.get_sender(ring.get_receiver(node, direction), direction) == node


def test_anticlockwise_is_reverse_of_clockwise():
    ring = RingTopology(Dimension.NA, 4, 4, 2, 2)
    clockwise = _walk(ring, 4, Direction.CLOCKWISE)
    anticlockwise = _walk(ring, 4, Direction.ANTICLOCKWISE)
    assert anticlockwise[1:] == list(reversed(clockwise[1:]))


def test_accessors():
    ring = RingTopology(Dimension.VERTICAL, 3, 8, 3, 1)
    assert ring.get_nodes_in_ring() == 8
    assert ring.get_num_of_nodes_in_dimension(0) == 8
    assert ring.get_index_in_ring() == 3
    assert ring.get_dimension() is Dimension.VERTICAL
    assert ring.basic_topology is BasicTopology.RING
    assert ring.get_num_of_dimensions() == 1
    assert ring.get_basic_topology_at_dimension(0, ComType.ALL_REDUCE) is ring


@pytest.mark.parametrize(
    "dimension, name",
    [
        (Dimension.LOCAL, "local"),
        (Dimension.VERTICAL, "vertical"),
        (Dimension.HORIZONTAL, "horizontal"),
        (Dimension.NA, "local"),
    ],
)
def test_dimension_names(dimension, name):
    assert RingTopology(dimension, 0, 2, 0, 1).name == name


def test_is_enabled():
    assert RingTopology(Dimension.LOCAL, 6, 4, 2, 3).is_enabled() is True
    assert RingTopology(Dimension.LOCAL, 7, 4, 2, 3).is_enabled() is False


def test_negative_receiver_is_rejected():
    with pytest.raises(ValueError):
        RingTopology(Dimension.NA, 1, 4, 2, 1)


def test_unknown_node_is_rejected():
    ring = RingTopology(Dimension.LOCAL, 0, 4, 0, 1)
    with pytest.raises(KeyError):
        ring.get_receiver(99, Direction.CLOCKWISE)
    with pytest.raises(KeyError):
        ring.get_sender(99, Direction.ANTICLOCKWISE)


def test_from_npus_follows_list_order():
    npus = [5, 2, 9]
    ring = RingTopology.from_npus(Dimension.HORIZONTAL, 2, npus)
    assert ring.get_index_in_ring() == npus.index(2)
    assert ring.get_nodes_in_ring() == len(npus)
    assert ring.get_receiver(5, Direction.CLOCKWISE) == 2
    assert ring.get_receiver(9, Direction.CLOCKWISE) == 5
    assert ring.get_sender(5, Direction.CLOCKWISE) == 9
    assert ring.get_receiver(5, Direction.ANTICLOCKWISE) == 9


def test_from_npus_requires_membership():
    with pytest.raises(ValueError):
        RingTopology.from_npus(Dimension.LOCAL, 4, [1, 2, 3])


def test_from_npus_has_no_offset():
    ring = RingTopology.from_npus(Dimension.LOCAL, 1, [0, 1])
    with pytest.raises(ValueError):
        ring.is_enabled()
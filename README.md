# astrasim

Building blocks for simulating distributed training systems: logical network
topologies (rings, binary trees and multi-dimensional combinations of them),
per-stream delay statistics, accounting of in-flight work on an NPU, and an
offline greedy planner that decides the order in which a chunk of a
collective visits the dimensions of a multi-dimensional network.

The package has no third-party dependencies.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `astrasim.common`: shared enumerations (`ComType`, `EventType`,
  `CollectiveImplType`, `InterDimensionScheduling`, `InjectionPolicy`,
  `BusType`, `StreamState`, `SchedulingPolicy`, ...), the records
  `TimeSpec`, `SimRequest` and `MetaData`, the abstract `Callable` interface
  with its `call(event, data)` method, the event payloads `CallData` and
  `IntData`, and the collective implementation descriptions
  `CollectiveImpl` and `DirectCollectiveImpl` (each with `clone()`). The
  constants `CLOCK_PERIOD` and `FREQ` are defined here too.
- `astrasim.api`: abstract interfaces for a memory backend
  (`AstraMemoryAPI`, with `TensorLocationType`) and a network backend
  (`AstraNetworkAPI`, with `BackendType`). `AstraNetworkAPI` keeps a rank,
  reports `BackendType.NOT_SPECIFIED` and a bandwidth of `-1.0` per
  dimension unless a subclass says otherwise. The dataclasses `LayerData`
  and `AstraSimDataAPI` hold the summary of a run.
- `astrasim.stats`: `NetworkStat`, `SharedBusStat` and `StreamStat`.
  Statistics from many streams are added together with `update_*` and then
  divided by their counts with `take_*_average`. `SharedBusStat` keeps the
  shared-bus and memory-bus delays in its `shared` and `mem` attributes,
  each with `transfer_queue`, `transfer`, `processing_queue` and
  `processing`. Averaging over a count of zero gives `inf` or `nan`.
- `astrasim.hardware`: `HardwareResource` counts in-flight memory, compute
  and communication operations by `NodeType`. Only compute nodes are
  limited: `is_available` is false once as many compute operations are in
  flight as there are NPUs.
- `astrasim.logical_topology`: the abstract `LogicalTopology`,
  `BasicLogicalTopology` (one dimension, tagged by `BasicTopology`),
  `ComplexLogicalTopology`, and the tree `Node`.
- `astrasim.ring_topology`: `RingTopology` with `Direction` and
  `Dimension`. A ring is built either from its size, this node's index and
  the stride between members, or with `RingTopology.from_npus` from an
  explicit list of NPU identifiers. `get_receiver` and `get_sender` step
  around the ring. Asking about a node outside the ring raises `KeyError`.
- `astrasim.binary_tree`: `BinaryTree`, with nodes numbered in in-order
  from `start` by `stride`. The root holds the largest or smallest
  identifier depending on `TreeType`. `get_node_type` returns a
  `TreeNodeType`, and `describe(node)` returns one text line per node of a
  subtree.
- `astrasim.complex_topologies`: `GeneralComplexTopology` (one ring or
  double binary tree per dimension, chosen by each dimension's
  `CollectiveImpl`), `Torus3D`, `DoubleBinaryTreeTopology` (alternates
  between its max-rooted and min-rooted trees on each `get_topology()`
  call), `LocalRingGlobalBinaryTree` and `LocalRingNodeA2AGlobalDBT`.
- `astrasim.offline_greedy`: `OfflineGreedy` balances load across network
  dimensions. `SharedSchedule` lets the planners of every NPU agree on one
  schedule per chunk: NPU 0's planner computes it, and the others read it.
  `dimension_bandwidths` builds the per-dimension bandwidth list, including
  the case where one physical dimension is broken in two.

Log messages, such as the ring and planner configurations, go through the
standard `logging` module under the module names.

## Example

```python
from astrasim.common import CollectiveImpl, CollectiveImplType, ComType
from astrasim.complex_topologies import GeneralComplexTopology
from astrasim.ring_topology import Direction

topology = GeneralComplexTopology(
    5,
    [4, 2],
    [CollectiveImpl(CollectiveImplType.RING), CollectiveImpl(CollectiveImplType.RING)],
)
print(topology.get_num_of_dimensions())           # 2
ring = topology.get_basic_topology_at_dimension(0, ComType.ALL_REDUCE)
print(ring.get_receiver(5, Direction.CLOCKWISE))  # 6
```

Planning the dimension order for a chunk:

```python
from astrasim.common import ComType, InterDimensionScheduling
from astrasim.offline_greedy import OfflineGreedy, SharedSchedule

schedule = SharedSchedule()
planner = OfflineGreedy(0, [4, 2], [100.0, 50.0], schedule)
order, remaining = planner.get_chunk_scheduling(
    0,
    1048576,
    1048576,
    [True, True],
    InterDimensionScheduling.OFFLINE_GREEDY,
    ComType.ALL_REDUCE,
)
```

`get_chunk_scheduling` returns the order of dimensions and the amount of
data left once this chunk has been taken off the remaining size.

## What this package does not do

This is a library of parts. It has no event-driven simulation engine, and it
does not run workloads or execution graphs. It does not implement collective
algorithms such as ring, all-to-all, halving-doubling or double-binary-tree
all-reduce. It has no network or memory backend: `AstraNetworkAPI` and
`AstraMemoryAPI` are interfaces only, and a caller must subclass them. There
is no command-line program.
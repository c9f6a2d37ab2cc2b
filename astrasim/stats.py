"""Running totals and averages of network, bus and stream delays."""

from __future__ import annotations

import math
from dataclasses import dataclass

from astrasim.common import BusType


def _divide(value: float, count: int) -> float:
    """Floating division that yields inf or nan on a zero count."""
    if count:
        return value / count
    if value == 0 or math.isnan(value):
        return math.nan
    return math.copysign(math.inf, value)


def _accumulate(target: list[float], source: list[float]) -> None:
    """Add ``source`` element-wise into ``target``, growing it as needed."""
    if len(target) < len(source):
        target.extend([0.0] * (len(source) - len(target)))
    for position, value in enumerate(source):
        target[position] += value


class NetworkStat:
    """Per-phase network message latencies summed over many streams."""

    def __init__(self) -> None:
        self.net_message_latency: list[float] = []
        self.net_message_counter = 0

    def update_network_stat(self, other: NetworkStat) -> None:
        _accumulate(self.net_message_latency, other.net_message_latency)
        self.net_message_counter += 1

    def take_network_stat_average(self) -> None:
        self.net_message_latency = [
            _divide(value, self.net_message_counter) for value in self.net_message_latency
        ]


@dataclass
class _BusDelays:
    transfer_queue: float = 0.0
    transfer: float = 0.0
    processing_queue: float = 0.0
    processing: float = 0.0

    def add(self, other: _BusDelays) -> None:
        self.transfer_queue += other.transfer_queue
        self.transfer += other.transfer
        self.processing_queue += other.processing_queue
        self.processing += other.processing

    def divide(self, count: int) -> None:
        self.transfer_queue = _divide(self.transfer_queue, count)
        self.transfer = _divide(self.transfer, count)
        self.processing_queue = _divide(self.processing_queue, count)
        self.processing = _divide(self.processing, count)


class SharedBusStat:
    """Delays on the shared bus and the memory bus, with request counts."""

    def __init__(
        self,
        bus_type: BusType = BusType.SHARED,
        transfer_queue_delay: float = 0.0,
        transfer_delay: float = 0.0,
        processing_queue_delay: float = 0.0,
        processing_delay: float = 0.0,
    ) -> None:
        given = _BusDelays(
            float(transfer_queue_delay),
            float(transfer_delay),
            float(processing_queue_delay),
            float(processing_delay),
        )
        if bus_type is BusType.SHARED:
            self.shared, self.mem = given, _BusDelays()
        else:
            self.shared, self.mem = _BusDelays(), given
        self.shared_request_counter = 0
        self.mem_request_counter = 0

    def update_bus_stats(self, bus_type: BusType, other: SharedBusStat) -> None:
        if bus_type in (BusType.SHARED, BusType.BOTH):
            self.shared.add(other.shared)
            self.shared_request_counter += 1
        if bus_type in (BusType.MEM, BusType.BOTH):
            self.mem.add(other.mem)
            self.mem_request_counter += 1

    def take_bus_stats_average(self) -> None:
        self.shared.divide(self.shared_request_counter)
        self.mem.divide(self.mem_request_counter)


class StreamStat(SharedBusStat, NetworkStat):
    """Bus, network and queuing statistics of a stream."""

    def __init__(self) -> None:
        SharedBusStat.__init__(self, BusType.SHARED, 0, 0, 0, 0)
        NetworkStat.__init__(self)
        self.queuing_delay: list[float] = []
        self.stream_stat_counter = 0

    def update_stream_stats(self, other: StreamStat) -> None:
        self.update_bus_stats(BusType.BOTH, other)
        self.update_network_stat(other)
        _accumulate(self.queuing_delay, other.queuing_delay)
        self.stream_stat_counter += 1

    def take_stream_stats_average(self) -> None:
        self.take_bus_stats_average()
        self.take_network_stat_average()
        self.queuing_delay = [
            _divide(value, self.stream_stat_counter) for value in self.queuing_delay
        ]
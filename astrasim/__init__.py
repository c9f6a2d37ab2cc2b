"""Logical topologies, statistics, hardware accounting and offline greedy scheduling for simulating distributed training systems."""

__version__ = "0.1.0"
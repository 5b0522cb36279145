"""Testing utilities for code built on coflow aggregators."""

from .fixture import ConcurrencyProbe, TimedTask, after

__all__ = ["ConcurrencyProbe", "TimedTask", "after"]

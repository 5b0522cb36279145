"""Runtime - task dispatch, aggregation and observability."""

from __future__ import annotations

from .aggregate import all_of, any_of
from .concurrency import Concurrency, ExecutionMode, from_callback, run_tasks

__all__ = ["all_of", "any_of", "run_tasks", "Concurrency", "ExecutionMode", "from_callback"]

"""Task dispatch primitives.

Key Components:
    - run_tasks: drive a batch serially, in parallel or through a worker pool
    - Concurrency/ExecutionMode: resolved scheduling plan
    - drive/from_callback: adapt awaitables, callables and callback-style
      functions into single-outcome tasks
    - wait/delay: pauses and delayed tasks

Example:
    >>> from coflow.runtime.concurrency import run_tasks
    >>> await run_tasks(tasks, 2, on_complete)
"""

from __future__ import annotations

from .runner import Concurrency, ExecutionMode, OnComplete, run_tasks
from .task import CallbackTask, Done, Task, drive, from_callback
from .wait import delay, wait

__all__ = [
    # Runner
    "run_tasks",
    "Concurrency",
    "ExecutionMode",
    "OnComplete",
    # Tasks
    "Task",
    "CallbackTask",
    "Done",
    "drive",
    "from_callback",
    # Delays
    "wait",
    "delay",
]

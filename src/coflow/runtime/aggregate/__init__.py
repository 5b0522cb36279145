"""Aggregators reducing a batch of task outcomes to one result.

    - all_of: JOIN - wait for every task, fail or return one entry per task
    - any_of: RACE - first qualifying completion wins
"""

from __future__ import annotations

from .join import JoinAggregator, JoinState, all_of
from .options import AggregateOptions, JoinOptions, RaceOptions, UnusedResultHandler
from .race import RaceAggregator, RaceState, any_of
from .unused import deliver_unused

__all__ = [
    # JOIN
    "all_of", "JoinAggregator", "JoinState",
    # RACE
    "any_of", "RaceAggregator", "RaceState",
    # Options
    "AggregateOptions", "JoinOptions", "RaceOptions", "UnusedResultHandler",
    # Side channel
    "deliver_unused",
]

"""
Committed incentive snapshot history.

EventLog keeps the most recent IncentiveSnapshotEvents (bounded) and fans
each one out to listeners, e.g. a keeper publishing to a dashboard.
to_arrays() / to_frame() export the history for analysis.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable

import numpy as np
import pandas as pd

from .state import IncentiveSnapshotEvent

EVENT_COLUMNS = [
    "timestamp",
    "total_apr",
    "incentive_credits",
    "last_incentive_timestamp",
    "decay_state",
    "decay_init_timestamp",
]


class EventLog:
    def __init__(self, maxlen: int | None = None) -> None:
        self.events: deque[IncentiveSnapshotEvent] = deque(maxlen=maxlen)
        self._listeners: list[Callable[[IncentiveSnapshotEvent], None]] = []

    def __len__(self) -> int:
        return len(self.events)

    def subscribe(self, listener: Callable[[IncentiveSnapshotEvent], None]) -> None:
        self._listeners.append(listener)

    def add(self, event: IncentiveSnapshotEvent) -> None:
        self.events.append(event)
        for listener in self._listeners:
            listener(event)

    def tail(self, n: int = 200) -> list[IncentiveSnapshotEvent]:
        if n <= 0:
            return []
        if n >= len(self.events):
            return list(self.events)
        return list(self.events)[-n:]

    @property
    def latest(self) -> IncentiveSnapshotEvent | None:
        return self.events[-1] if self.events else None

    def to_arrays(self) -> dict[str, np.ndarray]:
        """
        History as numpy arrays.

        APRs are converted to decimals (1e18 → 1.0) since they exceed int64.
        """
        events = list(self.events)
        return {
            "time": np.array([e.timestamp for e in events], dtype=np.int64),
            "apr": np.array([e.total_apr / 1e18 for e in events], dtype=float),
            "credits": np.array([e.incentive_credits for e in events], dtype=np.int64),
            "decay_state": np.array([e.decay_state for e in events], dtype=bool),
        }

    def to_frame(self) -> pd.DataFrame:
        """History as a DataFrame, one row per event, raw integer APR kept as object."""
        frame = pd.DataFrame([e.as_dict() for e in self.events], columns=EVENT_COLUMNS)
        frame["apr"] = frame["total_apr"].astype(float) / 1e18
        return frame

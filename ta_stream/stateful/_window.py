# -*- coding: utf-8 -*-
"""ta-stream stateful – fixed-capacity rolling window.

The window holds at most ``capacity`` values, oldest first.  ``add`` either
appends a committed value (evicting the oldest when full) or overwrites the
newest slot in place, which is how a node revises the still-open interval
without growing or shrinking its history.

Aggregates are O(1) queries:
  sum / average -- running sum over the non-NaN slots
  min / max     -- monotonic deques of (sequence, value) pairs

NaN slots count toward ``len`` but are skipped by every aggregate, the way
pandas skips NaN by default.

The running sum is rebuilt from the held slots (``math.fsum``) when a value
leaving it is much larger than what remains, and once per ``capacity``
appends, so cancellation error never outlives the values that caused it.
"""
from __future__ import annotations

import math
from collections import deque
from typing import Deque, List, Tuple

from ._base import NAN, StreamProtocolError

# rebuild the running sum when a dropped value exceeds the remainder by this
_CANCELLATION = 1024.0


class RollingWindow:
    """Ring buffer with append and replace-last."""

    __slots__ = (
        "capacity", "_values", "_seq", "_sum", "_valid", "_appends",
        "_maxq", "_minq", "_max_run", "_min_run",
    )

    def __init__(self, capacity: int) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise ValueError(f"capacity must be an integer >= 1, got {capacity!r}")
        self.capacity = capacity
        self._values: Deque[float] = deque(maxlen=capacity)
        self.clear()

    def clear(self) -> None:
        self._values.clear()
        self._seq = -1            # sequence number of the newest slot
        self._sum = 0.0
        self._valid = 0
        self._appends = 0       # appends since the sum was last rebuilt
        self._maxq: Deque[Tuple[int, float]] = deque()
        self._minq: Deque[Tuple[int, float]] = deque()
        # entries popped off the tail by the newest append, kept so a
        # replace-last can put them back
        self._max_run: List[Tuple[int, float]] = []
        self._min_run: List[Tuple[int, float]] = []

    # -----------------------------------------------------------------------
    # Mutation
    # -----------------------------------------------------------------------

    def add(self, value: float, is_new: bool = True) -> None:
        value = float(value)
        if is_new:
            self._append(value)
        else:
            if self._seq < 0:
                raise StreamProtocolError("replace-last on a window that never received an append")
            self._replace_last(value)

    def _append(self, value: float) -> None:
        dropped = NAN
        if len(self._values) == self.capacity:
            dropped = self._values[0]
            self._drop(dropped)
            oldest = self._seq - self.capacity + 1
            if self._maxq and self._maxq[0][0] == oldest:
                self._maxq.popleft()
            if self._minq and self._minq[0][0] == oldest:
                self._minq.popleft()
        self._seq += 1
        self._values.append(value)
        self._take(value)
        self._appends += 1
        self._settle(dropped)
        self._max_run = []
        self._min_run = []
        self._push(value)

    def _replace_last(self, value: float) -> None:
        old = self._values[-1]
        self._drop(old)
        self._values[-1] = value
        self._take(value)
        self._settle(old)
        if not math.isnan(old):
            # the newest slot is always the tail of both deques
            self._maxq.pop()
            self._minq.pop()
        self._maxq.extend(reversed(self._max_run))
        self._minq.extend(reversed(self._min_run))
        self._max_run = []
        self._min_run = []
        self._push(value)

    def _push(self, value: float) -> None:
        if math.isnan(value):
            return
        while self._maxq and self._maxq[-1][1] <= value:
            self._max_run.append(self._maxq.pop())
        self._maxq.append((self._seq, value))
        while self._minq and self._minq[-1][1] >= value:
            self._min_run.append(self._minq.pop())
        self._minq.append((self._seq, value))

    def _take(self, value: float) -> None:
        if not math.isnan(value):
            self._sum += value
            self._valid += 1

    def _drop(self, value: float) -> None:
        if not math.isnan(value):
            self._valid -= 1
            self._sum = self._sum - value if self._valid else 0.0

    def _settle(self, dropped: float) -> None:
        if self._appends >= self.capacity or (
            not math.isnan(dropped) and abs(dropped) > _CANCELLATION * abs(self._sum)
        ):
            self._sum = math.fsum(x for x in self._values if not math.isnan(x))
            self._appends = 0

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._values)

    @property
    def count(self) -> int:
        return len(self._values)

    @property
    def valid_count(self) -> int:
        return self._valid

    @property
    def is_full(self) -> bool:
        return len(self._values) == self.capacity

    @property
    def last(self) -> float:
        return self._values[-1] if self._values else NAN

    def sum(self) -> float:
        return self._sum if self._valid else NAN

    def average(self) -> float:
        return self._sum / self._valid if self._valid else NAN

    def max(self) -> float:
        return self._maxq[0][1] if self._maxq else NAN

    def min(self) -> float:
        return self._minq[0][1] if self._minq else NAN

    def snapshot(self) -> Tuple[float, ...]:
        """Ordered copy of the held values, oldest first."""
        return tuple(self._values)

    def __repr__(self) -> str:
        return f"RollingWindow(capacity={self.capacity}, values={list(self._values)!r})"

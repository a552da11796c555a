# -*- coding: utf-8 -*-
"""ta-stream stateful – the streaming node engine.

A ``StreamNode`` wraps one registered formula (``StatefulIndicator``) and
runs every input through the same lifecycle:

  commit   (is_new=True)  -- index += 1, shadow <- copy(state), apply input
  revision (is_new=False) -- state <- copy(shadow), apply input

so any number of revisions of the open slot are each computed from the
state left by the last commit, never from the previous revision.  Windows
are not part of the snapshot; they revise in place with replace-last.

Nodes also form the signal bus: every result is re-published as a
``TimedValue`` to the node's subscribers, synchronously and depth-first.
"""
from __future__ import annotations

import copy
import logging
import math
import warnings
from typing import Any, Dict, List, Optional, Protocol, Tuple

from ._base import (
    NAN,
    StreamProtocolError,
    TimedValue,
    _as_int,
    get_indicator,
)
from ._window import RollingWindow

logger = logging.getLogger(__name__)


class Subscriber(Protocol):
    """Anything that can receive a node's emissions."""

    def on_value(self, value: TimedValue, channel: str) -> None: ...


class StreamNode:
    """Generic stateful node parameterised by a registered formula.

    Parameters
    ----------
    kind : str
        Key in ``STATEFUL_REGISTRY`` ("sma", "median", "mae", ...).
    source : StreamNode, optional
        Upstream node feeding the primary input channel.
    predicted : StreamNode, optional
        Upstream node feeding the secondary channel of two-input formulas.
    warmup : int, optional
        Committed inputs needed before the node turns hot.  Defaults to
        the formula's own warm-up (usually ``period``).
    name : str, optional
        Display / column name.  Defaults to the formula's output name.
    **params
        Formula parameters (``period``, ``decay``, ``population``, ...).
        Validated here; invalid values raise ``ValueError``.
    """

    def __init__(
        self,
        kind: str,
        source: Optional["StreamNode"] = None,
        *,
        predicted: Optional["StreamNode"] = None,
        warmup: Optional[int] = None,
        name: Optional[str] = None,
        **params: Any,
    ) -> None:
        self.indicator = get_indicator(kind)
        self.kind = kind
        self.params: Dict[str, Any] = dict(params)

        self._capacities: Tuple[int, ...] = tuple(self.indicator.windows(self.params))
        if warmup is None:
            self.warmup = self.indicator.warmup(self.params)
        else:
            self.warmup = _as_int(warmup, "warmup")
            if self.warmup < 0:
                raise ValueError(f"warmup must be >= 0, got {self.warmup}")
        self.name = name or self.indicator.output_names(self.params)[0]

        self._windows: Tuple[RollingWindow, ...] = tuple(
            RollingWindow(capacity) for capacity in self._capacities
        )
        self._subscribers: List[Tuple[Subscriber, Optional[str]]] = []
        self._latched: Dict[str, TimedValue] = {}
        self.reset()

        # the secondary channel subscribes first so a shared root latches it
        # before the primary channel triggers the update
        if predicted is not None:
            if len(self.indicator.inputs) < 2:
                raise ValueError(f"'{kind}' takes a single input; predicted source not allowed")
            predicted.subscribe(self, self.indicator.inputs[1])
        if source is not None:
            source.subscribe(self)

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------

    def reset(self) -> None:
        """Return to the cold, empty state.  Subscriptions are kept."""
        for window in self._windows:
            window.clear()
        self._state = self.indicator.init(self.params)
        self._shadow = None
        self._latched.clear()
        self._pending: Optional[TimedValue] = None
        self._busy = False
        self._warned_order = False
        self._stale = False
        self.index = 0
        self.last_valid = NAN
        self.is_hot = False
        self.value = NAN
        self.last: Optional[TimedValue] = None
        logger.debug("reset %s", self.name)

    def update(self, input: Any, input2: Any = None) -> float:
        """Apply one input (commit or revision) and publish the result."""
        tv = TimedValue.of(input)
        if self._busy:
            raise StreamProtocolError(f"re-entrant update of {self.name}")
        if tv.is_new:
            self._check_order(tv)
            self.index += 1
            if not math.isnan(tv.value):
                self.last_valid = tv.value
            self._shadow = copy.copy(self._state)
        else:
            self._check_revision(tv)
            self._state = copy.copy(self._shadow)

        bar = self._bar(tv, input2)
        self._busy = True
        try:
            self._feed(bar, tv.is_new)
            result = float(self.indicator.update(self._state, self._windows, bar, self.params))
            self._pending = tv
            if self.index >= self.warmup:
                self.is_hot = True
            self.value = result
            self.last = TimedValue(tv.time, result, tv.is_new)
            self.publish(self.last)
        finally:
            self._busy = False
        return result

    def _bar(self, tv: TimedValue, input2: Any) -> Dict[str, float]:
        inputs = self.indicator.inputs
        self._stale = False
        bar = {inputs[0]: tv.value}
        for name in inputs[1:]:
            if input2 is not None:
                bar[name] = TimedValue.of(input2).value
            else:
                bar[name] = self._latched_value(name, tv)
        return bar

    def _latched_value(self, name: str, tv: TimedValue) -> float:
        """Latched secondary input, or NaN when it is missing for this slot."""
        latched = self._latched.get(name)
        if latched is not None and (latched.time is None or tv.time is None or latched.time == tv.time):
            return latched.value
        self._stale = tv.time is not None
        return NAN

    def _feed(self, bar: Dict[str, float], is_new: bool) -> None:
        if self.indicator.feed is not None:
            self.indicator.feed(self._windows, bar, is_new)
            return
        for window, name in zip(self._windows, self.indicator.inputs):
            window.add(bar[name], is_new)

    def _check_order(self, tv: TimedValue) -> None:
        prev = self._pending
        if prev is None or prev.time is None or tv.time is None or self._warned_order:
            return
        if tv.time < prev.time:
            warnings.warn(
                f"{self.name}: committed timestamp {tv.time!r} is older than "
                f"{prev.time!r}; the stream is out of order.",
                UserWarning,
                stacklevel=3,
            )
            self._warned_order = True

    def _check_revision(self, tv: TimedValue) -> None:
        if self.index == 0:
            raise StreamProtocolError(f"{self.name}: revision received before any committed input")
        prev = self._pending
        if prev is not None and prev.time is not None and tv.time is not None and tv.time != prev.time:
            raise StreamProtocolError(
                f"{self.name}: revision at {tv.time!r} does not match the open slot {prev.time!r}"
            )

    # -----------------------------------------------------------------------
    # Signal bus
    # -----------------------------------------------------------------------

    @property
    def subscribers(self) -> List[Subscriber]:
        return [sub for sub, _ in self._subscribers]

    def subscribe(self, subscriber: Subscriber, channel: Optional[str] = None) -> None:
        """Add an edge self -> subscriber.  Idempotent; rejects cycles."""
        if any(sub is subscriber and ch == channel for sub, ch in self._subscribers):
            return
        if subscriber is self or _reaches(subscriber, self):
            raise StreamProtocolError(
                f"subscribing {getattr(subscriber, 'name', subscriber)!r} to {self.name} would create a cycle"
            )
        self._subscribers.append((subscriber, channel))
        logger.debug("subscribe %s -> %s [%s]", self.name, getattr(subscriber, "name", subscriber), channel)

    def unsubscribe(self, subscriber: Subscriber, channel: Optional[str] = None) -> None:
        """Remove the edge(s) self -> subscriber; no-op when absent."""
        self._subscribers = [
            (sub, ch) for sub, ch in self._subscribers
            if not (sub is subscriber and (channel is None or ch == channel))
        ]

    def publish(self, value: TimedValue) -> None:
        for subscriber, channel in list(self._subscribers):
            subscriber.on_value(value, channel or "")

    def on_value(self, value: TimedValue, channel: str) -> None:
        """Subscriber entry point.

        Secondary channels latch the value; the primary channel (empty or
        the first input name) drives ``update``.  A secondary value for the
        slot already computed without it re-runs that slot as a revision.
        """
        inputs = self.indicator.inputs
        if channel and channel != inputs[0]:
            if channel not in inputs:
                raise ValueError(f"{self.name} has no input channel '{channel}'")
            self._latched[channel] = value
            pending = self._pending
            if self._stale and pending is not None and value.time is not None and value.time == pending.time:
                # the slot was computed before this input arrived; redo it
                self.update(TimedValue(pending.time, pending.value, False))
            return
        self.update(value)

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------

    @property
    def windows(self) -> Tuple[RollingWindow, ...]:
        return self._windows

    @property
    def state(self) -> Any:
        """Live accumulator state (read-only by convention)."""
        return self._state

    def __repr__(self) -> str:
        hot = "hot" if self.is_hot else "cold"
        return f"StreamNode({self.name}, index={self.index}, {hot}, value={self.value!r})"


def _reaches(start: Any, target: Any) -> bool:
    """True when *target* is reachable from *start* along subscriber edges."""
    seen = set()
    stack = [start]
    while stack:
        node = stack.pop()
        if node is target:
            return True
        if id(node) in seen:
            continue
        seen.add(id(node))
        stack.extend(getattr(node, "subscribers", ()))
    return False

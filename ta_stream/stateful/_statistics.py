# -*- coding: utf-8 -*-
"""ta-stream stateful -- rolling statistics.

Registered kinds
----------------
max, min       : decaying extreme, capped by the window extreme
median         : window median (average until the window fills)
variance, stdev: sample (ddof=1) or population (ddof=0) dispersion
sum            : rolling sum
"""
from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from ._base import (
    NAN,
    _param,
    _as_float,
    _period,
    StatefulIndicator,
    STATEFUL_REGISTRY,
)
from ._window import RollingWindow

DEFAULT_PERIOD = 10


def _valid(window: RollingWindow) -> List[float]:
    return [x for x in window.snapshot() if not math.isnan(x)]


# ===========================================================================
# MAX / MIN  (with half-life decay)
# ===========================================================================
# The tracked extreme resets to the input whenever the input reaches it.
# Otherwise it decays toward the window average at
#   rate = 1 - exp(-half_life * since / period),   half_life = decay * 0.1
# and is always capped by the true window extreme.  decay=0 gives the plain
# rolling max / min.

@dataclass
class ExtremeState:
    current: float
    since: int = 0


def _decay(params: Dict[str, Any]) -> float:
    decay = _as_float(_param(params, "decay", 0.0), "decay")
    if decay < 0:
        raise ValueError(f"decay must be non-negative, got {decay}")
    return decay


def _extreme_windows(params: Dict[str, Any]):
    _decay(params)
    return (_period(params, DEFAULT_PERIOD),)


def _max_init(params: Dict[str, Any]) -> ExtremeState:
    return ExtremeState(current=-sys.float_info.max)


def _min_init(params: Dict[str, Any]) -> ExtremeState:
    return ExtremeState(current=sys.float_info.max)


def _max_update(
    state: ExtremeState, windows: Sequence[RollingWindow], bar: Dict[str, float], params: Dict[str, Any]
) -> float:
    window = windows[0]
    x = bar["value"]
    state.since += 1
    if x >= state.current:
        state.current = x
        state.since = 0
    if window.valid_count == 0:
        return NAN
    half_life = _decay(params) * 0.1
    rate = 1.0 - math.exp(-half_life * state.since / window.capacity)
    state.current -= rate * (state.current - window.average())
    state.current = min(state.current, window.max())
    return state.current


def _min_update(
    state: ExtremeState, windows: Sequence[RollingWindow], bar: Dict[str, float], params: Dict[str, Any]
) -> float:
    window = windows[0]
    x = bar["value"]
    state.since += 1
    if x <= state.current:
        state.current = x
        state.since = 0
    if window.valid_count == 0:
        return NAN
    half_life = _decay(params) * 0.1
    rate = 1.0 - math.exp(-half_life * state.since / window.capacity)
    state.current += rate * (window.average() - state.current)
    state.current = max(state.current, window.min())
    return state.current


def _max_output_names(params: Dict[str, Any]) -> List[str]:
    return [f"MAX_{_period(params, DEFAULT_PERIOD)}"]


def _min_output_names(params: Dict[str, Any]) -> List[str]:
    return [f"MIN_{_period(params, DEFAULT_PERIOD)}"]


STATEFUL_REGISTRY["max"] = StatefulIndicator(
    kind="max",
    inputs=("value",),
    init=_max_init,
    update=_max_update,
    output_names=_max_output_names,
    windows=_extreme_windows,
)

STATEFUL_REGISTRY["min"] = StatefulIndicator(
    kind="min",
    inputs=("value",),
    init=_min_init,
    update=_min_update,
    output_names=_min_output_names,
    windows=_extreme_windows,
)


# ===========================================================================
# MEDIAN
# ===========================================================================

def _median_update(
    state: None, windows: Sequence[RollingWindow], bar: Dict[str, float], params: Dict[str, Any]
) -> float:
    window = windows[0]
    if not window.is_full:
        return window.average()
    values = sorted(_valid(window))
    n = len(values)
    if n == 0:
        return NAN
    mid = n // 2
    if n % 2 == 0:
        return (values[mid - 1] + values[mid]) / 2.0
    return values[mid]


def _median_output_names(params: Dict[str, Any]) -> List[str]:
    return [f"MEDIAN_{_period(params, DEFAULT_PERIOD)}"]


STATEFUL_REGISTRY["median"] = StatefulIndicator(
    kind="median",
    inputs=("value",),
    update=_median_update,
    output_names=_median_output_names,
    windows=lambda params: (_period(params, DEFAULT_PERIOD),),
    warmup=lambda params: _period(params, DEFAULT_PERIOD),
)


# ===========================================================================
# VARIANCE / STDEV
# ===========================================================================
# population=False -> sample variance (ddof=1), matches pandas default.
# Fewer than two valid values -> 0.0.

def _dispersion_windows(params: Dict[str, Any]):
    return (_period(params, DEFAULT_PERIOD, minimum=2),)


def _variance_from_buf(values: List[float], population: bool) -> float:
    n = len(values)
    if n < 2:
        return 0.0
    mean = sum(values) / n
    ss = sum((x - mean) ** 2 for x in values)
    return ss / (n if population else n - 1)


def _variance_update(
    state: None, windows: Sequence[RollingWindow], bar: Dict[str, float], params: Dict[str, Any]
) -> float:
    return _variance_from_buf(_valid(windows[0]), bool(_param(params, "population", False)))


def _stdev_update(
    state: None, windows: Sequence[RollingWindow], bar: Dict[str, float], params: Dict[str, Any]
) -> float:
    return math.sqrt(max(_variance_update(state, windows, bar, params), 0.0))


def _dispersion_names(prefix: str):
    def output_names(params: Dict[str, Any]) -> List[str]:
        period = _period(params, DEFAULT_PERIOD, minimum=2)
        ddof = 0 if _param(params, "population", False) else 1
        return [f"{prefix}_{period}_{ddof}"]
    return output_names


STATEFUL_REGISTRY["variance"] = StatefulIndicator(
    kind="variance",
    inputs=("value",),
    update=_variance_update,
    output_names=_dispersion_names("VAR"),
    windows=_dispersion_windows,
)

STATEFUL_REGISTRY["stdev"] = StatefulIndicator(
    kind="stdev",
    inputs=("value",),
    update=_stdev_update,
    output_names=_dispersion_names("STDEV"),
    windows=_dispersion_windows,
)


# ===========================================================================
# SUM
# ===========================================================================

STATEFUL_REGISTRY["sum"] = StatefulIndicator(
    kind="sum",
    inputs=("value",),
    update=lambda state, windows, bar, params: windows[0].sum(),
    output_names=lambda params: [f"SUM_{_period(params, DEFAULT_PERIOD)}"],
    windows=lambda params: (_period(params, DEFAULT_PERIOD),),
    warmup=lambda params: _period(params, DEFAULT_PERIOD),
)

# -*- coding: utf-8 -*-
"""ta-stream stateful -- overlap indicators.

Each section follows the pattern:
  1. State dataclass  (if beyond what _base already provides)
  2. init / update / output_names helpers
  3. STATEFUL_REGISTRY["<kind>"] = StatefulIndicator(...)

Window-only formulas (sma, wma) keep no accumulator state; recursive ones
(ema, rma) keep an ``EMAState`` that the node snapshots on every commit.

Registered kinds
----------------
sma, wma, ema, rma
"""
from __future__ import annotations

import math
from typing import Any, Dict, List, Sequence

from ._base import (
    NAN,
    EMAState,
    ema_make,
    rma_make,
    ema_update_raw,
    _param,
    _period,
    StatefulIndicator,
    STATEFUL_REGISTRY,
)
from ._window import RollingWindow

DEFAULT_PERIOD = 10


def _window_of_period(params: Dict[str, Any]):
    return (_period(params, DEFAULT_PERIOD),)


def _warmup_of_period(params: Dict[str, Any]) -> int:
    return _period(params, DEFAULT_PERIOD)


# ===========================================================================
# SMA
# ===========================================================================
# Running average over the window; NaN slots are skipped.

def _sma_update(
    state: None, windows: Sequence[RollingWindow], bar: Dict[str, float], params: Dict[str, Any]
) -> float:
    return windows[0].average()


def _sma_output_names(params: Dict[str, Any]) -> List[str]:
    return [f"SMA_{_period(params, DEFAULT_PERIOD)}"]


STATEFUL_REGISTRY["sma"] = StatefulIndicator(
    kind="sma",
    inputs=("value",),
    update=_sma_update,
    output_names=_sma_output_names,
    windows=_window_of_period,
    warmup=_warmup_of_period,
)


# ===========================================================================
# WMA  -- linear weights, newest slot weighs ``n``
# ===========================================================================

def _wma_update(
    state: None, windows: Sequence[RollingWindow], bar: Dict[str, float], params: Dict[str, Any]
) -> float:
    num = 0.0
    den = 0.0
    for weight, x in enumerate(windows[0].snapshot(), start=1):
        if math.isnan(x):
            continue
        num += weight * x
        den += weight
    return num / den if den else NAN


def _wma_output_names(params: Dict[str, Any]) -> List[str]:
    return [f"WMA_{_period(params, DEFAULT_PERIOD)}"]


STATEFUL_REGISTRY["wma"] = StatefulIndicator(
    kind="wma",
    inputs=("value",),
    update=_wma_update,
    output_names=_wma_output_names,
    windows=_window_of_period,
    warmup=_warmup_of_period,
)


# ===========================================================================
# EMA / RMA
# ===========================================================================
# State: EMAState.  presma=True seeds with the SMA of the first ``period``
# values and returns NaN before that.  NaN inputs leave the state as is.

def _ema_init(params: Dict[str, Any]) -> EMAState:
    return ema_make(_period(params, DEFAULT_PERIOD), presma=bool(_param(params, "presma", True)))


def _rma_init(params: Dict[str, Any]) -> EMAState:
    return rma_make(_period(params, DEFAULT_PERIOD), presma=bool(_param(params, "presma", True)))


def _ema_update(
    state: EMAState, windows: Sequence[RollingWindow], bar: Dict[str, float], params: Dict[str, Any]
) -> float:
    x = bar["value"]
    if math.isnan(x):
        return NAN if state.last is None else state.last
    val = ema_update_raw(state, x)
    return NAN if val is None else val


def _ema_output_names(params: Dict[str, Any]) -> List[str]:
    return [f"EMA_{_period(params, DEFAULT_PERIOD)}"]


def _rma_output_names(params: Dict[str, Any]) -> List[str]:
    return [f"RMA_{_period(params, DEFAULT_PERIOD)}"]


STATEFUL_REGISTRY["ema"] = StatefulIndicator(
    kind="ema",
    inputs=("value",),
    init=_ema_init,
    update=_ema_update,
    output_names=_ema_output_names,
    warmup=_warmup_of_period,
)

STATEFUL_REGISTRY["rma"] = StatefulIndicator(
    kind="rma",
    inputs=("value",),
    init=_rma_init,
    update=_ema_update,
    output_names=_rma_output_names,
    warmup=_warmup_of_period,
)

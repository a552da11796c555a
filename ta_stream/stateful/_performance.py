# -*- coding: utf-8 -*-
"""ta-stream stateful – performance indicators.

Registered kinds
----------------
drawdown
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from ._base import (
    NAN,
    _param,
    StatefulIndicator,
    STATEFUL_REGISTRY,
)
from ._window import RollingWindow


# ===========================================================================
# Drawdown
# ===========================================================================
#   dd  = max_close - close                  (absolute drawdown)
#   pct = 1 - (close / max_close)            (percentage drawdown)
#   log = log(max_close) - log(close)        (log drawdown)
#   max = running max of pct                 (max drawdown so far)
#
# max_close is the running (cumulative) maximum of the input.  Both running
# maxima are accumulators, so a revised bar that briefly set a new peak is
# rolled back by the node before the next revision is applied.
# ===========================================================================

DRAWDOWN_MODES = ("dd", "pct", "log", "max")


@dataclass
class DrawdownState:
    max_close: Optional[float] = None
    max_dd:    float            = 0.0


def _mode(params: Dict[str, Any]) -> str:
    mode = _param(params, "mode", "pct")
    if mode not in DRAWDOWN_MODES:
        raise ValueError(f"mode must be one of {DRAWDOWN_MODES}, got {mode!r}")
    return mode


def _drawdown_init(params: Dict[str, Any]) -> DrawdownState:
    _mode(params)
    return DrawdownState()


def _drawdown_update(
    state: DrawdownState, windows: Sequence[RollingWindow], bar: Dict[str, float], params: Dict[str, Any]
) -> float:
    close = bar["value"]
    if math.isnan(close):
        return NAN

    if state.max_close is None or close > state.max_close:
        state.max_close = close

    if state.max_close != 0.0:
        dd_pct = 1.0 - (close / state.max_close)
    else:
        dd_pct = 0.0
    if dd_pct > state.max_dd:
        state.max_dd = dd_pct

    mode = _mode(params)
    if mode == "dd":
        return state.max_close - close
    if mode == "log":
        if close > 0.0 and state.max_close > 0.0:
            return math.log(state.max_close) - math.log(close)
        return NAN
    if mode == "max":
        return state.max_dd
    return dd_pct


def _drawdown_output_names(params: Dict[str, Any]) -> List[str]:
    return {"dd": ["DD"], "pct": ["DD_PCT"], "log": ["DD_LOG"], "max": ["max_DD"]}[_mode(params)]


STATEFUL_REGISTRY["drawdown"] = StatefulIndicator(
    kind="drawdown",
    inputs=("value",),
    init=_drawdown_init,
    update=_drawdown_update,
    output_names=_drawdown_output_names,
)

# -*- coding: utf-8 -*-
"""ta-stream stateful -- forecast error metrics.

Two-input formulas: ``actual`` and ``predicted``.  A NaN ``predicted``
falls back to the running average of ``actual``.

Windows
-------
0 : actual values (drives the fallback)
1 : per-pair error term  (|a - p|, (a - p)^2, |a - p| / |a|)
2 : |actual|             (rae only)

Keeping the error term in its own window makes every metric a running
average or sum, O(1) per update.

Registered kinds
----------------
mae, mse, rmse, mape, rae
"""
from __future__ import annotations

import math
from typing import Any, Callable, Dict, Sequence

from ._base import (
    NAN,
    _period,
    StatefulIndicator,
    STATEFUL_REGISTRY,
)
from ._window import RollingWindow

DEFAULT_PERIOD = 10
INPUTS = ("actual", "predicted")


def _abs_error(a: float, p: float) -> float:
    return abs(a - p)


def _sq_error(a: float, p: float) -> float:
    return (a - p) ** 2


def _abs_pct_error(a: float, p: float) -> float:
    return abs(a - p) / abs(a) if a != 0.0 else NAN


def _make_feed(term: Callable[[float, float], float]):
    def feed(windows: Sequence[RollingWindow], bar: Dict[str, float], is_new: bool) -> None:
        actual = bar["actual"]
        windows[0].add(actual, is_new)
        predicted = bar["predicted"]
        if math.isnan(predicted):
            predicted = windows[0].average()
        windows[1].add(term(actual, predicted), is_new)
        if len(windows) > 2:
            windows[2].add(abs(actual), is_new)
    return feed


def _register(kind: str, term, update, n_windows: int = 2) -> None:
    STATEFUL_REGISTRY[kind] = StatefulIndicator(
        kind=kind,
        inputs=INPUTS,
        update=update,
        output_names=lambda params: [f"{kind.upper()}_{_period(params, DEFAULT_PERIOD)}"],
        windows=lambda params: (_period(params, DEFAULT_PERIOD),) * n_windows,
        warmup=lambda params: _period(params, DEFAULT_PERIOD),
        feed=_make_feed(term),
    )


def _mean_error(
    state: None, windows: Sequence[RollingWindow], bar: Dict[str, float], params: Dict[str, Any]
) -> float:
    return windows[1].average()


def _root_mean_error(
    state: None, windows: Sequence[RollingWindow], bar: Dict[str, float], params: Dict[str, Any]
) -> float:
    mean = windows[1].average()
    if math.isnan(mean):
        return NAN
    return math.sqrt(max(mean, 0.0))


def _relative_error(
    state: None, windows: Sequence[RollingWindow], bar: Dict[str, float], params: Dict[str, Any]
) -> float:
    total = windows[2].sum()
    if math.isnan(total) or total == 0.0:
        return NAN
    return windows[1].sum() / total


_register("mae", _abs_error, _mean_error)
_register("mse", _sq_error, _mean_error)
_register("rmse", _sq_error, _root_mean_error)
_register("mape", _abs_pct_error, _mean_error)
_register("rae", _abs_error, _relative_error, n_windows=3)


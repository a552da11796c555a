# -*- coding: utf-8 -*-
"""ta-stream.stateful – streaming / stateful indicator package.

Category modules populate STATEFUL_REGISTRY at import time.  This package
re-exports it plus the shared engine API.
"""
from __future__ import annotations

# Base API (always available)
from ._base import (
    NAN,
    TimedValue,
    EMAState,
    StatefulIndicator,
    StreamProtocolError,
    STATEFUL_REGISTRY,
    ema_make,
    rma_make,
    ema_update_raw,
    get_indicator,
    resolve_output_names,
    stateful_supported_kinds,
    STATEFUL_SPEC_EXCLUDES,
)
from ._window import RollingWindow
from ._node import StreamNode, Subscriber
from ._replay import replay, replay_frame

# ---------------------------------------------------------------------------
# Category modules – each populates the shared registry on import
# ---------------------------------------------------------------------------
from . import _overlap      # noqa: F401  sma, wma, ema, rma
from . import _statistics   # noqa: F401  max, min, median, variance, …
from . import _errors       # noqa: F401  mae, mse, rmse, mape, rae
from . import _performance  # noqa: F401  drawdown

__all__ = [
    # base
    "NAN",
    "TimedValue",
    "EMAState",
    "StatefulIndicator",
    "StreamProtocolError",
    "STATEFUL_REGISTRY",
    "ema_make",
    "rma_make",
    "ema_update_raw",
    "get_indicator",
    "resolve_output_names",
    "stateful_supported_kinds",
    # engine
    "RollingWindow",
    "StreamNode",
    "Subscriber",
    # pandas bridge
    "replay",
    "replay_frame",
]

# -*- coding: utf-8 -*-
"""ta-stream stateful – shared base: values, descriptors, helpers, registry.

All category modules (``_overlap``, ``_statistics``, …) import from here
and populate the registry at load time.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import math

NAN = float("nan")


class StreamProtocolError(RuntimeError):
    """Raised when a caller breaks the commit / revision protocol."""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _param(params: Dict[str, Any], key: str, default: Any) -> Any:
    """Pull *key* from *params*; treat None as missing → default."""
    value = params.get(key, default)
    return default if value is None else value


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    try:
        result = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}") from None
    if result != value:
        raise ValueError(f"{name} must be an integer, got {value!r}")
    return result


def _as_float(value: Any, name: str) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}") from None
    if math.isnan(result):
        raise ValueError(f"{name} must not be NaN")
    return result


def _period(params: Dict[str, Any], default: int, minimum: int = 1) -> int:
    """Validated ``period`` parameter.  Raises ValueError below *minimum*."""
    period = _as_int(_param(params, "period", default), "period")
    if period < minimum:
        raise ValueError(f"period must be >= {minimum}, got {period}")
    return period


# ---------------------------------------------------------------------------
# Timed value
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TimedValue:
    """One point of a stream.

    ``is_new=False`` revises the most recently committed slot; it never
    refers to an older one.
    """
    time:   Any
    value:  float
    is_new: bool = True

    @classmethod
    def of(cls, x: Any, time: Any = None, is_new: bool = True) -> "TimedValue":
        if isinstance(x, TimedValue):
            return x
        return cls(time=time, value=NAN if x is None else float(x), is_new=is_new)


# ---------------------------------------------------------------------------
# Shared state classes
# ---------------------------------------------------------------------------

@dataclass
class EMAState:
    """Reusable for EMA / RMA / Wilder / SMMA.

    EMA  -> alpha = 2 / (period + 1)   via ``ema_make``
    RMA  -> alpha = 1 / period          via ``rma_make``

    presma=True  ->  first output = SMA(x[0:period])   (TA-Lib default)
    presma=False ->  first output = x[0]
    """
    period: int
    alpha: float
    last: Optional[float] = None
    presma: bool = True
    _warmup_sum: float = 0.0
    _warmup_count: int = 0


def ema_make(period: int, presma: bool = True) -> EMAState:
    """EMA state – alpha = 2 / (period + 1)."""
    return EMAState(period=period, alpha=2.0 / (period + 1.0), presma=presma)


def rma_make(period: int, presma: bool = True) -> EMAState:
    """RMA / Wilder state – alpha = 1 / period."""
    return EMAState(period=period, alpha=1.0 / period, presma=presma)


def ema_update_raw(state: EMAState, x: float) -> Optional[float]:
    """Single-step EMA / RMA update.  Returns the value or None.

    Returns None while warming up (presma mode, fewer than *period*
    samples seen).
    """
    if state.last is None:
        if state.presma:
            state._warmup_sum += x
            state._warmup_count += 1
            if state._warmup_count < state.period:
                return None
            state.last = state._warmup_sum / state.period   # SMA seed
            return state.last
        state.last = x
        return state.last
    state.last = state.alpha * x + (1.0 - state.alpha) * state.last
    return state.last


# ---------------------------------------------------------------------------
# Indicator descriptor & registry  (populated by category modules)
# ---------------------------------------------------------------------------

def _no_windows(params: Dict[str, Any]) -> Tuple[int, ...]:
    return ()


def _no_warmup(params: Dict[str, Any]) -> int:
    return 0


def _no_state(params: Dict[str, Any]) -> Any:
    return None


@dataclass(frozen=True)
class StatefulIndicator:
    """Immutable descriptor for a single streaming formula.

    ``init`` builds the accumulator state (scalars only, it is snapshotted
    with a shallow copy).  ``update`` must read nothing but its arguments.
    ``feed`` pushes the bar into the node's windows; when omitted, input
    channel ``i`` goes to window ``i``.
    """
    kind:         str
    inputs:       Tuple[str, ...]
    update:       Callable[[Any, Sequence[Any], Dict[str, float], Dict[str, Any]], float]
    output_names: Callable[[Dict[str, Any]], List[str]]
    init:         Callable[[Dict[str, Any]], Any] = _no_state
    windows:      Callable[[Dict[str, Any]], Tuple[int, ...]] = _no_windows
    warmup:       Callable[[Dict[str, Any]], int] = _no_warmup
    feed:         Optional[Callable[[Sequence[Any], Dict[str, float], bool], None]] = None


# Populated by category modules at import time.
STATEFUL_REGISTRY: Dict[str, StatefulIndicator] = {}


def get_indicator(kind: str) -> StatefulIndicator:
    indicator = STATEFUL_REGISTRY.get(kind)
    if indicator is None:
        raise ValueError(f"Indicator '{kind}' not found in STATEFUL_REGISTRY")
    return indicator


# ---------------------------------------------------------------------------
# Output-name helpers
# ---------------------------------------------------------------------------

STATEFUL_SPEC_EXCLUDES = frozenset({
    "kind", "prefix", "suffix", "delimiter", "col_names", "name",
})


def resolve_output_names(
        base_names: List[str], spec: Dict[str, Any]
) -> Tuple[Optional[List[str]], Optional[str]]:
    """Apply prefix / suffix / col_names overrides from *spec*."""
    names = list(base_names)
    delimiter = spec.get("delimiter", "_")
    prefix = spec.get("prefix") or ""
    suffix = spec.get("suffix") or ""
    if prefix:
        prefix = f"{prefix}{delimiter}"
    if suffix:
        suffix = f"{delimiter}{suffix}"
    if prefix or suffix:
        names = [f"{prefix}{n}{suffix}" for n in names]
    col_names = spec.get("col_names")
    if col_names is not None:
        if not isinstance(col_names, tuple):
            col_names = (col_names,)
        if len(col_names) < len(names):
            return None, f"[!] col_names too short: {len(col_names)} < {len(names)}"
        names = list(col_names[: len(names)])
    return names, None


def stateful_supported_kinds() -> List[str]:
    """Return sorted list of supported indicator kinds."""
    return sorted(STATEFUL_REGISTRY.keys())

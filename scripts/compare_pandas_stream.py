#!/usr/bin/env python3
"""Compare pandas rolling / ewm outputs vs streamed node outputs.

Replays a random-walk close through StreamNodes and reports the largest
deviations from the equivalent vectorised pandas computation.
"""
from __future__ import annotations

import argparse
import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import numpy as np
import pandas as pd
import ta_stream as ta


def make_close(rows: int, seed: int) -> pd.Series:
    rng = np.random.default_rng(seed)
    idx = pd.date_range("2025-01-01", periods=rows, freq="1min")
    base = 100 + rng.standard_normal(rows).cumsum()
    return pd.Series(base + rng.normal(0, 0.2, rows), index=idx, name="close")


def references(close: pd.Series, period: int) -> dict:
    roll = close.rolling(period, min_periods=1)
    return {
        "sma": roll.mean(),
        "sum": roll.sum(),
        "max": roll.max(),
        "min": roll.min(),
        "variance": close.rolling(period, min_periods=2).var().fillna(0.0),
        "stdev": close.rolling(period, min_periods=2).std().fillna(0.0),
        "median": close.rolling(period).median(),
    }


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--rows", type=int, default=5000)
    ap.add_argument("--period", type=int, default=20)
    ap.add_argument("--seed", type=int, default=11)
    ap.add_argument("--eps", type=float, default=1e-12)
    args = ap.parse_args()

    close = make_close(args.rows, args.seed)
    rows = []
    for kind, ref in references(close, args.period).items():
        test = ta.replay(ta.StreamNode(kind, period=args.period), close)
        mask = ref.notna()
        diff = (test[mask] - ref[mask]).abs()
        rel = diff / (ref[mask].abs() + args.eps)
        rows.append({
            "kind": kind,
            "nan_ref": int(ref.isna().sum()),
            "nan_test": int(test.isna().sum()),
            "max_abs": diff.max(),
            "mean_abs": diff.mean(),
            "mean_rel": rel.mean(),
        })

    summary = pd.DataFrame(rows).set_index("kind")
    print("[i] rows:", args.rows)
    print("[i] period:", args.period)
    print(summary.sort_values("max_abs", ascending=False))


if __name__ == "__main__":
    main()

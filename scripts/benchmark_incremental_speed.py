#!/usr/bin/env python3
"""Benchmark per-update cost of StreamNodes.

Measures commit and revision updates as the window grows.  Both should
stay flat for O(1) formulas (sma, sum, max, min, ema, mae) and grow with
the window for snapshot-based ones (median, variance, wma).
"""
from __future__ import annotations

import argparse
import os
import sys
from time import perf_counter
from typing import List

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import numpy as np
import ta_stream as ta


def parse_list(value: str) -> List[int]:
    return [int(v.strip()) for v in value.split(",") if v.strip()]


def parse_kinds(value: str | None) -> List[str]:
    if not value:
        return ["sma", "max", "ema", "median", "variance"]
    return [v.strip() for v in value.split(",") if v.strip()]


def time_updates(kind: str, period: int, values: np.ndarray, revisions: int) -> tuple:
    node = ta.StreamNode(kind, period=max(period, 2))
    start = perf_counter()
    for t, x in enumerate(values):
        node.update(ta.TimedValue(t, float(x)))
    commit_s = (perf_counter() - start) / len(values)

    t = len(values) - 1
    start = perf_counter()
    for i in range(revisions):
        node.update(ta.TimedValue(t, float(values[i % len(values)]), False))
    revise_s = (perf_counter() - start) / max(revisions, 1)
    return commit_s, revise_s


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--periods", type=str, default="10,100,1000,10000", help="comma-separated window sizes")
    ap.add_argument("--rows", type=int, default=50000, help="committed updates per run")
    ap.add_argument("--revisions", type=int, default=10000, help="revisions of the last slot")
    ap.add_argument("--kinds", type=str, default="", help="comma-separated kinds")
    ap.add_argument("--seed", type=int, default=7)
    args = ap.parse_args()

    rng = np.random.default_rng(args.seed)
    values = 100 + rng.standard_normal(args.rows).cumsum()

    print(f"[i] rows: {args.rows}  revisions: {args.revisions}")
    for kind in parse_kinds(args.kinds):
        for period in parse_list(args.periods):
            commit_s, revise_s = time_updates(kind, period, values, args.revisions)
            print(
                f"[{kind}] period={period} commit_us={commit_s * 1e6:.2f} "
                f"revise_us={revise_s * 1e6:.2f}"
            )


if __name__ == "__main__":
    main()

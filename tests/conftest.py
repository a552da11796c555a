# -*- coding: utf-8 -*-
"""Shared fixtures for the ta-stream test suite."""
import numpy as np
import pandas as pd
import pytest


def make_close(rows: int, seed: int) -> pd.Series:
    rng = np.random.default_rng(seed)
    idx = pd.date_range("2025-01-01", periods=rows, freq="1min")
    base = 100 + rng.standard_normal(rows).cumsum()
    return pd.Series(base + rng.normal(0, 0.2, rows), index=idx, name="close")


@pytest.fixture
def close():
    """200 one-minute closes, random walk around 100."""
    return make_close(200, 7)


@pytest.fixture
def predicted(close):
    """Noisy forecast of ``close``."""
    rng = np.random.default_rng(11)
    return close + rng.normal(0, 0.5, len(close))


class Recorder:
    """Subscriber that logs every emission it receives."""

    def __init__(self, log=None, label=""):
        self.log = log if log is not None else []
        self.label = label

    def on_value(self, value, channel):
        self.log.append((self.label, value, channel))

    @property
    def values(self):
        return [v.value for _, v, _ in self.log]


@pytest.fixture
def recorder():
    return Recorder()

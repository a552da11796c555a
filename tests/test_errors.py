# -*- coding: utf-8 -*-
import math

import numpy as np
import pytest

from ta_stream import StreamNode, TimedValue, replay

ACTUAL = [1.0, 2.0, 3.0, 4.0]
FORECAST = [1.0, 1.0, 1.0, 1.0]


def _run(kind, actual=ACTUAL, forecast=FORECAST, period=4):
    node = StreamNode(kind, period=period)
    for a, p in zip(actual, forecast):
        node.update(a, p)
    return node


class TestErrorMetrics:

    def test_mae(self):
        assert _run("mae").value == pytest.approx(1.5)

    def test_mse(self):
        assert _run("mse").value == pytest.approx(3.5)

    def test_rmse(self):
        assert _run("rmse").value == pytest.approx(math.sqrt(3.5))

    def test_mape(self):
        assert _run("mape").value == pytest.approx((0.0 + 0.5 + 2.0 / 3.0 + 0.75) / 4.0)

    def test_rae(self):
        assert _run("rae").value == pytest.approx(6.0 / 10.0)

    def test_rolling_window(self):
        node = _run("mae", actual=ACTUAL + [5.0], forecast=FORECAST + [5.0])
        assert node.value == pytest.approx((1.0 + 2.0 + 3.0 + 0.0) / 4.0)

    def test_missing_prediction_falls_back_to_actual_average(self):
        node = StreamNode("mae", period=3)
        assert node.update(2.0, float("nan")) == 0.0
        node.update(4.0)
        # fallback = mean(2, 4) = 3 -> |4 - 3| = 1
        assert node.value == pytest.approx(0.5)

    def test_rae_with_zero_actuals_is_nan(self):
        assert math.isnan(_run("rae", actual=[0.0, 0.0], forecast=[1.0, 2.0]).value)

    def test_rmse_of_zero_errors_after_a_large_error_leaves(self):
        node = StreamNode("rmse", period=2)
        for actual in (1e4, math.sqrt(0.02), 0.0, 0.0):
            node.update(actual, 0.0)
        assert node.value == 0.0

    def test_mae_of_zero_errors_after_a_large_error_leaves(self):
        node = StreamNode("mae", period=2)
        for actual in (1e8, 0.7, 0.0, 0.0):
            node.update(actual, 0.0)
        assert node.value == 0.0

    def test_warmup_is_period(self):
        node = StreamNode("rmse", period=3)
        node.update(1.0, 1.0)
        node.update(1.0, 1.0)
        assert not node.is_hot
        node.update(1.0, 1.0)
        assert node.is_hot

    def test_revision_replaces_last_pair(self):
        node = StreamNode("mae", period=3)
        node.update(TimedValue(0, 10.0), 8.0)
        node.update(TimedValue(1, 10.0), 4.0)
        assert node.value == pytest.approx(4.0)
        node.update(TimedValue(1, 10.0, False), 10.0)
        assert node.value == pytest.approx(1.0)

    def test_matches_vectorised(self, close, predicted):
        ours = replay(StreamNode("mse", period=20), close, predicted)
        ref = ((close - predicted) ** 2).rolling(20, min_periods=1).mean()
        np.testing.assert_allclose(ours.to_numpy(), ref.to_numpy(), rtol=1e-8)

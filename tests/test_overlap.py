# -*- coding: utf-8 -*-
import math

import numpy as np
import pytest

from ta_stream import StreamNode, TimedValue, replay


def _ema_reference(values, period, alpha):
    out = []
    last = None
    for i, x in enumerate(values):
        if last is None:
            if i + 1 < period:
                out.append(float("nan"))
                continue
            last = sum(values[:period]) / period
        else:
            last = alpha * x + (1.0 - alpha) * last
        out.append(last)
    return out


class TestMovingAverages:

    def test_sma_matches_pandas(self, close):
        ours = replay(StreamNode("sma", period=10), close)
        ref = close.rolling(10, min_periods=1).mean()
        np.testing.assert_allclose(ours.to_numpy(), ref.to_numpy(), rtol=1e-9)

    def test_ema_is_sma_seeded(self, close):
        values = close.tolist()
        ours = replay(StreamNode("ema", period=10), close)
        ref = _ema_reference(values, 10, 2.0 / 11.0)
        np.testing.assert_allclose(ours.to_numpy(), ref, rtol=1e-12)
        assert ours.iloc[:9].isna().all()

    def test_rma_without_presma_matches_pandas_ewm(self, close):
        ours = replay(StreamNode("rma", period=14, presma=False), close)
        ref = close.ewm(alpha=1.0 / 14.0, adjust=False).mean()
        np.testing.assert_allclose(ours.to_numpy(), ref.to_numpy(), rtol=1e-9)

    def test_wma(self):
        node = StreamNode("wma", period=3)
        for x in (1.0, 2.0, 3.0, 4.0):
            node.update(x)
        assert node.value == pytest.approx((2.0 * 1 + 3.0 * 2 + 4.0 * 3) / 6.0)

    def test_ema_holds_through_nan(self):
        node = StreamNode("ema", period=2)
        node.update(1.0)
        node.update(3.0)
        assert node.value == pytest.approx(2.0)
        assert node.update(float("nan")) == pytest.approx(2.0)
        assert node.state.last == pytest.approx(2.0)

    def test_ema_revision_restores_seed_accumulators(self):
        node = StreamNode("ema", period=3)
        node.update(TimedValue(0, 1.0))
        node.update(TimedValue(1, 2.0))
        node.update(TimedValue(1, 100.0, False))
        node.update(TimedValue(1, 5.0, False))
        assert node.state._warmup_count == 2
        assert node.state._warmup_sum == pytest.approx(6.0)
        assert math.isnan(node.value)
        assert node.update(TimedValue(2, 3.0)) == pytest.approx(3.0)

# -*- coding: utf-8 -*-
import numpy as np
import pandas as pd
import pytest

from conftest import Recorder
from ta_stream import StreamNode, replay, replay_frame


class TestReplay:

    def test_series_keeps_index_and_name(self, close):
        node = StreamNode("sma", period=5)
        out = replay(node, close)
        assert isinstance(out, pd.Series)
        assert out.name == "SMA_5"
        assert out.index.equals(close.index)
        assert node.index == len(close)
        assert out.iloc[-1] == pytest.approx(close.iloc[-5:].mean())

    def test_plain_iterable(self):
        out = replay(StreamNode("sum", period=2), [1.0, 2.0, 3.0])
        assert out.tolist() == [1.0, 3.0, 5.0]
        assert isinstance(out.index, pd.RangeIndex)

    def test_revision_rows_overwrite_their_slot(self):
        idx = pd.to_datetime(["2025-01-01 00:00", "2025-01-01 00:01",
                              "2025-01-01 00:01", "2025-01-01 00:02"])
        values = pd.Series([1.0, 2.0, 2.5, 3.0], index=idx)
        out = replay(StreamNode("sma", period=2), values, is_new=[True, True, False, True])
        assert out.tolist() == pytest.approx([1.0, 1.75, 2.75])
        assert list(out.index) == [idx[0], idx[1], idx[3]]

    def test_seeds_a_live_node(self, close):
        node = StreamNode("ema", period=10)
        replay(node, close.iloc[:150])
        live = [node.update(x) for x in close.iloc[150:]]
        full = replay(StreamNode("ema", period=10), close)
        np.testing.assert_allclose(live, full.iloc[150:].to_numpy())

    def test_subscribers_see_replayed_values(self):
        node = StreamNode("sma", period=1)
        rec = Recorder()
        node.subscribe(rec)
        replay(node, [4.0, 5.0])
        assert rec.values == [4.0, 5.0]

    def test_two_inputs(self, close, predicted):
        out = replay(StreamNode("mae", period=10), close, predicted)
        ref = (close - predicted).abs().rolling(10, min_periods=1).mean()
        np.testing.assert_allclose(out.to_numpy(), ref.to_numpy(), rtol=1e-9)

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            replay(StreamNode("mae", period=2), [1.0, 2.0], [1.0])
        with pytest.raises(ValueError):
            replay(StreamNode("sma", period=2), [1.0, 2.0], is_new=[True])


class TestReplayFrame:

    def test_one_column_per_spec(self, close):
        frame = close.to_frame()
        specs = [
            {"kind": "sma", "period": 5},
            {"kind": "median", "period": 5, "prefix": "C"},
            {"kind": "stdev", "period": 5, "col_names": ("vol",)},
        ]
        out = replay_frame(frame, specs)
        assert list(out.columns) == ["SMA_5", "C_MEDIAN_5", "vol"]
        assert out.index.equals(frame.index)
        ref = close.rolling(5).std()
        np.testing.assert_allclose(out["vol"].iloc[4:], ref.iloc[4:], rtol=1e-7)

    def test_spec_without_kind(self, close):
        with pytest.raises(ValueError):
            replay_frame(close.to_frame(), [{"period": 3}])

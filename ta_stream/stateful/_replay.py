# -*- coding: utf-8 -*-
"""ta-stream stateful – pandas bridge.

Replays historical Series through nodes, one update per row, so a node can
be seeded from history and then kept live, or so stream results can be
compared with vectorised pandas computations.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from ._base import NAN, TimedValue, resolve_output_names, STATEFUL_SPEC_EXCLUDES
from ._node import StreamNode


def _rows(values: Any):
    """(time, value) pairs; the index of a Series supplies the times."""
    index = getattr(values, "index", None)
    if index is not None:
        return list(zip(index, values.to_numpy()))
    return [(None, v) for v in values]


def replay(
    node: StreamNode,
    values: Any,
    predicted: Any = None,
    is_new: Optional[Iterable[bool]] = None,
):
    """Feed *values* through *node* and return its outputs as a Series.

    *values* may be a ``pd.Series`` (index used as timestamps) or any
    iterable of numbers.  *predicted* is the second input of two-input
    formulas.  *is_new* flags revisions row by row; a revision overwrites
    the output of the slot it revises, so the result holds one row per
    committed slot.

    Subscribers of *node* receive every emission as usual.
    """
    import pandas as pd          # lazy – pandas not required at module load

    rows = _rows(values)
    second = [v for _, v in _rows(predicted)] if predicted is not None else None
    if second is not None and len(second) != len(rows):
        raise ValueError(f"predicted has {len(second)} rows, values has {len(rows)}")
    flags = list(is_new) if is_new is not None else [True] * len(rows)
    if len(flags) != len(rows):
        raise ValueError(f"is_new has {len(flags)} rows, values has {len(rows)}")

    times: List[Any] = []
    out: List[float] = []
    for i, (t, v) in enumerate(rows):
        tv = TimedValue(t, NAN if pd.isna(v) else float(v), bool(flags[i]))
        input2 = None
        if second is not None:
            input2 = NAN if pd.isna(second[i]) else float(second[i])
        result = node.update(tv, input2)
        if tv.is_new:
            times.append(t)
            out.append(result)
        else:
            out[-1] = result

    index = times if all(t is not None for t in times) else None
    return pd.Series(out, index=index, name=node.name, dtype=float)


def replay_frame(frame, specs: List[Dict[str, Any]], column: str = "close"):
    """Replay ``frame[column]`` through one node per spec dict.

    Each spec is ``{"kind": ..., **params}`` plus optional ``prefix`` /
    ``suffix`` / ``col_names`` overrides.  Returns a DataFrame with one
    column per spec, on the frame's index.
    """
    import pandas as pd

    columns: Dict[str, Any] = {}
    for spec in specs:
        spec = dict(spec)
        kind = spec.get("kind")
        if kind is None:
            raise ValueError(f"spec without 'kind': {spec!r}")
        params = {k: v for k, v in spec.items() if k not in STATEFUL_SPEC_EXCLUDES}
        node = StreamNode(kind, **params)
        names, err = resolve_output_names([node.name], spec)
        if err:
            raise ValueError(err)
        columns[names[0]] = replay(node, frame[column]).to_numpy()
    return pd.DataFrame(columns, index=frame.index)

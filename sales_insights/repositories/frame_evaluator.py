"""
pandas evaluator for predicates and aggregation pipelines.

Stores that can only hand back raw documents (a JSON file, a Firestore
collection stream) load a snapshot into a DataFrame and evaluate the core's
predicate/pipeline descriptions here.
"""

from __future__ import annotations

import math
from typing import Any, Optional

import pandas as pd

from sales_insights.analytics.pipeline import (
    Accumulator,
    Bucket,
    Count,
    CountIf,
    Group,
    Pipeline,
    Sort,
    Sum,
)
from sales_insights.analytics.predicates import (
    AllOf,
    AnyOf,
    MonthEquals,
    NumberEquals,
    Predicate,
    TextContains,
)

# Columns every frame carries, with the value used when a record omits them.
COLUMN_DEFAULTS: dict[str, Any] = {
    "id": None,
    "title": "",
    "description": "",
    "price": math.nan,
    "category": "",
    "sold": False,
    "dateOfSale": None,
}


def records_to_frame(records: list[dict[str, Any]]) -> pd.DataFrame:
    """Build a DataFrame whose row positions match `records` positions."""
    frame = pd.DataFrame.from_records(records) if records else pd.DataFrame()
    for column, default in COLUMN_DEFAULTS.items():
        if column not in frame.columns:
            frame[column] = default
    return frame.reset_index(drop=True)


def evaluate_mask(frame: pd.DataFrame, predicate: Predicate) -> pd.Series:
    """Return a boolean Series marking the rows that satisfy `predicate`."""
    if isinstance(predicate, MonthEquals):
        timestamps = pd.to_datetime(frame[predicate.field], utc=True, errors="coerce", format="ISO8601")
        return (timestamps.dt.month == predicate.month).fillna(False).astype(bool)

    if isinstance(predicate, TextContains):
        text = _fill_missing(frame[predicate.field], "").astype(str)
        return text.str.contains(predicate.term, case=False, regex=False).astype(bool)

    if isinstance(predicate, NumberEquals):
        numbers = pd.to_numeric(frame[predicate.field], errors="coerce")
        return (numbers == predicate.value).astype(bool)

    if isinstance(predicate, AllOf):
        mask = pd.Series(True, index=frame.index, dtype=bool)
        for clause in predicate.clauses:
            mask &= evaluate_mask(frame, clause)
        return mask

    if isinstance(predicate, AnyOf):
        mask = pd.Series(False, index=frame.index, dtype=bool)
        for clause in predicate.clauses:
            mask |= evaluate_mask(frame, clause)
        return mask

    raise TypeError(f"Unsupported predicate: {type(predicate).__name__}")


def select_records(
    records: list[dict[str, Any]],
    predicate: Predicate,
    skip: int = 0,
    limit: Optional[int] = None,
) -> list[dict[str, Any]]:
    """Return the matching records, in input order, after skip/limit."""
    frame = records_to_frame(records)
    positions = frame.index[evaluate_mask(frame, predicate).to_numpy()]
    end = None if limit is None else skip + limit
    return [records[pos] for pos in positions[skip:end]]


def count_records(records: list[dict[str, Any]], predicate: Predicate) -> int:
    frame = records_to_frame(records)
    return int(evaluate_mask(frame, predicate).sum())


def run_pipeline(
    records: list[dict[str, Any]],
    predicate: Predicate,
    pipeline: Pipeline,
) -> list[dict[str, Any]]:
    """Filter `records` by `predicate`, then apply each pipeline stage in order."""
    frame = records_to_frame(records)
    current: Any = frame[evaluate_mask(frame, predicate)]

    for stage in pipeline:
        if isinstance(stage, Group):
            current = _group(_require_frame(current, stage), stage)
        elif isinstance(stage, Bucket):
            current = _bucket(_require_frame(current, stage), stage)
        elif isinstance(stage, Sort):
            current = _sort(_as_rows(current), stage)
        else:
            raise TypeError(f"Unsupported pipeline stage: {type(stage).__name__}")

    return _as_rows(current)


def _fill_missing(series: pd.Series, value: Any) -> pd.Series:
    return series.where(series.notna(), value)


def _require_frame(current: Any, stage: Any) -> pd.DataFrame:
    if not isinstance(current, pd.DataFrame):
        raise ValueError(f"{type(stage).__name__} stage must run on records, not on aggregated rows")
    return current


def _as_rows(current: Any) -> list[dict[str, Any]]:
    if isinstance(current, pd.DataFrame):
        return current.to_dict(orient="records")
    return current


def _accumulate(part: pd.DataFrame, accumulator: Accumulator) -> Any:
    if isinstance(accumulator, Sum):
        return float(pd.to_numeric(part[accumulator.field], errors="coerce").fillna(0).sum())
    if isinstance(accumulator, Count):
        return int(len(part))
    if isinstance(accumulator, CountIf):
        default = COLUMN_DEFAULTS.get(accumulator.field)
        values = _fill_missing(part[accumulator.field], default)
        return int((values == accumulator.value).sum())
    raise TypeError(f"Unsupported accumulator: {type(accumulator).__name__}")


def _group(frame: pd.DataFrame, stage: Group) -> list[dict[str, Any]]:
    if stage.by is None:
        if frame.empty:
            return []
        parts = [(None, frame)]
    else:
        parts = list(frame.groupby(stage.by, sort=False, dropna=False))

    rows = []
    for key, part in parts:
        row: dict[str, Any] = {"_id": None if pd.isna(key) else key}
        for name, accumulator in stage.accumulators.items():
            row[name] = _accumulate(part, accumulator)
        rows.append(row)
    return rows


def _bucket(frame: pd.DataFrame, stage: Bucket) -> list[dict[str, Any]]:
    if frame.empty:
        return []
    values = pd.to_numeric(frame[stage.field], errors="coerce")
    edges = [-math.inf, *stage.boundaries, math.inf]
    codes = pd.cut(values, bins=edges, right=True, labels=False).dropna().astype(int)
    counts = codes.value_counts().sort_index()
    return [{"_id": int(index), stage.output: int(count)} for index, count in counts.items()]


def _sort(rows: list[dict[str, Any]], stage: Sort) -> list[dict[str, Any]]:
    # Stable sorts applied from the least significant key.
    for key in reversed(stage.keys):
        descending = key.startswith("-")
        name = key.lstrip("-")
        rows = sorted(
            rows,
            key=lambda row: (row.get(name) is None, row.get(name)),
            reverse=descending,
        )
    return rows

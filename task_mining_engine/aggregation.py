"""Grouping-and-reduction over event records.

Every derived statistic in the package is produced by :func:`aggregate_by_key`:
records are bucketed by a key function and each bucket is passed through a set
of named reducers. Reducers receive the list of records in the bucket, in
input order, and return a single value.

    grouped = aggregate_by_key(
        records,
        lambda r: r.window,
        {"count": count(), "total_duration": total("duration_seconds")},
    )
    rows = top_n(to_rows(grouped, "window"), "total_duration", 10)
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Callable, Iterable, Mapping, Optional

from task_mining_engine import stats
from task_mining_engine.schema import UNKNOWN, EventRecord

KeyFn = Callable[[EventRecord], Any]
Reducer = Callable[[list[EventRecord]], Any]


def normalize_key(value: Any) -> str:
    """Map a raw key to its group label; missing or blank keys become ``"Unknown"``."""

    if value is None:
        return UNKNOWN
    text = str(value).strip()
    return text or UNKNOWN


def group_records(records: Iterable[EventRecord], key_fn: KeyFn) -> dict[str, list[EventRecord]]:
    """Bucket records by key, keys in first-encounter order."""

    groups: dict[str, list[EventRecord]] = {}
    for record in records:
        groups.setdefault(normalize_key(key_fn(record)), []).append(record)
    return groups


def aggregate_by_key(
    records: Iterable[EventRecord],
    key_fn: KeyFn,
    reducers: Mapping[str, Reducer],
) -> dict[str, dict[str, Any]]:
    """Reduce each group of records to a statistic record.

    The result maps group key to ``{stat_name: value}`` for every reducer, in
    the order keys were first seen. The input is not modified and an empty
    input yields an empty mapping.
    """

    groups = group_records(records, key_fn)
    return {
        key: {name: reducer(members) for name, reducer in reducers.items()}
        for key, members in groups.items()
    }


def to_rows(grouped: Mapping[str, Mapping[str, Any]], key_name: str) -> list[dict[str, Any]]:
    """Flatten an aggregation into display rows, keeping aggregation order."""

    return [{key_name: key, **values} for key, values in grouped.items()]


def top_n(rows: list[dict[str, Any]], stat: str, n: int) -> list[dict[str, Any]]:
    """Return the ``n`` rows with the largest ``stat``.

    Ties keep their input order; there is no secondary sort key.
    """

    if n <= 0:
        return []
    return sorted(rows, key=lambda row: row[stat], reverse=True)[:n]


def _values(records: list[EventRecord], field: str) -> list[Any]:
    return [getattr(record, field) for record in records]


def _present(values: list[Any]) -> list[Any]:
    return [value for value in values if value is not None and value != ""]


def count() -> Reducer:
    return len


def total(field: str) -> Reducer:
    def reduce(records: list[EventRecord]) -> float:
        return sum(getattr(record, field) for record in records)

    return reduce


def average(field: str) -> Reducer:
    def reduce(records: list[EventRecord]) -> float:
        return stats.mean([getattr(record, field) for record in records])

    return reduce


def minimum(field: str) -> Reducer:
    def reduce(records: list[EventRecord]) -> float:
        return min((getattr(record, field) for record in records), default=0)

    return reduce


def maximum(field: str) -> Reducer:
    def reduce(records: list[EventRecord]) -> float:
        return max((getattr(record, field) for record in records), default=0)

    return reduce


def median_of(field: str) -> Reducer:
    def reduce(records: list[EventRecord]) -> float:
        return stats.median([getattr(record, field) for record in records])

    return reduce


def variability_of(field: str) -> Reducer:
    def reduce(records: list[EventRecord]) -> float:
        return stats.variability_ratio([getattr(record, field) for record in records])

    return reduce


def distinct(field: str) -> Reducer:
    """Number of distinct non-empty values."""

    def reduce(records: list[EventRecord]) -> int:
        return len(set(_present(_values(records, field))))

    return reduce


def distinct_values(field: str) -> Reducer:
    """Distinct non-empty values in first-seen order."""

    def reduce(records: list[EventRecord]) -> list[Any]:
        return list(dict.fromkeys(_present(_values(records, field))))

    return reduce


def frequencies(field: str) -> Reducer:
    """Occurrences per value, missing values counted under ``"Unknown"``."""

    def reduce(records: list[EventRecord]) -> dict[str, int]:
        return dict(Counter(normalize_key(value) for value in _values(records, field)))

    return reduce


def earliest(field: str) -> Reducer:
    def reduce(records: list[EventRecord]) -> Optional[Any]:
        return min(_present(_values(records, field)), default=None)

    return reduce


def latest(field: str) -> Reducer:
    def reduce(records: list[EventRecord]) -> Optional[Any]:
        return max(_present(_values(records, field)), default=None)

    return reduce


def crosstab(
    records: Iterable[EventRecord],
    row_fn: KeyFn,
    col_fn: KeyFn,
    value_fn: Optional[Callable[[EventRecord], float]] = None,
) -> dict[str, Any]:
    """Two-dimensional grouping for heatmaps.

    Rows and columns are listed in first-encounter order; combinations that
    never occur are zero. ``value_fn`` defaults to counting records.
    """

    cells: dict[tuple[str, str], float] = {}
    row_keys: dict[str, None] = {}
    col_keys: dict[str, None] = {}
    for record in records:
        row = normalize_key(row_fn(record))
        col = normalize_key(col_fn(record))
        row_keys.setdefault(row)
        col_keys.setdefault(col)
        value = 1 if value_fn is None else value_fn(record)
        cells[(row, col)] = cells.get((row, col), 0) + value

    rows = list(row_keys)
    columns = list(col_keys)
    matrix = [[cells.get((row, col), 0) for col in columns] for row in rows]
    return {
        "rows": rows,
        "columns": columns,
        "matrix": matrix,
        "max_value": max(cells.values(), default=0),
    }

"""Per-dimension statistic views used by the dashboard charts and tables."""

from __future__ import annotations

from typing import Any, Iterable

from task_mining_engine import stats
from task_mining_engine.aggregation import (
    aggregate_by_key,
    average,
    count,
    crosstab,
    distinct,
    distinct_values,
    earliest,
    frequencies,
    latest,
    maximum,
    median_of,
    minimum,
    to_rows,
    top_n,
    total,
    variability_of,
)
from task_mining_engine.schema import EventRecord

_INTERACTION_REDUCERS = {
    "total_clicks": total("mouse_clicks"),
    "total_keypresses": total("keystrokes"),
    "total_copies": total("copies"),
    "total_pastes": total("pastes"),
}

CASE_DURATION_REDUCERS = {
    "count": count(),
    "total_duration": total("duration_seconds"),
    "avg_duration": average("duration_seconds"),
    "min_duration": minimum("duration_seconds"),
    "median_duration": median_of("duration_seconds"),
    "max_duration": maximum("duration_seconds"),
    "variability_ratio": variability_of("duration_seconds"),
}

_DURATION_FIELDS = ("total_duration", "avg_duration", "min_duration", "median_duration", "max_duration")

_UNITS = {"seconds": lambda value: round(value, 2), "minutes": stats.to_minutes, "hours": stats.to_hours}


def case_duration_stats(records: Iterable[EventRecord]) -> dict[str, dict[str, Any]]:
    """Raw per-case duration statistics in seconds, keyed by case id."""

    return aggregate_by_key(records, lambda r: r.case_id, CASE_DURATION_REDUCERS)


def case_duration_table(records: Iterable[EventRecord]) -> list[dict[str, Any]]:
    """Cases table rows: durations in minutes, variability ratio to two decimals."""

    grouped = aggregate_by_key(
        records,
        lambda r: r.case_id,
        {
            **CASE_DURATION_REDUCERS,
            "variant_count": distinct("activity"),
            "resources": distinct("actor"),
            "windows": distinct("window"),
        },
    )
    rows = []
    for row in to_rows(grouped, "case_id"):
        for field in _DURATION_FIELDS:
            row[field] = stats.to_minutes(row[field])
        row["variability_ratio"] = round(row["variability_ratio"], 2)
        rows.append(row)
    return rows


def case_stats(records: Iterable[EventRecord]) -> list[dict[str, Any]]:
    grouped = aggregate_by_key(
        records,
        lambda r: r.case_id,
        {
            "total_activities": count(),
            "total_duration": total("duration_seconds"),
            "avg_activity_duration": average("duration_seconds"),
            "unique_windows": distinct("window"),
            "unique_activities": distinct("activity"),
            "unique_agents": distinct("actor"),
            **_INTERACTION_REDUCERS,
            "first_activity": earliest("start_time"),
            "last_activity": latest("end_time"),
        },
    )
    rows = to_rows(grouped, "case_id")
    for row in rows:
        first, last = row["first_activity"], row["last_activity"]
        row["case_span_seconds"] = (last - first).total_seconds() if first and last else None
    return rows


def agent_stats(records: Iterable[EventRecord]) -> list[dict[str, Any]]:
    grouped = aggregate_by_key(
        records,
        lambda r: r.actor,
        {
            "total_activities": count(),
            "total_cases": distinct("case_id"),
            "total_work_time": total("duration_seconds"),
            "avg_activity_duration": average("duration_seconds"),
            "unique_windows": distinct("window"),
            "unique_activities": distinct("activity"),
            **_INTERACTION_REDUCERS,
            "applications": distinct_values("application"),
        },
    )
    return to_rows(grouped, "agent")


def window_stats(records: Iterable[EventRecord]) -> list[dict[str, Any]]:
    grouped = aggregate_by_key(
        records,
        lambda r: r.window,
        {
            "total_activities": count(),
            "unique_cases": distinct("case_id"),
            "unique_agents": distinct("actor"),
            "total_usage_time": total("duration_seconds"),
            "avg_session_duration": average("duration_seconds"),
            **_INTERACTION_REDUCERS,
        },
    )
    return to_rows(grouped, "window")


def activity_stats(records: Iterable[EventRecord]) -> list[dict[str, Any]]:
    grouped = aggregate_by_key(
        records,
        lambda r: r.activity,
        {
            "total_occurrences": count(),
            "unique_cases": distinct("case_id"),
            "unique_agents": distinct("actor"),
            "total_time_spent": total("duration_seconds"),
            "avg_duration": average("duration_seconds"),
            **_INTERACTION_REDUCERS,
        },
    )
    return to_rows(grouped, "activity")


def step_stats(records: Iterable[EventRecord]) -> list[dict[str, Any]]:
    grouped = aggregate_by_key(
        records,
        lambda r: r.step,
        {
            "count": count(),
            "total_duration": total("duration_seconds"),
            "avg_duration": average("duration_seconds"),
            "unique_resources": distinct("actor"),
        },
    )
    return to_rows(grouped, "step")


def team_stats(records: Iterable[EventRecord]) -> list[dict[str, Any]]:
    grouped = aggregate_by_key(
        records,
        lambda r: r.team,
        {
            "count": count(),
            "total_duration": total("duration_seconds"),
            "avg_duration": average("duration_seconds"),
            "total_clicks": total("mouse_clicks"),
            "total_keypresses": total("keystrokes"),
            "resources": distinct_values("actor"),
            "statuses": frequencies("status"),
            "priorities": frequencies("priority"),
        },
    )
    return to_rows(grouped, "team")


def resource_stats(records: Iterable[EventRecord]) -> list[dict[str, Any]]:
    grouped = aggregate_by_key(
        records,
        lambda r: r.actor,
        {
            "count": count(),
            "total_duration": total("duration_seconds"),
            "avg_duration": average("duration_seconds"),
            "teams": distinct_values("team"),
            "activities": frequencies("activity"),
        },
    )
    return to_rows(grouped, "resource")


def hourly_patterns(records: Iterable[EventRecord]) -> list[dict[str, Any]]:
    """Activity grouped by the hour of day each event started."""

    grouped = aggregate_by_key(
        records,
        lambda r: r.start_time.hour if r.start_time else None,
        {
            "total_activities": count(),
            "total_duration": total("duration_seconds"),
            "avg_duration": average("duration_seconds"),
            "cases": distinct_values("case_id"),
            "resources": distinct_values("actor"),
        },
    )
    return to_rows(grouped, "hour")


def distribution(records: Iterable[EventRecord], field: str) -> list[dict[str, Any]]:
    """Share of records per value of ``field`` (status, priority, ...)."""

    records = list(records)
    grouped = aggregate_by_key(records, lambda r: getattr(r, field), {"count": count()})
    rows = to_rows(grouped, "value")
    for row in rows:
        row["percentage"] = stats.percentage(row["count"], len(records))
    return rows


def _duration_minutes(record: EventRecord) -> float:
    return record.duration_seconds / 60.0


def steps_by_resource(records: Iterable[EventRecord]) -> dict[str, Any]:
    return crosstab(records, lambda r: r.step, lambda r: r.actor)


def steps_by_team(records: Iterable[EventRecord]) -> dict[str, Any]:
    return crosstab(records, lambda r: r.step, lambda r: r.team)


def resources_by_window(records: Iterable[EventRecord]) -> dict[str, Any]:
    """Minutes each resource spent per window."""

    return crosstab(records, lambda r: r.actor, lambda r: r.window, _duration_minutes)


def status_by_window(records: Iterable[EventRecord]) -> dict[str, Any]:
    """Minutes spent per status and window."""

    return crosstab(records, lambda r: r.status, lambda r: r.window, _duration_minutes)


def duration_chart(
    rows: list[dict[str, Any]],
    duration_field: str,
    unit: str = "minutes",
    limit: int = 15,
) -> list[dict[str, Any]]:
    """Top rows by a duration statistic, with the value converted for display.

    The converted value is added under ``<duration_field>_<unit>``.
    """

    if unit not in _UNITS:
        raise ValueError(f"Unsupported unit '{unit}'")
    convert = _UNITS[unit]
    return [
        {**row, f"{duration_field}_{unit}": convert(row[duration_field])}
        for row in top_n(rows, duration_field, limit)
    ]

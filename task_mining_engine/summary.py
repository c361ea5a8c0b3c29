"""Dataset overview and headline metrics."""

from __future__ import annotations

from typing import Any, Iterable

from task_mining_engine import stats
from task_mining_engine.aggregation import distinct_values
from task_mining_engine.schema import EventRecord


def dataset_overview(records: Iterable[EventRecord]) -> dict[str, Any]:
    """Totals and distinct labels for one dataset."""

    records = list(records)
    return {
        "total_records": len(records),
        "total_cases": len(set(r.case_id for r in records)),
        "total_agents": len(set(r.actor for r in records)),
        "total_teams": len(set(r.team for r in records if r.team)),
        "total_duration": sum(r.duration_seconds for r in records),
        "applications": distinct_values("application")(records),
        "activities": distinct_values("activity")(records),
        "windows": distinct_values("window")(records),
        "statuses": distinct_values("status")(records),
        "priorities": distinct_values("priority")(records),
    }


def case_detail(records: Iterable[EventRecord], case_id: str) -> dict[str, Any]:
    """Drill-down for a single case."""

    case_records = [r for r in records if r.case_id == case_id]
    return {
        "case_id": case_id,
        "records": case_records,
        "total_activities": len(case_records),
        "total_duration": sum(r.duration_seconds for r in case_records),
        "applications": distinct_values("application")(case_records),
        "activities": distinct_values("activity")(case_records),
    }


def headline_metrics(
    case_rows: list[dict[str, Any]],
    agent_rows: list[dict[str, Any]],
    window_rows: list[dict[str, Any]],
) -> dict[str, Any]:
    """Summary tiles computed from the case, agent and window views."""

    total_cases = len(case_rows)
    total_work_time = sum(row["total_duration"] for row in case_rows)
    avg_case_duration = total_work_time / total_cases if total_cases else 0.0
    return {
        "total_cases": total_cases,
        "total_activities": sum(row["total_activities"] for row in case_rows),
        "total_work_time_hours": stats.to_hours(total_work_time),
        "avg_case_duration_minutes": stats.to_minutes(avg_case_duration),
        "active_agents": len(agent_rows),
        "applications": len(window_rows),
    }

"""Column profiles mapping source headers onto event record fields."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from task_mining_engine.schema import AMADEUS, SALESFORCE, UNKNOWN, EventRecord

_REQUIRED_TEXT = ("case_id", "actor", "window", "activity")
_OPTIONAL_TEXT = ("team", "step", "application", "status", "priority")
_COUNTERS = ("mouse_clicks", "keystrokes", "copies", "pastes")
_TIMESTAMPS = ("start_time", "end_time")


@dataclass(frozen=True)
class ColumnProfile:
    """Source column names for each record field, first present column wins."""

    name: str
    columns: dict[str, tuple[str, ...]]
    duration_scale: dict[str, float] = field(default_factory=dict)


AMADEUS_PROFILE = ColumnProfile(
    name=AMADEUS,
    columns={
        "case_id": ("Case_ID",),
        "actor": ("upn", "agent_profile_id"),
        "window": ("Window",),
        "activity": ("Activity",),
        "team": ("team_name",),
        "step": ("Step",),
        "application": ("process_name",),
        "duration_seconds": ("duration_seconds",),
        "mouse_clicks": ("mouse_click_count",),
        "keystrokes": ("keypress_count",),
        "copies": ("copy_count",),
        "pastes": ("paste_count",),
        "start_time": ("Start_Time",),
        "end_time": ("End_Time",),
    },
)

SALESFORCE_PROFILE = ColumnProfile(
    name=SALESFORCE,
    columns={
        "case_id": ("Case_ID",),
        "actor": ("Resource",),
        "window": ("Window",),
        "activity": ("Activity", "Activity_Type"),
        "team": ("Team",),
        "step": ("Step",),
        "status": ("Status",),
        "priority": ("Priority",),
        "duration_seconds": ("duration_seconds", "Duration_Hours"),
        "mouse_clicks": ("mouse_click_count",),
        "keystrokes": ("keypress_count",),
        "copies": ("copy_count",),
        "pastes": ("paste_count",),
        "start_time": ("Start_Time", "Window_Start", "Created_Date"),
        "end_time": ("End_Time", "Window_End", "Closed_Date"),
    },
    duration_scale={"Duration_Hours": 3600.0},
)

PROFILES = {profile.name: profile for profile in (AMADEUS_PROFILE, SALESFORCE_PROFILE)}


def get_profile(dataset: str) -> ColumnProfile:
    try:
        return PROFILES[dataset]
    except KeyError as exc:
        raise ValueError(f"Unknown dataset '{dataset}', expected one of {sorted(PROFILES)}") from exc


def _lookup(row: dict, names: tuple[str, ...]) -> tuple[Optional[str], Any]:
    for name in names:
        value = row.get(name)
        if isinstance(value, str):
            value = value.strip()
        if value not in (None, ""):
            return name, value
    return None, None


def _parse_number(value: Any, column: str, where: str, integer: bool = False) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{where}: invalid number in '{column}'") from exc
    if not math.isfinite(number):
        raise ValueError(f"{where}: non-finite value in '{column}'")
    if number < 0:
        raise ValueError(f"{where}: negative value in '{column}'")
    if integer and not number.is_integer():
        raise ValueError(f"{where}: expected a whole number in '{column}'")
    return number


def _parse_timestamp(value: Any, column: str, where: str) -> datetime:
    """Parse an ISO-8601 timestamp into naive UTC; offsets are converted, naive values kept."""

    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValueError(f"{where}: malformed timestamp in '{column}'") from exc
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def normalize(row: dict, profile: ColumnProfile, where: str) -> EventRecord:
    """Build an event record from a raw source row.

    Missing or empty values take the record defaults. Values that are present
    but cannot be parsed raise ``ValueError`` prefixed with ``where``.
    """

    values: dict[str, Any] = {}

    for name in _REQUIRED_TEXT + _OPTIONAL_TEXT:
        _, value = _lookup(row, profile.columns.get(name, ()))
        if value is not None:
            values[name] = str(value)
        elif name in _REQUIRED_TEXT:
            values[name] = UNKNOWN

    column, value = _lookup(row, profile.columns["duration_seconds"])
    if column is not None:
        values["duration_seconds"] = _parse_number(value, column, where) * profile.duration_scale.get(column, 1.0)

    for name in _COUNTERS:
        column, value = _lookup(row, profile.columns.get(name, ()))
        if column is not None:
            values[name] = int(_parse_number(value, column, where, integer=True))

    for name in _TIMESTAMPS:
        column, value = _lookup(row, profile.columns.get(name, ()))
        if column is not None:
            values[name] = _parse_timestamp(value, column, where)

    return EventRecord(**values)

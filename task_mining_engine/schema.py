"""Core data schema for task-mining events."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

UNKNOWN = "Unknown"

AMADEUS = "amadeus"
SALESFORCE = "salesforce"
DATASETS = (AMADEUS, SALESFORCE)


@dataclass(frozen=True)
class EventRecord:
    """Normalized event record used by all modules.

    One row per observed user action. Defaults are filled once by the
    adapters so consumers never fall back on missing fields themselves.
    """

    case_id: str = UNKNOWN
    actor: str = UNKNOWN
    window: str = UNKNOWN
    activity: str = UNKNOWN
    duration_seconds: float = 0.0
    mouse_clicks: int = 0
    keystrokes: int = 0
    copies: int = 0
    pastes: int = 0
    team: Optional[str] = None
    step: Optional[str] = None
    application: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

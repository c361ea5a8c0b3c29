"""JSON adapter for event records."""

from __future__ import annotations

import json
import logging
from typing import Any

from task_mining_engine.adapters.columns import get_profile, normalize
from task_mining_engine.schema import EventRecord

logger = logging.getLogger(__name__)


def parse_items(payload: Any, dataset: str) -> list[EventRecord]:
    """Normalize an already-decoded JSON array of ``dataset`` rows."""

    if not isinstance(payload, list):
        raise ValueError("JSON payload must be a list of objects")

    profile = get_profile(dataset)
    events: list[EventRecord] = []
    for index, item in enumerate(payload, start=1):
        if not isinstance(item, dict):
            raise ValueError(f"Item {index}: expected an object")
        events.append(normalize(item, profile, f"Item {index}"))
    return events


def parse(file_path: str, dataset: str) -> list[EventRecord]:
    """Parse JSON file into event records."""

    with open(file_path, encoding="utf-8") as handle:
        payload = json.load(handle)

    events = parse_items(payload, dataset)
    logger.info("Parsed %d %s records from %s", len(events), dataset, file_path)
    return events

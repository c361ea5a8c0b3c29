"""CSV adapter for event records."""

from __future__ import annotations

import csv
import logging

from task_mining_engine.adapters.columns import get_profile, normalize
from task_mining_engine.schema import EventRecord

logger = logging.getLogger(__name__)


def parse(file_path: str, dataset: str) -> list[EventRecord]:
    """Parse a delimited export of ``dataset`` into event records.

    The header row names the columns; data rows are numbered from 2.
    """

    profile = get_profile(dataset)
    with open(file_path, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            return []

        events: list[EventRecord] = []
        for row_number, row in enumerate(reader, start=2):
            if not any((value or "").strip() for value in row.values() if isinstance(value, str)):
                continue
            events.append(normalize(row, profile, f"Row {row_number}"))

    logger.info("Parsed %d %s records from %s", len(events), dataset, file_path)
    return events

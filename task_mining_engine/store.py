"""Loading datasets and publishing them to subscribers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, Mapping

from task_mining_engine.adapters import csv_adapter, json_adapter
from task_mining_engine.config import Settings
from task_mining_engine.remote import RemoteStatsClient
from task_mining_engine.schema import AMADEUS, SALESFORCE, EventRecord

logger = logging.getLogger(__name__)

DataSource = Callable[[], list[EventRecord]]
Listener = Callable[["DataSnapshot"], None]


@dataclass(frozen=True)
class DataSnapshot:
    """Result of one load: the records per dataset plus load state."""

    amadeus: tuple[EventRecord, ...] = ()
    salesforce: tuple[EventRecord, ...] = ()
    loaded: bool = False
    loading: bool = False
    errors: dict[str, str] = field(default_factory=dict)

    def records(self, dataset: str) -> tuple[EventRecord, ...]:
        if dataset == AMADEUS:
            return self.amadeus
        if dataset == SALESFORCE:
            return self.salesforce
        raise ValueError(f"Unknown dataset '{dataset}'")


def load_events(path: str | Path, dataset: str) -> list[EventRecord]:
    suffix = Path(path).suffix.lower()
    if suffix == ".csv":
        return csv_adapter.parse(str(path), dataset)
    if suffix == ".json":
        return json_adapter.parse(str(path), dataset)
    raise ValueError("Unsupported input format, expected .csv or .json")


def file_source(path: str | Path, dataset: str) -> DataSource:
    return lambda: load_events(path, dataset)


def remote_source(client: RemoteStatsClient, path: str, dataset: str) -> DataSource:
    return lambda: client.fetch_events(path, dataset)


class DataLoader:
    """Loads each configured dataset and notifies listeners of every state change.

    Datasets load independently: a failing source leaves its dataset empty and
    records the message in ``DataSnapshot.errors`` without blocking the rest.
    """

    def __init__(self, sources: Mapping[str, DataSource]):
        unknown = set(sources) - {AMADEUS, SALESFORCE}
        if unknown:
            raise ValueError(f"Unknown datasets: {sorted(unknown)}")
        self._sources = dict(sources)
        self._listeners: list[Listener] = []
        self._snapshot = DataSnapshot()

    @property
    def snapshot(self) -> DataSnapshot:
        return self._snapshot

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; the returned callable unsubscribes it."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, snapshot: DataSnapshot) -> None:
        self._snapshot = snapshot
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:  # noqa: BLE001
                logger.exception("Snapshot listener %r failed", listener)

    def load(self) -> DataSnapshot:
        if self._snapshot.loading:
            return self._snapshot

        loaded: dict[str, tuple[EventRecord, ...]] = {}
        errors: dict[str, str] = {}
        try:
            self._publish(replace(self._snapshot, loading=True, errors={}))
            for dataset, source in self._sources.items():
                try:
                    loaded[dataset] = tuple(source())
                except Exception as exc:  # noqa: BLE001
                    logger.error("Failed to load %s data: %s", dataset, exc)
                    errors[dataset] = str(exc) or type(exc).__name__
                else:
                    logger.info("Loaded %d %s records", len(loaded[dataset]), dataset)
        finally:
            self._publish(
                DataSnapshot(
                    amadeus=loaded.get(AMADEUS, ()),
                    salesforce=loaded.get(SALESFORCE, ()),
                    loaded=True,
                    loading=False,
                    errors=errors,
                )
            )
        return self._snapshot

    def reload(self) -> DataSnapshot:
        self._snapshot = replace(self._snapshot, loaded=False)
        return self.load()


def loader_from_settings(settings: Settings) -> DataLoader:
    """Loader over the dataset files named in ``settings.data``; unset paths are skipped."""

    paths = {AMADEUS: settings.data.amadeus_path, SALESFORCE: settings.data.salesforce_path}
    return DataLoader({dataset: file_source(path, dataset) for dataset, path in paths.items() if path})

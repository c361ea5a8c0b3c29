"""Compute dashboard statistics from a CSV/JSON event export."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from task_mining_engine.aggregation import top_n
from task_mining_engine.assistant import assistant_from_settings, fallback_answer
from task_mining_engine.config import configure_logging, load_settings
from task_mining_engine.remote import RemoteStatsError, client_from_settings
from task_mining_engine.schema import DATASETS
from task_mining_engine.store import load_events
from task_mining_engine.summary import dataset_overview, headline_metrics
from task_mining_engine import views

logger = logging.getLogger("run_report")


def build_report(events: list, limits) -> dict:
    cases = views.case_stats(events)
    agents = views.agent_stats(events)
    windows = views.window_stats(events)
    activities = views.activity_stats(events)
    return {
        "overview": dataset_overview(events),
        "headline": headline_metrics(cases, agents, windows),
        "top_cases": views.duration_chart(cases, "total_duration", "minutes", limits.top_cases),
        "top_activities": top_n(activities, "total_occurrences", limits.top_activities),
        "top_agents": top_n(agents, "total_cases", limits.top_agents),
        "top_windows": views.duration_chart(windows, "total_usage_time", "hours", limits.top_windows),
        "cases_table": top_n(views.case_duration_table(events), "count", limits.cases_table),
        "teams": views.team_stats(events),
        "steps": views.step_stats(events),
        "status_distribution": views.distribution(events, "status"),
        "priority_distribution": views.distribution(events, "priority"),
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Run task-mining statistics report")
    parser.add_argument("--dataset", choices=DATASETS, required=True, help="Source dataset layout")
    parser.add_argument("--data", default=None, help="Path to CSV/JSON events file (defaults to settings data path)")
    parser.add_argument("--config", default=None, help="Path to settings YAML")
    parser.add_argument("--ask", default=None, help="Question for the task mining assistant")
    parser.add_argument("--remote", action="store_true", help="Include dashboard metrics from the statistics API")
    args = parser.parse_args()

    settings = load_settings(args.config)
    configure_logging(settings.log_level)

    data_path = args.data or getattr(settings.data, f"{args.dataset}_path")
    if not data_path:
        parser.error(f"--data is required when no {args.dataset} path is configured")

    events = load_events(Path(data_path), args.dataset)
    if not events:
        logger.warning("No events found in %s", data_path)
    report = build_report(events, settings.limits)

    if args.ask:
        assistant = assistant_from_settings(settings)
        if assistant is None:
            report["answer"] = fallback_answer(args.ask, events)
        else:
            report["answer"] = assistant.ask(args.ask, events)

    if args.remote:
        try:
            report["remote_metrics"] = client_from_settings(settings).dashboard_metrics()
        except RemoteStatsError as exc:
            logger.error("Statistics API unavailable: %s", exc)

    text = json.dumps(report, indent=2, default=str)
    print(text)

    outputs_dir = Path("outputs")
    outputs_dir.mkdir(parents=True, exist_ok=True)
    out_path = outputs_dir / f"{args.dataset}_report.json"
    out_path.write_text(text, encoding="utf-8")
    logger.info("Saved report to %s", out_path)


if __name__ == "__main__":
    main()

"""Demo script for task-mining-engine."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from task_mining_engine.aggregation import top_n
from task_mining_engine.assistant import assistant_from_settings, fallback_answer
from task_mining_engine.config import configure_logging, load_settings
from task_mining_engine.store import loader_from_settings
from task_mining_engine.views import case_duration_table, team_stats


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)
    loader = loader_from_settings(settings)
    loader.subscribe(lambda snap: print("Loading..." if snap.loading else f"Loaded, errors: {snap.errors}"))
    snapshot = loader.load()

    print("Cases:", top_n(case_duration_table(snapshot.amadeus), "total_duration", settings.limits.top_cases))
    print("Teams:", team_stats(snapshot.salesforce))

    question = "Analyze my Amadeus workflow"
    assistant = assistant_from_settings(settings)
    answer = assistant.ask(question, snapshot.amadeus) if assistant else fallback_answer(question, snapshot.amadeus)
    print("Assistant:", answer)


if __name__ == "__main__":
    main()

"""Task mining assistant: LLM answers grounded in derived statistics."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from task_mining_engine.aggregation import top_n
from task_mining_engine.config import Settings
from task_mining_engine.schema import EventRecord
from task_mining_engine.views import activity_stats, case_stats, resource_stats, team_stats, window_stats

logger = logging.getLogger(__name__)

Completion = Callable[[list[dict]], str]

SYSTEM_PROMPT = (
    "You are a task mining assistant. Answer questions about process data, "
    "bottlenecks and workflow efficiency using only the statistics provided."
)

HELP_TEXT = (
    "I can help you analyze:\n"
    "- Team performance metrics\n"
    "- Resource utilization patterns\n"
    "- Application usage statistics\n"
    "- Process workflow analysis\n"
    "- Case duration insights\n"
    "- Bottleneck identification\n"
    "Just ask me about any of these areas!"
)

DEFAULT_TEXT = (
    "I can help you analyze your task mining data. Try asking about team performance, "
    "resource utilization, application usage, or process analysis. "
    "What specific insights are you looking for?"
)


def _first(rows: list[dict], stat: str) -> Optional[dict]:
    ranked = top_n(rows, stat, 1)
    return ranked[0] if ranked else None


def _highlights(records: list[EventRecord]) -> dict[str, Optional[dict]]:
    return {
        "team": _first(team_stats(records), "count"),
        "resource": _first(resource_stats(records), "count"),
        "window": _first(window_stats(records), "total_usage_time"),
        "activity": _first(activity_stats(records), "total_time_spent"),
        "case": _first(case_stats(records), "total_duration"),
    }


def build_context(records: Iterable[EventRecord]) -> str:
    """Short plain-text summary of the busiest groups, one line each."""

    records = list(records)
    if not records:
        return "No task mining data is loaded."

    top = _highlights(records)
    lines = [f"Events: {len(records)}"]
    if top["team"]:
        lines.append(
            f"Top team: {top['team']['team']} ({top['team']['count']} activities, "
            f"avg {round(top['team']['avg_duration'])}s)"
        )
    if top["resource"]:
        lines.append(
            f"Top resource: {top['resource']['resource']} ({top['resource']['count']} activities, "
            f"avg {round(top['resource']['avg_duration'])}s)"
        )
    if top["window"]:
        lines.append(
            f"Most used application: {top['window']['window']} "
            f"({round(top['window']['total_usage_time'])}s, {top['window']['total_clicks']} clicks)"
        )
    if top["activity"]:
        lines.append(
            f"Most time-consuming activity: {top['activity']['activity']} "
            f"({round(top['activity']['total_time_spent'])}s)"
        )
    if top["case"]:
        lines.append(
            f"Longest case: {top['case']['case_id']} ({round(top['case']['total_duration'])}s, "
            f"{top['case']['total_activities']} activities)"
        )
    return "\n".join(lines)


def fallback_answer(prompt: str, records: Iterable[EventRecord]) -> str:
    """Canned answer computed locally when no language model is available."""

    text = prompt.lower()
    records = list(records)
    top = _highlights(records)

    if "team" in text or "performance" in text:
        team = top["team"] or {"team": "the top team", "count": 0, "avg_duration": 0}
        return (
            f"Based on the data, {team['team']} has the highest activity count with {team['count']} "
            f"activities. The average duration per activity is {round(team['avg_duration'])} seconds."
        )

    if "resource" in text or "utilization" in text:
        resource = top["resource"] or {"resource": "unknown", "count": 0, "avg_duration": 0}
        return (
            f"The most active resource is {resource['resource']} with {resource['count']} activities. "
            f"They spend an average of {round(resource['avg_duration'])} seconds per activity."
        )

    if "application" in text or "window" in text or "app" in text:
        window = top["window"] or {"window": "unknown", "total_usage_time": 0, "total_clicks": 0}
        return (
            f"The most used application is {window['window']} with {round(window['total_usage_time'])} "
            f"total seconds of usage and {window['total_clicks']} total clicks."
        )

    if "process" in text or "workflow" in text:
        activity = top["activity"] or {"activity": "unknown", "total_time_spent": 0}
        return (
            f'The most time-consuming activity is "{activity["activity"]}" with '
            f"{round(activity['total_time_spent'])} total seconds. This might be a bottleneck in your process."
        )

    if "amadeus" in text or "case" in text:
        case = top["case"]
        if case is None:
            return (
                "I can see you have process mining data available. Ask me about case analysis, "
                "agent performance, or application usage patterns."
            )
        return (
            f"Case {case['case_id']} has the longest duration with {round(case['total_duration'])} "
            f"seconds and {case['total_activities']} activities."
        )

    if "help" in text or "what can you do" in text:
        return HELP_TEXT

    return DEFAULT_TEXT


def litellm_completion(model: str, timeout: float = 30.0) -> Completion:
    """Completion collaborator backed by LiteLLM."""

    def complete(messages: list[dict]) -> str:
        import litellm

        litellm.suppress_debug_info = True
        response = litellm.completion(model=model, messages=messages, timeout=timeout)
        return response.choices[0].message.content or ""

    return complete


class TaskMiningAssistant:
    """Answers free-text questions about the loaded records.

    The prompt and a context summary go to the completion collaborator; if it
    fails or returns nothing, the answer comes from :func:`fallback_answer`.
    """

    def __init__(self, model: str = "gpt-4o-mini", complete: Optional[Completion] = None, timeout: float = 30.0):
        self.model = model
        self.complete = complete or litellm_completion(model, timeout)

    def ask(self, prompt: str, records: Iterable[EventRecord]) -> Optional[str]:
        if not prompt or not prompt.strip():
            return None

        records = list(records)
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "system", "content": f"Statistics:\n{build_context(records)}"},
            {"role": "user", "content": prompt.strip()},
        ]
        try:
            reply = self.complete(messages)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Completion with %s failed, using local summary: %s", self.model, exc)
            return fallback_answer(prompt, records)

        if not reply or not reply.strip():
            logger.warning("Completion with %s returned no text, using local summary", self.model)
            return fallback_answer(prompt, records)
        return reply.strip()


def assistant_from_settings(settings: Settings) -> Optional[TaskMiningAssistant]:
    """Assistant configured from ``settings.assistant``, or ``None`` when it is disabled."""

    config = settings.assistant
    if not config.enabled:
        return None
    return TaskMiningAssistant(model=config.model, timeout=config.timeout)

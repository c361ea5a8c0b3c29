from task_mining_engine.assistant import (
    DEFAULT_TEXT,
    HELP_TEXT,
    TaskMiningAssistant,
    assistant_from_settings,
    build_context,
    fallback_answer,
)
from task_mining_engine.config import Settings
from task_mining_engine.schema import EventRecord


def sample_events():
    return [
        EventRecord(case_id="C1", actor="alice", team="Sales", window="Booking", activity="Search",
                    duration_seconds=100, mouse_clicks=5),
        EventRecord(case_id="C1", actor="alice", team="Sales", window="Email", activity="Send",
                    duration_seconds=50, mouse_clicks=1),
        EventRecord(case_id="C2", actor="bob", team="Support", window="Booking", activity="Search",
                    duration_seconds=300, mouse_clicks=2),
    ]


def test_build_context_mentions_top_groups():
    context = build_context(sample_events())
    assert "Top team: Sales (2 activities, avg 75s)" in context
    assert "Most used application: Booking (400s, 7 clicks)" in context
    assert "Longest case: C2 (300s, 1 activities)" in context
    assert build_context([]) == "No task mining data is loaded."


def test_fallback_routing():
    events = sample_events()
    assert fallback_answer("How is my team performing?", events).startswith("Based on the data, Sales")
    assert "alice" in fallback_answer("Resource utilization?", events)
    assert "Booking" in fallback_answer("Which applications are used most?", events)
    assert '"Search"' in fallback_answer("What are the bottlenecks in my process?", events)
    assert fallback_answer("Analyze my Amadeus workflow", events).startswith("The most time-consuming")
    assert "C2" in fallback_answer("Which case took longest?", events)
    assert fallback_answer("help", events) == HELP_TEXT
    assert fallback_answer("hello there", events) == DEFAULT_TEXT


def test_fallback_without_data():
    assert "the top team" in fallback_answer("team?", [])
    assert "Ask me about case analysis" in fallback_answer("case?", [])


def test_ask_uses_completion_with_context():
    captured = []

    def complete(messages):
        captured.append(messages)
        return "  Sales leads.  "

    assistant = TaskMiningAssistant(model="test-model", complete=complete)
    assert assistant.ask("Who leads?", sample_events()) == "Sales leads."
    messages = captured[0]
    assert messages[-1] == {"role": "user", "content": "Who leads?"}
    assert "Top team: Sales" in messages[1]["content"]


def test_ask_falls_back_on_failure():
    def complete(messages):
        raise TimeoutError("model timed out")

    assistant = TaskMiningAssistant(complete=complete)
    answer = assistant.ask("How is my team performing?", sample_events())
    assert answer.startswith("Based on the data, Sales")


def test_ask_falls_back_on_empty_reply():
    assistant = TaskMiningAssistant(complete=lambda messages: "")
    assert assistant.ask("help", sample_events()) == HELP_TEXT


def test_ask_ignores_blank_prompt():
    calls = []
    assistant = TaskMiningAssistant(complete=lambda messages: calls.append(messages) or "x")
    assert assistant.ask("   ", sample_events()) is None
    assert calls == []


def test_assistant_from_settings():
    assert assistant_from_settings(Settings()) is None

    settings = Settings.model_validate({"assistant": {"enabled": True, "model": "test-model", "timeout": 5}})
    assistant = assistant_from_settings(settings)
    assert isinstance(assistant, TaskMiningAssistant)
    assert assistant.model == "test-model"

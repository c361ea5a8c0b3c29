from datetime import datetime

from task_mining_engine.aggregation import (
    aggregate_by_key,
    count,
    crosstab,
    distinct,
    distinct_values,
    earliest,
    frequencies,
    latest,
    to_rows,
    top_n,
    total,
)
from task_mining_engine.schema import EventRecord
from task_mining_engine.views import CASE_DURATION_REDUCERS


def sample_events():
    return [
        EventRecord(case_id="C1", actor="alice", window="Booking", activity="Search", duration_seconds=60),
        EventRecord(case_id="C2", actor="bob", window="Email", activity="Send", duration_seconds=30),
        EventRecord(case_id="C1", actor="bob", window="Booking", activity="Create", duration_seconds=120),
        EventRecord(case_id="C3", actor="carol", window="Excel", activity="Report", duration_seconds=10),
        EventRecord(case_id="C1", actor="alice", window="Email", activity="Send", duration_seconds=180),
    ]


def test_counts_sum_to_record_count():
    events = sample_events()
    for key_fn in (lambda r: r.case_id, lambda r: r.actor, lambda r: r.window, lambda r: r.activity):
        grouped = aggregate_by_key(events, key_fn, {"count": count()})
        assert sum(group["count"] for group in grouped.values()) == len(events)


def test_empty_input_yields_empty_mapping():
    assert aggregate_by_key([], lambda r: r.case_id, {"count": count()}) == {}


def test_first_encounter_order():
    grouped = aggregate_by_key(sample_events(), lambda r: r.case_id, {"count": count()})
    assert list(grouped) == ["C1", "C2", "C3"]


def test_missing_key_goes_to_unknown():
    events = [
        EventRecord(case_id="C1", step=None),
        EventRecord(case_id="C2", step="  "),
        EventRecord(case_id="C3", step="Login"),
    ]
    grouped = aggregate_by_key(events, lambda r: r.step, {"count": count()})
    assert grouped == {"Unknown": {"count": 2}, "Login": {"count": 1}}


def test_case_level_example():
    events = [EventRecord(case_id="C1", duration_seconds=d) for d in (60, 120, 180)]
    stats = aggregate_by_key(events, lambda r: r.case_id, CASE_DURATION_REDUCERS)["C1"]
    assert stats["count"] == 3
    assert stats["total_duration"] == 360
    assert stats["avg_duration"] == 120
    assert stats["min_duration"] == 60
    assert stats["median_duration"] == 120
    assert stats["max_duration"] == 180
    assert round(stats["variability_ratio"], 2) == 0.41


def test_input_not_mutated():
    events = sample_events()
    before = list(events)
    aggregate_by_key(events, lambda r: r.window, {"total": total("duration_seconds")})
    assert events == before


def test_distinct_and_frequency_reducers():
    events = sample_events()
    grouped = aggregate_by_key(
        events,
        lambda r: r.case_id,
        {
            "agents": distinct("actor"),
            "agent_list": distinct_values("actor"),
            "windows": frequencies("window"),
            "teams": frequencies("team"),
        },
    )
    assert grouped["C1"]["agents"] == 2
    assert grouped["C1"]["agent_list"] == ["alice", "bob"]
    assert grouped["C1"]["windows"] == {"Booking": 2, "Email": 1}
    assert grouped["C1"]["teams"] == {"Unknown": 3}


def test_earliest_and_latest_ignore_missing():
    events = [
        EventRecord(case_id="C1", start_time=datetime(2025, 1, 1, 10)),
        EventRecord(case_id="C1"),
        EventRecord(case_id="C1", start_time=datetime(2025, 1, 1, 9)),
    ]
    grouped = aggregate_by_key(
        events, lambda r: r.case_id, {"first": earliest("start_time"), "last": latest("start_time")}
    )
    assert grouped["C1"] == {"first": datetime(2025, 1, 1, 9), "last": datetime(2025, 1, 1, 10)}


def test_top_n_ties_keep_first_encountered():
    rows = [
        {"key": "a", "count": 1},
        {"key": "b", "count": 3},
        {"key": "c", "count": 2},
        {"key": "d", "count": 3},
        {"key": "e", "count": 2},
    ]
    assert [row["key"] for row in top_n(rows, "count", 2)] == ["b", "d"]
    assert [row["key"] for row in top_n(rows, "count", 3)] == ["b", "d", "c"]
    assert top_n(rows, "count", 0) == []


def test_to_rows_keeps_order():
    grouped = aggregate_by_key(sample_events(), lambda r: r.window, {"count": count()})
    rows = to_rows(grouped, "window")
    assert rows == [
        {"window": "Booking", "count": 2},
        {"window": "Email", "count": 2},
        {"window": "Excel", "count": 1},
    ]


def test_crosstab_counts_and_zero_cells():
    table = crosstab(sample_events(), lambda r: r.actor, lambda r: r.window)
    assert table["rows"] == ["alice", "bob", "carol"]
    assert table["columns"] == ["Booking", "Email", "Excel"]
    assert table["matrix"] == [[1, 1, 0], [1, 1, 0], [0, 0, 1]]
    assert table["max_value"] == 1


def test_crosstab_empty():
    assert crosstab([], lambda r: r.actor, lambda r: r.window) == {
        "rows": [],
        "columns": [],
        "matrix": [],
        "max_value": 0,
    }

from datetime import UTC, datetime

from treestatus_app.core.diagnostics import MALFORMED_EVENT, DiagnosticLog
from treestatus_app.core.mappers import normalize_status_changes


def _ms(*args):
    return int(datetime(*args, tzinfo=UTC).timestamp() * 1000)


START = _ms(2024, 3, 1)
END = _ms(2024, 3, 8)


def test_sentinel_first_and_order_preserved():
    raw = [
        {"when": "2024-03-07T10:00:00", "status": "closed", "reason": "bustage", "tags": ["checkin-test"]},
        {"when": "2024-03-05T10:00:00", "status": "open", "reason": "", "tags": []},
    ]
    log = DiagnosticLog("autoland")
    changes = normalize_status_changes(raw, START, END, log)
    assert changes[0].is_sentinel
    assert changes[0].timestamp == END
    assert [c.status for c in changes[1:]] == ["closed", "open"]
    assert changes[1].timestamp == _ms(2024, 3, 7, 10)
    assert changes[1].tags == ("checkin-test",)
    assert changes[1].reason == "bustage"
    assert len(log) == 0


def test_status_labels_are_hyphenated():
    raw = [{"when": _ms(2024, 3, 6), "status": "approval required", "reason": "", "tags": []}]
    changes = normalize_status_changes(raw, START, END, DiagnosticLog("autoland"))
    assert changes[1].status == "approval-required"


def test_range_filtering_keeps_boundary_event():
    raw = [
        {"when": END + 3600000, "status": "open"},
        {"when": END, "status": "closed"},
        {"when": _ms(2024, 3, 4), "status": "open"},
        {"when": _ms(2024, 2, 28), "status": "closed"},
        {"when": _ms(2024, 2, 20), "status": "open"},
    ]
    changes = normalize_status_changes(raw, START, END, DiagnosticLog("autoland"))
    assert [c.timestamp for c in changes] == [END, _ms(2024, 3, 4), _ms(2024, 2, 28)]


def test_event_exactly_at_start_stops_consumption():
    raw = [
        {"when": START, "status": "closed"},
        {"when": START - 1000, "status": "open"},
    ]
    changes = normalize_status_changes(raw, START, END, DiagnosticLog("autoland"))
    assert [c.status for c in changes[1:]] == ["closed"]


def test_malformed_events_are_dropped_and_reported():
    raw = [
        {"when": "not a date", "status": "open"},
        {"status": "closed"},
        {"when": _ms(2024, 3, 6), "status": ""},
        "garbage",
        {"when": ["2024-03-06T10:00:00"], "status": "closed"},
        {"when": ["2024-03-06T10:00:00", "2024-03-06T11:00:00"], "status": "closed"},
        {"when": {"year": 2024}, "status": "closed"},
        {"when": _ms(2024, 3, 5), "status": "open", "reason": None, "tags": None},
    ]
    log = DiagnosticLog("autoland")
    changes = normalize_status_changes(raw, START, END, log)
    assert len(changes) == 2
    assert changes[1].status == "open"
    assert changes[1].reason == ""
    assert changes[1].tags == ()
    assert len(log) == 4
    assert [d.occurrences for d in log.entries if d.value == "unparseable timestamp"] == [4]
    assert {d.kind for d in log.entries} == {MALFORMED_EVENT}
    assert all(d.tree == "autoland" for d in log.entries)


def test_single_string_tag_is_wrapped():
    raw = [{"when": _ms(2024, 3, 6), "status": "closed", "tags": "infra"}]
    changes = normalize_status_changes(raw, START, END, DiagnosticLog("autoland"))
    assert changes[1].tags == ("infra",)


def test_digit_string_is_epoch_milliseconds():
    raw = [{"when": f" {_ms(2024, 3, 6)} ", "status": "closed", "tags": []}]
    log = DiagnosticLog("autoland")
    changes = normalize_status_changes(raw, START, END, log)
    assert changes[1].timestamp == _ms(2024, 3, 6)
    assert len(log) == 0

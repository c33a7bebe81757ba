from datetime import datetime, timedelta, timezone

from fightnight.espn.schemas import CalendarEntry
from fightnight.services.selector import (
    FUTURE,
    ONGOING,
    RECENT,
    matches_ignore,
    select_entry,
    select_recent,
)

NOW = datetime(2025, 2, 28, 10, 0, tzinfo=timezone.utc)


def _entry(label: str, start: str, end: str = "", ref: str = "") -> CalendarEntry:
    return CalendarEntry.model_validate(
        {"label": label, "startDate": start, "endDate": end, "event": {"$ref": ref}}
    )


def test_ongoing_entry_is_selected():
    entries = [
        _entry("Later", "2025-03-08T23:00Z"),
        _entry("Tonight", "2025-02-28T09:00Z", "2025-02-28T15:00Z"),
    ]
    sel = select_entry(entries, [], NOW)
    assert sel.entry.label == "Tonight"
    assert sel.state == ONGOING
    assert sel.end == datetime(2025, 2, 28, 15, 0, tzinfo=timezone.utc)


def test_start_instant_is_inside_window_and_end_is_not():
    entry = _entry("Card", "2025-02-28T10:00Z", "2025-02-28T16:00Z")
    assert select_entry([entry], [], NOW).state == ONGOING
    assert select_entry([entry], [], NOW + timedelta(hours=6)) is None


def test_entry_without_end_is_never_ongoing():
    entry = _entry("No End", "2025-02-28T09:00Z")
    assert select_entry([entry], [], NOW) is None


def test_earliest_future_wins_regardless_of_order():
    a = _entry("A", "2025-03-15T23:00Z")
    b = _entry("B", "2025-03-01T02:00Z")
    c = _entry("C", "2025-03-08T23:00Z")
    for entries in ([a, b, c], [c, b, a], [b, a, c]):
        sel = select_entry(entries, [], NOW)
        assert sel.entry.label == "B"
        assert sel.state == FUTURE


def test_equal_starts_keep_first_seen():
    entries = [_entry("First", "2025-03-01T02:00Z"), _entry("Second", "2025-03-01T02:00Z")]
    assert select_entry(entries, [], NOW).entry.label == "First"


def test_earliest_ongoing_wins():
    entries = [
        _entry("Late start", "2025-02-28T09:30Z", "2025-02-28T20:00Z"),
        _entry("Early start", "2025-02-28T08:00Z", "2025-02-28T20:00Z"),
    ]
    assert select_entry(entries, [], NOW).entry.label == "Early start"


def test_ongoing_beats_sooner_future():
    entries = [
        _entry("Soon", "2025-02-28T11:00Z"),
        _entry("Now", "2025-02-28T09:00Z", "2025-02-28T12:00Z"),
    ]
    assert select_entry(entries, [], NOW).entry.label == "Now"


def test_ignored_labels_are_skipped_case_insensitively():
    entries = [
        _entry("Dana White's CONTENDER SERIES: Week 1", "2025-03-01T00:00Z"),
        _entry("UFC 313", "2025-03-02T02:00Z"),
    ]
    assert select_entry(entries, ["Contender Series"], NOW).entry.label == "UFC 313"
    assert select_entry(entries, [], NOW).entry.label.startswith("Dana White")


def test_unparsable_start_is_skipped_and_bad_end_treated_as_absent():
    entries = [
        _entry("Broken", "TBD"),
        _entry("Bad end", "2025-03-01T02:00Z", "soon"),
    ]
    sel = select_entry(entries, [], NOW)
    assert sel.entry.label == "Bad end"
    assert sel.end is None


def test_end_before_start_is_excluded():
    entries = [_entry("Inverted", "2025-03-01T02:00Z", "2025-03-01T01:00Z")]
    assert select_entry(entries, [], NOW) is None


def test_empty_calendar():
    assert select_entry([], ["Contender Series"], NOW) is None


def test_past_entries_are_not_selected():
    entries = [_entry("Last week", "2025-02-22T02:00Z", "2025-02-22T08:00Z")]
    assert select_entry(entries, [], NOW) is None


def test_matches_ignore():
    assert matches_ignore("Noche UFC", ["noche"])
    assert not matches_ignore("", ["noche"])
    assert not matches_ignore("UFC 313", ["", "Contender"])


class TestSelectRecent:
    def test_started_without_end_is_recent(self):
        entries = [_entry("Event X", "2025-03-01T02:00Z")]
        at_start = datetime(2025, 3, 1, 2, 0, tzinfo=timezone.utc)
        sel = select_recent(entries, [], at_start)
        assert sel.entry.label == "Event X"
        assert sel.state == RECENT
        assert select_recent(entries, [], at_start + timedelta(hours=11, minutes=59)) is not None

    def test_window_is_bounded(self):
        entries = [_entry("Event X", "2025-03-01T02:00Z")]
        assert select_recent(entries, [], datetime(2025, 3, 1, 14, 0, tzinfo=timezone.utc)) is None

    def test_future_and_ended_entries_are_not_recent(self):
        entries = [
            _entry("Future", "2025-03-01T02:00Z"),
            _entry("Has end", "2025-02-28T08:00Z", "2025-02-28T12:00Z"),
        ]
        assert select_recent(entries, [], NOW) is None

    def test_most_recent_start_wins(self):
        entries = [
            _entry("Earlier", "2025-02-28T01:00Z"),
            _entry("Later", "2025-02-28T06:00Z"),
        ]
        assert select_recent(entries, [], NOW).entry.label == "Later"

    def test_ignore_labels_apply(self):
        entries = [_entry("Contender Series 2025", "2025-02-28T06:00Z")]
        assert select_recent(entries, ["contender series"], NOW) is None

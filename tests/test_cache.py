"""Tests for the date-indexed calendar cache."""

from datetime import date, timedelta, timezone

import pytest

from talendar.core.cache import CalendarCache, RemoveOutcome
from talendar.core.events import (
    Calendar,
    ColorDefinition,
    ColorPalette,
    Event,
    EventStatus,
    EventTime,
)

PACIFIC = timezone(timedelta(hours=-7))


@pytest.fixture
def cache():
    return CalendarCache(timezone=timezone.utc)


@pytest.fixture
def make_event():
    """Factory for all-day events."""
    def _make(event_id: str | None, day: date = date(2024, 6, 1), **kwargs) -> Event:
        return Event(id=event_id, start=EventTime(date=day), end=EventTime(date=day + timedelta(days=1)), **kwargs)
    return _make


class TestUpsert:
    def test_creates_bucket(self, cache, make_event):
        e1 = make_event("a")
        assert cache.upsert(e1) == date(2024, 6, 1)
        assert cache.events_on(date(2024, 6, 1)) == [e1]

    def test_distinct_ids_keep_insertion_order(self, cache, make_event):
        events = [make_event(str(i), summary=f"Event {i}") for i in range(5)]
        for e in events:
            cache.upsert(e)
        assert cache.events_on(date(2024, 6, 1)) == events

    def test_duplicates_are_kept(self, cache, make_event):
        cache.upsert(make_event("a"))
        cache.upsert(make_event("a"))
        assert len(cache.events_on(date(2024, 6, 1))) == 2

    def test_event_without_start_is_not_inserted(self, cache):
        assert cache.upsert(Event(id="x", summary="No start")) is None
        assert cache.events == {}

    def test_timed_event_uses_local_date(self):
        cache = CalendarCache(timezone=timezone.utc)
        event = Event.from_api({"id": "late", "start": {"dateTime": "2024-06-01T23:30:00-07:00"}})
        assert cache.upsert(event) == date(2024, 6, 2)

    def test_timed_event_in_its_own_zone(self):
        cache = CalendarCache(timezone=PACIFIC)
        event = Event.from_api({"id": "late", "start": {"dateTime": "2024-06-01T23:30:00-07:00"}})
        assert cache.upsert(event) == date(2024, 6, 1)


class TestRemove:
    def test_removes_matching_ids_only(self, cache, make_event):
        keep = make_event("b")
        cache.upsert(make_event("a"))
        cache.upsert(keep)
        cache.upsert(make_event("a"))

        outcome = cache.remove(make_event("a", status=EventStatus.CANCELLED))

        assert outcome is RemoveOutcome.REMOVED
        assert cache.events_on(date(2024, 6, 1)) == [keep]

    def test_missing_bucket_is_noop(self, cache, make_event):
        cache.upsert(make_event("a"))
        before = cache.to_dict()

        outcome = cache.remove(make_event("a", day=date(2024, 7, 1)))

        assert outcome is RemoveOutcome.NO_BUCKET
        assert cache.to_dict() == before

    def test_unknown_id_is_noop(self, cache, make_event):
        cache.upsert(make_event("a"))
        assert cache.remove(make_event("zzz")) is RemoveOutcome.NOT_IN_BUCKET
        assert len(cache.events_on(date(2024, 6, 1))) == 1

    def test_missing_id_is_reported_skip(self, cache, make_event):
        cache.upsert(make_event("a"))
        assert cache.remove(make_event(None)) is RemoveOutcome.MISSING_ID
        assert len(cache.events_on(date(2024, 6, 1))) == 1

    def test_no_date_is_reported_skip(self, cache):
        assert cache.remove(Event(id="a")) is RemoveOutcome.NO_DATE


class TestEventsOn:
    def test_absent_date_is_none(self, cache):
        assert cache.events_on(date(2024, 6, 1)) is None

    def test_emptied_bucket_is_empty_list(self, cache, make_event):
        cache.upsert(make_event("a"))
        cache.remove(make_event("a"))
        assert cache.events_on(date(2024, 6, 1)) == []

    def test_returns_copy(self, cache, make_event):
        cache.upsert(make_event("a"))
        cache.events_on(date(2024, 6, 1)).clear()
        assert len(cache.events_on(date(2024, 6, 1))) == 1

    def test_add_add_remove_scenario(self, cache, make_event):
        day = date(2024, 6, 1)
        e1 = make_event("a")
        e2 = make_event("b")

        cache.upsert(e1)
        assert cache.events_on(day) == [e1]
        cache.upsert(e2)
        assert cache.events_on(day) == [e1, e2]
        cache.remove(e1)
        assert cache.events_on(day) == [e2]


class TestLookups:
    def test_dates_sorted(self, cache, make_event):
        cache.upsert(make_event("b", day=date(2024, 6, 3)))
        cache.upsert(make_event("a", day=date(2024, 6, 1)))
        assert cache.dates() == [date(2024, 6, 1), date(2024, 6, 3)]

    def test_calendar_lookup(self, cache):
        cache.calendars = [Calendar(id="work", summary="Work"), Calendar(id="home", summary="Home")]
        assert cache.calendar("home").summary == "Home"
        assert cache.calendar("missing") is None

    def test_event_color(self, cache, make_event):
        cache.colors = ColorPalette(event={"5": ColorDefinition(foreground="#1d1d1d", background="#fbd75b")})
        assert cache.event_color(make_event("a", color_id="5")) == "#1d1d1d"
        assert cache.event_color(make_event("a", color_id="9")) == "#FFFFFF"
        assert cache.event_color(make_event("a")) == "#FFFFFF"


class TestSerialization:
    def test_round_trip(self, cache, make_event):
        cache.sync_tokens = {"work": "tok-1"}
        cache.calendars = [Calendar(id="work", summary="Work", access_role="owner", primary=True)]
        cache.colors = ColorPalette(
            event={"1": ColorDefinition("#000000", "#a4bdfc")},
            calendar={"2": ColorDefinition("#1d1d1d", "#d06b64")},
        )
        cache.upsert(make_event("a", summary="Holiday", status=EventStatus.CONFIRMED, color_id="1"))
        cache.upsert(Event.from_api({
            "id": "b",
            "status": "tentative",
            "start": {"dateTime": "2024-06-01T09:00:00+00:00", "timeZone": "UTC"},
            "end": {"dateTime": "2024-06-01T10:00:00+00:00"},
        }))

        restored = CalendarCache.from_dict(cache.to_dict(), timezone=timezone.utc)

        assert restored == cache

    def test_document_shape(self, cache, make_event):
        cache.upsert(make_event("a"))
        data = cache.to_dict()
        assert set(data) == {"sync_tokens", "events", "calendars", "colors"}
        assert list(data["events"]) == ["2024-06-01"]
        assert data["events"]["2024-06-01"][0]["start"] == {"date": "2024-06-01"}
        assert data["colors"] == {"event": {}, "calendar": {}}

    def test_non_string_sync_tokens_dropped(self):
        restored = CalendarCache.from_dict({"sync_tokens": {"a": None, "b": "tok", "c": 7, "d": ""}})
        assert restored.sync_tokens == {"b": "tok"}

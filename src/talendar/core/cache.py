"""In-memory calendar cache, indexed by local date."""

import logging
from dataclasses import dataclass, field
from datetime import date, tzinfo
from enum import Enum

from .events import Calendar, ColorPalette, Event, event_date

logger = logging.getLogger(__name__)


class RemoveOutcome(Enum):
    """What happened when removing an event from the cache."""

    REMOVED = "removed"
    NOT_IN_BUCKET = "not_in_bucket"
    NO_BUCKET = "no_bucket"
    MISSING_ID = "missing_id"
    NO_DATE = "no_date"


@dataclass
class CalendarCache:
    """
    Local mirror of remote calendar state.

    Events are grouped into per-date buckets keyed by the local calendar date
    of their start. Buckets keep insertion order and do not deduplicate.
    """

    sync_tokens: dict[str, str] = field(default_factory=dict)
    events: dict[date, list[Event]] = field(default_factory=dict)
    calendars: list[Calendar] = field(default_factory=list)
    colors: ColorPalette = field(default_factory=ColorPalette)
    # Zone used for bucketing timed events; None means the system zone.
    timezone: tzinfo | None = field(default=None, compare=False, repr=False)

    def upsert(self, event: Event) -> date | None:
        """Append an event to its date bucket. Returns the bucket date."""
        day = event_date(event, self.timezone)
        if day is None:
            logger.debug(f"Event {event.id!r} has no start date, not cached")
            return None
        self.events.setdefault(day, []).append(event)
        return day

    def remove(self, event: Event) -> RemoveOutcome:
        """Remove every entry sharing the event's id from its date bucket."""
        if not event.id:
            logger.warning("Cannot remove an event without an id, skipping")
            return RemoveOutcome.MISSING_ID

        day = event_date(event, self.timezone)
        if day is None:
            logger.debug(f"Event {event.id!r} has no start date, nothing to remove")
            return RemoveOutcome.NO_DATE

        bucket = self.events.get(day)
        if bucket is None:
            logger.info(f"Tried to remove event {event.id!r} already missing from cache")
            return RemoveOutcome.NO_BUCKET

        before = len(bucket)
        bucket[:] = [e for e in bucket if e.id != event.id]
        if len(bucket) == before:
            return RemoveOutcome.NOT_IN_BUCKET
        return RemoveOutcome.REMOVED

    def events_on(self, day: date) -> list[Event] | None:
        """Events cached for a date, or None if the date has no bucket."""
        bucket = self.events.get(day)
        if bucket is None:
            return None
        return list(bucket)

    def dates(self) -> list[date]:
        return sorted(self.events)

    def calendar(self, calendar_id: str) -> Calendar | None:
        return next((c for c in self.calendars if c.id == calendar_id), None)

    def event_color(self, event: Event) -> str:
        return self.colors.event_foreground(event.color_id)

    def to_dict(self) -> dict:
        """Serialize to the persisted document shape."""
        return {
            "sync_tokens": dict(self.sync_tokens),
            "events": {
                day.isoformat(): [e.to_dict() for e in bucket]
                for day, bucket in sorted(self.events.items())
            },
            "calendars": [c.to_dict() for c in self.calendars],
            "colors": self.colors.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict, timezone: tzinfo | None = None) -> "CalendarCache":
        """Rebuild a cache from a persisted document.

        Raises KeyError, TypeError or ValueError on malformed input.
        """
        return cls(
            sync_tokens={
                str(k): v for k, v in data.get("sync_tokens", {}).items() if isinstance(v, str) and v
            },
            events={
                date.fromisoformat(day): [Event.from_api(item) for item in items]
                for day, items in data.get("events", {}).items()
            },
            calendars=[Calendar.from_api(item) for item in data.get("calendars", [])],
            colors=ColorPalette.from_api(data.get("colors")),
            timezone=timezone,
        )

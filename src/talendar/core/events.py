"""Calendar event model - pure domain logic, no I/O dependencies."""

import datetime as dt
from dataclasses import dataclass, field
from datetime import tzinfo
from enum import Enum

DEFAULT_COLOR = "#FFFFFF"


class EventStatus(Enum):
    """Event status as reported by the remote calendar."""

    CONFIRMED = "confirmed"
    TENTATIVE = "tentative"
    CANCELLED = "cancelled"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str | None) -> "EventStatus | None":
        if value is None:
            return None
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


def _parse_date_time(value: str) -> dt.datetime:
    # fromisoformat only accepts a trailing Z from Python 3.11
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return dt.datetime.fromisoformat(value)


@dataclass(frozen=True)
class EventTime:
    """Start or end of an event: either an all-day date or a zoned timestamp."""

    date: dt.date | None = None
    date_time: dt.datetime | None = None
    time_zone: str | None = None

    @classmethod
    def from_api(cls, data: dict | None) -> "EventTime | None":
        if not data:
            return None
        day = dt.date.fromisoformat(data["date"]) if data.get("date") else None
        stamp = _parse_date_time(data["dateTime"]) if data.get("dateTime") else None
        return cls(date=day, date_time=stamp, time_zone=data.get("timeZone"))

    def to_dict(self) -> dict:
        data = {}
        if self.date is not None:
            data["date"] = self.date.isoformat()
        if self.date_time is not None:
            data["dateTime"] = self.date_time.isoformat()
        if self.time_zone:
            data["timeZone"] = self.time_zone
        return data

    def local_date(self, tz: tzinfo | None = None) -> dt.date | None:
        """Calendar date in the given zone (system local zone when None)."""
        if self.date is not None:
            return self.date
        if self.date_time is not None:
            return self.date_time.astimezone(tz).date()
        return None


@dataclass(frozen=True)
class Event:
    """A calendar event as received from the remote service."""

    id: str | None
    summary: str | None = None
    status: EventStatus | None = None
    color_id: str | None = None
    start: EventTime | None = None
    end: EventTime | None = None
    location: str | None = None
    description: str | None = None
    html_link: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "Event":
        return cls(
            id=data.get("id") or None,
            summary=data.get("summary"),
            status=EventStatus.parse(data.get("status")),
            color_id=data.get("colorId"),
            start=EventTime.from_api(data.get("start")),
            end=EventTime.from_api(data.get("end")),
            location=data.get("location"),
            description=data.get("description"),
            html_link=data.get("htmlLink"),
        )

    def to_dict(self) -> dict:
        """Serialize back to the remote wire shape, omitting absent fields."""
        data = {
            "id": self.id,
            "summary": self.summary,
            "status": self.status.value if self.status else None,
            "colorId": self.color_id,
            "start": self.start.to_dict() if self.start else None,
            "end": self.end.to_dict() if self.end else None,
            "location": self.location,
            "description": self.description,
            "htmlLink": self.html_link,
        }
        return {k: v for k, v in data.items() if v is not None}

    @property
    def is_cancelled(self) -> bool:
        return self.status is EventStatus.CANCELLED

    @property
    def all_day(self) -> bool:
        return self.start is not None and self.start.date is not None

    def is_multiday(self, tz: tzinfo | None = None) -> bool:
        """True when the event ends on a later day than it starts.

        All-day end dates are exclusive, so a single all-day event ends the
        day after it starts; timed end dates are inclusive.
        """
        start = event_date(self, tz)
        end = self.end.local_date(tz) if self.end else None
        if start is None or end is None:
            return False
        if self.all_day:
            return (end - start).days > 1
        return end > start

    def start_string(self, tz: tzinfo | None = None) -> str:
        """Human-readable start, e.g. '2024-06-01 09:00' or '2024-06-01 ALL DAY'."""
        if self.start is None:
            return "No Start Time"
        if self.start.date_time is not None:
            return self.start.date_time.astimezone(tz).strftime("%Y-%m-%d %H:%M")
        if self.start.date is not None:
            return f"{self.start.date.isoformat()} ALL DAY"
        return "No Start Time"


def event_date(event: Event, tz: tzinfo | None = None) -> dt.date | None:
    """Local calendar date an event is bucketed under, or None if undeterminable.

    Multi-day events are placed on their start date only.
    """
    if event.start is None:
        return None
    return event.start.local_date(tz)


@dataclass
class Calendar:
    """A calendar list entry."""

    id: str
    summary: str = ""
    description: str | None = None
    time_zone: str | None = None
    color_id: str | None = None
    background_color: str | None = None
    foreground_color: str | None = None
    access_role: str | None = None
    primary: bool = False

    @classmethod
    def from_api(cls, data: dict) -> "Calendar":
        return cls(
            id=data["id"],
            summary=data.get("summaryOverride") or data.get("summary", ""),
            description=data.get("description"),
            time_zone=data.get("timeZone"),
            color_id=data.get("colorId"),
            background_color=data.get("backgroundColor"),
            foreground_color=data.get("foregroundColor"),
            access_role=data.get("accessRole"),
            primary=bool(data.get("primary", False)),
        )

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "summary": self.summary,
            "description": self.description,
            "timeZone": self.time_zone,
            "colorId": self.color_id,
            "backgroundColor": self.background_color,
            "foregroundColor": self.foreground_color,
            "accessRole": self.access_role,
        }
        data = {k: v for k, v in data.items() if v is not None}
        if self.primary:
            data["primary"] = True
        return data


@dataclass(frozen=True)
class ColorDefinition:
    """A foreground/background colour pair."""

    foreground: str
    background: str


def _parse_color_map(data: dict | None) -> dict[str, ColorDefinition]:
    return {
        color_id: ColorDefinition(
            foreground=entry.get("foreground", DEFAULT_COLOR),
            background=entry.get("background", DEFAULT_COLOR),
        )
        for color_id, entry in (data or {}).items()
    }


@dataclass
class ColorPalette:
    """Colour definitions for events and calendars, keyed by colour id."""

    event: dict[str, ColorDefinition] = field(default_factory=dict)
    calendar: dict[str, ColorDefinition] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict | None) -> "ColorPalette":
        data = data or {}
        return cls(
            event=_parse_color_map(data.get("event")),
            calendar=_parse_color_map(data.get("calendar")),
        )

    def to_dict(self) -> dict:
        return {
            "event": {
                k: {"foreground": v.foreground, "background": v.background}
                for k, v in self.event.items()
            },
            "calendar": {
                k: {"foreground": v.foreground, "background": v.background}
                for k, v in self.calendar.items()
            },
        }

    def event_foreground(self, color_id: str | None) -> str:
        """Foreground colour for an event colour id, or the default colour."""
        if not color_id or color_id not in self.event:
            return DEFAULT_COLOR
        return self.event[color_id].foreground or DEFAULT_COLOR

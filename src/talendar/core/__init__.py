"""Functional core - pure calendar data model with no I/O."""

from .events import (
    Calendar,
    ColorDefinition,
    ColorPalette,
    Event,
    EventStatus,
    EventTime,
    event_date,
)
from .cache import CalendarCache, RemoveOutcome

__all__ = [
    # Events
    "Calendar",
    "ColorDefinition",
    "ColorPalette",
    "Event",
    "EventStatus",
    "EventTime",
    "event_date",
    # Cache
    "CalendarCache",
    "RemoveOutcome",
]

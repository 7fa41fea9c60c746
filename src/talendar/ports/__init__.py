"""Ports - interfaces/protocols for external dependencies."""

from .calendar_api import CalendarAPI, CalendarAPIError, EventPage, MalformedResponseError
from .consent_presenter import ConsentPresenter
from .cache_store import CacheStore, LoadResult

__all__ = [
    "CalendarAPI",
    "CalendarAPIError",
    "EventPage",
    "MalformedResponseError",
    "CacheStore",
    "LoadResult",
    "ConsentPresenter",
]

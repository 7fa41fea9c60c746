"""Remote calendar service interface."""

from dataclasses import dataclass, field
from typing import Protocol

from talendar.core.events import Calendar, ColorPalette, Event

MAX_RESULTS = 2500

_TRANSIENT_STATUSES = {408, 429}


class CalendarAPIError(Exception):
    """Raised when a remote calendar request fails."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status

    @property
    def transient(self) -> bool:
        """Network failures, timeouts, rate limits and server errors."""
        if self.status is None:
            return True
        return self.status in _TRANSIENT_STATUSES or self.status >= 500

    @property
    def token_expired(self) -> bool:
        """The sync token is no longer valid and a full sync is required."""
        return self.status == 410


class MalformedResponseError(CalendarAPIError):
    """Raised when a response can't be parsed into the calendar model."""

    @property
    def transient(self) -> bool:
        return False


@dataclass
class EventPage:
    """One page of an event list response."""

    items: list[Event] = field(default_factory=list)
    next_page_token: str | None = None
    next_sync_token: str | None = None


class CalendarAPI(Protocol):
    """Interface for an authenticated remote calendar transport."""

    def list_calendars(self) -> list[Calendar]:
        """List every calendar visible to the account."""
        ...

    def list_events(
        self,
        calendar_id: str,
        *,
        sync_token: str | None = None,
        page_token: str | None = None,
        time_zone: str | None = None,
        single_events: bool = True,
        max_results: int = MAX_RESULTS,
    ) -> EventPage:
        """Fetch one page of events, optionally since a sync token."""
        ...

    def get_colors(self) -> ColorPalette:
        """Fetch the colour palette."""
        ...

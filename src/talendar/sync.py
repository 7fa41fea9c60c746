"""Incremental synchronization of remote calendars into the local cache."""

import logging
import threading
from dataclasses import dataclass, field

from .core.cache import CalendarCache, RemoveOutcome
from .core.events import event_date
from .ports.cache_store import CacheStore
from .ports.calendar_api import MAX_RESULTS, CalendarAPI, CalendarAPIError

logger = logging.getLogger(__name__)


class SyncCancelled(Exception):
    """Raised when a sync pass is cancelled between requests."""

    pass


class SyncError(Exception):
    """A calendar failed to sync; the remaining calendars were not attempted."""

    def __init__(self, calendar_id: str, index: int, cause: Exception):
        super().__init__(f"Sync failed for calendar {calendar_id!r} (#{index}): {cause}")
        self.calendar_id = calendar_id
        self.index = index
        self.cause = cause

    @property
    def transient(self) -> bool:
        return isinstance(self.cause, CalendarAPIError) and self.cause.transient


@dataclass
class CalendarSyncStats:
    """Counters for one calendar's sync."""

    calendar_id: str
    full_sync: bool
    requests: int = 0
    upserted: int = 0
    removed: int = 0
    skipped: int = 0
    token_updated: bool = False


@dataclass
class SyncResult:
    """Outcome of a completed sync pass, one entry per calendar in list order."""

    calendars: list[CalendarSyncStats] = field(default_factory=list)

    @property
    def upserted(self) -> int:
        return sum(s.upserted for s in self.calendars)

    @property
    def removed(self) -> int:
        return sum(s.removed for s in self.calendars)


def _check_cancelled(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise SyncCancelled("Sync cancelled")


def incremental_sync(
    api: CalendarAPI,
    cache: CalendarCache,
    calendar_id: str,
    *,
    time_zone: str | None = None,
    cancel: threading.Event | None = None,
) -> CalendarSyncStats:
    """
    Bring one calendar's events in the cache up to date.

    Uses the stored sync token for a delta sync, or a full sync when none is
    stored. Pages are applied as they arrive, so a failure part-way leaves
    earlier pages applied. The sync token is replaced only when the final
    page supplies a new one.

    Raises:
        CalendarAPIError: on any transport failure. An expired sync token is
            dropped first so the next pass does a full sync.
        SyncCancelled: if ``cancel`` is set before a request.
    """
    sync_token = cache.sync_tokens.get(calendar_id)
    stats = CalendarSyncStats(calendar_id=calendar_id, full_sync=sync_token is None)
    logger.info(f"{'Full' if stats.full_sync else 'Delta'} sync of calendar {calendar_id}")

    page_token = None
    while True:
        _check_cancelled(cancel)
        try:
            page = api.list_events(
                calendar_id,
                sync_token=sync_token,
                page_token=page_token,
                time_zone=time_zone,
                single_events=True,
                max_results=MAX_RESULTS,
            )
        except CalendarAPIError as e:
            if e.token_expired and sync_token is not None:
                logger.warning(f"Sync token for {calendar_id} expired, next sync will be full")
                cache.sync_tokens.pop(calendar_id, None)
            raise
        stats.requests += 1

        for event in page.items:
            if event_date(event, cache.timezone) is None:
                stats.skipped += 1
                continue
            if event.is_cancelled:
                if cache.remove(event) is RemoveOutcome.REMOVED:
                    stats.removed += 1
                else:
                    stats.skipped += 1
            else:
                cache.upsert(event)
                stats.upserted += 1

        if not page.items or not page.next_page_token:
            break
        page_token = page.next_page_token

    if page.next_sync_token:
        cache.sync_tokens[calendar_id] = page.next_sync_token
        stats.token_updated = True
    else:
        logger.warning(f"No sync token returned for {calendar_id}, next sync will be full")

    logger.debug(
        f"Calendar {calendar_id}: {stats.requests} request(s), "
        f"{stats.upserted} upserted, {stats.removed} removed, {stats.skipped} skipped"
    )
    return stats


class SyncEngine:
    """
    Runs a full sync pass: calendar list, each calendar's events, colours.

    Calendars are synced one after another in the order the remote lists
    them. The cache is persisted only when every step succeeds.
    """

    def __init__(
        self,
        api: CalendarAPI,
        store: CacheStore,
        time_zone: str | None = None,
        cancel: threading.Event | None = None,
    ):
        self.api = api
        self.store = store
        self.time_zone = time_zone
        self.cancel = cancel

    def sync(self, cache: CalendarCache) -> SyncResult:
        """Sync every calendar into ``cache`` and persist it.

        Raises:
            SyncError: when a calendar fails; later calendars are skipped and
                nothing is persisted.
            CalendarAPIError: when the calendar list or colours can't be fetched.
            SyncCancelled: when the cancellation token is set.
        """
        _check_cancelled(self.cancel)
        calendars = self.api.list_calendars()
        cache.calendars = list(calendars)
        logger.info(f"Syncing {len(calendars)} calendar(s)")

        result = SyncResult()
        for index, calendar in enumerate(calendars):
            try:
                stats = incremental_sync(
                    self.api,
                    cache,
                    calendar.id,
                    time_zone=self.time_zone,
                    cancel=self.cancel,
                )
            except CalendarAPIError as e:
                logger.error(f"Sync failed for calendar {calendar.id}: {e}")
                raise SyncError(calendar.id, index, e) from e
            result.calendars.append(stats)

        _check_cancelled(self.cancel)
        cache.colors = self.api.get_colors()

        self.store.save(cache)
        logger.info(f"Sync complete: {result.upserted} upserted, {result.removed} removed")
        return result

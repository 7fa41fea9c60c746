"""Cache persistence interface."""

from dataclasses import dataclass
from typing import Protocol

from talendar.core.cache import CalendarCache


@dataclass
class LoadResult:
    """A loaded cache, with a warning when stored state had to be discarded."""

    cache: CalendarCache
    warning: str | None = None


class CacheStore(Protocol):
    """Interface for loading and saving the calendar cache."""

    def load(self) -> LoadResult:
        """Load the cache, falling back to an empty one."""
        ...

    def save(self, cache: CalendarCache) -> None:
        """Persist the whole cache, replacing what was stored."""
        ...

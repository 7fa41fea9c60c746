"""JSON file cache storage adapter."""

import json
import logging
import os
from datetime import tzinfo
from pathlib import Path

from talendar.core.cache import CalendarCache
from talendar.ports.cache_store import LoadResult

logger = logging.getLogger(__name__)


class JsonCacheStore:
    """
    File-based cache storage.

    Implements CacheStore protocol. The whole cache is one pretty-printed
    JSON document, replaced atomically on every save.
    """

    def __init__(self, path: Path | str, timezone: tzinfo | None = None):
        self.path = Path(path).expanduser()
        self.timezone = timezone

    @property
    def _tmp_path(self) -> Path:
        return self.path.with_name(f"{self.path.name}.tmp")

    def load(self) -> LoadResult:
        """Load the cache. Missing or corrupt files yield an empty cache."""
        if not self.path.exists():
            logger.debug(f"No cache at {self.path}, starting empty")
            return LoadResult(CalendarCache(timezone=self.timezone))

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise TypeError(f"expected an object, got {type(data).__name__}")
            cache = CalendarCache.from_dict(data, timezone=self.timezone)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            warning = f"Discarded unreadable cache at {self.path}: {e}"
            logger.warning(warning)
            return LoadResult(CalendarCache(timezone=self.timezone), warning=warning)

        return LoadResult(cache)

    def save(self, cache: CalendarCache) -> None:
        """Write the cache to a temporary file, then move it into place."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._tmp_path
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(cache.to_dict(), f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        finally:
            tmp.unlink(missing_ok=True)
        logger.debug(f"Saved cache to {self.path}")

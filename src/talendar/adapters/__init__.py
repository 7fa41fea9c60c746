"""Adapters - I/O implementations of ports."""

from .google_calendar import AuthenticationError, BrowserConsentPresenter, GoogleCalendarClient
from .json_cache import JsonCacheStore

__all__ = [
    "AuthenticationError",
    "BrowserConsentPresenter",
    "GoogleCalendarClient",
    "JsonCacheStore",
]

"""Google Calendar API adapter."""

import logging
import webbrowser
from pathlib import Path

import click

from talendar.core.events import Calendar, ColorPalette, Event
from talendar.ports.calendar_api import (
    MAX_RESULTS,
    CalendarAPIError,
    EventPage,
    MalformedResponseError,
)
from talendar.ports.consent_presenter import ConsentPresenter

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar.readonly"]
DEFAULT_TIMEOUT = 30.0


class AuthenticationError(CalendarAPIError):
    """Raised when no usable credentials are available."""

    def __init__(self, message: str):
        super().__init__(message, status=401)


class BrowserConsentPresenter:
    """Opens the consent URL in a browser and always echoes it."""

    def present(self, url: str) -> None:
        if webbrowser.open(url):
            click.echo("Opened your browser to authorize Google Calendar access.")
        click.echo(f"If it did not open, visit this URL:\n\n{url}\n")


class GoogleCalendarClient:
    """
    Authenticated Google Calendar v3 transport.

    Implements CalendarAPI protocol.
    """

    def __init__(
        self,
        config_dir: Path | str,
        client_secret_file: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        presenter: ConsentPresenter | None = None,
    ):
        self.config_dir = Path(config_dir).expanduser()
        self.client_secret_file = client_secret_file
        self.timeout = timeout
        self.presenter = presenter or BrowserConsentPresenter()
        self._token_path = self.config_dir / "token.json"
        self._service = None

    def _get_credentials(self):
        """Load credentials from token.json, refreshing if needed."""
        from google.auth.exceptions import RefreshError, TransportError
        from google.auth.transport.requests import Request
        from google.oauth2.credentials import Credentials

        if not self._token_path.exists():
            raise AuthenticationError("Not authorized yet. Run 'talendar auth' first.")

        try:
            creds = Credentials.from_authorized_user_file(str(self._token_path), SCOPES)
        except ValueError as e:
            raise AuthenticationError(f"Unreadable token.json, run 'talendar auth' again: {e}") from e

        if creds.expired and creds.refresh_token:
            try:
                creds.refresh(Request())
            except RefreshError as e:
                raise AuthenticationError(f"Failed to refresh token: {e}") from e
            except TransportError as e:
                raise CalendarAPIError(f"Could not reach Google to refresh token: {e}") from e
            self._save_credentials(creds)

        if not creds.valid:
            raise AuthenticationError("Stored credentials are invalid. Run 'talendar auth' again.")

        return creds

    def _save_credentials(self, creds) -> None:
        self._token_path.parent.mkdir(parents=True, exist_ok=True)
        self._token_path.write_text(creds.to_json())
        self._token_path.chmod(0o600)

    def _build_service(self):
        """Build a Calendar API service whose requests time out."""
        import httplib2
        from google_auth_httplib2 import AuthorizedHttp
        from googleapiclient.discovery import build

        creds = self._get_credentials()
        http = AuthorizedHttp(creds, http=httplib2.Http(timeout=self.timeout))
        return build("calendar", "v3", http=http, cache_discovery=False)

    @property
    def service(self):
        if self._service is None:
            self._service = self._build_service()
        return self._service

    def _execute(self, request) -> dict:
        """Run a request, translating transport failures to CalendarAPIError."""
        from google.auth.exceptions import GoogleAuthError, TransportError
        from googleapiclient.errors import HttpError
        from httplib2 import HttpLib2Error

        try:
            return request.execute()
        except HttpError as e:
            status = e.resp.status if e.resp is not None else None
            raise CalendarAPIError(
                f"Google Calendar request failed: {e}",
                status=int(status) if status else None,
            ) from e
        except TransportError as e:
            raise CalendarAPIError(f"Could not reach Google to refresh token: {e}") from e
        except GoogleAuthError as e:
            raise AuthenticationError(f"Google rejected the stored credentials: {e}") from e
        except (HttpLib2Error, OSError) as e:
            raise CalendarAPIError(f"Google Calendar request failed: {e}") from e

    def _parse(self, parse, data):
        """Apply a model parser to response data, reporting malformed payloads."""
        try:
            return parse(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise MalformedResponseError(f"Unexpected Google Calendar response: {e!r}") from e

    def authenticate(self) -> bool:
        """Run the OAuth consent flow. Returns True on success."""
        from google_auth_oauthlib.flow import InstalledAppFlow

        if not self.client_secret_file:
            logger.error("No client secret file configured")
            return False

        secret_path = Path(self.client_secret_file).expanduser()
        if not secret_path.exists():
            logger.error(f"Client secret file not found: {secret_path}")
            return False

        presenter = self.presenter

        class PresentingFlow(InstalledAppFlow):
            def authorization_url(self, **kwargs):
                url, state = super().authorization_url(**kwargs)
                presenter.present(url)
                return url, state

        flow = PresentingFlow.from_client_secrets_file(str(secret_path), SCOPES)
        creds = flow.run_local_server(port=0, open_browser=False, authorization_prompt_message="")
        self._save_credentials(creds)
        self._service = None
        return True

    def list_calendars(self) -> list[Calendar]:
        """List every calendar on the account, following pagination."""
        calendars = []
        page_token = None
        while True:
            kwargs = {"pageToken": page_token} if page_token else {}
            result = self._execute(self.service.calendarList().list(**kwargs))
            calendars.extend(self._parse(Calendar.from_api, item) for item in result.get("items", []))
            page_token = result.get("nextPageToken")
            if not page_token:
                return calendars

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
        """Fetch one page of events for a calendar."""
        kwargs = {
            "calendarId": calendar_id,
            "singleEvents": single_events,
            "maxResults": max_results,
        }
        if time_zone:
            kwargs["timeZone"] = time_zone
        if sync_token:
            kwargs["syncToken"] = sync_token
        if page_token:
            kwargs["pageToken"] = page_token

        result = self._execute(self.service.events().list(**kwargs))
        return EventPage(
            items=[self._parse(Event.from_api, item) for item in result.get("items", [])],
            next_page_token=result.get("nextPageToken"),
            next_sync_token=result.get("nextSyncToken"),
        )

    def get_colors(self) -> ColorPalette:
        return self._parse(ColorPalette.from_api, self._execute(self.service.colors().get()))

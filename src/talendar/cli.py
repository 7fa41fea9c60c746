"""talendar CLI - Google Calendar in the terminal."""

import json
import logging
import sys
from datetime import date

import click

from .adapters.google_calendar import GoogleCalendarClient
from .adapters.json_cache import JsonCacheStore
from .config import CONFIG_DIR, Config, load_config, resolve_cache_path
from .ports.calendar_api import CalendarAPIError
from .sync import SyncCancelled, SyncEngine, SyncError


def _store(config: Config) -> JsonCacheStore:
    return JsonCacheStore(resolve_cache_path(config), timezone=config.zoneinfo())


def _client(config: Config) -> GoogleCalendarClient:
    return GoogleCalendarClient(
        config_dir=CONFIG_DIR,
        client_secret_file=config.client_secret_file,
        timeout=config.request_timeout,
    )


def _load_cache(config: Config):
    result = _store(config).load()
    if result.warning:
        click.echo(f"Warning: {result.warning}", err=True)
    return result.cache


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """talendar - Google Calendar in the terminal."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


@main.command()
def auth():
    """Authorize access to Google Calendar."""
    config = load_config()
    if not _client(config).authenticate():
        click.echo("Error: set CLIENT_SECRET_FILE in talendar.conf to a valid client secret", err=True)
        sys.exit(1)
    click.echo("Authentication successful!")


@main.command()
@click.option("--timeout", type=float, default=None, help="Per-request timeout in seconds")
def sync(timeout: float | None):
    """Fetch changes from Google Calendar into the local cache."""
    config = load_config()
    if timeout is not None:
        config.request_timeout = timeout

    store = _store(config)
    loaded = store.load()
    if loaded.warning:
        click.echo(f"Warning: {loaded.warning}", err=True)

    zone = config.zoneinfo()
    engine = SyncEngine(_client(config), store, time_zone=zone.key if zone else None)
    try:
        result = engine.sync(loaded.cache)
    except SyncError as e:
        hint = " (temporary, try again)" if e.transient else ""
        click.echo(f"Error: {e}{hint}", err=True)
        sys.exit(1)
    except (CalendarAPIError, SyncCancelled) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except OSError as e:
        click.echo(f"Error: could not save cache to {store.path}: {e}", err=True)
        sys.exit(1)

    for stats in result.calendars:
        kind = "full" if stats.full_sync else "delta"
        click.echo(f"{stats.calendar_id}: {kind}, +{stats.upserted} -{stats.removed}")
    click.echo(f"Synced {len(result.calendars)} calendar(s).")


@main.command()
@click.option("--date", "-d", "target_date", default=None,
              help="Date to show (YYYY-MM-DD), defaults to today")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def day(target_date: str | None, as_json: bool):
    """Show cached events for a day."""
    config = load_config()
    try:
        target = date.fromisoformat(target_date) if target_date else date.today()
    except ValueError:
        click.echo(f"Error: invalid date {target_date!r}", err=True)
        sys.exit(1)

    cache = _load_cache(config)
    events = cache.events_on(target)

    if as_json:
        payload = [
            {**e.to_dict(), "startLocal": e.start_string(cache.timezone), "color": cache.event_color(e)}
            for e in events or []
        ]
        click.echo(json.dumps(payload, indent=2))
        return

    click.echo(f"### {target.strftime('%A, %B %d')}")
    if events is None:
        click.echo("Nothing cached for this day.")
        return
    if not events:
        click.echo("No events.")
        return

    tz = cache.timezone
    for event in events:
        when = "All day" if event.all_day else event.start.date_time.astimezone(tz).strftime("%H:%M")
        multi = " (multi-day)" if event.is_multiday(tz) else ""
        click.echo(f"  {when:8} {event.summary or '(no title)'}{multi}  {cache.event_color(event)}")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def calendars(as_json: bool):
    """List calendars from the last sync."""
    cache = _load_cache(load_config())

    if as_json:
        click.echo(json.dumps([c.to_dict() for c in cache.calendars], indent=2))
        return

    if not cache.calendars:
        click.echo("No calendars cached. Run 'talendar sync' first.")
        return

    for cal in cache.calendars:
        marker = "*" if cal.primary else " "
        synced = "synced" if cal.id in cache.sync_tokens else "full sync pending"
        click.echo(f"{marker} {cal.summary} [{cal.access_role or '-'}] ({synced})")


if __name__ == "__main__":
    main()

import threading
from datetime import date, datetime, timezone

from flask import current_app

_singleton_lock = threading.Lock()


def utcnow():
    """Naive UTC timestamp, the form stored in DateTime columns"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_today():
    return datetime.now(timezone.utc).date()


def isoformat_utc(value):
    if value is None:
        return None
    return value.isoformat(timespec='microseconds') + 'Z'


def parse_iso_timestamp(value):
    """Parse an ISO-8601 timestamp (with or without a trailing Z) into naive UTC"""
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def one_year_after(issue_date):
    """
    Same month and day one year later.

    29 February has no counterpart in the following year and rolls over to
    1 March.
    """
    try:
        return issue_date.replace(year=issue_date.year + 1)
    except ValueError:
        return date(issue_date.year + 1, 3, 1)


def app_singleton(key, factory):
    """
    Get or create a per-application service instance.

    The factory runs at most once per application, even when several request
    threads ask for the service at the same time. A factory returning None
    (service not configured) is remembered too.
    """
    app = current_app._get_current_object()
    extension_key = f'presscard.{key}'
    if extension_key not in app.extensions:
        with _singleton_lock:
            if extension_key not in app.extensions:
                app.extensions[extension_key] = factory(app.config)
    return app.extensions[extension_key]


def blank_to_none(value):
    if value is None:
        return None
    value = value.strip()
    return value or None


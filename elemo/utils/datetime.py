# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities.

Every datetime handled by the service layer is timezone-aware UTC. License
expiry in particular is compared against ``utc_now()``.

Usage:
    from elemo.utils.datetime import utc_now

    expired = utc_now() >= license.expires_at
"""

from datetime import datetime, timedelta, timezone

# English names, independent of the process locale
WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Example:
        >>> utc_now().tzinfo
        datetime.timezone.utc
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    Naive datetimes are assumed to be UTC; aware ones are converted.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def time_until(target: datetime) -> timedelta:
    """Calculate time remaining until a target datetime.

    Returns:
        Timedelta until target (negative if target is in the past).
    """
    return ensure_utc(target) - utc_now()


def format_rfc850(dt: datetime) -> str:
    """Format a datetime in RFC 850 form, in UTC.

    Example:
        >>> format_rfc850(datetime(2023, 1, 1, tzinfo=timezone.utc))
        'Sunday, 01-Jan-23 00:00:00 UTC'
    """
    dt = ensure_utc(dt)
    return (
        f"{WEEKDAYS[dt.weekday()]}, {dt.day:02d}-{MONTHS[dt.month - 1]}-{dt.year % 100:02d} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} UTC"
    )

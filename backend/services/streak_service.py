"""
streak_service.py — Logging streaks
Turns symptom-log timestamps into a consecutive-day streak, counted backward
from the most recent calendar day in the user's timezone.
"""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from config import DEFAULT_TIMEZONE


def resolve_timezone(name: str | None = None) -> ZoneInfo:
    """ZoneInfo for an IANA name (DEFAULT_TIMEZONE when empty). Raises ValueError if unknown."""
    tz_name = name or DEFAULT_TIMEZONE
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {tz_name}") from e


def parse_timestamp(value) -> datetime:
    """Parse a PostgREST timestamp (``Z`` or ``+00:00`` suffix). Naive values are taken as UTC."""
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def local_date(value, tz: ZoneInfo) -> date:
    return parse_timestamp(value).astimezone(tz).date()


def calculate_streak(timestamps, today: date, tz: ZoneInfo | None = None) -> int:
    """Count consecutive logging days ending today or yesterday.

    ``timestamps`` may come in any order and may hold several entries per day.
    """
    tz = tz or resolve_timezone()
    days = sorted({local_date(ts, tz) for ts in timestamps}, reverse=True)
    if not days:
        return 0

    # The chain has to be anchored on today or yesterday
    if days[0] != today and days[0] != today - timedelta(days=1):
        return 0

    streak = 1
    for later, earlier in zip(days, days[1:]):
        if later - earlier == timedelta(days=1):
            streak += 1
        else:
            break
    return streak


def today_in(tz: ZoneInfo) -> date:
    return datetime.now(tz).date()

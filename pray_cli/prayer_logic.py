from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .models import RESOLVABLE_PRAYERS, PrayerInstant, PrayerName, PrayerSchedule

logger = logging.getLogger(__name__)

_HHMM_RE = re.compile(r"([0-9]{1,2}):([0-9]{2})")


class ParseError(ValueError):
    def __init__(self, raw: str) -> None:
        super().__init__(f"Invalid time value: {raw!r}")
        self.raw = raw


class ResolutionError(RuntimeError):
    pass


def local_now(time_zone: str | None = None) -> datetime:
    """Current time in ``time_zone``, or in the system zone when it is unknown."""
    if time_zone:
        try:
            return datetime.now(ZoneInfo(time_zone))
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Unknown time zone %r, using the system clock", time_zone)
    return datetime.now().astimezone()


def parse_time(raw: str, today: datetime) -> datetime:
    """Anchor a provider "HH:MM" string (trailing annotation ignored) to ``today``.

    The result keeps ``today``'s date and tzinfo with seconds zeroed.
    Raises :class:`ParseError` when the leading segment is not a 24-hour time.
    """
    head = raw.split(" ", 1)[0]
    match = _HHMM_RE.fullmatch(head)
    if not match:
        raise ParseError(raw)

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ParseError(raw)

    return today.replace(hour=hours, minute=minutes, second=0, microsecond=0)


def find_next_prayer(schedule: PrayerSchedule, now: datetime) -> PrayerInstant:
    for name in RESOLVABLE_PRAYERS:
        try:
            prayer_time = parse_time(schedule.get(name), now)
        except ParseError as exc:
            logger.debug("Skipping %s: %s", name, exc)
            continue

        if now < prayer_time:
            return PrayerInstant(name=name, at=prayer_time)

    logger.debug("All prayers passed for today, rolling over to tomorrow's Fajr")
    tomorrow = now + timedelta(days=1)
    try:
        fajr_time = parse_time(schedule.Fajr, tomorrow)
    except ParseError as exc:
        raise ResolutionError(f"Cannot determine tomorrow's Fajr: {exc}") from exc

    return PrayerInstant(name=PrayerName.FAJR, at=fajr_time)


def time_until(instant: PrayerInstant, now: datetime) -> timedelta:
    return instant.at.astimezone(timezone.utc) - now.astimezone(timezone.utc)


def format_duration(delta: timedelta) -> str:
    if delta < timedelta(0):
        raise ValueError("duration must not be negative")

    total_minutes = int(delta.total_seconds()) // 60
    hours = total_minutes // 60
    minutes = total_minutes % 60

    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def countdown_text(instant: PrayerInstant, now: datetime) -> str | None:
    """Formatted time remaining, or ``None`` once the prayer time has arrived."""
    remaining = time_until(instant, now)
    if remaining <= timedelta(0):
        return None
    return format_duration(remaining)

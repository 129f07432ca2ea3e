"""
Wall-clock conversion for the clinic's civil timezone.

Recurring slots are stored as local wall-clock values ("Wednesday 14:00")
while sessions are stored as absolute UTC instants. These helpers map between
the two for the zone configured in ``settings.CLINIC_TIME_ZONE``.

``compose_instant`` does not resolve a wall-clock time against the zone rules
directly. It samples the zone's UTC offset at local noon of the requested date
and applies that single offset to the requested hour/minute. On days where the
offset changes between midnight and the requested time (DST transitions) the
result is approximate; every other day is exact.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone as dt_timezone
from zoneinfo import ZoneInfo

from django.conf import settings
from django.utils import timezone

from clinic_backend.appointments.exceptions import InvalidScheduleData


SAMPLE_HOUR = 12


def clinic_zone() -> ZoneInfo:
    return ZoneInfo(settings.CLINIC_TIME_ZONE)


def _as_aware(instant: datetime) -> datetime:
    """Naive datetimes are interpreted as UTC."""
    if timezone.is_naive(instant):
        return instant.replace(tzinfo=dt_timezone.utc)
    return instant


def to_local(instant: datetime) -> datetime:
    return timezone.localtime(_as_aware(instant), clinic_zone())


def local_date_key(instant: datetime) -> str:
    """Civil date of ``instant`` in the clinic zone, as "YYYY-MM-DD"."""
    return to_local(instant).date().isoformat()


def sunday_weekday(day: date) -> int:
    """Weekday with Sunday=0 ... Saturday=6."""
    return (day.weekday() + 1) % 7


def local_weekday(instant: datetime) -> int:
    return sunday_weekday(to_local(instant).date())


def parse_date_key(value) -> date:
    if isinstance(value, datetime):
        raise InvalidScheduleData('Expected a calendar date, got a datetime.', field='date')
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise InvalidScheduleData(f'Invalid date "{value}", expected YYYY-MM-DD.', field='date')


def shift_date_key(date_key, days: int) -> str:
    return (parse_date_key(date_key) + timedelta(days=days)).isoformat()


def parse_time_of_day(value: str) -> tuple[int, int]:
    """Parse a 24-hour "HH:MM" string into ``(hour, minute)``."""
    parts = str(value or '').strip().split(':')
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise InvalidScheduleData(f'Invalid time "{value}", expected HH:MM.', field='time')
    hour, minute = int(parts[0]), int(parts[1])
    _validate_hour_minute(hour, minute)
    return hour, minute


def _validate_hour_minute(hour: int, minute: int) -> None:
    if not 0 <= hour <= 23:
        raise InvalidScheduleData(f'Hour must be between 0 and 23, got {hour}.', field='hour')
    if not 0 <= minute <= 59:
        raise InvalidScheduleData(f'Minute must be between 0 and 59, got {minute}.', field='minute')


def _offset_at(instant: datetime) -> timedelta:
    """UTC offset of the clinic zone at ``instant``, read back from its wall clock."""
    wall = timezone.localtime(instant, clinic_zone())
    return wall.replace(tzinfo=dt_timezone.utc) - instant


def sample_offset(date_key) -> timedelta:
    """UTC offset of the clinic zone at local noon of ``date_key``."""
    day = parse_date_key(date_key)
    noon_as_utc = datetime(day.year, day.month, day.day, SAMPLE_HOUR, tzinfo=dt_timezone.utc)
    local_noon = noon_as_utc - _offset_at(noon_as_utc)
    return _offset_at(local_noon)


def compose_instant(date_key, hour: int, minute: int) -> datetime:
    """Absolute UTC instant of the local wall-clock ``date_key hour:minute``."""
    _validate_hour_minute(hour, minute)
    day = parse_date_key(date_key)
    wall_as_utc = datetime(day.year, day.month, day.day, hour, minute, tzinfo=dt_timezone.utc)
    return wall_as_utc - sample_offset(day)

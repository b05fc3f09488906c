from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Iterable, List, Optional, Sequence, Set, Union
from datetime import date, datetime, timedelta
from functools import reduce
from dateutil.parser import isoparse
import pytz
import re

from tutor_availability.core.config import settings
from tutor_availability.core.exceptions import MalformedRecordError
from tutor_availability.domain import (
    AdditiveRange,
    AvailabilityException,
    ResolutionWindow,
    ResolvedDaySlots,
    SlotChange,
    SubtractiveRange,
    WeeklyAvailabilityRule,
)
from tutor_availability.services.availability_service import AvailabilityService
from tutor_availability.services.slot_generator import generate_slots, parse_time_of_day


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def get_timezone(name: str):
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        raise MalformedRecordError(f"Unknown timezone: {name!r}")


def effective_timezone(exception: AvailabilityException, tutor_default: str) -> str:
    """The exception's own timezone, else the tutor's weekly timezone"""
    return exception.timezone or tutor_default


def day_of_week(target_date: date) -> int:
    """0=Sunday .. 6=Saturday"""
    return target_date.isoweekday() % 7


def _as_date(value: Any, tz) -> date:
    # Instants are mapped into the timezone; naive instants are UTC
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = pytz.utc.localize(value)
        return value.astimezone(tz).date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        try:
            if len(value.strip()) == 10:
                return date.fromisoformat(value.strip())
            return _as_date(isoparse(value.strip()), tz)
        except ValueError:
            pass

    raise MalformedRecordError(f"Unparsable date: {value!r}")


def exception_local_date(exception: AvailabilityException, tutor_default: str) -> date:
    """Calendar date an exception applies to, read in its effective timezone"""
    tz = get_timezone(effective_timezone(exception, tutor_default))
    return _as_date(exception.date, tz)


def to_slot_change(exception: AvailabilityException) -> SlotChange:
    if exception.is_active is None:
        raise MalformedRecordError("Exception has no is_active flag")

    start = parse_time_of_day(exception.start_time)
    end = parse_time_of_day(exception.end_time)
    if exception.is_active:
        return AdditiveRange(start=start, end=end)
    return SubtractiveRange(start=start, end=end)


def apply_slot_changes(
    base_slots: Iterable[str],
    changes: Sequence[SlotChange],
    increment_minutes: int = 30
) -> Set[str]:
    """Fold additive/subtractive ranges over the base slots, in order"""
    def apply(slots: frozenset, change: SlotChange) -> frozenset:
        generated = generate_slots(change.start, change.end, increment_minutes)
        if isinstance(change, AdditiveRange):
            return slots.union(generated)
        return slots.difference(generated)

    return set(reduce(apply, changes, frozenset(base_slots)))


def resolve_day(
    target_date: Union[date, str],
    weekly_rules: Sequence[WeeklyAvailabilityRule],
    exceptions: Sequence[AvailabilityException],
    increment_minutes: int = 30,
    timezone: str = "UTC"
) -> List[str]:
    """
    Resolve the bookable slot starts for one tutor-local date.

    Weekly rules for the date's weekday form the base set; exceptions falling
    on the date are then applied as additions or removals. A rule or exception
    with an unusable time, date or timezone contributes nothing.
    """
    if isinstance(target_date, str):
        target_date = date.fromisoformat(target_date)

    weekday = day_of_week(target_date)
    base_slots = set()
    for rule in weekly_rules:
        if rule.day_of_week != weekday:
            continue
        try:
            base_slots.update(generate_slots(rule.start_time, rule.end_time, increment_minutes))
        except MalformedRecordError:
            continue

    changes = []
    for exception in exceptions:
        try:
            if exception_local_date(exception, timezone) != target_date:
                continue
            changes.append(to_slot_change(exception))
        except MalformedRecordError:
            continue

    if not changes:
        return sorted(base_slots)

    return sorted(apply_slot_changes(base_slots, changes, increment_minutes))


def clamp_window_days(raw: Any = None) -> int:
    """Window length in days: leading integer of `raw`, default when absent or zero, clamped to bounds"""
    default = settings.DEFAULT_WINDOW_DAYS
    if raw is None or isinstance(raw, bool):
        return default

    if isinstance(raw, int):
        value = raw
    else:
        match = _LEADING_INT.match(str(raw))
        if not match:
            return default
        value = int(match.group(1))

    if value == 0:
        return default
    return min(max(value, settings.MIN_WINDOW_DAYS), settings.MAX_WINDOW_DAYS)


def governing_timezone(
    weekly_rules: Sequence[WeeklyAvailabilityRule],
    exceptions: Sequence[AvailabilityException]
) -> str:
    """First weekly rule's timezone, else first exception's, else the default"""
    name = (
        (weekly_rules[0].timezone if weekly_rules else None)
        or (exceptions[0].timezone if exceptions else None)
        or settings.DEFAULT_TIMEZONE
    )
    try:
        get_timezone(name)
    except MalformedRecordError:
        return settings.DEFAULT_TIMEZONE
    return name


def resolve_window(
    weekly_rules: Sequence[WeeklyAvailabilityRule],
    exceptions: Sequence[AvailabilityException],
    window_days: Any = None,
    now: Optional[datetime] = None,
    increment_minutes: Optional[int] = None
) -> ResolutionWindow:
    """Resolve one entry per day, starting with today in the governing timezone"""
    days = clamp_window_days(window_days)
    increment = increment_minutes or settings.SLOT_INCREMENT_MINUTES
    timezone_name = governing_timezone(weekly_rules, exceptions)

    now = now or datetime.now(pytz.utc)
    if now.tzinfo is None:
        now = pytz.utc.localize(now)
    today = now.astimezone(get_timezone(timezone_name)).date()

    resolved = []
    for offset in range(days):
        local_date = today + timedelta(days=offset)
        resolved.append(ResolvedDaySlots(
            date=local_date.isoformat(),
            slots=resolve_day(local_date, weekly_rules, exceptions, increment, timezone_name)
        ))

    return ResolutionWindow(timezone=timezone_name, days=resolved)


class CalendarService:
    """Service resolving a tutor's bookable calendar from stored availability"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.availability = AvailabilityService(db)

    async def get_calendar(
        self,
        tutor_id: Optional[str] = None,
        email: Optional[str] = None,
        days: Any = None,
        now: Optional[datetime] = None
    ) -> ResolutionWindow:
        """Resolve the bookable slots for the next `days` days"""
        resolved_tutor_id = await self.availability.resolve_tutor_id(tutor_id, email)
        weekly_rules = await self.availability.get_weekly_rules(resolved_tutor_id)
        exceptions = await self.availability.get_exceptions(resolved_tutor_id)

        return resolve_window(weekly_rules, exceptions, window_days=days, now=now)

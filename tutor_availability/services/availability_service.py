from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select, and_
from typing import List, Dict, Any, Optional
from datetime import date
import pytz

from tutor_availability.models.profile import Profile
from tutor_availability.models.availability import TutorAvailability, TutorAvailabilityException
from tutor_availability.domain import WeeklyAvailabilityRule, AvailabilityException
from tutor_availability.services.slot_generator import parse_time_of_day, format_time_of_day
from tutor_availability.core.exceptions import ValidationError, NotFoundError, StorageError, MalformedRecordError


class AvailabilityService:
    """Access to tutor weekly availability and date exceptions"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def resolve_tutor_id(
        self,
        tutor_id: Optional[str] = None,
        email: Optional[str] = None
    ) -> str:
        """Return the tutor id, looking it up by email when no id is given"""
        if tutor_id:
            return tutor_id

        if not email:
            raise ValidationError("tutorId or email required")

        try:
            result = await self.db.execute(select(Profile.id).where(Profile.email == email))
            profile_id = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageError(details=f"Failed to look up profile: {str(e)}")

        if profile_id is None:
            raise NotFoundError("Tutor not found")

        return profile_id

    async def get_weekly_rules(self, tutor_id: str) -> List[WeeklyAvailabilityRule]:
        """Active weekly rules ordered by day of week, then start time"""
        try:
            result = await self.db.execute(
                select(TutorAvailability)
                .where(and_(
                    TutorAvailability.tutor_id == tutor_id,
                    TutorAvailability.is_active.is_(True)
                ))
                .order_by(TutorAvailability.day_of_week, TutorAvailability.start_time)
            )
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise StorageError(details=f"Failed to get weekly availability: {str(e)}")

        return [
            WeeklyAvailabilityRule(
                id=row.id,
                tutor_id=row.tutor_id,
                day_of_week=row.day_of_week,
                start_time=row.start_time,
                end_time=row.end_time,
                timezone=row.timezone,
                is_active=row.is_active
            )
            for row in rows
        ]

    async def get_exceptions(self, tutor_id: str) -> List[AvailabilityException]:
        """All exceptions for the tutor, in storage order"""
        try:
            result = await self.db.execute(
                select(TutorAvailabilityException).where(TutorAvailabilityException.tutor_id == tutor_id)
            )
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise StorageError(details=f"Failed to get availability exceptions: {str(e)}")

        return [
            AvailabilityException(
                id=row.id,
                tutor_id=row.tutor_id,
                date=row.date,
                start_time=row.start_time,
                end_time=row.end_time,
                is_active=row.is_active,
                timezone=row.timezone
            )
            for row in rows
        ]

    async def list_weekly_availability(self, tutor_id: str) -> Dict[str, Any]:
        """Weekly rules as HH:MM ranges, with the tutor's timezone"""
        rules = await self.get_weekly_rules(tutor_id)

        slots = []
        for rule in rules:
            try:
                start = format_time_of_day(parse_time_of_day(rule.start_time))
                end = format_time_of_day(parse_time_of_day(rule.end_time))
            except MalformedRecordError:
                continue
            slots.append({
                "id": rule.id,
                "day_of_week": rule.day_of_week,
                "start": start,
                "end": end
            })

        return {
            "timezone": (rules[0].timezone if rules else None) or "UTC",
            "slots": slots
        }

    async def create_weekly_rule(
        self,
        tutor_id: str,
        day_of_week: Optional[int],
        start: Optional[str],
        end: Optional[str],
        timezone: Optional[str] = None
    ) -> Dict[str, Any]:
        """Store one recurring weekly availability range"""
        if day_of_week is None or not start or not end:
            raise ValidationError("dayOfWeek, start, end required")

        if isinstance(day_of_week, bool) or not isinstance(day_of_week, int) or not 0 <= day_of_week <= 6:
            raise ValidationError("dayOfWeek must be between 0 (Sunday) and 6 (Saturday)")

        try:
            start_time = parse_time_of_day(start)
            end_time = parse_time_of_day(end)
        except MalformedRecordError as e:
            raise ValidationError(str(e))

        if start_time >= end_time:
            raise ValidationError("start must be before end")

        if timezone and timezone not in pytz.all_timezones_set:
            raise ValidationError(f"Unknown timezone {timezone!r}")

        rule = TutorAvailability(
            tutor_id=tutor_id,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
            timezone=timezone or "UTC",
            is_active=True
        )

        try:
            self.db.add(rule)
            await self.db.commit()
            await self.db.refresh(rule)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(details=f"Failed to create weekly availability: {str(e)}")

        return {
            "id": rule.id,
            "tutor_id": rule.tutor_id,
            "day_of_week": rule.day_of_week,
            "start": format_time_of_day(rule.start_time),
            "end": format_time_of_day(rule.end_time),
            "timezone": rule.timezone
        }

    async def delete_weekly_rule(self, rule_id: str):
        """Remove one weekly availability rule"""
        try:
            rule = await self.db.get(TutorAvailability, rule_id)
        except SQLAlchemyError as e:
            raise StorageError(details=f"Failed to get weekly availability: {str(e)}")

        if rule is None:
            raise NotFoundError("Availability rule not found")

        try:
            await self.db.delete(rule)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(details=f"Failed to delete weekly availability: {str(e)}")

    async def create_exception(
        self,
        tutor_id: str,
        exception_date: Optional[str],
        start: Optional[str],
        end: Optional[str],
        is_active: Optional[bool],
        timezone: Optional[str] = None
    ) -> Dict[str, Any]:
        """Store a date-specific addition (is_active) or removal of availability"""
        if not exception_date or not start or not end or is_active is None:
            raise ValidationError("date, start, end, isActive required")

        try:
            parsed_date = date.fromisoformat(exception_date)
        except ValueError:
            raise ValidationError(f"Invalid date {exception_date!r}, use YYYY-MM-DD")

        try:
            start_time = parse_time_of_day(start)
            end_time = parse_time_of_day(end)
        except MalformedRecordError as e:
            raise ValidationError(str(e))

        if start_time >= end_time:
            raise ValidationError("start must be before end")

        if timezone and timezone not in pytz.all_timezones_set:
            raise ValidationError(f"Unknown timezone {timezone!r}")

        exception = TutorAvailabilityException(
            tutor_id=tutor_id,
            date=parsed_date,
            start_time=start_time,
            end_time=end_time,
            is_active=is_active,
            timezone=timezone or None
        )

        try:
            self.db.add(exception)
            await self.db.commit()
            await self.db.refresh(exception)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(details=f"Failed to create availability exception: {str(e)}")

        return {
            "id": exception.id,
            "tutor_id": exception.tutor_id,
            "date": exception.date.isoformat(),
            "start": format_time_of_day(exception.start_time),
            "end": format_time_of_day(exception.end_time),
            "is_active": exception.is_active,
            "timezone": exception.timezone
        }

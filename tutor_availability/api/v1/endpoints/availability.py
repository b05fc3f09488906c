from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from tutor_availability.core.database import get_db
from tutor_availability.core.exceptions import TutorAvailabilityException, AvailabilityError
from tutor_availability.schemas.availability import (
    CalendarResponse,
    WeeklyAvailabilityResponse,
    WeeklyRuleCreate,
    WeeklyRuleCreated,
    WeeklyRuleDeleted,
    AvailabilityExceptionCreate,
    AvailabilityExceptionCreated,
)
from tutor_availability.services.availability_service import AvailabilityService
from tutor_availability.services.calendar_service import CalendarService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/calendar", response_model=CalendarResponse)
async def get_tutor_calendar(
    tutor_id: Optional[str] = Query(None, alias="tutorId", description="Tutor ID, takes precedence over email"),
    email: Optional[str] = Query(None, description="Tutor email"),
    days: Optional[str] = Query(None, description="Window length in days (1-60, default 30)"),
    db: AsyncSession = Depends(get_db)
):
    """Get the tutor's bookable slots for the next `days` days, in the tutor's timezone"""
    try:
        calendar_service = CalendarService(db)
        window = await calendar_service.get_calendar(tutor_id=tutor_id, email=email, days=days)
        return window.to_dict()

    except TutorAvailabilityException:
        raise
    except Exception as e:
        logger.exception("Failed to resolve tutor calendar")
        raise AvailabilityError(details=str(e))


@router.get("", response_model=WeeklyAvailabilityResponse)
async def get_weekly_availability(
    tutor_id: Optional[str] = Query(None, alias="tutorId", description="Tutor ID, takes precedence over email"),
    email: Optional[str] = Query(None, description="Tutor email"),
    db: AsyncSession = Depends(get_db)
):
    """Get the tutor's active weekly availability rules"""
    try:
        availability_service = AvailabilityService(db)
        resolved_tutor_id = await availability_service.resolve_tutor_id(tutor_id, email)
        return await availability_service.list_weekly_availability(resolved_tutor_id)

    except TutorAvailabilityException:
        raise
    except Exception as e:
        logger.exception("Failed to get weekly availability")
        raise AvailabilityError(details=str(e))


@router.post("", response_model=WeeklyRuleCreated, status_code=status.HTTP_201_CREATED)
async def create_weekly_availability(
    payload: WeeklyRuleCreate,
    db: AsyncSession = Depends(get_db)
):
    """Add a recurring weekly availability range"""
    try:
        availability_service = AvailabilityService(db)
        resolved_tutor_id = await availability_service.resolve_tutor_id(payload.tutor_id, payload.email)
        rule = await availability_service.create_weekly_rule(
            tutor_id=resolved_tutor_id,
            day_of_week=payload.day_of_week,
            start=payload.start,
            end=payload.end,
            timezone=payload.timezone
        )
        logger.info(f"Created weekly availability {rule['id']} for tutor {resolved_tutor_id}")
        return {"success": True, "slot": rule}

    except TutorAvailabilityException:
        raise
    except Exception as e:
        logger.exception("Failed to create weekly availability")
        raise AvailabilityError(details=str(e))


@router.delete("/{rule_id}", response_model=WeeklyRuleDeleted)
async def delete_weekly_availability(
    rule_id: str,
    db: AsyncSession = Depends(get_db)
):
    """Remove a recurring weekly availability range"""
    try:
        await AvailabilityService(db).delete_weekly_rule(rule_id)
        logger.info(f"Deleted weekly availability {rule_id}")
        return {"success": True}

    except TutorAvailabilityException:
        raise
    except Exception as e:
        logger.exception("Failed to delete weekly availability")
        raise AvailabilityError(details=str(e))


@router.post("/exception", response_model=AvailabilityExceptionCreated, status_code=status.HTTP_201_CREATED)
async def create_availability_exception(
    payload: AvailabilityExceptionCreate,
    db: AsyncSession = Depends(get_db)
):
    """Add or remove availability on one specific date"""
    try:
        availability_service = AvailabilityService(db)
        resolved_tutor_id = await availability_service.resolve_tutor_id(payload.tutor_id, payload.user_email)
        exception = await availability_service.create_exception(
            tutor_id=resolved_tutor_id,
            exception_date=payload.date,
            start=payload.start,
            end=payload.end,
            is_active=payload.is_active,
            timezone=payload.timezone
        )
        logger.info(f"Created availability exception {exception['id']} for tutor {resolved_tutor_id}")
        return {"success": True, "exception": exception}

    except TutorAvailabilityException:
        raise
    except Exception as e:
        logger.exception("Failed to create availability exception")
        raise AvailabilityError(details=str(e))

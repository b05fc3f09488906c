from pydantic import BaseModel, Field, StrictBool, StrictInt, StrictStr
from typing import Optional, List


class CalendarDay(BaseModel):
    date: str = Field(..., description="Tutor-local date in YYYY-MM-DD format")
    slots: List[str] = Field(default_factory=list, description="Bookable slot start times (HH:MM), ascending")


class CalendarResponse(BaseModel):
    timezone: str = Field(..., description="IANA timezone the slots are expressed in")
    days: List[CalendarDay] = Field(..., description="One entry per day, today first")


class WeeklySlot(BaseModel):
    id: Optional[str] = Field(None, description="Availability rule ID")
    day_of_week: int = Field(..., alias="dayOfWeek", description="0=Sunday .. 6=Saturday")
    start: str = Field(..., description="Start time (HH:MM)")
    end: str = Field(..., description="End time (HH:MM)")

    class Config:
        populate_by_name = True


class WeeklyAvailabilityResponse(BaseModel):
    timezone: str = Field(..., description="Timezone of the weekly rules")
    slots: List[WeeklySlot] = Field(default_factory=list, description="Active weekly rules")


class WeeklyRuleCreate(BaseModel):
    tutor_id: Optional[StrictStr] = Field(None, alias="tutorId", description="Tutor ID")
    email: Optional[StrictStr] = Field(None, description="Tutor email, used when no ID is given")
    day_of_week: Optional[StrictInt] = Field(None, alias="dayOfWeek", description="0=Sunday .. 6=Saturday")
    start: Optional[StrictStr] = Field(None, description="Start time (HH:MM)")
    end: Optional[StrictStr] = Field(None, description="End time (HH:MM)")
    timezone: Optional[StrictStr] = Field(None, description="IANA timezone, defaults to UTC")

    class Config:
        populate_by_name = True


class WeeklyRuleResponse(WeeklySlot):
    tutor_id: str = Field(..., alias="tutorId", description="Tutor ID")
    timezone: str = Field(..., description="IANA timezone of the rule")


class WeeklyRuleCreated(BaseModel):
    success: bool = True
    slot: WeeklyRuleResponse


class WeeklyRuleDeleted(BaseModel):
    success: bool = True


class AvailabilityExceptionCreate(BaseModel):
    tutor_id: Optional[str] = Field(None, alias="tutorId", description="Tutor ID")
    user_email: Optional[str] = Field(None, alias="userEmail", description="Tutor email, used when no ID is given")
    date: Optional[StrictStr] = Field(None, description="Date in YYYY-MM-DD format")
    start: Optional[StrictStr] = Field(None, description="Start time (HH:MM)")
    end: Optional[StrictStr] = Field(None, description="End time (HH:MM)")
    is_active: Optional[StrictBool] = Field(None, alias="isActive", description="True adds availability, false removes it")
    timezone: Optional[str] = Field(None, description="IANA timezone, defaults to the weekly timezone")

    class Config:
        populate_by_name = True


class AvailabilityExceptionResponse(BaseModel):
    id: str = Field(..., description="Exception ID")
    tutor_id: str = Field(..., alias="tutorId", description="Tutor ID")
    date: str = Field(..., description="Date in YYYY-MM-DD format")
    start: str = Field(..., description="Start time (HH:MM)")
    end: str = Field(..., description="End time (HH:MM)")
    is_active: bool = Field(..., alias="isActive", description="True adds availability, false removes it")
    timezone: Optional[str] = Field(None, description="IANA timezone, if set")

    class Config:
        populate_by_name = True


class AvailabilityExceptionCreated(BaseModel):
    success: bool = True
    exception: AvailabilityExceptionResponse

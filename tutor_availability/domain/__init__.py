"""
Plain records the availability resolver works on.

Rows are shaped into these by the rule store accessor, so the resolver never
touches the ORM. Time and date fields are kept as read from storage and only
parsed during resolution, where an unusable value skips the record instead of
failing the whole window.
"""

from dataclasses import dataclass, field
from datetime import time
from typing import Any, Dict, List, Optional, Union


@dataclass(frozen=True)
class WeeklyAvailabilityRule:
    """Recurring weekly availability. day_of_week: 0=Sunday .. 6=Saturday."""
    tutor_id: str
    day_of_week: int
    start_time: Any
    end_time: Any
    timezone: Optional[str] = "UTC"
    is_active: bool = True
    id: Optional[str] = None


@dataclass(frozen=True)
class AvailabilityException:
    """
    Date-specific change to weekly availability.

    is_active=True adds the range on that date, is_active=False removes it.
    A missing timezone means the tutor's weekly timezone applies.
    """
    tutor_id: str
    date: Any
    start_time: Any
    end_time: Any
    is_active: bool
    timezone: Optional[str] = None
    id: Optional[str] = None


@dataclass(frozen=True)
class AdditiveRange:
    start: time
    end: time


@dataclass(frozen=True)
class SubtractiveRange:
    start: time
    end: time


SlotChange = Union[AdditiveRange, SubtractiveRange]


@dataclass
class ResolvedDaySlots:
    """Bookable slot starts (HH:MM, ascending) for one tutor-local date."""
    date: str
    slots: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "slots": list(self.slots)}


@dataclass
class ResolutionWindow:
    timezone: str
    days: List[ResolvedDaySlots] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timezone": self.timezone,
            "days": [day.to_dict() for day in self.days]
        }

from tutor_availability.core.database import Base
from .profile import Profile, ProfileRole
from .availability import TutorAvailability, TutorAvailabilityException

__all__ = [
    "Base",

    # Profiles
    "Profile",
    "ProfileRole",

    # Availability
    "TutorAvailability",
    "TutorAvailabilityException",
]

from sqlalchemy import Column, String, Enum
from sqlalchemy.orm import relationship
import enum

from tutor_availability.core.database import Base


class ProfileRole(str, enum.Enum):
    STUDENT = "student"
    TUTOR = "tutor"
    ADMIN = "admin"


class Profile(Base):
    __tablename__ = "profiles"

    # Core profile fields
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    role = Column(Enum(ProfileRole), default=ProfileRole.TUTOR, nullable=False)

    # Relationships
    weekly_availability = relationship("TutorAvailability", back_populates="tutor", cascade="all, delete-orphan")
    availability_exceptions = relationship("TutorAvailabilityException", back_populates="tutor", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Profile(id={self.id}, email={self.email}, role={self.role})>"

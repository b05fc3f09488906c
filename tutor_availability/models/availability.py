from sqlalchemy import Column, String, Time, Date, Boolean, ForeignKey, Integer, CheckConstraint, Index
from sqlalchemy.orm import relationship

from tutor_availability.core.database import Base


class TutorAvailability(Base):
    """
    Recurring weekly availability for a tutor.
    day_of_week: 0 (Sunday) .. 6 (Saturday)
    start_time, end_time: tutor-local times of day in `timezone`
    """
    __tablename__ = "tutor_availability"
    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6"),
    )

    # Foreign key to tutor
    tutor_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)

    # Time information
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    timezone = Column(String, default="UTC", nullable=False)  # IANA name

    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    tutor = relationship("Profile", back_populates="weekly_availability")

    def __repr__(self):
        return f"<TutorAvailability(tutor_id={self.tutor_id}, day_of_week={self.day_of_week}, start_time={self.start_time}, end_time={self.end_time})>"


class TutorAvailabilityException(Base):
    """
    Date-specific change to a tutor's weekly availability.
    is_active=True opens the range on that date, is_active=False removes it.
    """
    __tablename__ = "tutor_availability_exceptions"

    # Foreign key to tutor
    tutor_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)

    # Time information
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    timezone = Column(String, nullable=True)  # falls back to the weekly timezone

    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    tutor = relationship("Profile", back_populates="availability_exceptions")

    def __repr__(self):
        return f"<TutorAvailabilityException(tutor_id={self.tutor_id}, date={self.date}, is_active={self.is_active})>"


Index("idx_tutor_availability_tutor_day", TutorAvailability.tutor_id, TutorAvailability.day_of_week)

"""
Class schedule model for Training Hub.
"""

from datetime import datetime, date, time
from typing import Optional
from sqlalchemy import Integer, String, DateTime, Date, Time, Text, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

from app.core.database import Base


class ClassSchedule(Base):
    """
    A scheduled live or virtual class, optionally tied to a course.
    """
    __tablename__ = "class_schedules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    class_title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    course_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("courses.id", ondelete="SET NULL"), nullable=True
    )
    mentor_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    class_date: Mapped[date] = mapped_column(Date, nullable=False)
    class_time: Mapped[time] = mapped_column(Time, nullable=False)
    duration: Mapped[str] = mapped_column(String(50), nullable=False)
    class_type: Mapped[str] = mapped_column(String(50), nullable=False)
    max_trainees: Mapped[int] = mapped_column(Integer, nullable=False)
    meeting_link: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    course = relationship("Course")

    __table_args__ = (
        CheckConstraint("max_trainees > 0", name="check_max_trainees_positive"),
        Index("idx_class_date_time", "class_date", "class_time"),
    )

    def __repr__(self) -> str:
        return f"<ClassSchedule(id={self.id}, class_title='{self.class_title}', class_date={self.class_date})>"

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.class_date, self.class_time)

    def is_upcoming(self, now: Optional[datetime] = None) -> bool:
        return self.starts_at > (now or datetime.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "class_title": self.class_title,
            "description": self.description,
            "course_id": self.course_id,
            "mentor_name": self.mentor_name,
            "class_date": self.class_date.isoformat(),
            "class_time": self.class_time.strftime("%H:%M:%S"),
            "duration": self.duration,
            "class_type": self.class_type,
            "max_trainees": self.max_trainees,
            "meeting_link": self.meeting_link,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

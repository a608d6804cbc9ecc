"""
Class schedule schemas.
"""

from datetime import date, time
from typing import Optional
from pydantic import BaseModel, Field


class ClassScheduleCreate(BaseModel):
    class_title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    mentor_name: str = Field(..., min_length=1)
    class_date: date
    class_time: time
    course_id: Optional[int] = None
    duration: Optional[str] = None
    class_type: Optional[str] = None
    max_trainees: Optional[int] = Field(None, gt=0)
    meeting_link: Optional[str] = None


class ClassScheduleUpdate(BaseModel):
    class_title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    mentor_name: Optional[str] = Field(None, min_length=1)
    class_date: Optional[date] = None
    class_time: Optional[time] = None
    course_id: Optional[int] = None
    duration: Optional[str] = None
    class_type: Optional[str] = None
    max_trainees: Optional[int] = Field(None, gt=0)
    meeting_link: Optional[str] = None

"""
Request schemas for courses, modules and subtopics.

Field names are camelCase on the wire and snake_case in Python. Required
fields of the aggregate payload are deliberately optional here: the
aggregate writer reports missing values itself, naming the 1-based
position of the offending module or subtopic.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Course payloads

class CourseFields(CamelModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    course_name: Optional[str] = None
    description: Optional[str] = None
    department: Optional[str] = None
    mentor_name: Optional[str] = None
    course_duration: Optional[str] = None
    course_template: Optional[str] = None


class CourseCreate(CourseFields):
    pass


class CourseUpdate(CourseFields):
    pass


class SubtopicDraft(CamelModel):
    subtopic_name: Optional[str] = None
    description: Optional[str] = None
    duration_days: Optional[int] = None
    training_by: Optional[str] = None


class ModuleDraft(CamelModel):
    module_name: Optional[str] = None
    description: Optional[str] = None
    duration_days: Optional[int] = None
    subtopics: Optional[List[SubtopicDraft]] = None


class CourseAggregateCreate(CourseFields):
    modules: Optional[List[ModuleDraft]] = None


# Module payloads

class ModuleCreate(CamelModel):
    course_id: int
    module_name: str = Field(..., min_length=1)
    description: Optional[str] = None
    duration_days: int = Field(0, ge=0)
    module_order: Optional[int] = Field(None, ge=0)


class ModuleUpdate(CamelModel):
    module_name: str = Field(..., min_length=1)
    description: Optional[str] = None
    duration_days: Optional[int] = Field(None, ge=0)
    module_order: Optional[int] = Field(None, ge=0)


class ModuleOrderItem(CamelModel):
    id: int
    module_order: int = Field(..., ge=0)


class ModuleReorder(CamelModel):
    module_orders: List[ModuleOrderItem]


# Subtopic payloads

class SubtopicCreate(CamelModel):
    module_id: int
    subtopic_name: str = Field(..., min_length=1)
    description: Optional[str] = None
    duration_days: int = Field(0, ge=0)
    training_by: Optional[str] = None
    subtopic_order: Optional[int] = Field(None, ge=0)


class SubtopicBulkItem(CamelModel):
    subtopic_name: str = Field(..., min_length=1)
    description: Optional[str] = None
    duration_days: int = Field(0, ge=0)
    training_by: Optional[str] = None
    subtopic_order: Optional[int] = Field(None, ge=0)


class SubtopicBulkCreate(CamelModel):
    subtopics: List[SubtopicBulkItem] = Field(..., min_length=1)


class SubtopicUpdate(CamelModel):
    subtopic_name: str = Field(..., min_length=1)
    description: Optional[str] = None
    duration_days: Optional[int] = Field(None, ge=0)
    training_by: Optional[str] = None
    subtopic_order: Optional[int] = Field(None, ge=0)


class SubtopicOrderItem(CamelModel):
    id: int
    subtopic_order: int = Field(..., ge=0)


class SubtopicReorder(CamelModel):
    subtopic_orders: List[SubtopicOrderItem]

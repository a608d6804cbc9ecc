"""
Rebuild nested course trees from flattened join rows.

The hierarchy query left-joins courses -> modules -> subtopics, so a parent's
columns repeat on every row of its children and a childless parent shows up
once with NULL child columns. ``build_course_tree`` collapses those rows back
into ``course -> modules -> subtopics`` in a single pass. It depends only on
row keys, never on a database session, so it can be fed literal fixtures.

Expected row keys (the aliases used by the hierarchy query):

    course:   id, course_name, description, department, mentor_name,
              course_template, course_duration, created_at, updated_at
    module:   module_id, module_name, module_description, module_duration_days,
              module_order, module_created_at, module_updated_at
    subtopic: subtopic_id, subtopic_name, subtopic_description,
              subtopic_duration_days, training_by, subtopic_order,
              subtopic_created_at, subtopic_updated_at
"""

from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple


def _serialize(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _nulls_first(value: Any) -> Tuple[int, Any]:
    return (0, 0) if value is None else (1, value)


def hierarchy_sort_key(row: Mapping[str, Any]) -> tuple:
    """
    Sort key matching the hierarchy query's ORDER BY: course id, module
    position, module id, subtopic position, subtopic id.
    """
    return (
        row["id"],
        _nulls_first(row.get("module_order")),
        _nulls_first(row.get("module_id")),
        _nulls_first(row.get("subtopic_order")),
        _nulls_first(row.get("subtopic_id")),
    )


def order_hierarchy_rows(rows: Iterable[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    """Return rows in the order ``build_course_tree`` expects."""
    return sorted(rows, key=hierarchy_sort_key)


def course_node(row: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "courseName": row["course_name"],
        "description": row["description"],
        "department": row["department"],
        "mentorName": row["mentor_name"],
        "courseTemplate": row["course_template"],
        "courseDuration": row["course_duration"],
        "createdAt": _serialize(row["created_at"]),
        "updatedAt": _serialize(row["updated_at"]),
        "modules": [],
    }


def module_node(row: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["module_id"],
        "moduleName": row["module_name"],
        "description": row["module_description"],
        "durationDays": row["module_duration_days"],
        "moduleOrder": row["module_order"],
        "createdAt": _serialize(row["module_created_at"]),
        "updatedAt": _serialize(row["module_updated_at"]),
        "subtopics": [],
    }


def subtopic_node(row: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["subtopic_id"],
        "subtopicName": row["subtopic_name"],
        "description": row["subtopic_description"],
        "durationDays": row["subtopic_duration_days"],
        "trainingBy": row["training_by"],
        "subtopicOrder": row["subtopic_order"],
        "createdAt": _serialize(row["subtopic_created_at"]),
        "updatedAt": _serialize(row["subtopic_updated_at"]),
    }


def build_course_tree(rows: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """
    Collapse ordered join rows into a list of course trees.

    Rows must already be grouped by course and then by module (the query's
    ORDER BY, or ``order_hierarchy_rows``); output order follows row order.
    """
    courses: List[Dict[str, Any]] = []
    current_course: Optional[Dict[str, Any]] = None
    current_module: Optional[Dict[str, Any]] = None

    for row in rows:
        if current_course is None or current_course["id"] != row["id"]:
            current_course = course_node(row)
            courses.append(current_course)
            current_module = None

        module_id = row.get("module_id")
        if module_id is not None and (current_module is None or current_module["id"] != module_id):
            current_module = module_node(row)
            current_course["modules"].append(current_module)

        if row.get("subtopic_id") is not None and current_module is not None:
            current_module["subtopics"].append(subtopic_node(row))

    return courses

"""
Aggregate writer and reader: atomicity, ordering, defaults and not-found.
"""
import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from app.core.exceptions import NotFound, TransactionFailed, ValidationFailed
from app.models import Course, CourseModule, CourseSubtopic
from app.schemas.course import CourseAggregateCreate
from app.services.course_service import create_course_aggregate, get_course_hierarchy
from conftest import API


def course_count(db_session, name):
    return db_session.query(Course).filter(Course.course_name == name).count()


def test_aggregate_round_trip_keeps_order(client, mentor_headers, course_payload):
    response = client.post(f"{API}/courses/complete", json=course_payload, headers=mentor_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    tree = body["data"]
    assert [m["moduleName"] for m in tree["modules"]] == ["A", "B", "C"]
    assert [m["moduleOrder"] for m in tree["modules"]] == [1, 2, 3]
    subtopics = tree["modules"][1]["subtopics"]
    assert [s["subtopicName"] for s in subtopics] == ["x", "y"]
    assert [s["subtopicOrder"] for s in subtopics] == [1, 2]

    read_back = client.get(f"{API}/courses/{tree['id']}/hierarchy", headers=mentor_headers).json()["data"]
    assert read_back == tree


def test_training_by_defaults_to_course_mentor(client, mentor_headers, course_payload):
    tree = client.post(f"{API}/courses/complete", json=course_payload, headers=mentor_headers).json()["data"]

    x, y = tree["modules"][1]["subtopics"]
    assert x["trainingBy"] == "Guest"
    assert y["trainingBy"] == "Mario Rossi"


def test_module_without_subtopics_reads_back_with_empty_list(client, mentor_headers, course_payload):
    course_payload["modules"] = [{"moduleName": "Solo", "description": "Only one", "durationDays": 1}]

    tree = client.post(f"{API}/courses/complete", json=course_payload, headers=mentor_headers).json()["data"]

    assert len(tree["modules"]) == 1
    assert tree["modules"][0]["subtopics"] == []


def test_invalid_module_rolls_back_everything(client, mentor_headers, course_payload, db_session):
    del course_payload["modules"][1]["description"]

    response = client.post(f"{API}/courses/complete", json=course_payload, headers=mentor_headers)

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "message": "Module 2 is missing required fields (moduleName, description, durationDays)",
    }
    assert course_count(db_session, course_payload["courseName"]) == 0
    assert db_session.query(CourseModule).count() == 0


def test_invalid_subtopic_names_position_and_module(client, mentor_headers, course_payload, db_session):
    course_payload["modules"][1]["subtopics"][1]["durationDays"] = 0

    response = client.post(f"{API}/courses/complete", json=course_payload, headers=mentor_headers)

    assert response.status_code == 400
    assert response.json()["message"] == (
        'Subtopic 2 in module "B" is missing required fields (subtopicName, description, durationDays)'
    )
    assert course_count(db_session, course_payload["courseName"]) == 0
    assert db_session.query(CourseSubtopic).count() == 0


def test_missing_course_field_is_rejected(client, mentor_headers, course_payload):
    course_payload["mentorName"] = "   "

    response = client.post(f"{API}/courses/complete", json=course_payload, headers=mentor_headers)

    assert response.status_code == 400
    assert response.json()["message"] == (
        "Course name, description, department, mentor name, and course duration are required"
    )


def test_empty_module_list_is_rejected(db_session, course_payload):
    course_payload["modules"] = []

    with pytest.raises(ValidationFailed, match="At least one module is required"):
        create_course_aggregate(db_session, CourseAggregateCreate.model_validate(course_payload))


def test_store_failure_on_second_module_leaves_nothing(db_session, course_payload):
    inserts = []

    def fail_second_module(mapper, connection, target):
        inserts.append(target.module_name)
        if len(inserts) == 2:
            raise OperationalError("INSERT INTO course_modules", {}, Exception("simulated store failure"))

    event.listen(CourseModule, "before_insert", fail_second_module)
    try:
        with pytest.raises(TransactionFailed) as excinfo:
            create_course_aggregate(db_session, CourseAggregateCreate.model_validate(course_payload))
    finally:
        event.remove(CourseModule, "before_insert", fail_second_module)

    assert excinfo.value.message == "simulated store failure"
    assert inserts == ["A", "B"]
    assert course_count(db_session, course_payload["courseName"]) == 0
    assert db_session.query(CourseModule).count() == 0


def test_store_failure_over_http_is_a_500(client, mentor_headers, course_payload, db_session):
    def fail(mapper, connection, target):
        raise OperationalError("INSERT INTO course_subtopics", {}, Exception("disk I/O error"))

    event.listen(CourseSubtopic, "before_insert", fail)
    try:
        response = client.post(f"{API}/courses/complete", json=course_payload, headers=mentor_headers)
    finally:
        event.remove(CourseSubtopic, "before_insert", fail)

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "disk I/O error"}
    assert course_count(db_session, course_payload["courseName"]) == 0


def test_missing_course_is_not_found_but_empty_course_is_not(client, mentor_headers, db_session):
    assert client.get(f"{API}/courses/999/hierarchy", headers=mentor_headers).status_code == 404
    with pytest.raises(NotFound):
        get_course_hierarchy(db_session, 999)

    created = client.post(f"{API}/courses/", headers=mentor_headers, json={
        "courseName": "Empty",
        "description": "No modules yet",
        "department": "Ops",
        "mentorName": "Mario",
        "courseDuration": "1 week",
    })
    course_id = created.json()["data"]["id"]

    response = client.get(f"{API}/courses/{course_id}/hierarchy", headers=mentor_headers)
    assert response.status_code == 200
    assert response.json()["data"]["modules"] == []


def test_reading_twice_gives_identical_output(client, mentor_headers, course_payload):
    client.post(f"{API}/courses/complete", json=course_payload, headers=mentor_headers)

    first = client.get(f"{API}/courses/hierarchy", headers=mentor_headers).content
    second = client.get(f"{API}/courses/hierarchy", headers=mentor_headers).content

    assert first == second


def test_trainee_cannot_write_an_aggregate(client, trainee_headers, course_payload, db_session):
    response = client.post(f"{API}/courses/complete", json=course_payload, headers=trainee_headers)

    assert response.status_code == 403
    assert course_count(db_session, course_payload["courseName"]) == 0


def test_numeric_course_duration_is_stored_as_text(client, mentor_headers, course_payload):
    course_payload["courseDuration"] = 6

    response = client.post(f"{API}/courses/complete", json=course_payload, headers=mentor_headers)

    assert response.status_code == 201
    tree = response.json()["data"]
    assert tree["courseDuration"] == "6"

    fields = {key: value for key, value in course_payload.items() if key != "modules"}
    fields["courseDuration"] = 8
    updated = client.put(f"{API}/courses/{tree['id']}", json=fields, headers=mentor_headers)
    assert updated.status_code == 200
    assert updated.json()["data"]["courseDuration"] == "8"

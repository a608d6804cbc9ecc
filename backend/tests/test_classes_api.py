"""
Class schedule endpoints.
"""
from datetime import date, time, timedelta

from app.models import ClassSchedule
from conftest import API


def in_days(days: int) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


def schedule(**overrides):
    data = {
        "class_title": "Kickoff",
        "description": "Program introduction",
        "mentor_name": "Mario Rossi",
        "class_date": in_days(7),
        "class_time": "10:00:00",
    }
    data.update(overrides)
    return data


def test_create_applies_defaults(client, admin_headers):
    response = client.post(f"{API}/classes/", headers=admin_headers, json=schedule())

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["duration"] == "2 hours"
    assert data["class_type"] == "Virtual"
    assert data["max_trainees"] == 25
    assert data["class_time"] == "10:00:00"
    assert data["course_id"] is None


def test_past_class_is_rejected(client, admin_headers):
    response = client.post(f"{API}/classes/", headers=admin_headers, json=schedule(class_date=in_days(-1)))

    assert response.status_code == 400
    assert response.json()["message"] == "Class date and time must be in the future"


def test_bad_date_format_is_rejected(client, admin_headers):
    response = client.post(f"{API}/classes/", headers=admin_headers, json=schedule(class_date="next tuesday"))

    assert response.status_code == 400


def test_listing_order_and_paging(client, admin_headers, trainee_headers, db_session):
    client.post(f"{API}/classes/", headers=admin_headers, json=schedule(class_title="later", class_date=in_days(9)))
    client.post(f"{API}/classes/", headers=admin_headers, json=schedule(class_title="soon-late", class_date=in_days(2), class_time="15:00:00"))
    client.post(f"{API}/classes/", headers=admin_headers, json=schedule(class_title="soon-early", class_date=in_days(2), class_time="09:00:00"))

    listed = client.get(f"{API}/classes/", headers=trainee_headers).json()["data"]
    assert [c["class_title"] for c in listed["classes"]] == ["later", "soon-early", "soon-late"]
    assert listed["pagination"]["totalItems"] == 3

    page = client.get(f"{API}/classes/", headers=trainee_headers, params={"page": 2, "limit": 2}).json()["data"]
    assert [c["class_title"] for c in page["classes"]] == ["soon-late"]
    assert page["pagination"]["hasPrevPage"] is True
    assert page["pagination"]["hasNextPage"] is False

    upcoming = client.get(f"{API}/classes/upcoming", headers=trainee_headers).json()["data"]
    assert [c["class_title"] for c in upcoming] == ["soon-early", "soon-late", "later"]


def test_upcoming_excludes_past_classes(client, admin_headers, trainee_headers, db_session):
    client.post(f"{API}/classes/", headers=admin_headers, json=schedule(class_title="future"))
    past = ClassSchedule(
        class_title="past",
        description="Already happened",
        mentor_name="Mario Rossi",
        class_date=date.today() - timedelta(days=3),
        class_time=time(9, 30),
        duration="1 hour",
        class_type="Virtual",
        max_trainees=10,
    )
    db_session.add(past)
    db_session.commit()

    upcoming = client.get(f"{API}/classes/", headers=trainee_headers, params={"upcoming": "true"}).json()["data"]
    assert [c["class_title"] for c in upcoming["classes"]] == ["future"]


def test_filters_by_course_and_mentor(client, admin_headers, trainee_headers, course_payload):
    course = client.post(f"{API}/courses/complete", json=course_payload, headers=admin_headers).json()["data"]
    client.post(f"{API}/classes/", headers=admin_headers, json=schedule(class_title="linked", course_id=course["id"]))
    client.post(f"{API}/classes/", headers=admin_headers, json=schedule(class_title="other", mentor_name="Someone Else"))

    by_course = client.get(f"{API}/classes/course/{course['id']}", headers=trainee_headers).json()["data"]
    assert [c["class_title"] for c in by_course] == ["linked"]

    by_mentor = client.get(f"{API}/classes/mentor/Someone Else", headers=trainee_headers).json()["data"]
    assert [c["class_title"] for c in by_mentor] == ["other"]


def test_update_and_delete(client, admin_headers):
    class_id = client.post(f"{API}/classes/", headers=admin_headers, json=schedule()).json()["data"]["id"]

    response = client.put(f"{API}/classes/{class_id}", headers=admin_headers, json={"max_trainees": 40, "class_type": "Onsite"})
    assert response.status_code == 200
    assert response.json()["data"]["max_trainees"] == 40
    assert response.json()["data"]["class_type"] == "Onsite"
    assert response.json()["data"]["class_title"] == "Kickoff"

    assert client.delete(f"{API}/classes/{class_id}", headers=admin_headers).status_code == 200
    assert client.get(f"{API}/classes/{class_id}", headers=admin_headers).status_code == 404


def test_deleting_course_keeps_its_classes(client, admin_headers, course_payload):
    course = client.post(f"{API}/courses/complete", json=course_payload, headers=admin_headers).json()["data"]
    class_id = client.post(
        f"{API}/classes/", headers=admin_headers, json=schedule(course_id=course["id"])
    ).json()["data"]["id"]

    client.delete(f"{API}/courses/{course['id']}", headers=admin_headers)

    response = client.get(f"{API}/classes/{class_id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["course_id"] is None

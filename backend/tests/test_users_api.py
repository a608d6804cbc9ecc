"""
User administration endpoints.
"""
from conftest import API, DEFAULT_PASSWORD


def new_user(**overrides):
    data = {
        "username": "bob",
        "email": "bob@example.com",
        "password": "B0bsSecret",
        "role": "trainee",
        "first_name": "Bob",
        "last_name": "Builder",
        "department": "Operations",
    }
    data.update(overrides)
    return data


def test_admin_creates_user(client, admin_headers):
    response = client.post(f"{API}/users/", headers=admin_headers, json=new_user())

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["username"] == "bob"
    assert data["status"] == "active"
    assert "hashed_password" not in data

    login = client.post(f"{API}/auth/login", json={"username": "bob", "password": "B0bsSecret"})
    assert login.status_code == 200


def test_trainee_assigned_to_mentor_and_course(client, admin_headers, mentor_user, course_payload):
    course = client.post(f"{API}/courses/complete", json=course_payload, headers=admin_headers).json()["data"]

    response = client.post(f"{API}/users/", headers=admin_headers, json=new_user(
        enrolled_course_id=course["id"],
        assigned_mentor_id=mentor_user.id,
    ))

    data = response.json()["data"]
    assert data["enrolled_course_name"] == "Backend Foundations"
    assert data["assigned_mentor_name"] == "Mario Tester"


def test_assigned_mentor_must_be_a_mentor(client, admin_headers, trainee_user):
    response = client.post(f"{API}/users/", headers=admin_headers, json=new_user(assigned_mentor_id=trainee_user.id))

    assert response.status_code == 400


def test_list_filters_and_search(client, admin_headers, admin_user, mentor_user, trainee_user):
    mentors = client.get(f"{API}/users/", headers=admin_headers, params={"role": "mentor"}).json()["data"]
    assert [u["username"] for u in mentors["users"]] == ["mario"]
    assert mentors["pagination"]["totalItems"] == 1

    found = client.get(f"{API}/users/", headers=admin_headers, params={"search": "tin"}).json()["data"]
    assert [u["username"] for u in found["users"]] == ["tina"]

    everyone = client.get(f"{API}/users/", headers=admin_headers).json()["data"]["users"]
    assert [u["username"] for u in everyone] == ["tina", "mario", "alice"]


def test_update_and_change_password(client, admin_headers, trainee_user):
    response = client.put(f"{API}/users/{trainee_user.id}", headers=admin_headers, json={
        "department": "Design",
        "role": "mentor",
    })
    assert response.status_code == 200
    assert response.json()["data"]["department"] == "Design"
    assert response.json()["data"]["role"] == "mentor"

    response = client.put(f"{API}/users/{trainee_user.id}/password", headers=admin_headers, json={
        "new_password": "Brand-New-1"
    })
    assert response.status_code == 200

    old = client.post(f"{API}/auth/login", json={"username": "tina", "password": DEFAULT_PASSWORD})
    new = client.post(f"{API}/auth/login", json={"username": "tina", "password": "Brand-New-1"})
    assert old.status_code == 401
    assert new.status_code == 200


def test_statistics_and_departments(client, admin_headers, make_user, admin_user):
    make_user("dev1", department="Engineering")
    make_user("dev2", department="Engineering", status="inactive")
    make_user("ops1", department="Operations")

    stats = client.get(f"{API}/users/statistics", headers=admin_headers).json()["data"]
    assert stats["total"] == 4
    assert stats["active"] == 3
    assert stats["inactive"] == 1
    assert stats["by_role"] == {"admin": 1, "mentor": 0, "trainee": 3}

    departments = client.get(f"{API}/users/departments", headers=admin_headers).json()["data"]
    assert departments == ["Engineering", "Operations"]


def test_bulk_status(client, admin_headers, make_user):
    ids = [make_user(name).id for name in ("u1", "u2")]

    response = client.put(f"{API}/users/bulk-status", headers=admin_headers, json={
        "user_ids": ids,
        "status": "inactive",
    })

    assert response.json()["data"] == {"updated": 2}
    inactive = client.get(f"{API}/users/", headers=admin_headers, params={"status": "inactive"}).json()["data"]
    assert sorted(u["id"] for u in inactive["users"]) == sorted(ids)


def test_export_csv(client, admin_headers, trainee_user):
    response = client.get(f"{API}/users/export", headers=admin_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "users.csv" in response.headers["content-disposition"]
    lines = response.text.strip().splitlines()
    assert lines[0].startswith("id,username,email,role")
    assert any("tina@example.com" in line for line in lines[1:])


def test_delete_user(client, admin_headers, admin_user, trainee_user):
    assert client.delete(f"{API}/users/{admin_user.id}", headers=admin_headers).status_code == 400

    assert client.delete(f"{API}/users/{trainee_user.id}", headers=admin_headers).status_code == 200
    assert client.get(f"{API}/users/{trainee_user.id}", headers=admin_headers).status_code == 404


def test_duplicate_email_is_rejected(client, admin_headers, trainee_user):
    response = client.post(f"{API}/users/", headers=admin_headers, json=new_user(email=trainee_user.email))

    assert response.status_code == 400
    assert response.json()["message"] == "Email already registered"

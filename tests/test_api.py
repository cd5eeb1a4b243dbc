"""
HTTP surface: auth, role guards and the end-to-end admissions flow.
"""

import json

from admissions.core.auth import create_access_token
from admissions.schemas.schemas import UserRole
from tests.factories import auth_header, make_college, make_profile, make_student


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["mongodb"] == "connected"


def test_student_register_and_login(client):
    payload = {
        "first_name": "Asha",
        "last_name": "Rao",
        "email": "Asha@Example.com",
        "phone": "9876543210",
        "password": "secret123",
        "date_of_birth": "2005-04-12",
        "education": "12th Grade"
    }
    assert client.post("/api/auth/student/register", json=payload).status_code == 201
    assert client.post("/api/auth/student/register", json=payload).status_code == 400

    bad = client.post("/api/auth/student/login", json={"email": "asha@example.com", "password": "nope"})
    assert bad.status_code == 401

    login = client.post("/api/auth/student/login", json={"email": "asha@example.com", "password": "secret123"})
    assert login.status_code == 200
    body = login.json()
    assert body["role"] == "student"

    verify = client.get("/api/users/verify", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert verify.json()["email"] == "asha@example.com"


def test_student_cannot_log_in_as_admin(client, student_id):
    client.post("/api/auth/admin/register", json={"name": "Root", "email": "root@example.com", "password": "secret123"})
    response = client.post("/api/auth/student/login", json={"email": "root@example.com", "password": "secret123"})
    assert response.status_code == 401


def test_missing_token_is_unauthorized(client):
    response = client.get("/api/shortlists/my-shortlists")
    assert response.status_code == 401
    assert response.json()["detail"] == "Access denied"


def test_unknown_role_token_is_unauthorized(client, college_id):
    token = create_access_token({"sub": college_id, "role": "college-admin", "email": "x@example.com"})
    response = client.get("/api/college-admins/profile", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_tampered_token_is_unauthorized(client):
    response = client.get("/api/users/verify", headers={"Authorization": "Bearer not.a.jwt"})
    assert response.status_code == 401


def test_wrong_role_is_forbidden(client, student_id):
    headers = auth_header(student_id, UserRole.student)
    assert client.get("/api/shortlists/stats/aggregate", headers=headers).status_code == 403
    assert client.get("/api/shortlists/college", headers=headers).status_code == 403


def test_shortlist_endpoints(client, student_id, profile_id):
    headers = auth_header(student_id, UserRole.student, "asha@example.com")
    body = {"college_id": profile_id, "notes": "visit", "interested_courses": [{"parent": "B.Tech", "name": "CSE"}]}

    created = client.post("/api/shortlists", json=body, headers=headers)
    assert created.status_code == 201
    assert created.json()["aggregated_courses"] == ["CSE"]
    assert "created" not in created.json()

    updated = client.post("/api/shortlists", json={**body, "interested_courses": [{"name": "ECE"}]}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["message"] == "Shortlist updated"
    assert updated.json()["data"]["notes"] == "visit"

    mine = client.get("/api/shortlists/my-shortlists", headers=headers).json()["shortlists"]
    assert mine[0]["college"]["name"] == "NIT Example"

    off = client.post("/api/shortlists/toggle", json={"college_id": profile_id}, headers=headers)
    assert off.status_code == 200
    assert off.json()["shortlisted"] is False

    on = client.post("/api/shortlists/toggle", json={"college_id": profile_id}, headers=headers)
    assert on.status_code == 201
    assert on.json()["shortlisted"] is True

    assert client.delete(f"/api/shortlists/{profile_id}", headers=headers).status_code == 200
    assert client.delete(f"/api/shortlists/{profile_id}", headers=headers).status_code == 404


def test_shortlist_for_unknown_college(client, student_id, college_id):
    headers = auth_header(student_id, UserRole.student)
    response = client.post("/api/shortlists", json={"college_id": college_id}, headers=headers)
    assert response.status_code == 404
    response = client.post("/api/shortlists", json={"college_id": "abc"}, headers=headers)
    assert response.status_code == 400


def test_admin_needs_student_query(client, admin_id, student_id, profile_id):
    headers = auth_header(admin_id, UserRole.admin)
    assert client.get("/api/shortlists", headers=headers).status_code == 400

    client.post(
        "/api/shortlists/toggle",
        json={"college_id": profile_id},
        headers=auth_header(student_id, UserRole.student)
    )
    listed = client.get(f"/api/shortlists?student={student_id}", headers=headers)
    assert listed.json()["data"][0]["college"]["_id"] == profile_id


def test_college_sees_only_its_own_students(client, student_id, college_id, profile_id):
    client.post(
        "/api/shortlists/toggle",
        json={"college_id": profile_id, "interested_courses": [{"name": "CSE"}]},
        headers=auth_header(student_id, UserRole.student)
    )
    headers = auth_header(college_id, UserRole.college)

    own = client.get("/api/shortlists/college", headers=headers)
    assert own.status_code == 200
    assert own.json()["count"] == 1
    assert own.json()["students"][0]["interested_courses"][0]["name"] == "CSE"
    assert own.json()["aggregated_courses"] == ["CSE"]

    assert client.get(f"/api/shortlists/college/{profile_id}", headers=headers).status_code == 200

    other = make_profile(make_college(email="other@example.com"))
    assert client.get(f"/api/shortlists/college/{other}", headers=headers).status_code == 403


def test_college_without_profile_gets_empty_list(client):
    bare = make_college(email="bare@example.com")
    response = client.get("/api/shortlists/college", headers=auth_header(bare, UserRole.college))
    assert response.json() == {"college": None, "count": 0, "students": [], "aggregated_courses": []}


def test_stats_for_admin(client, admin_id, student_id, profile_id):
    client.post(
        "/api/shortlists/toggle",
        json={"college_id": profile_id},
        headers=auth_header(student_id, UserRole.student)
    )
    stats = client.get("/api/shortlists/stats/aggregate", headers=auth_header(admin_id, UserRole.admin))
    assert stats.json()["data"][0]["count"] == 1
    assert stats.json()["data"][0]["name"] == "NIT Example"
    assert stats.json()["data"][0]["college_admin_id"] == profile_id


def test_finalize_and_forward_flow(client, admin_id, student_id, college_id, profile_id):
    admin = auth_header(admin_id, UserRole.admin)
    college = auth_header(college_id, UserRole.college)
    forward = {"student_id": student_id, "college_id": profile_id, "courses": ["CSE"], "notes": "top ranker"}

    client.post(
        "/api/shortlists/toggle",
        json={"college_id": profile_id},
        headers=auth_header(student_id, UserRole.student)
    )
    assert client.post("/api/users/forward", json=forward, headers=admin).status_code == 400

    bad_field = client.put(f"/api/users/{student_id}/finalize", json={"field": "campus", "value": "x"}, headers=admin)
    assert bad_field.status_code == 422

    for field, value in [("college", "NIT Example"), ("course", "CSE")]:
        response = client.put(f"/api/users/{student_id}/finalize", json={"field": field, "value": value}, headers=admin)
        assert response.status_code == 200

    assert client.get("/api/college-admins/forwarded-students", headers=college).json() == {"students": []}

    response = client.post("/api/users/forward", json=forward, headers=admin)
    assert response.status_code == 200
    assert response.json()["forwarded"]["shortlist"]["is_admin_forwarded"] is True

    students = client.get("/api/college-admins/forwarded-students", headers=college).json()["students"]
    assert [s["name"] for s in students] == ["Asha Rao"]

    info = client.get(f"/api/users/{student_id}/info", headers=admin).json()["student"]
    assert info["state"] == "forwarded"

    details = client.get(f"/api/users/{student_id}/details", headers=admin).json()
    assert details["course_selections"][0]["application_status"] == "Forwarded"


def test_forward_without_shortlist(client, admin_id, student_id, profile_id):
    admin = auth_header(admin_id, UserRole.admin)
    for field in ("college", "course"):
        client.put(f"/api/users/{student_id}/finalize", json={"field": field, "value": "X"}, headers=admin)

    response = client.post(
        "/api/users/forward",
        json={"student_id": student_id, "college_id": profile_id},
        headers=admin
    )
    assert response.status_code == 404


def test_forwarded_students_need_a_profile(client):
    bare = make_college(email="bare@example.com")
    response = client.get("/api/college-admins/forwarded-students", headers=auth_header(bare, UserRole.college))
    assert response.status_code == 404


def test_public_directory(client, profile_id):
    response = client.get("/api/colleges")
    assert response.status_code == 200
    (entry,) = response.json()["data"]
    assert entry["id"] == profile_id
    assert entry["name"] == "NIT Example"
    assert entry["course"] == "B.Tech"


def test_create_profile_with_upload(client, mongo):
    college_id = make_college(email="new@example.com")
    headers = auth_header(college_id, UserRole.college, "new@example.com")
    form = {
        "name": "New Campus",
        "profile": json.dumps({"address": "Pune, Maharashtra", "contact": {"primary_phone": "020-555"}}),
        "courses": json.dumps([{"name": "BBA"}])
    }
    files = {"logo": ("logo.png", b"\x89PNG\r\n\x1a\nfake", "image/png")}

    response = client.post("/api/college-admins/profile", data=form, files=files, headers=headers)
    assert response.status_code == 201
    doc = response.json()["data"]
    assert doc["email"] == "new@example.com"
    assert doc["logo"]["url"].startswith("/uploads/college-admins/")

    again = client.post("/api/college-admins/profile", data=form, headers=headers)
    assert again.status_code == 409

    (entry,) = client.get("/api/colleges").json()["data"]
    assert entry["city"] == "Pune"
    assert entry["contact_number"] == "020-555"


def test_create_profile_rejects_bad_json(client, college_id):
    response = client.post(
        "/api/college-admins/profile",
        data={"email": "x@example.com", "courses": "[not json"},
        headers=auth_header(college_id, UserRole.college)
    )
    assert response.status_code == 400


def test_upload_rejects_non_images(client, college_id):
    response = client.post(
        "/api/college-admins/upload",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=auth_header(college_id, UserRole.college)
    )
    assert response.status_code == 400


def test_delete_profile_not_implemented(client, admin_id, profile_id):
    response = client.delete(f"/api/college-admins/{profile_id}", headers=auth_header(admin_id, UserRole.admin))
    assert response.status_code == 501


def test_admin_profile_listing_carries_course_demand(client, admin_id, student_id, profile_id):
    client.post(
        "/api/shortlists/toggle",
        json={"college_id": profile_id, "interested_courses": [{"parent": "B.Tech", "name": "CSE"}]},
        headers=auth_header(student_id, UserRole.student)
    )
    response = client.get("/api/college-admins", headers=auth_header(admin_id, UserRole.admin))
    (profile,) = response.json()["data"]
    assert profile["_id"] == profile_id
    assert profile["aggregated_courses"] == ["CSE"]


def test_workflow_endpoints_are_admin_only(client, mongo, student_id, college_id, profile_id):
    client.post(
        "/api/shortlists/toggle",
        json={"college_id": profile_id},
        headers=auth_header(student_id, UserRole.student)
    )
    forward = {"student_id": student_id, "college_id": profile_id, "courses": ["CSE"]}

    for headers in (auth_header(student_id, UserRole.student), auth_header(college_id, UserRole.college)):
        finalize = client.put(
            f"/api/users/{student_id}/finalize",
            json={"field": "college", "value": "NIT Example"},
            headers=headers
        )
        assert finalize.status_code == 403
        assert client.post("/api/users/forward", json=forward, headers=headers).status_code == 403

    student = mongo["students"].find_one()
    assert student["college_finalized"] == ""
    assert student["course_finalized"] == ""
    assert mongo["shortlists"].count_documents({"is_admin_forwarded": True}) == 0


def test_forwarded_students_are_college_only(client, student_id, profile_id):
    response = client.get(
        "/api/college-admins/forwarded-students",
        headers=auth_header(student_id, UserRole.student)
    )
    assert response.status_code == 403


def test_college_dashboard_shows_course_demand(client, college_id, profile_id):
    for n, course in enumerate(["CSE", "CSE", "AI/ML"]):
        student = make_student(email=f"s{n}@example.com")
        client.post(
            "/api/shortlists/toggle",
            json={"college_id": profile_id, "interested_courses": [{"parent": "B.Tech", "name": course}]},
            headers=auth_header(student, UserRole.student)
        )

    response = client.get("/api/shortlists/college", headers=auth_header(college_id, UserRole.college))
    assert response.status_code == 200
    assert response.json()["count"] == 3
    assert sorted(response.json()["aggregated_courses"]) == ["AI/ML", "CSE"]


def test_upload_returns_media(client, college_id):
    response = client.post(
        "/api/college-admins/upload",
        files={"file": ("cover.jpg", b"\xff\xd8\xff\xe0fake", "image/jpeg")},
        headers=auth_header(college_id, UserRole.college)
    )
    assert response.status_code == 201
    media = response.json()
    assert media["url"].startswith("/uploads/college-admins/")
    assert media["size"] == 8

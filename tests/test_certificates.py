import inspect
import re
from datetime import datetime, timezone

import pytest
from pymongo.errors import DuplicateKeyError

from conftest import auth_header
from studysphere.courses.certificate_router import generate_certificate_image
from studysphere.courses.database import generate_certificate_id, grade_for_progress

STUDENT = auth_header("student-1", "student", "Grace Learner")
OTHER_STUDENT = auth_header("student-2", "student")
ADMIN = auth_header("admin-1", "admin")


@pytest.fixture
def completed(fake_db):
    fake_db.courses.docs.append({
        "course_id": "COURSE_1",
        "title": "Web Basics",
        "duration": "12 weeks",
        "instructor": "Ada Teacher",
        "instructor_id": "instructor-1",
        "curriculum": [
            {"title": "HTML", "lessons": [{"title": "Tags"}, {"title": "Forms"}]},
            {"title": "CSS", "lessons": [{"title": "Selectors"}]},
        ],
    })
    fake_db.enrollments.docs.append({
        "user_id": "student-1",
        "course_id": "COURSE_1",
        "status": "completed",
        "progress": 92,
        "completed_at": datetime(2024, 5, 1, tzinfo=timezone.utc),
        "completed_lessons": ["a", "b"],
    })


def generate(client, headers=STUDENT, course_id="COURSE_1"):
    return client.post(f"/api/certificates/generate/{course_id}", headers=headers)


@pytest.mark.parametrize("progress, grade", [
    (100, "A+"), (95, "A+"), (94.9, "A"), (90, "A"), (85, "B+"), (80, "B"),
    (75, "C+"), (70, "C"), (69.9, "Pass"), (0, "Pass"),
])
def test_grade_thresholds(progress, grade):
    assert grade_for_progress(progress) == grade


def test_certificate_id_format():
    assert re.fullmatch(r"CERT-[0-9A-Z]+-[0-9A-Z]{6}", generate_certificate_id())


def test_generate_issues_certificate_once(client, completed, fake_db):
    first = generate(client)

    assert first.status_code == 201
    data = first.json()["data"]
    assert data["grade"] == "A"
    assert data["certificate_id"].startswith("CERT-")
    assert data["verification_url"] == "http://localhost:5173/verify-certificate"
    assert data["metadata"] == {
        "course_duration": "12 weeks",
        "total_lessons": 3,
        "completed_lessons": 2,
        "instructor_name": "Ada Teacher",
    }

    second = generate(client)
    assert second.status_code == 200
    assert second.json()["message"] == "Certificate already exists"
    assert second.json()["data"]["certificate_id"] == data["certificate_id"]
    assert len(fake_db.certificates.docs) == 1


def test_generate_racing_insert_returns_existing_certificate(client, completed, fake_db):
    rival = {
        "certificate_id": "CERT-RIVAL-ABC123",
        "user_id": "student-1",
        "course_id": "COURSE_1",
        "grade": "A",
    }

    def concurrent_insert(doc):
        fake_db.certificates.docs.append(dict(rival))
        return DuplicateKeyError("E11000 duplicate key error collection: certificates")

    fake_db.certificates.fail_when = concurrent_insert

    response = generate(client)

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["message"] == "Certificate already exists"
    assert response.json()["data"]["certificate_id"] == "CERT-RIVAL-ABC123"
    assert len(fake_db.certificates.docs) == 1


def test_generate_other_insert_failure_is_500(client, completed, fake_db):
    fake_db.certificates.fail_when = lambda doc: True

    response = generate(client)

    assert response.status_code == 500
    assert response.json()["success"] is False


def test_generate_requires_completed_enrollment(client, completed, fake_db):
    fake_db.enrollments.docs[0]["status"] = "active"
    response = generate(client)
    assert response.status_code == 400
    assert response.json()["message"] == "Course must be completed to generate certificate"


def test_generate_without_enrollment_is_404(client, completed):
    assert generate(client, headers=OTHER_STUDENT).status_code == 404


def test_verify_is_public(client, completed):
    certificate_id = generate(client).json()["data"]["certificate_id"]

    response = client.get(f"/api/certificates/verify/{certificate_id}")

    assert response.status_code == 200
    assert response.json()["valid"] is True
    assert response.json()["data"]["student_name"] == "Grace Learner"


def test_verify_unknown_is_404_and_invalid(client):
    response = client.get("/api/certificates/verify/CERT-NOPE-000000")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Certificate not found or invalid", "valid": False}


def test_my_certificates(client, completed):
    generate(client)

    response = client.get("/api/certificates/my-certificates", headers=STUDENT)
    assert response.json()["count"] == 1

    response = client.get("/api/certificates/my-certificates", headers=OTHER_STUDENT)
    assert response.json() == {"success": True, "count": 0, "data": []}


def test_get_single_certificate(client, completed):
    certificate_id = generate(client).json()["data"]["certificate_id"]

    assert client.get(f"/api/certificates/{certificate_id}", headers=STUDENT).status_code == 200
    assert client.get("/api/certificates/CERT-NOPE-000000", headers=STUDENT).status_code == 404
    assert client.get(f"/api/certificates/{certificate_id}").status_code == 401


def test_download_renders_png_for_owner_only(client, completed):
    certificate_id = generate(client).json()["data"]["certificate_id"]

    response = client.get(f"/api/certificates/{certificate_id}/download", headers=STUDENT)
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content.startswith(b"\x89PNG")

    assert client.get(f"/api/certificates/{certificate_id}/download", headers=OTHER_STUDENT).status_code == 403


def test_admin_stats(client, completed):
    generate(client)

    response = client.get("/api/certificates/admin/stats", headers=ADMIN)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total"] == 1
    assert data["byGrade"] == [{"_id": "A", "count": 1}]
    assert len(data["recent"]) == 1
    assert client.get("/api/certificates/admin/stats", headers=STUDENT).status_code == 403


def test_delete_is_admin_only(client, completed, fake_db):
    certificate_id = generate(client).json()["data"]["certificate_id"]

    assert client.delete(f"/api/certificates/{certificate_id}", headers=STUDENT).status_code == 403

    response = client.delete(f"/api/certificates/{certificate_id}", headers=ADMIN)
    assert response.status_code == 200
    assert fake_db.certificates.docs == []
    assert client.delete(f"/api/certificates/{certificate_id}", headers=ADMIN).status_code == 404


def test_certificate_image_renders_synchronously():
    assert not inspect.iscoroutinefunction(generate_certificate_image)

    png = generate_certificate_image({
        "certificate_id": "CERT-TEST-000001",
        "student_name": "Grace Learner",
        "course_title": "Web Basics",
        "completion_date": datetime(2024, 5, 1, tzinfo=timezone.utc),
        "grade": "A",
        "metadata": {"instructor_name": "Ada Teacher"},
    })

    assert png.startswith(b"\x89PNG")

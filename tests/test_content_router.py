import pytest

from conftest import auth_header

HEADER = (
    "quizTitle,quizType,moduleIndex,lessonIndex,duration,passingScore,questionText,questionType,"
    "option1,option2,option3,option4,correctAnswer,explanation,points"
)
CSV = "\n".join([
    HEADER,
    "Basics Quiz,course,,,,,What is HTML?,,Markup,Database,,,1,,",
    "Basics Quiz,course,,,,,What is CSS?,,Styles,Server,,,Styles,,",
    "Bad Quiz,course,,,,,One option only,,Lonely,,,,1,,",
]) + "\n"

INSTRUCTOR = auth_header("instructor-1", "instructor", "Ada Teacher")
OTHER_INSTRUCTOR = auth_header("instructor-2", "instructor")
ADMIN = auth_header("admin-1", "admin")
STUDENT = auth_header("student-1", "student")


@pytest.fixture
def course(fake_db):
    doc = {
        "course_id": "COURSE_1",
        "title": "Web Basics",
        "instructor_id": "instructor-1",
        "curriculum": [
            {"title": "HTML", "lessons": [{"title": "Tags"}, {"title": "Forms"}]},
            {"title": "CSS", "lessons": [{"title": "Selectors"}]},
        ],
    }
    fake_db.courses.docs.append(doc)
    return doc


def upload(client, headers, content=CSV, filename="quizzes.csv", content_type="text/csv", course_id="COURSE_1"):
    return client.post(
        "/api/content-generation/bulk-import-quizzes",
        files={"csvFile": (filename, content.encode("utf-8"), content_type)},
        data={"courseId": course_id},
        headers=headers,
    )


# ==================== BULK IMPORT ====================

def test_bulk_import_groups_rows_and_reports_errors(client, course, fake_db):
    response = upload(client, INSTRUCTOR)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Successfully imported 1 quizzes"
    assert body["data"]["imported"] == 1
    assert body["data"]["errors"] == 1
    assert body["data"]["errorDetails"][0].startswith("Row 3: ")
    assert body["data"]["quizzes"][0]["title"] == "Basics Quiz"
    assert body["data"]["quizzes"][0]["questionCount"] == 2
    assert len(fake_db.quizzes.docs) == 1


def test_bulk_import_is_served_without_api_prefix(client, course):
    response = client.post(
        "/content-generation/bulk-import-quizzes",
        files={"csvFile": ("quizzes.csv", CSV.encode("utf-8"), "text/csv")},
        data={"courseId": "COURSE_1"},
        headers=ADMIN,
    )
    assert response.status_code == 200
    assert response.json()["data"]["imported"] == 1


def test_admin_may_import_into_any_course(client, course):
    assert upload(client, ADMIN).status_code == 200


def test_non_csv_upload_is_rejected(client, course):
    response = upload(client, INSTRUCTOR, filename="notes.txt", content_type="text/plain")
    assert response.status_code == 400
    assert response.json()["message"] == "Only CSV files are allowed"


def test_missing_file_is_rejected(client, course):
    response = client.post(
        "/api/content-generation/bulk-import-quizzes",
        data={"courseId": "COURSE_1"},
        headers=INSTRUCTOR,
    )
    assert response.status_code == 400


def test_header_only_csv_is_rejected(client, course):
    response = upload(client, INSTRUCTOR, content=HEADER + "\n")
    assert response.status_code == 400


def test_unknown_course_is_404(client, course):
    assert upload(client, INSTRUCTOR, course_id="NOPE").status_code == 404


def test_other_instructor_is_403(client, course):
    assert upload(client, OTHER_INSTRUCTOR).status_code == 403


def test_student_is_403(client, course):
    assert upload(client, STUDENT).status_code == 403


def test_anonymous_is_401(client, course):
    assert upload(client, {}).status_code == 401


# ==================== TEMPLATES ====================

def test_template_catalogue(client):
    response = client.get("/api/content-generation/templates", headers=INSTRUCTOR)
    assert response.status_code == 200
    assert [t["id"] for t in response.json()["templates"]] == [
        "web-development", "data-science", "digital-marketing", "business-fundamentals",
    ]


def test_course_template_is_stamped_with_caller(client):
    response = client.post(
        "/api/content-generation/course-template",
        json={"templateType": "data-science", "customization": {"level": "Advanced"}},
        headers=INSTRUCTOR,
    )

    assert response.status_code == 200
    template = response.json()["template"]
    assert template["level"] == "Advanced"
    assert template["instructor"] == "Ada Teacher"
    assert template["instructorId"] == "instructor-1"
    assert len(template["curriculum"]) == 4


def test_unknown_template_type_lists_available(client):
    response = client.post(
        "/api/content-generation/course-template",
        json={"templateType": "cooking"},
        headers=INSTRUCTOR,
    )

    assert response.status_code == 400
    assert response.json()["availableTemplates"] == ["web-development", "data-science"]


# ==================== AUTO-GENERATED QUIZ ====================

def test_auto_generate_quiz_cycles_question_bank(client, course, fake_db):
    response = client.post(
        "/api/content-generation/auto-generate-quiz",
        json={"courseId": "COURSE_1", "topic": "JavaScript", "questionCount": 5},
        headers=INSTRUCTOR,
    )

    assert response.status_code == 201
    quiz = response.json()["quiz"]
    assert quiz["title"] == "JavaScript - Intermediate Quiz"
    assert quiz["questionCount"] == 5
    assert quiz["duration"] == 15
    assert quiz["quizType"] == "course"

    questions = fake_db.quizzes.docs[0]["questions"]
    assert questions[0]["question"] == questions[2]["question"]
    assert questions[0]["question"] != questions[1]["question"]


def test_auto_generate_quiz_placement_and_duration(client, course, fake_db):
    response = client.post(
        "/api/content-generation/auto-generate-quiz",
        json={"courseId": "COURSE_1", "topic": "Forms", "questionCount": 20, "moduleIndex": 0, "lessonIndex": 1},
        headers=INSTRUCTOR,
    )

    quiz = response.json()["quiz"]
    assert quiz["quizType"] == "lesson"
    assert quiz["duration"] == 30
    stored = fake_db.quizzes.docs[0]
    assert (stored["module_title"], stored["lesson_title"]) == ("HTML", "Forms")
    assert stored["questions"][0]["question"] == "What is a key concept in Forms?"


def test_auto_generate_quiz_requires_course_ownership(client, course):
    response = client.post(
        "/api/content-generation/auto-generate-quiz",
        json={"courseId": "COURSE_1", "topic": "python"},
        headers=OTHER_INSTRUCTOR,
    )
    assert response.status_code == 403


@pytest.mark.parametrize("body", [
    {"courseId": "COURSE_1", "topic": "python", "questionCount": 0},
    {"courseId": "COURSE_1", "topic": "python", "questionTypes": ["essay"]},
    {"topic": "python"},
])
def test_auto_generate_quiz_invalid_body_is_400(client, course, fake_db, body):
    response = client.post("/api/content-generation/auto-generate-quiz", json=body, headers=INSTRUCTOR)

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert fake_db.quizzes.docs == []

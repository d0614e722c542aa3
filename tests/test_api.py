"""HTTP surface: authentication, status codes and response shapes."""

from datetime import timedelta

import pytest

from app.core.timeutils import utcnow


def _window(school, **overrides) -> dict:
    now = utcnow()
    body = {
        "session_id": str(school.session.id),
        "exam_type_id": str(school.midterm.id),
        "start_date": (now - timedelta(days=1)).isoformat(),
        "end_date": (now + timedelta(days=1)).isoformat(),
    }
    body.update(overrides)
    return body


def _result(school, student, obtained=80) -> dict:
    return {
        "student_id": str(student.id),
        "session_id": str(school.session.id),
        "exam_type_id": str(school.midterm.id),
        "subject_id": str(school.maths.id),
        "class_id": str(school.class_one.id),
        "section_id": str(school.section_one.id),
        "total_marks": 100,
        "obtained_marks": obtained,
    }


# ----- Authentication -----
@pytest.mark.asyncio
async def test_requires_token(client, school) -> None:
    response = await client.get("/api/v1/exam-types")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_rejects_garbage_token(client, school) -> None:
    response = await client.get("/api/v1/exam-types", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_rejects_inactive_user(client, school, headers_for) -> None:
    response = await client.get("/api/v1/exam-types", headers=headers_for(school.inactive))
    assert response.status_code == 401


# ----- Exam types -----
@pytest.mark.asyncio
async def test_exam_types(client, school, auth_headers) -> None:
    created = await client.post(
        "/api/v1/exam-types",
        json={"name": "Unit Test 1", "code": "ut1", "weightage": 10},
        headers=auth_headers,
    )
    assert created.status_code == 201
    assert created.json()["code"] == "UT1"

    duplicate = await client.post(
        "/api/v1/exam-types", json={"name": "Unit Test One", "code": "UT1"}, headers=auth_headers
    )
    assert duplicate.status_code == 409

    listed = await client.get("/api/v1/exam-types", headers=auth_headers)
    assert listed.status_code == 200
    assert {e["code"] for e in listed.json()} == {"MID", "FIN", "UT1"}


# ----- Deadlines and submission -----
@pytest.mark.asyncio
async def test_submission_follows_deadline_and_lock(client, school, auth_headers) -> None:
    student = school.students[0]
    # A refused submission rolls the shared session back and expires the seeded rows; build bodies first.
    first_body = _result(school, student)
    locked_body = _result(school, student, 20)
    second_body = _result(school, school.students[1])
    lock_body = {"session_id": str(school.session.id), "exam_type_id": str(school.midterm.id)}
    status_params = {
        "session_id": str(school.session.id),
        "exam_type_id": str(school.midterm.id),
        "class_id": str(school.class_one.id),
    }
    window_body = _window(school)

    refused = await client.post("/api/v1/results", json=first_body, headers=auth_headers)
    assert refused.status_code == 403

    window = await client.post("/api/v1/results/deadlines", json=window_body, headers=auth_headers)
    assert window.status_code == 201
    deadline_id = window.json()["id"]

    status = await client.get(
        "/api/v1/results/deadlines/status",
        params=status_params,
        headers=auth_headers,
    )
    assert status.json()["is_open"] is True
    assert status.json()["scope"] == "general"

    saved = await client.post("/api/v1/results", json=first_body, headers=auth_headers)
    assert saved.status_code == 201
    assert saved.json()["grade"] == "A"

    lock = await client.post(
        "/api/v1/results/lock",
        json=lock_body,
        headers=auth_headers,
    )
    assert lock.json() == {"updated": 1, "is_locked": True}

    locked = await client.post("/api/v1/results", json=locked_body, headers=auth_headers)
    assert locked.status_code == 423

    closed = await client.post(
        f"/api/v1/results/deadlines/{deadline_id}/toggle", json={"is_open": False}, headers=auth_headers
    )
    assert closed.status_code == 200
    assert closed.json()["is_open"] is False

    after_close = await client.post("/api/v1/results", json=second_body, headers=auth_headers)
    assert after_close.status_code == 403


@pytest.mark.asyncio
async def test_deadline_with_inverted_dates(client, school, auth_headers) -> None:
    now = utcnow()
    response = await client.post(
        "/api/v1/results/deadlines",
        json=_window(school, start_date=now.isoformat(), end_date=(now - timedelta(hours=1)).isoformat()),
        headers=auth_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_bulk_submission(client, school, auth_headers, add_deadline) -> None:
    await add_deadline(school)
    body = {
        "session_id": str(school.session.id),
        "exam_type_id": str(school.midterm.id),
        "subject_id": str(school.maths.id),
        "class_id": str(school.class_one.id),
        "section_id": str(school.section_one.id),
        "total_marks": 50,
        "results": [
            {"student_id": str(s.id), "obtained_marks": m} for s, m in zip(school.students, [50, 40, 10])
        ],
    }

    response = await client.post("/api/v1/results/bulk", json=body, headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"submitted": 3, "skipped_student_ids": []}

    listed = await client.get(
        "/api/v1/results",
        params={"session_id": str(school.session.id), "class_id": str(school.class_one.id)},
        headers=auth_headers,
    )
    assert sorted(r["grade"] for r in listed.json()) == ["A", "A+", "F"]


@pytest.mark.asyncio
async def test_bulk_rejects_duplicate_entries(client, school, auth_headers, add_deadline) -> None:
    await add_deadline(school)
    student_id = str(school.students[0].id)
    body = {
        "session_id": str(school.session.id),
        "exam_type_id": str(school.midterm.id),
        "subject_id": str(school.maths.id),
        "class_id": str(school.class_one.id),
        "section_id": str(school.section_one.id),
        "total_marks": 50,
        "results": [
            {"student_id": student_id, "obtained_marks": 10},
            {"student_id": student_id, "obtained_marks": 20},
        ],
    }

    response = await client.post("/api/v1/results/bulk", json=body, headers=auth_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_invalid_total_marks(client, school, auth_headers, add_deadline) -> None:
    await add_deadline(school)
    body = _result(school, school.students[0])
    body["total_marks"] = 0

    response = await client.post("/api/v1/results", json=body, headers=auth_headers)
    assert response.status_code == 422


# ----- Attendance and report cards -----
@pytest.mark.asyncio
async def test_attendance_future_date(client, school, auth_headers) -> None:
    response = await client.post(
        "/api/v1/attendance/mark",
        json={
            "student_id": str(school.students[0].id),
            "section_id": str(school.section_one.id),
            "date": (utcnow() + timedelta(days=3)).date().isoformat(),
            "status": "present",
        },
        headers=auth_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_report_card(client, school, auth_headers, add_deadline) -> None:
    await add_deadline(school)
    student = school.students[0]
    await client.post("/api/v1/results", json=_result(school, student, 64), headers=auth_headers)

    response = await client.get(
        f"/api/v1/report-cards/{student.id}",
        params={"session_id": str(school.session.id)},
        headers=auth_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["student"]["registration_no"] == "REG-001"
    assert body["summary"] == {
        "total_obtained": 64,
        "total_marks": 100,
        "percentage": 64,
        "overall_grade": "C",
        "total_subjects": 1,
    }
    assert body["attendance"]["total"] == 0


@pytest.mark.asyncio
async def test_report_card_unknown_student(client, school, auth_headers) -> None:
    response = await client.get(
        f"/api/v1/report-cards/{school.teacher.id}",
        params={"session_id": str(school.session.id)},
        headers=auth_headers,
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_attendance_report_rejects_year_zero(client, school, auth_headers) -> None:
    class_id = str(school.class_one.id)

    rejected = await client.get(
        "/api/v1/attendance/report",
        params={"class_id": class_id, "year": 0, "month": 2},
        headers=auth_headers,
    )
    accepted = await client.get(
        "/api/v1/attendance/report",
        params={"class_id": class_id, "year": 2025, "month": 2},
        headers=auth_headers,
    )

    assert rejected.status_code == 422
    assert accepted.status_code == 200
    assert accepted.json()["start_date"] == "2025-02-01"
    assert len(accepted.json()["report"]) == 3

from datetime import date, timedelta
from types import SimpleNamespace

import pytest

from app.api.v1.attendance import service as attendance_service
from app.api.v1.attendance.schemas import AttendanceMark
from app.api.v1.report_cards import service
from app.api.v1.results import service as results_service
from app.api.v1.results.schemas import ResultSubmit
from app.core.exceptions import ServiceError


def _result(obtained: int, total: int, is_absent: bool = False) -> SimpleNamespace:
    return SimpleNamespace(obtained_marks=obtained, total_marks=total, is_absent=is_absent)


def test_absent_marks_count_in_total_only() -> None:
    summary = service.compute_report_summary([_result(80, 100), _result(40, 50, is_absent=True)])

    assert summary.total_obtained == 80
    assert summary.total_marks == 150
    assert summary.percentage == 53
    assert summary.overall_grade == "D"
    assert summary.total_subjects == 2


def test_empty_report_has_no_overall_grade() -> None:
    summary = service.compute_report_summary([])

    assert summary.total_obtained == 0
    assert summary.total_marks == 0
    assert summary.percentage == 0
    assert summary.overall_grade is None
    assert summary.total_subjects == 0


async def _submit(db_session, school, student, exam_type, subject, obtained, total=100, is_absent=False):
    await results_service.submit_result(
        db_session,
        school.teacher.id,
        ResultSubmit(
            student_id=student.id,
            session_id=school.session.id,
            exam_type_id=exam_type.id,
            subject_id=subject.id,
            class_id=student.class_id,
            section_id=student.section_id,
            total_marks=total,
            obtained_marks=obtained,
            is_absent=is_absent,
        ),
    )


@pytest.mark.asyncio
async def test_report_card_for_student(db_session, school, add_deadline) -> None:
    await add_deadline(school)
    await add_deadline(school, exam_type_id=school.final.id)
    student = school.students[0]
    await _submit(db_session, school, student, school.midterm, school.science, 45, total=50)
    await _submit(db_session, school, student, school.midterm, school.maths, 30, total=50)
    await _submit(db_session, school, student, school.final, school.maths, 70, is_absent=True)
    # Another student's marks never leak into this card.
    await _submit(db_session, school, school.students[1], school.midterm, school.maths, 50, total=50)

    yesterday = date.today() - timedelta(days=1)
    for offset, status in enumerate(["present", "absent"]):
        await attendance_service.mark_student_attendance(
            db_session,
            school.teacher.id,
            AttendanceMark(
                student_id=student.id,
                section_id=student.section_id,
                date=yesterday - timedelta(days=offset),
                status=status,
            ),
        )

    card = await service.get_student_report_card(db_session, student.id, school.session.id)

    assert card.student.name == "Aarav"
    assert card.student.class_name == "1st"
    assert card.student.section_name == "A"
    assert card.session.name == "2025-2026"
    assert [(r.exam_type_name, r.subject_name) for r in card.results] == [
        ("Final", "Mathematics"),
        ("Midterm", "Mathematics"),
        ("Midterm", "Science"),
    ]
    assert card.results[0].grade == "AB"
    # (0 + 30 + 45) / (100 + 50 + 50)
    assert card.summary.total_obtained == 75
    assert card.summary.total_marks == 200
    assert card.summary.percentage == 38
    assert card.summary.overall_grade == "F"
    assert card.summary.total_subjects == 3

    breakdown = {b.exam_type_name: b for b in card.exam_breakdown}
    assert (breakdown["Midterm"].total_obtained, breakdown["Midterm"].total_marks) == (75, 100)
    assert breakdown["Midterm"].percentage == 75
    assert breakdown["Midterm"].weightage == 40
    assert breakdown["Final"].percentage == 0

    assert card.attendance.total == 2
    assert card.attendance.percentage == 50


@pytest.mark.asyncio
async def test_report_card_without_results(db_session, school) -> None:
    card = await service.get_student_report_card(
        db_session, school.other_student.id, school.session.id, include_attendance=False
    )

    assert card.results == []
    assert card.exam_breakdown == []
    assert card.summary.overall_grade is None
    assert card.attendance is None


@pytest.mark.asyncio
async def test_report_card_unknown_student_or_session(db_session, school) -> None:
    with pytest.raises(ServiceError) as exc:
        await service.get_student_report_card(db_session, school.teacher.id, school.session.id)
    assert exc.value.status_code == 404

    with pytest.raises(ServiceError) as exc:
        await service.get_student_report_card(db_session, school.students[0].id, school.teacher.id)
    assert exc.value.status_code == 404

"""Report card assembly: student, session, results and attendance with report-level totals."""

from typing import Dict, Iterable, List
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.attendance.service import get_student_attendance_summary
from app.core.exceptions import ServiceError
from app.core.grading import calculate_grade, percentage_of
from app.core.models import AcademicSession, Student, StudentResult

from .schemas import (
    ExamTypeBreakdown,
    ReportCardResponse,
    ReportResultItem,
    ReportSession,
    ReportStudent,
    ReportSummary,
)


def _obtained(result) -> int:
    return 0 if result.is_absent else result.obtained_marks


def compute_report_summary(results: Iterable) -> ReportSummary:
    """
    Absent rows add nothing to total_obtained but their total_marks still count,
    so an absence lowers the percentage.
    """
    results = list(results)
    total_obtained = sum(_obtained(r) for r in results)
    total_marks = sum(r.total_marks for r in results)
    return ReportSummary(
        total_obtained=total_obtained,
        total_marks=total_marks,
        percentage=percentage_of(total_obtained, total_marks),
        overall_grade=calculate_grade(total_obtained, total_marks).value if total_marks > 0 else None,
        total_subjects=len(results),
    )


def compute_exam_breakdown(results: Iterable[ReportResultItem]) -> List[ExamTypeBreakdown]:
    """Totals per exam type, in order of first appearance."""
    breakdown: Dict[UUID, ExamTypeBreakdown] = {}
    for r in results:
        row = breakdown.get(r.exam_type_id)
        if row is None:
            row = breakdown[r.exam_type_id] = ExamTypeBreakdown(
                exam_type_id=r.exam_type_id,
                exam_type_name=r.exam_type_name,
                weightage=r.weightage,
                total_obtained=0,
                total_marks=0,
                percentage=0,
            )
        row.total_obtained += _obtained(r)
        row.total_marks += r.total_marks
    for row in breakdown.values():
        row.percentage = percentage_of(row.total_obtained, row.total_marks)
    return list(breakdown.values())


def _to_item(r: StudentResult) -> ReportResultItem:
    return ReportResultItem(
        id=r.id,
        exam_type_id=r.exam_type_id,
        exam_type_name=r.exam_type.name if r.exam_type else None,
        exam_type_code=r.exam_type.code if r.exam_type else None,
        weightage=r.exam_type.weightage if r.exam_type else None,
        subject_id=r.subject_id,
        subject_name=r.subject.name if r.subject else None,
        subject_code=r.subject.code if r.subject else None,
        total_marks=r.total_marks,
        obtained_marks=r.obtained_marks,
        grade=r.grade,
        remarks=r.remarks,
        is_absent=r.is_absent,
    )


async def get_student_report_card(
    db: AsyncSession,
    student_id: UUID,
    session_id: UUID,
    include_attendance: bool = True,
) -> ReportCardResponse:
    """Read-only. Attendance is summarized over the session's start_date..end_date."""
    student = (await db.execute(select(Student).where(Student.id == student_id))).scalar_one_or_none()
    if not student:
        raise ServiceError("Student not found", status.HTTP_404_NOT_FOUND)
    session = await db.get(AcademicSession, session_id)
    if not session:
        raise ServiceError("Session not found", status.HTTP_404_NOT_FOUND)

    rows = await db.execute(
        select(StudentResult)
        .where(StudentResult.student_id == student_id, StudentResult.session_id == session_id)
        .execution_options(populate_existing=True)
    )
    items = sorted(
        (_to_item(r) for r in rows.scalars().all()),
        key=lambda i: (i.exam_type_name or "", i.subject_name or ""),
    )

    attendance = None
    if include_attendance:
        attendance_view = await get_student_attendance_summary(
            db, student_id, session.start_date, session.end_date
        )
        attendance = attendance_view.summary

    return ReportCardResponse(
        student=ReportStudent(
            id=student.id,
            name=student.name,
            registration_no=student.registration_no,
            father_name=student.father_name,
            date_of_birth=student.date_of_birth,
            class_id=student.class_id,
            class_name=student.school_class.name if student.school_class else None,
            section_id=student.section_id,
            section_name=student.section.name if student.section else None,
        ),
        session=ReportSession(
            id=session.id,
            name=session.name,
            start_date=session.start_date,
            end_date=session.end_date,
        ),
        results=items,
        summary=compute_report_summary(items),
        exam_breakdown=compute_exam_breakdown(items),
        attendance=attendance,
    )

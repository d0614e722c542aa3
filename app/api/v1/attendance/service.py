"""Attendance marking, half-day adjustments and attendance summaries."""

import logging
import uuid
from calendar import monthrange
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import AttendanceStatus, AttendanceType
from app.core.exceptions import ServiceError
from app.core.models import AttendanceRecord, Student
from app.core.timeutils import utcnow
from app.db.upsert import upsert_insert

from .aggregation import summarize
from .schemas import (
    AttendanceMark,
    AttendanceRecordResponse,
    AttendanceReportResponse,
    AttendanceReportRow,
    HalfDayMark,
    SectionAttendanceMark,
    StudentAttendanceSummaryResponse,
)

logger = logging.getLogger(__name__)


def _to_response(rec: AttendanceRecord) -> AttendanceRecordResponse:
    return AttendanceRecordResponse(
        id=rec.id,
        student_id=rec.student_id,
        student_name=rec.student.name if rec.student else None,
        registration_no=rec.student.registration_no if rec.student else None,
        section_id=rec.section_id,
        date=rec.date,
        status=rec.status,
        attendance_type=rec.attendance_type,
        left_early=rec.left_early,
        left_at=rec.left_at,
        remarks=rec.remarks,
        marked_by=rec.marked_by,
        created_at=rec.created_at,
        updated_at=rec.updated_at,
    )


def _resolve_type(att_status: AttendanceStatus, attendance_type: Optional[AttendanceType]) -> str:
    if attendance_type:
        return attendance_type.value
    if att_status == AttendanceStatus.absent:
        return AttendanceType.absent.value
    return AttendanceType.full_day.value


def _validate_date(att_date: date) -> None:
    if att_date > date.today():
        raise ServiceError("Cannot mark attendance for future dates", status.HTTP_400_BAD_REQUEST)


async def _get_record(db: AsyncSession, attendance_id: UUID) -> AttendanceRecord:
    result = await db.execute(
        select(AttendanceRecord)
        .where(AttendanceRecord.id == attendance_id)
        .execution_options(populate_existing=True)
    )
    rec = result.scalar_one_or_none()
    if not rec:
        raise ServiceError("Attendance record not found", status.HTTP_404_NOT_FOUND)
    return rec


# ----- Marking -----
async def mark_student_attendance(
    db: AsyncSession,
    user_id: UUID,
    payload: AttendanceMark,
) -> AttendanceRecordResponse:
    """Create or update the student's record for the date (one row per student per date)."""
    _validate_date(payload.date)
    attendance_type = _resolve_type(payload.status, payload.attendance_type)
    now = utcnow()
    insert_stmt = upsert_insert(db, AttendanceRecord).values(
        id=uuid.uuid4(),
        student_id=payload.student_id,
        section_id=payload.section_id,
        date=payload.date,
        status=payload.status.value,
        attendance_type=attendance_type,
        left_early=False,
        remarks=payload.remarks,
        marked_by=user_id,
        created_at=now,
        updated_at=now,
    )
    excluded = insert_stmt.excluded
    set_ = {
        "status": excluded.status,
        "attendance_type": excluded.attendance_type,
        "remarks": excluded.remarks,
        "marked_by": excluded.marked_by,
        "updated_at": excluded.updated_at,
    }
    if attendance_type != AttendanceType.half_day.value:
        # No longer a half-day: the early departure no longer applies.
        set_["left_early"] = False
        set_["left_at"] = None
    stmt = insert_stmt.on_conflict_do_update(
        index_elements=["student_id", "date"],
        set_=set_,
    ).returning(AttendanceRecord.id)
    try:
        result = await db.execute(stmt)
        attendance_id = result.scalar_one()
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ServiceError(f"Could not mark attendance: {e.orig}", status.HTTP_409_CONFLICT)
    return _to_response(await _get_record(db, attendance_id))


async def mark_section_attendance(
    db: AsyncSession,
    user_id: UUID,
    payload: SectionAttendanceMark,
) -> int:
    """Replace the section's roll call for the date. Delete and insert commit together or not at all."""
    _validate_date(payload.date)
    await db.execute(
        delete(AttendanceRecord).where(
            AttendanceRecord.section_id == payload.section_id,
            AttendanceRecord.date == payload.date,
        )
    )
    db.add_all(
        [
            AttendanceRecord(
                student_id=a.student_id,
                section_id=payload.section_id,
                date=payload.date,
                status=a.status.value,
                attendance_type=_resolve_type(a.status, a.attendance_type),
                remarks=a.remarks,
                marked_by=user_id,
            )
            for a in payload.attendance
        ]
    )
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ServiceError(
            f"Duplicate attendance or invalid student: {e.orig}",
            status.HTTP_409_CONFLICT,
        )
    logger.info(
        "Roll call for section %s on %s saved by %s (%d students)",
        payload.section_id, payload.date, user_id, len(payload.attendance),
    )
    return len(payload.attendance)


async def mark_half_day(
    db: AsyncSession,
    user_id: UUID,
    attendance_id: UUID,
    payload: HalfDayMark,
) -> AttendanceRecordResponse:
    """Student left early: the day becomes a half-day. status is left as marked."""
    rec = await _get_record(db, attendance_id)
    rec.attendance_type = AttendanceType.half_day.value
    rec.left_early = True
    rec.left_at = payload.left_at
    rec.marked_by = user_id
    rec.updated_at = utcnow()
    await db.commit()
    return _to_response(await _get_record(db, attendance_id))


# ----- Reads -----
async def get_section_attendance(
    db: AsyncSession,
    section_id: UUID,
    att_date: date,
) -> List[AttendanceRecordResponse]:
    result = await db.execute(
        select(AttendanceRecord)
        .where(AttendanceRecord.section_id == section_id, AttendanceRecord.date == att_date)
        .execution_options(populate_existing=True)
    )
    return [_to_response(rec) for rec in result.scalars().all()]


async def get_student_attendance_summary(
    db: AsyncSession,
    student_id: UUID,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> StudentAttendanceSummaryResponse:
    """Records (latest first) and summary for a student, optionally within [start_date, end_date]."""
    stmt = select(AttendanceRecord).where(AttendanceRecord.student_id == student_id)
    if start_date:
        stmt = stmt.where(AttendanceRecord.date >= start_date)
    if end_date:
        stmt = stmt.where(AttendanceRecord.date <= end_date)
    stmt = stmt.order_by(AttendanceRecord.date.desc()).execution_options(populate_existing=True)
    result = await db.execute(stmt)
    records = result.scalars().all()
    return StudentAttendanceSummaryResponse(
        student_id=student_id,
        start_date=start_date,
        end_date=end_date,
        records=[_to_response(rec) for rec in records],
        summary=summarize(records),
    )


async def get_attendance_report(
    db: AsyncSession,
    class_id: UUID,
    year: int,
    month: int,
    section_id: Optional[UUID] = None,
) -> AttendanceReportResponse:
    """Per active student of the class (or section): attendance summary for the calendar month."""
    start_dt = date(year, month, 1)
    end_dt = date(year, month, monthrange(year, month)[1])

    students_stmt = select(Student).where(
        Student.class_id == class_id,
        Student.status == "active",
    )
    if section_id:
        students_stmt = students_stmt.where(Student.section_id == section_id)
    students_result = await db.execute(students_stmt.order_by(Student.name))
    students = students_result.scalars().all()

    by_student = {s.id: [] for s in students}
    if by_student:
        att_result = await db.execute(
            select(AttendanceRecord).where(
                AttendanceRecord.student_id.in_(list(by_student)),
                AttendanceRecord.date >= start_dt,
                AttendanceRecord.date <= end_dt,
            )
        )
        for rec in att_result.scalars().all():
            by_student[rec.student_id].append(rec)

    return AttendanceReportResponse(
        class_id=class_id,
        section_id=section_id,
        year=year,
        month=month,
        start_date=start_dt,
        end_date=end_dt,
        report=[
            AttendanceReportRow(
                student_id=s.id,
                student_name=s.name,
                registration_no=s.registration_no,
                section_id=s.section_id,
                attendance=summarize(by_student[s.id]),
            )
            for s in students
        ],
    )

"""Attendance API router."""

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser
from app.core.exceptions import ServiceError
from app.db.session import get_db

from . import service
from .schemas import (
    AttendanceMark,
    AttendanceRecordResponse,
    AttendanceReportResponse,
    HalfDayMark,
    SectionAttendanceMark,
    SectionAttendanceMarkResponse,
    StudentAttendanceSummaryResponse,
)

router = APIRouter(prefix="/api/v1/attendance", tags=["attendance"])


# ----- Marking -----
@router.post(
    "/mark",
    response_model=AttendanceRecordResponse,
    status_code=status.HTTP_201_CREATED,
)
async def mark_student_attendance(
    payload: AttendanceMark,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Mark or re-mark one student for a date."""
    try:
        return await service.mark_student_attendance(db, current_user.id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/sections/mark",
    response_model=SectionAttendanceMarkResponse,
    status_code=status.HTTP_201_CREATED,
)
async def mark_section_attendance(
    payload: SectionAttendanceMark,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Submit a section's roll call for a date. Replaces any earlier roll call for that date."""
    try:
        count = await service.mark_section_attendance(db, current_user.id, payload)
        return SectionAttendanceMarkResponse(marked=count, message=f"Attendance marked for {count} students")
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/{attendance_id}/half-day", response_model=AttendanceRecordResponse)
async def mark_half_day(
    attendance_id: UUID,
    payload: HalfDayMark,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Record that the student left early."""
    try:
        return await service.mark_half_day(db, current_user.id, attendance_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


# ----- Reads -----
@router.get("/sections/{section_id}", response_model=List[AttendanceRecordResponse])
async def get_section_attendance(
    section_id: UUID,
    att_date: date = Query(..., alias="date", description="Attendance date"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await service.get_section_attendance(db, section_id, att_date)


@router.get("/students/{student_id}/summary", response_model=StudentAttendanceSummaryResponse)
async def get_student_attendance_summary(
    student_id: UUID,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Attendance records and weighted percentage for one student."""
    return await service.get_student_attendance_summary(db, student_id, start_date, end_date)


@router.get("/report", response_model=AttendanceReportResponse)
async def get_attendance_report(
    class_id: UUID,
    section_id: Optional[UUID] = Query(None),
    year: Optional[int] = Query(None, ge=1),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Monthly attendance per student. Defaults to the current month."""
    today = date.today()
    return await service.get_attendance_report(
        db,
        class_id,
        year if year is not None else today.year,
        month if month is not None else today.month,
        section_id=section_id,
    )

from datetime import date, datetime, time
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from app.core.enums import AttendanceStatus, AttendanceType


# ----- Marking -----
class AttendanceMark(BaseModel):
    """Mark (or re-mark) one student for a date."""

    student_id: UUID
    section_id: UUID
    date: date
    status: AttendanceStatus
    attendance_type: Optional[AttendanceType] = Field(
        None, description="Defaults to absent when status is absent, otherwise full_day"
    )
    remarks: Optional[str] = None


class SectionAttendanceEntry(BaseModel):
    student_id: UUID
    status: AttendanceStatus
    attendance_type: Optional[AttendanceType] = None
    remarks: Optional[str] = None


class SectionAttendanceMark(BaseModel):
    """Full roll call for a section on a date. Replaces whatever was recorded for that section/date."""

    section_id: UUID
    date: date
    attendance: List[SectionAttendanceEntry] = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_unique_students(self) -> "SectionAttendanceMark":
        student_ids = [a.student_id for a in self.attendance]
        if len(student_ids) != len(set(student_ids)):
            raise ValueError("Each student may appear only once in a roll call")
        return self


class HalfDayMark(BaseModel):
    left_at: Optional[time] = None


class SectionAttendanceMarkResponse(BaseModel):
    marked: int
    message: str


class AttendanceRecordResponse(BaseModel):
    id: UUID
    student_id: UUID
    student_name: Optional[str] = None
    registration_no: Optional[str] = None
    section_id: UUID
    date: date
    status: str
    attendance_type: str
    left_early: bool
    left_at: Optional[time] = None
    remarks: Optional[str] = None
    marked_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime


# ----- Aggregates -----
class AttendanceSummary(BaseModel):
    """Counts and weighted percentage: (present + late + half_day * 0.5) / total."""

    present: int = 0
    absent: int = 0
    late: int = 0
    half_day: int = 0
    full_day: int = 0
    total: int = 0
    percentage: int = 0


class StudentAttendanceSummaryResponse(BaseModel):
    student_id: UUID
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    records: List[AttendanceRecordResponse]
    summary: AttendanceSummary


class AttendanceReportRow(BaseModel):
    student_id: UUID
    student_name: str
    registration_no: str
    section_id: UUID
    attendance: AttendanceSummary


class AttendanceReportResponse(BaseModel):
    """Monthly per-student attendance for a class (or one of its sections)."""

    class_id: UUID
    section_id: Optional[UUID] = None
    year: int
    month: int
    start_date: date
    end_date: date
    report: List[AttendanceReportRow]

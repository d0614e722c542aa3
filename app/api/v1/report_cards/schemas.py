from datetime import date
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.api.v1.attendance.schemas import AttendanceSummary


class ReportStudent(BaseModel):
    id: UUID
    name: str
    registration_no: str
    father_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    class_id: UUID
    class_name: Optional[str] = None
    section_id: UUID
    section_name: Optional[str] = None


class ReportSession(BaseModel):
    id: UUID
    name: str
    start_date: date
    end_date: date


class ReportResultItem(BaseModel):
    id: UUID
    exam_type_id: UUID
    exam_type_name: Optional[str] = None
    exam_type_code: Optional[str] = None
    weightage: Optional[int] = None
    subject_id: UUID
    subject_name: Optional[str] = None
    subject_code: Optional[str] = None
    total_marks: int
    obtained_marks: int
    grade: Optional[str] = None
    remarks: Optional[str] = None
    is_absent: bool


class ReportSummary(BaseModel):
    total_obtained: int
    total_marks: int
    percentage: int
    overall_grade: Optional[str] = None  # None when there are no marks to grade
    total_subjects: int


class ExamTypeBreakdown(BaseModel):
    exam_type_id: UUID
    exam_type_name: Optional[str] = None
    weightage: Optional[int] = None
    total_obtained: int
    total_marks: int
    percentage: int


class ReportCardResponse(BaseModel):
    student: ReportStudent
    session: ReportSession
    results: List[ReportResultItem]
    summary: ReportSummary
    exam_breakdown: List[ExamTypeBreakdown] = Field(default_factory=list)
    attendance: Optional[AttendanceSummary] = None

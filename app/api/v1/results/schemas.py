from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class ResultSubmit(BaseModel):
    """Submit (or resubmit) marks for one student in one subject."""

    student_id: UUID
    session_id: UUID
    exam_type_id: UUID
    subject_id: UUID
    class_id: UUID
    section_id: UUID
    total_marks: int = Field(..., gt=0)
    obtained_marks: int = Field(0, ge=0)
    remarks: Optional[str] = None
    is_absent: bool = False


class BulkResultEntry(BaseModel):
    student_id: UUID
    obtained_marks: int = Field(0, ge=0)
    is_absent: bool = False
    remarks: Optional[str] = None


class BulkResultSubmit(BaseModel):
    """Marks for a whole class-section in one subject; total_marks is shared by every entry."""

    session_id: UUID
    exam_type_id: UUID
    subject_id: UUID
    class_id: UUID
    section_id: UUID
    total_marks: int = Field(..., gt=0)
    results: List[BulkResultEntry] = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_unique_students(self) -> "BulkResultSubmit":
        seen = set()
        for entry in self.results:
            if entry.student_id in seen:
                raise ValueError(f"Student {entry.student_id} appears more than once")
            seen.add(entry.student_id)
        return self


class BulkSubmitResponse(BaseModel):
    submitted: int
    skipped_student_ids: List[UUID] = Field(default_factory=list)  # rows left untouched because they are locked


class ResultLockRequest(BaseModel):
    """Scope of a lock/unlock. Omitted class_id / subject_id = every class / subject."""

    session_id: UUID
    exam_type_id: UUID
    class_id: Optional[UUID] = None
    subject_id: Optional[UUID] = None


class ResultLockResponse(BaseModel):
    updated: int
    is_locked: bool


class StudentResultResponse(BaseModel):
    id: UUID
    student_id: UUID
    student_name: Optional[str] = None
    registration_no: Optional[str] = None
    session_id: UUID
    exam_type_id: UUID
    exam_type_name: Optional[str] = None
    exam_type_code: Optional[str] = None
    subject_id: UUID
    subject_name: Optional[str] = None
    subject_code: Optional[str] = None
    class_id: UUID
    section_id: UUID
    total_marks: int
    obtained_marks: int
    grade: Optional[str] = None
    remarks: Optional[str] = None
    is_absent: bool
    is_locked: bool
    submitted_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

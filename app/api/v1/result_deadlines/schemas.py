from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ResultDeadlineCreate(BaseModel):
    """Open (or re-open) a submission window. class_id / subject_id omitted = applies to all."""

    session_id: UUID
    exam_type_id: UUID
    class_id: Optional[UUID] = None
    subject_id: Optional[UUID] = None
    start_date: datetime
    end_date: datetime
    is_open: bool = True


class ResultDeadlineToggle(BaseModel):
    is_open: bool


class ResultDeadlineResponse(BaseModel):
    id: UUID
    session_id: UUID
    session_name: Optional[str] = None
    exam_type_id: UUID
    exam_type_name: Optional[str] = None
    class_id: Optional[UUID] = None
    class_name: Optional[str] = None
    subject_id: Optional[UUID] = None
    subject_name: Optional[str] = None
    start_date: datetime
    end_date: datetime
    is_open: bool
    created_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime


class DeadlineStatus(BaseModel):
    """Outcome of resolving the window for a (session, exam type, class, subject)."""

    is_open: bool
    # "class" when a class-specific window matched, "general" for a session-wide one.
    scope: Optional[str] = Field(None, description="class | general")
    deadline: Optional[ResultDeadlineResponse] = None

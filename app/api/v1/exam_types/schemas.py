from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ExamTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    code: str = Field(..., min_length=1, max_length=20)
    weightage: int = Field(100, ge=0, le=100)
    description: Optional[str] = None


class ExamTypeResponse(BaseModel):
    id: UUID
    name: str
    code: str
    description: Optional[str] = None
    weightage: int
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True

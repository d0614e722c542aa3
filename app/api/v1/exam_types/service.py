from typing import List

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ServiceError
from app.core.models import ExamType

from .schemas import ExamTypeCreate, ExamTypeResponse


async def list_exam_types(db: AsyncSession) -> List[ExamTypeResponse]:
    """Active exam types by name."""
    result = await db.execute(
        select(ExamType).where(ExamType.is_active.is_(True)).order_by(ExamType.name)
    )
    return [ExamTypeResponse.model_validate(et) for et in result.scalars().all()]


async def create_exam_type(db: AsyncSession, payload: ExamTypeCreate) -> ExamTypeResponse:
    code = payload.code.strip().upper()
    existing = await db.execute(select(ExamType.id).where(ExamType.code == code))
    if existing.scalar_one_or_none():
        raise ServiceError(f"Exam type with code '{code}' already exists", status.HTTP_409_CONFLICT)
    exam_type = ExamType(
        name=payload.name.strip(),
        code=code,
        weightage=payload.weightage,
        description=payload.description,
    )
    db.add(exam_type)
    try:
        await db.commit()
        await db.refresh(exam_type)
    except IntegrityError:
        await db.rollback()
        raise ServiceError(f"Exam type with code '{code}' already exists", status.HTTP_409_CONFLICT)
    return ExamTypeResponse.model_validate(exam_type)

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser
from app.core.exceptions import ServiceError
from app.db.session import get_db

from . import service
from .schemas import ExamTypeCreate, ExamTypeResponse

router = APIRouter(prefix="/api/v1/exam-types", tags=["exam-types"])


@router.get("", response_model=List[ExamTypeResponse])
async def list_exam_types(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await service.list_exam_types(db)


@router.post("", response_model=ExamTypeResponse, status_code=status.HTTP_201_CREATED)
async def create_exam_type(
    payload: ExamTypeCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Create an exam type. The code is stored upper-case and must be unique."""
    try:
        return await service.create_exam_type(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

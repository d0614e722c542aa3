"""Result deadline API router."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser
from app.core.exceptions import ServiceError
from app.db.session import get_db

from . import service
from .schemas import DeadlineStatus, ResultDeadlineCreate, ResultDeadlineResponse, ResultDeadlineToggle

router = APIRouter(prefix="/api/v1/results/deadlines", tags=["result-deadlines"])


@router.post(
    "",
    response_model=ResultDeadlineResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_deadline(
    payload: ResultDeadlineCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Create a submission window, or update the one that already exists for the same scope."""
    try:
        return await service.create_deadline(db, current_user.id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[ResultDeadlineResponse])
async def list_deadlines(
    session_id: Optional[UUID] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await service.list_deadlines(db, session_id=session_id)


@router.get("/status", response_model=DeadlineStatus)
async def get_deadline_status(
    session_id: UUID,
    exam_type_id: UUID,
    class_id: UUID,
    subject_id: Optional[UUID] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Is result submission open right now for this class (and subject)?"""
    return await service.resolve_deadline(db, session_id, exam_type_id, class_id, subject_id)


@router.post("/{deadline_id}/toggle", response_model=ResultDeadlineResponse)
async def toggle_deadline(
    deadline_id: UUID,
    payload: ResultDeadlineToggle,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Open or close a window without touching its dates."""
    try:
        return await service.toggle_deadline(db, deadline_id, payload.is_open)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

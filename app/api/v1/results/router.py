"""Results API router."""

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
    BulkResultSubmit,
    BulkSubmitResponse,
    ResultLockRequest,
    ResultLockResponse,
    ResultSubmit,
    StudentResultResponse,
)

router = APIRouter(prefix="/api/v1/results", tags=["results"])


# ----- Submission -----
@router.post(
    "",
    response_model=StudentResultResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_result(
    payload: ResultSubmit,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Submit marks for one student. Refused outside an open window or when the result is locked."""
    try:
        return await service.submit_result(db, current_user.id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/bulk", response_model=BulkSubmitResponse)
async def submit_bulk_results(
    payload: BulkResultSubmit,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Submit marks for a class-section in one subject. All-or-nothing on the deadline check."""
    try:
        return await service.submit_bulk_results(db, current_user.id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


# ----- Lock / unlock -----
@router.post("/lock", response_model=ResultLockResponse)
async def lock_results(
    payload: ResultLockRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    updated = await service.set_results_locked(db, payload, locked=True)
    return ResultLockResponse(updated=updated, is_locked=True)


@router.post("/unlock", response_model=ResultLockResponse)
async def unlock_results(
    payload: ResultLockRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    updated = await service.set_results_locked(db, payload, locked=False)
    return ResultLockResponse(updated=updated, is_locked=False)


# ----- Reads -----
@router.get("", response_model=List[StudentResultResponse])
async def get_results(
    session_id: UUID,
    exam_type_id: Optional[UUID] = Query(None),
    class_id: Optional[UUID] = Query(None),
    section_id: Optional[UUID] = Query(None),
    subject_id: Optional[UUID] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Results for a session, optionally narrowed to an exam type, class, section or subject."""
    return await service.get_results(
        db,
        session_id,
        exam_type_id=exam_type_id,
        class_id=class_id,
        section_id=section_id,
        subject_id=subject_id,
    )


@router.get("/students/{student_id}", response_model=List[StudentResultResponse])
async def get_student_results(
    student_id: UUID,
    session_id: Optional[UUID] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await service.get_student_results(db, student_id, session_id=session_id)

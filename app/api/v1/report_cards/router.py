from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser
from app.core.exceptions import ServiceError
from app.db.session import get_db

from . import service
from .schemas import ReportCardResponse

router = APIRouter(prefix="/api/v1/report-cards", tags=["report-cards"])


@router.get("/{student_id}", response_model=ReportCardResponse)
async def get_student_report_card(
    student_id: UUID,
    session_id: UUID,
    include_attendance: bool = Query(True),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Report card for one student and session: results, totals, overall grade and attendance."""
    try:
        return await service.get_student_report_card(
            db, student_id, session_id, include_attendance=include_attendance
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

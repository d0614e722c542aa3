"""Result submission windows: administration and the class-then-general resolver."""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ServiceError
from app.core.models import ResultDeadline
from app.core.timeutils import as_utc, utcnow

from .schemas import DeadlineStatus, ResultDeadlineCreate, ResultDeadlineResponse

logger = logging.getLogger(__name__)

SCOPE_CLASS = "class"
SCOPE_GENERAL = "general"


def _to_response(deadline: ResultDeadline) -> ResultDeadlineResponse:
    return ResultDeadlineResponse(
        id=deadline.id,
        session_id=deadline.session_id,
        session_name=deadline.session.name if deadline.session else None,
        exam_type_id=deadline.exam_type_id,
        exam_type_name=deadline.exam_type.name if deadline.exam_type else None,
        class_id=deadline.class_id,
        class_name=deadline.school_class.name if deadline.school_class else None,
        subject_id=deadline.subject_id,
        subject_name=deadline.subject.name if deadline.subject else None,
        start_date=deadline.start_date,
        end_date=deadline.end_date,
        is_open=deadline.is_open,
        created_by=deadline.created_by,
        created_at=deadline.created_at,
        updated_at=deadline.updated_at,
    )


def _nullable_eq(column, value: Optional[UUID]):
    return column.is_(None) if value is None else column == value


async def _find_open_deadline(
    db: AsyncSession,
    session_id: UUID,
    exam_type_id: UUID,
    class_id: Optional[UUID],
    subject_id: Optional[UUID],
    now: datetime,
) -> Optional[ResultDeadline]:
    """
    Open window for exactly this class scope (class_id None = general) covering now.
    A window for the requested subject beats one for all subjects; windows for other subjects
    never match. With no subject requested, a window for any subject matches, all-subjects first.
    """
    stmt = select(ResultDeadline).where(
        ResultDeadline.session_id == session_id,
        ResultDeadline.exam_type_id == exam_type_id,
        _nullable_eq(ResultDeadline.class_id, class_id),
        ResultDeadline.is_open.is_(True),
        ResultDeadline.start_date <= now,
        ResultDeadline.end_date >= now,
    )
    if subject_id is None:
        stmt = stmt.order_by(ResultDeadline.subject_id.is_not(None))
    else:
        stmt = stmt.where(
            (ResultDeadline.subject_id == subject_id) | ResultDeadline.subject_id.is_(None)
        ).order_by(ResultDeadline.subject_id.is_(None))
    result = await db.execute(stmt.limit(1))
    return result.scalars().first()


async def resolve_deadline(
    db: AsyncSession,
    session_id: UUID,
    exam_type_id: UUID,
    class_id: UUID,
    subject_id: Optional[UUID] = None,
    now: Optional[datetime] = None,
) -> DeadlineStatus:
    """Class-specific window first; the general window only when no class window is open."""
    now = as_utc(now) if now else utcnow()

    deadline = await _find_open_deadline(db, session_id, exam_type_id, class_id, subject_id, now)
    if deadline:
        return DeadlineStatus(is_open=True, scope=SCOPE_CLASS, deadline=_to_response(deadline))

    deadline = await _find_open_deadline(db, session_id, exam_type_id, None, subject_id, now)
    if deadline:
        return DeadlineStatus(is_open=True, scope=SCOPE_GENERAL, deadline=_to_response(deadline))

    return DeadlineStatus(is_open=False)


async def create_deadline(
    db: AsyncSession,
    user_id: UUID,
    payload: ResultDeadlineCreate,
) -> ResultDeadlineResponse:
    """Create the window for a scope, or replace the dates of the existing one."""
    start_date = as_utc(payload.start_date)
    end_date = as_utc(payload.end_date)
    if end_date <= start_date:
        raise ServiceError("end_date must be after start_date", status.HTTP_400_BAD_REQUEST)

    result = await db.execute(
        select(ResultDeadline).where(
            ResultDeadline.session_id == payload.session_id,
            ResultDeadline.exam_type_id == payload.exam_type_id,
            _nullable_eq(ResultDeadline.class_id, payload.class_id),
            _nullable_eq(ResultDeadline.subject_id, payload.subject_id),
        )
    )
    deadline = result.scalar_one_or_none()
    if deadline:
        deadline.start_date = start_date
        deadline.end_date = end_date
        deadline.is_open = payload.is_open
        deadline.created_by = user_id
        deadline.updated_at = utcnow()
    else:
        deadline = ResultDeadline(
            session_id=payload.session_id,
            exam_type_id=payload.exam_type_id,
            class_id=payload.class_id,
            subject_id=payload.subject_id,
            start_date=start_date,
            end_date=end_date,
            is_open=payload.is_open,
            created_by=user_id,
        )
        db.add(deadline)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ServiceError(
            f"A deadline for this combination already exists: {e.orig}",
            status.HTTP_409_CONFLICT,
        )
    logger.info(
        "Result deadline %s saved (session=%s exam_type=%s class=%s subject=%s open=%s)",
        deadline.id, deadline.session_id, deadline.exam_type_id,
        deadline.class_id, deadline.subject_id, deadline.is_open,
    )
    return await get_deadline(db, deadline.id)


async def get_deadline(db: AsyncSession, deadline_id: UUID) -> ResultDeadlineResponse:
    result = await db.execute(
        select(ResultDeadline)
        .where(ResultDeadline.id == deadline_id)
        .execution_options(populate_existing=True)
    )
    deadline = result.scalar_one_or_none()
    if not deadline:
        raise ServiceError("Deadline not found", status.HTTP_404_NOT_FOUND)
    return _to_response(deadline)


async def list_deadlines(
    db: AsyncSession,
    session_id: Optional[UUID] = None,
) -> List[ResultDeadlineResponse]:
    """All windows, latest end_date first."""
    stmt = select(ResultDeadline)
    if session_id:
        stmt = stmt.where(ResultDeadline.session_id == session_id)
    stmt = stmt.order_by(ResultDeadline.end_date.desc()).execution_options(populate_existing=True)
    result = await db.execute(stmt)
    return [_to_response(d) for d in result.scalars().all()]


async def toggle_deadline(
    db: AsyncSession,
    deadline_id: UUID,
    is_open: bool,
) -> ResultDeadlineResponse:
    result = await db.execute(
        update(ResultDeadline)
        .where(ResultDeadline.id == deadline_id)
        .values(is_open=is_open, updated_at=utcnow())
    )
    if result.rowcount == 0:
        await db.rollback()
        raise ServiceError("Deadline not found", status.HTTP_404_NOT_FOUND)
    await db.commit()
    logger.info("Result deadline %s %s", deadline_id, "opened" if is_open else "closed")
    return await get_deadline(db, deadline_id)

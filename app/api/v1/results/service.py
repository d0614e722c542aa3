"""
Result record store: single and bulk submission against the natural key, lock control and reads.

Both write paths are single upsert statements on uq_student_result_natural_key, so concurrent
submissions for the same key can neither duplicate a row nor slip past the lock check.
"""

import logging
import uuid
from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.result_deadlines.service import resolve_deadline
from app.core.config import settings
from app.core.enums import ABSENT_GRADE, BulkLockedPolicy
from app.core.exceptions import DeadlineClosed, ResultLocked, ServiceError
from app.core.grading import calculate_grade
from app.core.models import RESULT_NATURAL_KEY, StudentResult
from app.core.timeutils import utcnow
from app.db.upsert import upsert_insert

from .schemas import (
    BulkResultSubmit,
    BulkSubmitResponse,
    ResultLockRequest,
    ResultSubmit,
    StudentResultResponse,
)

logger = logging.getLogger(__name__)


def _to_response(r: StudentResult) -> StudentResultResponse:
    return StudentResultResponse(
        id=r.id,
        student_id=r.student_id,
        student_name=r.student.name if r.student else None,
        registration_no=r.student.registration_no if r.student else None,
        session_id=r.session_id,
        exam_type_id=r.exam_type_id,
        exam_type_name=r.exam_type.name if r.exam_type else None,
        exam_type_code=r.exam_type.code if r.exam_type else None,
        subject_id=r.subject_id,
        subject_name=r.subject.name if r.subject else None,
        subject_code=r.subject.code if r.subject else None,
        class_id=r.class_id,
        section_id=r.section_id,
        total_marks=r.total_marks,
        obtained_marks=r.obtained_marks,
        grade=r.grade,
        remarks=r.remarks,
        is_absent=r.is_absent,
        is_locked=r.is_locked,
        submitted_by=r.submitted_by,
        created_at=r.created_at,
        updated_at=r.updated_at,
    )


def derive_grade(obtained_marks: int, total_marks: int, is_absent: bool) -> str:
    """Absent results get the AB sentinel and never reach the calculator."""
    if is_absent:
        return ABSENT_GRADE
    return calculate_grade(obtained_marks, total_marks).value


async def _ensure_window_open(
    db: AsyncSession,
    session_id: UUID,
    exam_type_id: UUID,
    class_id: UUID,
    subject_id: UUID,
) -> None:
    window = await resolve_deadline(db, session_id, exam_type_id, class_id, subject_id)
    if not window.is_open:
        logger.warning(
            "Result submission refused, no open window (session=%s exam_type=%s class=%s subject=%s)",
            session_id, exam_type_id, class_id, subject_id,
        )
        raise DeadlineClosed()


# ----- Single submission -----
async def submit_result(
    db: AsyncSession,
    user_id: UUID,
    payload: ResultSubmit,
) -> StudentResultResponse:
    """
    Insert or update one result. Refuses with DeadlineClosed when no window is open and with
    ResultLocked when the existing row is locked; neither case writes anything.
    """
    await _ensure_window_open(
        db, payload.session_id, payload.exam_type_id, payload.class_id, payload.subject_id
    )
    grade = derive_grade(payload.obtained_marks, payload.total_marks, payload.is_absent)
    now = utcnow()

    insert_stmt = upsert_insert(db, StudentResult).values(
        id=uuid.uuid4(),
        student_id=payload.student_id,
        session_id=payload.session_id,
        exam_type_id=payload.exam_type_id,
        subject_id=payload.subject_id,
        class_id=payload.class_id,
        section_id=payload.section_id,
        total_marks=payload.total_marks,
        obtained_marks=payload.obtained_marks,
        grade=grade,
        remarks=payload.remarks,
        is_absent=payload.is_absent,
        is_locked=False,
        submitted_by=user_id,
        created_at=now,
        updated_at=now,
    )
    excluded = insert_stmt.excluded
    stmt = insert_stmt.on_conflict_do_update(
        index_elements=list(RESULT_NATURAL_KEY),
        set_={
            "class_id": excluded.class_id,
            "section_id": excluded.section_id,
            "total_marks": excluded.total_marks,
            "obtained_marks": excluded.obtained_marks,
            "grade": excluded.grade,
            "remarks": excluded.remarks,
            "is_absent": excluded.is_absent,
            "submitted_by": excluded.submitted_by,
            "updated_at": excluded.updated_at,
        },
        where=StudentResult.is_locked.is_(False),
    ).returning(StudentResult.id)

    try:
        result = await db.execute(stmt)
        result_id = result.scalar_one_or_none()
    except IntegrityError as e:
        await db.rollback()
        raise ServiceError(f"Could not save results: {e.orig}", status.HTTP_409_CONFLICT)
    if result_id is None:
        # Conflict with a locked row: the guarded DO UPDATE matched nothing.
        await db.rollback()
        logger.warning(
            "Result submission refused, result locked (student=%s session=%s exam_type=%s subject=%s)",
            payload.student_id, payload.session_id, payload.exam_type_id, payload.subject_id,
        )
        raise ResultLocked()
    await db.commit()
    logger.info("Result %s saved by %s (grade=%s)", result_id, user_id, grade)
    return await get_result(db, result_id)


# ----- Bulk submission -----
async def submit_bulk_results(
    db: AsyncSession,
    user_id: UUID,
    payload: BulkResultSubmit,
    locked_policy: Optional[BulkLockedPolicy] = None,
) -> BulkSubmitResponse:
    """
    Upsert a class-section's marks for one subject in one statement.

    The window is checked once; a closed window rejects the whole batch. Locked rows follow
    locked_policy (default: settings.results_bulk_locked_policy):
    SKIP leaves them untouched and reports their student ids, OVERWRITE writes them and unlocks them.
    """
    policy = BulkLockedPolicy(locked_policy or settings.results_bulk_locked_policy)
    await _ensure_window_open(
        db, payload.session_id, payload.exam_type_id, payload.class_id, payload.subject_id
    )

    entries = payload.results
    skipped: List[UUID] = []
    if policy is BulkLockedPolicy.SKIP:
        locked_result = await db.execute(
            select(StudentResult.student_id).where(
                StudentResult.session_id == payload.session_id,
                StudentResult.exam_type_id == payload.exam_type_id,
                StudentResult.subject_id == payload.subject_id,
                StudentResult.student_id.in_([e.student_id for e in entries]),
                StudentResult.is_locked.is_(True),
            )
        )
        locked_ids = set(locked_result.scalars().all())
        skipped = [e.student_id for e in entries if e.student_id in locked_ids]
        entries = [e for e in entries if e.student_id not in locked_ids]

    if not entries:
        logger.info("Bulk result submission wrote nothing, all %d rows locked", len(skipped))
        return BulkSubmitResponse(submitted=0, skipped_student_ids=skipped)

    now = utcnow()
    rows = [
        {
            "id": uuid.uuid4(),
            "student_id": e.student_id,
            "session_id": payload.session_id,
            "exam_type_id": payload.exam_type_id,
            "subject_id": payload.subject_id,
            "class_id": payload.class_id,
            "section_id": payload.section_id,
            "total_marks": payload.total_marks,
            "obtained_marks": e.obtained_marks,
            "grade": derive_grade(e.obtained_marks, payload.total_marks, e.is_absent),
            "remarks": e.remarks,
            "is_absent": e.is_absent,
            "is_locked": False,
            "submitted_by": user_id,
            "created_at": now,
            "updated_at": now,
        }
        for e in entries
    ]
    insert_stmt = upsert_insert(db, StudentResult).values(rows)
    excluded = insert_stmt.excluded
    set_ = {
        "class_id": excluded.class_id,
        "section_id": excluded.section_id,
        "total_marks": excluded.total_marks,
        "obtained_marks": excluded.obtained_marks,
        "grade": excluded.grade,
        "remarks": excluded.remarks,
        "is_absent": excluded.is_absent,
        "submitted_by": excluded.submitted_by,
        "updated_at": excluded.updated_at,
    }
    if policy is BulkLockedPolicy.SKIP:
        # Guards rows locked between the lookup above and this statement.
        stmt = insert_stmt.on_conflict_do_update(
            index_elements=list(RESULT_NATURAL_KEY),
            set_=set_,
            where=StudentResult.is_locked.is_(False),
        )
    else:
        set_["is_locked"] = excluded.is_locked
        stmt = insert_stmt.on_conflict_do_update(
            index_elements=list(RESULT_NATURAL_KEY),
            set_=set_,
        )
    stmt = stmt.returning(StudentResult.student_id)

    try:
        result = await db.execute(stmt)
        written = set(result.scalars().all())
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ServiceError(f"Could not save results: {e.orig}", status.HTTP_409_CONFLICT)

    skipped.extend(e.student_id for e in entries if e.student_id not in written)
    logger.info(
        "Bulk results saved by %s: %d written, %d skipped (session=%s exam_type=%s subject=%s class=%s policy=%s)",
        user_id, len(written), len(skipped), payload.session_id, payload.exam_type_id,
        payload.subject_id, payload.class_id, policy.value,
    )
    return BulkSubmitResponse(submitted=len(written), skipped_student_ids=skipped)


# ----- Lock / unlock -----
async def set_results_locked(
    db: AsyncSession,
    payload: ResultLockRequest,
    locked: bool,
) -> int:
    """Lock or unlock every result in the scope. Administrative; ignores submission windows."""
    stmt = (
        update(StudentResult)
        .where(
            StudentResult.session_id == payload.session_id,
            StudentResult.exam_type_id == payload.exam_type_id,
        )
        .values(is_locked=locked, updated_at=utcnow())
    )
    if payload.class_id:
        stmt = stmt.where(StudentResult.class_id == payload.class_id)
    if payload.subject_id:
        stmt = stmt.where(StudentResult.subject_id == payload.subject_id)
    result = await db.execute(stmt)
    await db.commit()
    logger.info(
        "%s %d results (session=%s exam_type=%s class=%s subject=%s)",
        "Locked" if locked else "Unlocked", result.rowcount,
        payload.session_id, payload.exam_type_id, payload.class_id, payload.subject_id,
    )
    return result.rowcount


# ----- Reads -----
async def get_result(db: AsyncSession, result_id: UUID) -> StudentResultResponse:
    result = await db.execute(
        select(StudentResult)
        .where(StudentResult.id == result_id)
        .execution_options(populate_existing=True)
    )
    row = result.scalar_one_or_none()
    if not row:
        raise ServiceError("Result not found", status.HTTP_404_NOT_FOUND)
    return _to_response(row)


async def get_results(
    db: AsyncSession,
    session_id: UUID,
    exam_type_id: Optional[UUID] = None,
    class_id: Optional[UUID] = None,
    section_id: Optional[UUID] = None,
    subject_id: Optional[UUID] = None,
) -> List[StudentResultResponse]:
    """Results for a session, narrowed by any of the optional filters. Most recent first."""
    stmt = select(StudentResult).where(StudentResult.session_id == session_id)
    if exam_type_id:
        stmt = stmt.where(StudentResult.exam_type_id == exam_type_id)
    if class_id:
        stmt = stmt.where(StudentResult.class_id == class_id)
    if section_id:
        stmt = stmt.where(StudentResult.section_id == section_id)
    if subject_id:
        stmt = stmt.where(StudentResult.subject_id == subject_id)
    stmt = stmt.order_by(StudentResult.created_at.desc()).execution_options(populate_existing=True)
    result = await db.execute(stmt)
    return [_to_response(r) for r in result.scalars().all()]


async def get_student_results(
    db: AsyncSession,
    student_id: UUID,
    session_id: Optional[UUID] = None,
) -> List[StudentResultResponse]:
    stmt = select(StudentResult).where(StudentResult.student_id == student_id)
    if session_id:
        stmt = stmt.where(StudentResult.session_id == session_id)
    stmt = stmt.order_by(StudentResult.created_at.desc()).execution_options(populate_existing=True)
    result = await db.execute(stmt)
    return [_to_response(r) for r in result.scalars().all()]

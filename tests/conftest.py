import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from datetime import date, timedelta
from types import SimpleNamespace
from typing import AsyncGenerator, Dict, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.auth.models import User
from app.auth.security import create_access_token
from app.core.models import (
    AcademicSession,
    ExamType,
    ResultDeadline,
    SchoolClass,
    Section,
    Student,
    Subject,
)
from app.core.timeutils import utcnow
from app.db.schema_check import SCHEMAS
from app.db.session import Base, get_db
from app.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture()
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database per test; PostgreSQL schemas are mapped away for SQLite."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        execution_options={"schema_translate_map": {schema: None for schema in SCHEMAS}},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.clear()
    await engine.dispose()


@pytest.fixture()
async def school(db_session: AsyncSession) -> SimpleNamespace:
    """One session, two classes with a section each, two subjects, three students in class 1-A and one in 2-A."""
    teacher = User(full_name="Asha Teacher", email="asha@example.com", role="teacher")
    inactive = User(full_name="Old Account", email="old@example.com", role="teacher", status="INACTIVE")
    today = date.today()
    session = AcademicSession(
        name="2025-2026",
        start_date=today - timedelta(days=180),
        end_date=today + timedelta(days=180),
        is_current=True,
    )
    midterm = ExamType(name="Midterm", code="MID", weightage=40)
    final = ExamType(name="Final", code="FIN", weightage=60)
    class_one = SchoolClass(name="1st", grade_level=1)
    class_two = SchoolClass(name="2nd", grade_level=2)
    db_session.add_all([teacher, inactive, session, midterm, final, class_one, class_two])
    await db_session.flush()

    section_one = Section(class_id=class_one.id, name="A")
    section_two = Section(class_id=class_two.id, name="A")
    maths = Subject(name="Mathematics", code="MATH")
    science = Subject(name="Science", code="SCI")
    db_session.add_all([section_one, section_two, maths, science])
    await db_session.flush()

    students = [
        Student(name=name, registration_no=f"REG-{i:03d}", class_id=class_one.id, section_id=section_one.id)
        for i, name in enumerate(["Aarav", "Bina", "Chen"], start=1)
    ]
    other_student = Student(
        name="Dev", registration_no="REG-100", class_id=class_two.id, section_id=section_two.id
    )
    db_session.add_all(students + [other_student])
    await db_session.commit()

    return SimpleNamespace(
        teacher=teacher,
        inactive=inactive,
        session=session,
        midterm=midterm,
        final=final,
        class_one=class_one,
        class_two=class_two,
        section_one=section_one,
        section_two=section_two,
        maths=maths,
        science=science,
        students=students,
        other_student=other_student,
    )


@pytest.fixture()
def add_deadline(db_session: AsyncSession):
    """Insert a deadline row directly. Window is open and covers now unless told otherwise."""

    async def _add(
        school: SimpleNamespace,
        class_id=None,
        subject_id=None,
        exam_type_id=None,
        is_open: bool = True,
        starts_in: timedelta = timedelta(days=-1),
        ends_in: timedelta = timedelta(days=1),
    ) -> ResultDeadline:
        now = utcnow()
        deadline = ResultDeadline(
            session_id=school.session.id,
            exam_type_id=exam_type_id or school.midterm.id,
            class_id=class_id,
            subject_id=subject_id,
            start_date=now + starts_in,
            end_date=now + ends_in,
            is_open=is_open,
            created_by=school.teacher.id,
        )
        db_session.add(deadline)
        await db_session.commit()
        return deadline

    return _add


def auth_headers_for(user: User, role: Optional[str] = None) -> Dict[str, str]:
    token = create_access_token(subject={"sub": str(user.id), "role": role or user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def headers_for():
    """Build bearer headers for any user."""
    return auth_headers_for


@pytest.fixture()
def auth_headers(school: SimpleNamespace) -> Dict[str, str]:
    return auth_headers_for(school.teacher)


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

"""
Shared pytest fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without a
live Postgres instance. StaticPool keeps every session on the one connection
that holds the in-memory schema.

Environment overrides are applied before importing app modules so that
Settings() picks up the test database URL.
"""
import os

# Set test environment BEFORE importing any app module
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEV_SKIP_AUTH", "true")
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("SQS_EXPORT_QUEUE_URL", "")
os.environ.setdefault("S3_ATTACHMENTS_BUCKET", "")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from elacak.core.security import hash_password
from elacak.models import Base, District, User, Village
from elacak.schemas.housing import HousingRecordCreate
from elacak.services import housing
from elacak.services.storage import LocalBlobStore

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "secret123"


class RecordingExporter:
    """Report exporter that keeps render requests in memory."""

    def __init__(self):
        self.jobs: list[tuple[str, str, list[dict]]] = []

    def export(self, filename: str, report_format: str, rows: list[dict]) -> str:
        self.jobs.append((filename, report_format, rows))
        return f"/reports/{filename}"


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # SQLite doesn't enforce FK by default, enable it
    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session
        await session.rollback()


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def district(db_session: AsyncSession) -> District:
    row = District(name="Bandar Lampung", code="BDL")
    db_session.add(row)
    await db_session.commit()
    return row


@pytest_asyncio.fixture
async def village(db_session: AsyncSession, district: District) -> Village:
    row = Village(name="Kedaton", code="KDT", district_id=district.id)
    db_session.add(row)
    await db_session.commit()
    return row


@pytest_asyncio.fixture
async def other_district(db_session: AsyncSession) -> District:
    row = District(name="Metro", code="MTR")
    db_session.add(row)
    await db_session.commit()
    return row


@pytest_asyncio.fixture
async def other_village(db_session: AsyncSession, other_district: District) -> Village:
    row = Village(name="Hadimulyo", code="HDM", district_id=other_district.id)
    db_session.add(row)
    await db_session.commit()
    return row


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

async def _make_user(db: AsyncSession, username: str, role: str, **scope) -> User:
    user = User(
        username=username,
        email=f"{username}@test.local",
        password_hash=hash_password(TEST_PASSWORD),
        role=role,
        is_active=True,
        **scope,
    )
    db.add(user)
    await db.commit()
    return user


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "admin", "PUPR_ADMIN")


@pytest_asyncio.fixture
async def district_operator(db_session: AsyncSession, district: District) -> User:
    return await _make_user(
        db_session, "district_op", "DISTRICT_OPERATOR", district_id=district.id
    )


@pytest_asyncio.fixture
async def village_operator(db_session: AsyncSession, village: Village) -> User:
    return await _make_user(
        db_session,
        "village_op",
        "VILLAGE_OPERATOR",
        district_id=village.district_id,
        village_id=village.id,
    )


@pytest_asyncio.fixture
async def public_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "citizen", "PUBLIC")


# ---------------------------------------------------------------------------
# Housing records
# ---------------------------------------------------------------------------

@pytest.fixture
def housing_payload(district: District, village: Village):
    """Factory for a valid create payload; keyword overrides replace fields."""
    counter = iter(range(1, 10_000))

    def _payload(**overrides) -> dict:
        data = {
            "head_of_household": "Budi Santoso",
            "nik": f"{1871010000000000 + next(counter)}",
            "housing_status": "RTLH",
            "eligibility_category": "POOR",
            "district_id": district.id,
            "village_id": village.id,
            "latitude": "-5.39712345",
            "longitude": "105.26654321",
            "address": "Jl. Teuku Umar No. 1",
            "phone": "081234567890",
            "family_members": 4,
            "monthly_income": "1500000.50",
            "house_condition_score": 35,
        }
        data.update(overrides)
        return data

    return _payload


@pytest.fixture
def make_record(db_session: AsyncSession, admin_user: User, housing_payload):
    async def _make(**overrides):
        payload = HousingRecordCreate(**housing_payload(**overrides))
        mutation = await housing.create_record(db_session, payload, admin_user.id)
        return mutation.result

    return _make


# ---------------------------------------------------------------------------
# API client
# ---------------------------------------------------------------------------

@pytest.fixture
def report_exporter() -> RecordingExporter:
    return RecordingExporter()


@pytest.fixture
def blob_store(tmp_path) -> LocalBlobStore:
    return LocalBlobStore(tmp_path / "uploads", "/uploads")


@pytest_asyncio.fixture
async def client(db_session: AsyncSession, admin_user: User, blob_store, report_exporter):
    """
    AsyncClient for the FastAPI app with:
    - DB dependency overridden to use the test session
    - DEV_SKIP_AUTH=true so requests are authenticated as admin_user
      by default (pass an X-Dev-User-ID header with another user id to
      switch users).
    """
    from elacak.core.db import get_db
    from elacak.main import app
    from elacak.services.reports import get_report_exporter
    from elacak.services.storage import get_blob_store

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    app.dependency_overrides[get_report_exporter] = lambda: report_exporter

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
        headers={"X-Dev-User-ID": str(admin_user.id)},
    ) as ac:
        yield ac

    app.dependency_overrides.clear()

"""
Test Suite Configuration

An in-memory SQLite store seeded with the dataset in tests/seed.py, a report
service over it and an HTTP client bound to the application.
"""
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from pos_reporting.config import Settings
from pos_reporting.database.models import Base
from pos_reporting.main import create_app
from pos_reporting.reporting import ReportService
from pos_reporting.serving.cache import ResultCache

from tests.seed import NOW, FakeClock, seed_rows


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        APP_ENV="testing",
        DEBUG=True,
    )


@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory database shared by every session of one test"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory over the seeded database"""
    factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with factory() as session:
        session.add_all(seed_rows())
        await session.commit()
    return factory


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def report_service(session_factory, clock) -> ReportService:
    """Report service with a summary cache on the fake clock"""
    return ReportService(
        session_factory,
        summary_cache=ResultCache("sales-summary", ttl_seconds=60, clock=clock),
        query_timeout=5.0,
        now=lambda: NOW,
    )


@pytest.fixture
async def broken_service() -> AsyncGenerator[ReportService, None]:
    """Report service over a database with no tables"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    yield ReportService(async_sessionmaker(bind=engine, class_=AsyncSession), query_timeout=5.0)
    await engine.dispose()


@pytest.fixture
def app(test_settings, report_service):
    """Application with the seeded report service, lifespan not run"""
    application = create_app(test_settings, rate_limit=False)
    application.state.report_service = report_service
    return application


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the application"""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client

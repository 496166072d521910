"""Pytest configuration and fixtures."""
import os
from pathlib import Path
from uuid import uuid4

import jwt
import pytest
from alembic import command
from alembic.config import Config as AlembicConfig
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

# Ensure the application uses a dedicated SQLite database during tests
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
# The sweep is exercised directly; never start the background loop in tests
os.environ["LIVENESS_SWEEP_ENABLED"] = "false"
os.environ["API_KEY"] = ""
os.environ["ENVIRONMENT"] = "test"

from editor_activity.config import get_settings


BASE_DIR = Path(__file__).resolve().parent.parent
TEST_DB_PATH = BASE_DIR / "test.db"
settings = get_settings()


@pytest.fixture(scope="session", autouse=True)
def apply_migrations():
    """Apply database migrations against the test database."""
    if TEST_DB_PATH.exists():
        TEST_DB_PATH.unlink()

    alembic_cfg = AlembicConfig(str(BASE_DIR / "alembic.ini"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.database_url)
    command.upgrade(alembic_cfg, "head")

    yield

    if TEST_DB_PATH.exists():
        try:
            TEST_DB_PATH.unlink()
        except PermissionError:
            # On Windows the file may still be held open; the next run removes it
            pass


@pytest.fixture
async def test_engine():
    """Create a test database engine bound to the migrated database."""
    engine = create_async_engine(
        settings.database_url,
        echo=False,
        pool_pre_ping=True,
    )

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Session factory for tests that need several independent sessions."""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def db_session(session_factory):
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()
        await session.close()


@pytest.fixture
async def test_app(session_factory):
    """Create test app with database override."""
    from editor_activity.main import app
    from editor_activity.database import get_db

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            finally:
                await session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def unique_user_id():
    """Factory for user ids that do not collide across tests."""

    def _make() -> str:
        return f"user-{uuid4().hex[:12]}"

    return _make


@pytest.fixture
def unique_project_path():
    """Factory for Windows-style project paths that do not collide across tests."""

    def _make(name: str = "project") -> str:
        return f"C:\\Users\\dev\\workspace\\{name}-{uuid4().hex[:8]}"

    return _make


@pytest.fixture
def make_token():
    """Issue a bearer token the way the identity provider does."""

    def _make(user_id: str, claim: str = "sub") -> str:
        return jwt.encode({claim: user_id}, settings.secret_key, algorithm=settings.jwt_algorithm)

    return _make


@pytest.fixture
def sample_structure():
    """A small nested structure with files at several depths."""
    return {
        "project_name": "demo",
        "files": [
            {
                "file_name": "README.md",
                "idle_duration": 1,
                "total_duration": 4,
                "keystrokes_count": 10,
                "file_switch_count": 1,
            },
        ],
        "folders": [
            {
                "folder_name": "src",
                "files": [
                    {
                        "file_name": "a.ts",
                        "idle_duration": 5,
                        "total_duration": 20,
                        "keystrokes_count": 100,
                        "file_switch_count": 2,
                    },
                ],
                "folders": [
                    {
                        "folder_name": "utils",
                        "files": [
                            {
                                "file_name": "b.ts",
                                "idle_duration": 3,
                                "total_duration": 9,
                                "keystrokes_count": 40,
                                "file_switch_count": 4,
                            },
                        ],
                        "folders": [],
                    },
                ],
            },
            {
                "folder_name": "test",
                "files": [
                    {
                        "file_name": "a.test.ts",
                        "idle_duration": 0,
                        "total_duration": 7,
                        "keystrokes_count": 25,
                        "file_switch_count": 1,
                    },
                ],
                "folders": [],
            },
        ],
    }

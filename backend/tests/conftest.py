"""
Map Notes Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment overrides are applied before any mapnotes import so the
       settings singleton is built for testing (memory backend, SQLite URL,
       rate limiting off, quiet logs).

Fixture Hierarchy (all function-scoped):
    ├── memory_table: empty in-memory Sheet1
    ├── missing_table: accessor whose sheet does not exist
    ├── csv_workbook: temporary workbook directory containing an empty Sheet1.csv
    ├── db_session_factory: SQLite database with the schema and Sheet1 created
    └── test_client: HTTPX AsyncClient bound to the app, get_table → memory_table
"""

import os
import tempfile

_TEST_ROOT = tempfile.mkdtemp(prefix="mapnotes_test_")

os.environ["TABLE_BACKEND"] = "memory"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/app.db"
os.environ["CSV_WORKBOOK_DIR"] = os.path.join(_TEST_ROOT, "workbook")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402

from mapnotes.services.memory_table import MemoryTableAccessor  # noqa: E402


@pytest.fixture
def memory_table():
    """An existing, empty sheet named Sheet1."""
    return MemoryTableAccessor("Sheet1")


@pytest.fixture
def missing_table():
    """A workbook in which Sheet1 does not exist."""
    return MemoryTableAccessor("Sheet1", exists=False)


@pytest.fixture
def csv_workbook(tmp_path):
    """Workbook directory holding an empty Sheet1.csv."""
    workbook = tmp_path / "workbook"
    workbook.mkdir()
    (workbook / "Sheet1.csv").write_text("", encoding="utf-8")
    return workbook


@pytest_asyncio.fixture
async def db_session_factory(tmp_path):
    """
    Session factory for a fresh SQLite database with the sheet tables and
    a Sheet1 row, mirroring what migration 001 sets up.
    """
    from mapnotes.database import Base
    from mapnotes.models.sheet import Sheet

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/sheets.db")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        session.add(Sheet(name="Sheet1"))
        await session.commit()

    yield factory

    await engine.dispose()


@pytest_asyncio.fixture
async def test_client(memory_table):
    """
    HTTPX AsyncClient talking to the FastAPI app through ASGITransport.

    get_table is overridden to hand every request the memory_table fixture,
    so tests can inspect memory_table.rows after a call.
    """
    from mapnotes.main import app
    from mapnotes.services.table_provider import get_table

    async def override_get_table():
        yield memory_table

    app.dependency_overrides[get_table] = override_get_table
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()

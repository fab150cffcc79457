"""
Name: Integration Test DB Setup

Responsibilities:
  - Ensure database schema exists before integration tests run
  - Run Alembic migrations once per test session
  - Provide a per-test AsyncConnectionPool and clean tables

Notes:
  - Only runs when RUN_INTEGRATION=1
  - Uses DATABASE_URL from environment (see alembic/env.py)
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from psycopg import connect
from psycopg_pool import AsyncConnectionPool

from dealership.crosscutting.config import get_settings

DB_USER = os.getenv("POSTGRES_USER", "postgres")
DB_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
DB_HOST = os.getenv("POSTGRES_HOST", "localhost")
DB_PORT = os.getenv("POSTGRES_HOST_PORT", "5432")
DB_NAME = os.getenv("POSTGRES_DB", "dealership")
DEFAULT_DATABASE_URL = (
    f"postgresql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
)

RUN_INTEGRATION = os.getenv("RUN_INTEGRATION") == "1"

if RUN_INTEGRATION:
    os.environ["APP_ENV"] = "integration"
    os.environ.setdefault("DATABASE_URL", DEFAULT_DATABASE_URL)
    get_settings.cache_clear()


def pytest_collection_modifyitems(config, items) -> None:
    if RUN_INTEGRATION:
        return
    skip = pytest.mark.skip(reason="Set RUN_INTEGRATION=1 to run PostgreSQL tests")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(scope="session")
def database_url() -> str:
    return os.environ["DATABASE_URL"]


@pytest.fixture(scope="session", autouse=True)
def apply_migrations() -> None:
    """Run Alembic migrations for integration tests."""
    if not RUN_INTEGRATION:
        return

    root_dir = Path(__file__).resolve().parents[2]
    config = Config(str(root_dir / "alembic.ini"))
    config.set_main_option("script_location", str(root_dir / "alembic"))

    command.upgrade(config, "head")


@pytest.fixture
def clean_tables(database_url: str) -> None:
    with connect(database_url, autocommit=True) as conn:
        conn.execute("TRUNCATE vehicles, persons, historial")


@pytest.fixture
async def pool(database_url: str, clean_tables):
    """R: Pool bound to the current test's event loop."""
    async with AsyncConnectionPool(
        conninfo=database_url, min_size=1, max_size=4, open=False
    ) as pool:
        await pool.wait()
        yield pool

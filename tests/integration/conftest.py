import hashlib
import os
import uuid
from collections.abc import Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from docvault.config.settings import Settings
from docvault.database.connection import close_pool, get_connection, init_pool

_SCHEMA = Path(__file__).resolve().parents[2] / "docvault" / "database" / "schema.sql"


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "docvault_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute(_SCHEMA.read_text(encoding="utf-8"))
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run integration tests")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def unique_hash(db_conn: psycopg.Connection[Any]) -> Generator[str, None, None]:
    sha256_hash = hashlib.sha256(uuid.uuid4().bytes).hexdigest()
    yield sha256_hash
    db_conn.execute("DELETE FROM document_hashes WHERE sha256_hash = %s", (sha256_hash,))
    db_conn.commit()


@pytest.fixture
def unique_user(db_conn: psycopg.Connection[Any]) -> Generator[str, None, None]:
    user_id = f"it-{uuid.uuid4()}"
    yield user_id
    for table in ("account_flags", "security_events", "documents"):
        db_conn.execute(f"DELETE FROM {table} WHERE user_id = %s", (user_id,))
    db_conn.execute("DELETE FROM blacklisted_emails WHERE associated_user_id = %s", (user_id,))
    db_conn.commit()

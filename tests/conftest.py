"""
Shared pytest fixtures and configuration for tablespine tests.

This module provides:
- A fresh in-memory SQLite connection per test
- The companies / company_details / employees tables, seeded
- Repositories for the sample entities in ``tests/_support``
- Settings cache isolation

Usage:
    Fixtures are auto-discovered by pytest.  Use them as function
    arguments::

        def test_reads(company_repo, seeded_conn):
            assert company_repo.count(seeded_conn) == 12
"""

import os
import sys
from pathlib import Path
from typing import Generator

import pytest
import structlog

# Ensure tablespine package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent.parent))

from tablespine.core.repository import Repository
from tablespine.core.settings import clear_settings_cache
from tablespine.ops.sqlite_conn import SqliteConnection

from tests._support import (
    COMPANIES_DDL,
    COMPANY_DETAILS_DDL,
    COMPANY_DETAILS_ROWS,
    COMPANY_ROWS,
    EMPLOYEES_DDL,
    Company,
    CompanyDetails,
    Employee,
)


# =============================================================================
# Settings / Logging Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Drop cached settings, TABLESPINE_* variables and structlog config around every test."""
    for key in list(os.environ):
        if key.startswith("TABLESPINE_"):
            monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()
    structlog.reset_defaults()


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def conn() -> Generator[SqliteConnection, None, None]:
    """Empty in-memory database with the sample tables created."""
    connection = SqliteConnection(":memory:")
    connection.execute(COMPANIES_DDL)
    connection.execute(COMPANY_DETAILS_DDL)
    connection.execute(EMPLOYEES_DDL)
    yield connection
    connection.close()


@pytest.fixture
def seeded_conn(conn: SqliteConnection) -> SqliteConnection:
    """``conn`` with the twelve sample companies."""
    conn.executemany("INSERT INTO companies (id, company_name, city) VALUES (?,?,?)", COMPANY_ROWS)
    return conn


@pytest.fixture
def details_conn(seeded_conn: SqliteConnection) -> SqliteConnection:
    """``seeded_conn`` plus detail rows for co005 and co006 (foreign keys enforced)."""
    seeded_conn.executemany(
        "INSERT INTO company_details (id, company_id, business_type, description) VALUES (?,?,?,?)",
        COMPANY_DETAILS_ROWS,
    )
    return seeded_conn


# =============================================================================
# Repository Fixtures
# =============================================================================


@pytest.fixture
def company_repo() -> Repository[Company]:
    return Repository(Company)


@pytest.fixture
def details_repo() -> Repository[CompanyDetails]:
    return Repository(CompanyDetails)


@pytest.fixture
def employee_repo() -> Repository[Employee]:
    return Repository(Employee)

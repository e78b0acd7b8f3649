"""
Test support utilities for tablespine tests.

Sample entities mapped onto the tables created by ``tests/conftest.py``
and SQL snippets for creating and seeding them.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from enum import Enum

from tablespine.core.metadata import GenerationType, column, identity

COMPANIES_DDL = """
    CREATE TABLE companies (
        id VARCHAR(5) NOT NULL UNIQUE,
        company_name VARCHAR(36) NOT NULL,
        city VARCHAR(45) NOT NULL,
        PRIMARY KEY (id)
    )
"""

COMPANY_ROWS = [
    ("co001", "Veloxia Technologies", "Genoa"),
    ("co002", "Zephyr Dynamics", "Genoa"),
    ("co003", "EchoSafe Security", "Genoa"),
    ("co004", "Solstice Renewables", "Genoa"),
    ("co005", "Vortex Gaming", "Milan"),
    ("co006", "Aether Innovations", "Milan"),
    ("co007", "BluePeak Logistics", "Milan"),
    ("co008", "Prisma Design Co", "Rome"),
    ("co009", "Lumina Textiles", "Rome"),
    ("co010", "Celestia Entertainment", "Turin"),
    ("co011", "Mirage Media Studios", "Turin"),
    ("co012", "PyroTech Electronics", "Venice"),
]

COMPANY_DETAILS_DDL = """
    CREATE TABLE company_details (
        id VARCHAR(5) NOT NULL PRIMARY KEY,
        company_id VARCHAR(5) NOT NULL REFERENCES companies (id),
        business_type VARCHAR(45),
        description TEXT
    )
"""

COMPANY_DETAILS_ROWS = [
    ("cd001", "co005", "Entertainment", "Console and PC titles"),
    ("cd002", "co006", "Research", "Applied materials lab"),
]

EMPLOYEES_DDL = """
    CREATE TABLE employees (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        status TEXT,
        hired_on TEXT,
        updated_at TEXT
    )
"""


@dataclass
class Company:
    __tablename__ = "companies"

    id: str | None = identity()
    company_name: str | None = column("company_name")
    city: str | None = column()

    # Not mapped: filled by joins or left empty
    description_extra_field: str | None = None


@dataclass
class ExpandedCompany(Company):
    extra_field_from_another_table: str | None = None


@dataclass
class CompanyDetails:
    __tablename__ = "company_details"

    id: str | None = identity()
    company_id: str | None = column("company_id")
    business_type: str | None = column("business_type")
    description: str | None = column()


class Status(Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


@dataclass
class Employee:
    __tablename__ = "employees"

    id: int | None = identity(generated=GenerationType.AUTO)
    name: str | None = column()
    status: Status | None = column()
    hired_on: dt.date | None = column("hired_on")
    updated_at: dt.datetime | None = column("updated_at")


class Unmapped:
    """Plain class: no dataclass, no columns."""


@dataclass
class Keyless:
    __tablename__ = "keyless"

    label: str | None = column()
    amount: int | None = column()

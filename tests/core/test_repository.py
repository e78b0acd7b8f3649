"""Tests for tablespine.core.repository: counts and reads.

Runs against the twelve sample companies seeded by ``seeded_conn``.
Mutations live in ``test_repository_mutations.py``, hooks in
``test_repository_hooks.py``.
"""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from tablespine.core.errors import MappingError, QueryError
from tablespine.core.metadata import column, identity
from tablespine.core.paging import Pageable
from tablespine.core.repository import Repository, is_value_set

from tests._support import Company, Keyless
from tests._support.fault_injection import RecordingConnection


@dataclass
class RenamedCompany:
    """Field names that differ from their columns."""

    __tablename__ = "companies"

    code: str | None = identity("id")
    title: str | None = column("company_name")
    town: str | None = column("city")


def names(companies) -> list[str]:
    return [c.company_name for c in companies]


class TestIsValueSet:
    @pytest.mark.parametrize("value", [[], ["a"], ("a",), {"a"}, frozenset({"a"})])
    def test_collections(self, value):
        assert is_value_set(value)

    @pytest.mark.parametrize("value", ["Milan", b"x", 3, None, {"a": 1}])
    def test_scalars(self, value):
        assert not is_value_set(value)


class TestRepositoryMetadata:
    def test_shortcuts(self, company_repo):
        assert company_repo.table_name == "companies"
        assert company_repo.columns == ("id", "company_name", "city")
        assert company_repo.primary_key == "id"

    def test_field_column_lookups(self):
        repo = Repository(RenamedCompany)
        assert repo.column_for_field("title") == "company_name"
        assert repo.field_for_column("city") == "town"
        assert repo.column_for_field("company_name") is None

    def test_order_by_for(self):
        repo = Repository(RenamedCompany)
        assert repo.order_by_for(Pageable(0, 3)) is None
        assert repo.order_by_for(Pageable(0, 3, "title", "asc")) == "company_name"
        assert repo.order_by_for(Pageable(0, 3, "title", "DESC")) == "company_name DESC"

    def test_order_by_for_unknown_field(self, company_repo):
        with pytest.raises(MappingError, match="cannot sort by 'founded'"):
            company_repo.order_by_for(Pageable(0, 3, "founded", "asc"))

    def test_repr(self, company_repo):
        assert repr(company_repo) == "Repository(Company, table='companies')"


class TestCount:
    def test_count(self, company_repo, seeded_conn):
        assert company_repo.count(seeded_conn) == 12

    def test_count_empty_table(self, company_repo, conn):
        assert company_repo.count(conn) == 0

    def test_count_by(self, company_repo, seeded_conn):
        assert company_repo.count_by(seeded_conn, "city", "Genoa") == 4

    def test_count_by_no_match(self, company_repo, seeded_conn):
        assert company_repo.count_by(seeded_conn, "city", "Naples") == 0

    def test_count_by_value_set(self, company_repo, seeded_conn):
        assert company_repo.count_by(seeded_conn, "city", ["Genoa", "Rome"]) == 6
        assert company_repo.count_by(seeded_conn, "city", {"Turin", "Venice"}) == 3

    def test_count_by_empty_set_issues_no_query(self, company_repo, seeded_conn):
        recording = RecordingConnection(seeded_conn)
        assert company_repo.count_by(recording, "city", []) == 0
        assert recording.statements == []

    def test_count_where(self, company_repo, seeded_conn):
        assert company_repo.count_where(seeded_conn, "city = 'Turin'") == 2

    def test_count_without_primary_key(self, conn):
        conn.execute("CREATE TABLE keyless (label TEXT, amount INTEGER)")
        conn.executemany("INSERT INTO keyless VALUES (?,?)", [("a", 1), ("b", 2)])
        assert Repository(Keyless).count(conn) == 2

    def test_count_sql(self, company_repo, seeded_conn):
        recording = RecordingConnection(seeded_conn)
        company_repo.count_by(recording, "id", ("co001", "co002"))
        assert recording.statements == ["SELECT COUNT(id) AS total FROM companies WHERE id IN ( ?,? );"]


class TestRead:
    def test_read_all(self, company_repo, seeded_conn):
        companies = company_repo.read(seeded_conn)
        assert len(companies) == 12
        assert all(isinstance(c, Company) for c in companies)

    def test_read_populates_mapped_fields_only(self, company_repo, seeded_conn):
        first = company_repo.read(seeded_conn, order_by="id", limit=1)[0]
        assert first == Company(id="co001", company_name="Veloxia Technologies", city="Genoa")
        assert first.description_extra_field is None

    def test_limit(self, company_repo, seeded_conn):
        assert len(company_repo.read(seeded_conn, limit=5)) == 5

    def test_limit_offset(self, company_repo, seeded_conn):
        assert len(company_repo.read(seeded_conn, limit=5, offset=10)) == 2

    def test_order_by(self, company_repo, seeded_conn):
        assert company_repo.read(seeded_conn, order_by="company_name")[0].company_name == "Aether Innovations"

    def test_order_by_limit_offset(self, company_repo, seeded_conn):
        page = company_repo.read(seeded_conn, order_by="company_name", limit=5, offset=1)
        assert page[0].company_name == "BluePeak Logistics"

    def test_pageable_descending(self, company_repo, seeded_conn):
        page = company_repo.read(seeded_conn, pageable=Pageable(0, 3, "company_name", "desc"))
        assert names(page) == ["Zephyr Dynamics", "Vortex Gaming", "Veloxia Technologies"]

    def test_pageable_second_page(self, company_repo, seeded_conn):
        page = company_repo.read(seeded_conn, pageable=Pageable(1, 5, "company_name", "asc"))
        assert names(page) == [
            "Mirage Media Studios",
            "Prisma Design Co",
            "PyroTech Electronics",
            "Solstice Renewables",
            "Veloxia Technologies",
        ]

    def test_pageable_unsorted(self, company_repo, seeded_conn):
        assert len(company_repo.read(seeded_conn, pageable=Pageable(3, 5))) == 0
        assert len(company_repo.read(seeded_conn, pageable=Pageable(2, 5))) == 2

    def test_pageable_sorts_by_field_name(self, seeded_conn):
        repo = Repository(RenamedCompany)
        page = repo.read(seeded_conn, pageable=Pageable(0, 1, "title", "desc"))
        assert page[0] == RenamedCompany(code="co002", title="Zephyr Dynamics", town="Genoa")

    def test_pageable_with_explicit_paging_rejected(self, company_repo, seeded_conn):
        with pytest.raises(ValueError, match="either pageable"):
            company_repo.read(seeded_conn, limit=3, pageable=Pageable(0, 3))

    def test_offset_without_limit_rejected(self, company_repo, seeded_conn):
        with pytest.raises(ValueError, match="offset requires a limit"):
            company_repo.read(seeded_conn, offset=2)


class TestReadBy:
    def test_read_by(self, company_repo, seeded_conn):
        assert len(company_repo.read_by(seeded_conn, "city", "Milan")) == 3

    def test_read_by_limit(self, company_repo, seeded_conn):
        assert len(company_repo.read_by(seeded_conn, "city", "Milan", limit=2)) == 2

    def test_read_by_limit_offset(self, company_repo, seeded_conn):
        assert len(company_repo.read_by(seeded_conn, "city", "Milan", limit=3, offset=1)) == 2

    def test_read_by_ordered(self, company_repo, seeded_conn):
        page = company_repo.read_by(seeded_conn, "city", "Milan", order_by="company_name", limit=2)
        assert page[0].company_name == "Aether Innovations"

    def test_read_by_ordered_offset(self, company_repo, seeded_conn):
        page = company_repo.read_by(seeded_conn, "city", "Milan", order_by="company_name", limit=3, offset=1)
        assert names(page) == ["BluePeak Logistics", "Vortex Gaming"]

    def test_read_by_pageable(self, company_repo, seeded_conn):
        page = company_repo.read_by(seeded_conn, "city", "Genoa", pageable=Pageable(1, 2, "company_name", "asc"))
        assert names(page) == ["Veloxia Technologies", "Zephyr Dynamics"]

    def test_read_by_value_list(self, company_repo, seeded_conn):
        found = company_repo.read_by(seeded_conn, "id", ["co001", "co012", "co999"], order_by="id")
        assert [c.id for c in found] == ["co001", "co012"]

    def test_read_by_value_set(self, company_repo, seeded_conn):
        assert len(company_repo.read_by(seeded_conn, "city", {"Rome", "Venice"})) == 3

    def test_read_by_tuple(self, company_repo, seeded_conn):
        assert len(company_repo.read_by(seeded_conn, "city", ("Turin",))) == 2

    def test_read_by_empty_set_issues_no_query(self, company_repo, seeded_conn):
        recording = RecordingConnection(seeded_conn)
        assert company_repo.read_by(recording, "city", set()) == []
        assert recording.statements == []

    def test_values_are_bound_not_interpolated(self, company_repo, seeded_conn):
        recording = RecordingConnection(seeded_conn)
        assert company_repo.read_by(recording, "city", "Milan' OR '1'='1") == []
        assert recording.statements == ["SELECT id,company_name,city FROM companies WHERE city = ?;"]

    def test_unknown_column_is_query_error(self, company_repo, seeded_conn):
        with pytest.raises(QueryError) as exc_info:
            company_repo.read_by(seeded_conn, "country", "Italy")
        assert exc_info.value.context.operation == "read_by"
        assert exc_info.value.context.table == "companies"


class TestReadWhere:
    def test_predicate(self, company_repo, seeded_conn):
        assert len(company_repo.read_where(seeded_conn, "city LIKE 'M%'")) == 3

    def test_predicate_ordered_limited(self, company_repo, seeded_conn):
        found = company_repo.read_where(seeded_conn, "city LIKE 'M%'", order_by="company_name DESC", limit=1)
        assert names(found) == ["Vortex Gaming"]

    def test_predicate_pageable(self, company_repo, seeded_conn):
        found = company_repo.read_where(
            seeded_conn, "city IN ('Rome', 'Turin')", pageable=Pageable(0, 2, "company_name", "asc")
        )
        assert names(found) == ["Celestia Entertainment", "Lumina Textiles"]

    def test_bad_predicate(self, company_repo, seeded_conn):
        with pytest.raises(QueryError):
            company_repo.read_where(seeded_conn, "city = 'Milan' AND")


class TestReadById:
    def test_found(self, company_repo, seeded_conn):
        company = company_repo.read_by_id(seeded_conn, "co003")
        assert company == Company(id="co003", company_name="EchoSafe Security", city="Genoa")

    def test_not_found(self, company_repo, seeded_conn):
        assert company_repo.read_by_id(seeded_conn, "co999") is None

    def test_requires_primary_key(self, conn):
        with pytest.raises(MappingError, match="read_by_id requires a primary key"):
            Repository(Keyless).read_by_id(conn, 1)

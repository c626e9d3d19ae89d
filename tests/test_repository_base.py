import uuid
from decimal import Decimal

import pytest

from institut_core.repositories import base
from institut_core.repositories.base import PagedResult, RecordNotFound, SqlTableRepository, TableSpec
from tests import fakes

SPEC = TableSpec(
    table="dd-test",
    columns=("name", "email", "is_active"),
    search_columns=("name", "email"),
    order_by="name ASC",
    date_column="created_at",
)


def test_normalize_paging_clamps_values():
    assert base.normalize_paging(0, 0) == (1, 1, 0)
    assert base.normalize_paging(3, 20) == (3, 20, 40)
    assert base.normalize_paging(1, 10_000) == (1, base.MAX_PER_PAGE, 0)


def test_paged_result_meta():
    result = PagedResult(items=[1, 2], total=45, page=2, per_page=20)
    assert result.meta() == {"page": 2, "per_page": 20, "total": 45, "total_pages": 3}
    assert result.has_next and result.has_prev


@pytest.mark.parametrize(
    ("total", "expected_pages"),
    [(0, 0), (1, 1), (20, 1), (21, 2)],
)
def test_total_pages_rounds_up(total, expected_pages):
    result = PagedResult(items=[], total=total, page=1, per_page=20)
    assert result.total_pages == expected_pages


def test_total_pages_is_zero_without_page_size():
    assert PagedResult(items=[], total=5, page=1, per_page=0).total_pages == 0


def test_row_to_dict_converts_uuid_and_decimal():
    key = uuid.uuid4()
    row = fakes.FakeRow({"id": key, "price": Decimal("12.50")})
    assert base.row_to_dict(row) == {"id": str(key), "price": 12.5}


def test_list_page_builds_filters_search_and_paging(monkeypatch):
    def handler(sql, params):
        if sql.startswith("SELECT COUNT(*)"):
            return [{"count": 3}]
        return [{"id": "a", "name": "Awa"}]

    engine = fakes.install(monkeypatch, handler=handler)
    repo = SqlTableRepository(SPEC)

    result = repo.list_page(page=2, per_page=2, search=" awa ", is_active=True, email=None)

    count_sql, count_params = engine.executed[0]
    assert 'FROM "dd-test"' in count_sql
    assert "is_active = :f_is_active" in count_sql
    assert "name::text ILIKE :search OR email::text ILIKE :search" in count_sql
    assert "email = " not in count_sql
    assert count_params["search"] == "%awa%"
    _, list_params = engine.executed[1]
    assert list_params["limit"] == 2 and list_params["offset"] == 2
    assert result.total == 3
    assert result.meta()["total_pages"] == 2


def test_list_page_rejects_unknown_filter(monkeypatch):
    fakes.install(monkeypatch)
    with pytest.raises(ValueError):
        SqlTableRepository(SPEC).list_page(password="x")


def test_insert_rejects_unknown_columns(monkeypatch):
    fakes.install(monkeypatch)
    with pytest.raises(ValueError):
        SqlTableRepository(SPEC).insert({"name": "A", "role": "admin"})


def test_get_missing_row_raises_record_not_found(monkeypatch):
    fakes.install(monkeypatch, handler=lambda sql, params: None)
    with pytest.raises(RecordNotFound):
        SqlTableRepository(SPEC).get("missing")


def test_update_without_changes_returns_current_row(monkeypatch):
    engine = fakes.install(monkeypatch, handler=lambda sql, params: [{"id": params["id"], "name": "Awa"}])
    record = SqlTableRepository(SPEC).update("a", {})
    assert record == {"id": "a", "name": "Awa"}
    assert not engine.statements("UPDATE")

"""
Base Repository - Generic access to the ``dd-*`` tables.

Each table is described by a :class:`TableSpec` (writable columns, searchable
columns, default ordering). :class:`SqlTableRepository` turns a spec into the
usual paginated list / get / insert / update / delete statements.
"""

from __future__ import annotations

import uuid
from abc import abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Generic, Mapping, Protocol, Sequence, TypeVar

from sqlalchemy import text
from sqlalchemy.engine import Connection

from institut_core.data_repository import get_engine, quote_table

T = TypeVar("T")
ID = TypeVar("ID", int, str)

MAX_PER_PAGE = 200


class RecordNotFound(LookupError):
    """Raised when a row addressed by id does not exist."""


class ReadOnlyRepository(Protocol[T, ID]):
    """Read-only repository interface."""

    @abstractmethod
    def get(self, id: ID) -> T:
        """Get entity by ID (raises RecordNotFound)."""
        ...

    @abstractmethod
    def list_page(self, *, page: int = 1, per_page: int = 20, **filters: Any) -> "PagedResult[T]":
        """List entities with pagination."""
        ...


class Repository(ReadOnlyRepository[T, ID], Protocol):
    """Full repository interface with write operations."""

    @abstractmethod
    def insert(self, values: Mapping[str, Any]) -> T:
        ...

    @abstractmethod
    def update(self, id: ID, changes: Mapping[str, Any]) -> T:
        ...

    @abstractmethod
    def delete(self, id: ID) -> None:
        ...


@dataclass
class PagedResult(Generic[T]):
    """Container for paginated results."""

    items: Sequence[T]
    total: int
    page: int
    per_page: int

    @property
    def total_pages(self) -> int:
        if self.per_page <= 0:
            return 0
        return (self.total + self.per_page - 1) // self.per_page

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def meta(self) -> dict[str, int]:
        return {
            "page": self.page,
            "per_page": self.per_page,
            "total": self.total,
            "total_pages": self.total_pages,
        }


def normalize_paging(page: int, per_page: int) -> tuple[int, int, int]:
    """Clamp page/per_page and return (page, per_page, offset)."""
    page = max(1, int(page or 1))
    per_page = max(1, min(int(per_page or 1), MAX_PER_PAGE))
    return page, per_page, (page - 1) * per_page


def _plain(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, Decimal):
        return float(value)
    return value


def row_to_dict(row: Any) -> dict[str, Any]:
    if row is None:
        return {}
    if hasattr(row, "_mapping"):
        data = dict(row._mapping)
    else:
        data = dict(row)
    return {key: _plain(value) for key, value in data.items()}


@dataclass(frozen=True)
class TableSpec:
    table: str
    columns: tuple[str, ...]
    search_columns: tuple[str, ...] = ()
    order_by: str = "created_at DESC"
    date_column: str | None = None
    readonly_columns: tuple[str, ...] = field(default=("id", "created_at"))

    @property
    def quoted(self) -> str:
        return quote_table(self.table)

    @property
    def select_columns(self) -> str:
        return ", ".join(self.readonly_columns[:1] + self.columns + self.readonly_columns[1:])


class SqlTableRepository:
    """SQLAlchemy implementation of Repository over one ``dd-*`` table."""

    def __init__(self, spec: TableSpec):
        self.spec = spec

    # -- helpers ---------------------------------------------------------

    def _check_columns(self, keys: Sequence[str]) -> None:
        unknown = [key for key in keys if key not in self.spec.columns]
        if unknown:
            raise ValueError(f"Colonnes inconnues pour {self.spec.table} : {', '.join(sorted(unknown))}")

    def _where(
        self,
        *,
        search: str | None,
        filters: Mapping[str, Any],
        date_from: date | datetime | None,
        date_to: date | datetime | None,
    ) -> tuple[str, dict[str, Any]]:
        clauses: list[str] = []
        params: dict[str, Any] = {}
        for column, value in filters.items():
            if value is None:
                continue
            if column not in self.spec.columns and column != "id":
                raise ValueError(f"Filtre inconnu pour {self.spec.table} : {column}")
            clauses.append(f"{column} = :f_{column}")
            params[f"f_{column}"] = value
        if search and self.spec.search_columns:
            ors = " OR ".join(f"{column}::text ILIKE :search" for column in self.spec.search_columns)
            clauses.append(f"({ors})")
            params["search"] = f"%{search.strip()}%"
        if self.spec.date_column:
            if date_from is not None:
                clauses.append(f"{self.spec.date_column} >= :date_from")
                params["date_from"] = date_from
            if date_to is not None:
                clauses.append(f"{self.spec.date_column} <= :date_to")
                params["date_to"] = date_to
        where_sql = ("WHERE " + " AND ".join(clauses)) if clauses else ""
        return where_sql, params

    # -- reads -----------------------------------------------------------

    def list_page(
        self,
        *,
        page: int = 1,
        per_page: int = 20,
        search: str | None = None,
        date_from: date | datetime | None = None,
        date_to: date | datetime | None = None,
        **filters: Any,
    ) -> PagedResult[dict[str, Any]]:
        page, per_page, offset = normalize_paging(page, per_page)
        where_sql, params = self._where(search=search, filters=filters, date_from=date_from, date_to=date_to)
        table = self.spec.quoted

        with get_engine().begin() as conn:
            count_row = conn.execute(text(f"SELECT COUNT(*) FROM {table} {where_sql}"), params).fetchone()
            total = int(count_row[0] if count_row else 0)
            rows = conn.execute(
                text(
                    f"SELECT {self.spec.select_columns} FROM {table} {where_sql} "
                    f"ORDER BY {self.spec.order_by} LIMIT :limit OFFSET :offset"
                ),
                {**params, "limit": per_page, "offset": offset},
            ).fetchall()

        return PagedResult(items=[row_to_dict(row) for row in rows], total=total, page=page, per_page=per_page)

    def fetch_by_id(self, conn: Connection, id: str, *, for_update: bool = False) -> dict[str, Any]:
        lock = " FOR UPDATE" if for_update else ""
        row = conn.execute(
            text(f"SELECT {self.spec.select_columns} FROM {self.spec.quoted} WHERE id = :id{lock}"),
            {"id": id},
        ).fetchone()
        if row is None:
            raise RecordNotFound(f"{self.spec.table} {id} introuvable.")
        return row_to_dict(row)

    def get(self, id: str) -> dict[str, Any]:
        with get_engine().begin() as conn:
            return self.fetch_by_id(conn, id)

    def find_by(self, conn: Connection, column: str, value: Any) -> list[dict[str, Any]]:
        self._check_columns([column])
        rows = conn.execute(
            text(
                f"SELECT {self.spec.select_columns} FROM {self.spec.quoted} "
                f"WHERE {column} = :value ORDER BY {self.spec.order_by}"
            ),
            {"value": value},
        ).fetchall()
        return [row_to_dict(row) for row in rows]

    # -- writes ----------------------------------------------------------

    def insert_with(self, conn: Connection, values: Mapping[str, Any]) -> dict[str, Any]:
        self._check_columns(list(values.keys()))
        if not values:
            raise ValueError("Aucune valeur à insérer.")
        columns = ", ".join(values.keys())
        placeholders = ", ".join(f":{key}" for key in values.keys())
        row = conn.execute(
            text(
                f"INSERT INTO {self.spec.quoted} ({columns}) VALUES ({placeholders}) "
                f"RETURNING {self.spec.select_columns}"
            ),
            dict(values),
        ).fetchone()
        if row is None:
            raise RuntimeError(f"Insertion dans {self.spec.table} sans ligne retournée.")
        return row_to_dict(row)

    def insert(self, values: Mapping[str, Any]) -> dict[str, Any]:
        with get_engine().begin() as conn:
            return self.insert_with(conn, values)

    def update_with(self, conn: Connection, id: str, changes: Mapping[str, Any]) -> dict[str, Any]:
        if not changes:
            return self.fetch_by_id(conn, id)
        self._check_columns(list(changes.keys()))
        set_clauses = ", ".join(f"{col} = :{col}" for col in changes.keys())
        row = conn.execute(
            text(
                f"UPDATE {self.spec.quoted} SET {set_clauses} WHERE id = :id "
                f"RETURNING {self.spec.select_columns}"
            ),
            {**changes, "id": id},
        ).fetchone()
        if row is None:
            raise RecordNotFound(f"{self.spec.table} {id} introuvable.")
        return row_to_dict(row)

    def update(self, id: str, changes: Mapping[str, Any]) -> dict[str, Any]:
        with get_engine().begin() as conn:
            return self.update_with(conn, id, changes)

    def delete_with(self, conn: Connection, id: str) -> None:
        result = conn.execute(text(f"DELETE FROM {self.spec.quoted} WHERE id = :id"), {"id": id})
        if result.rowcount == 0:
            raise RecordNotFound(f"{self.spec.table} {id} introuvable.")

    def delete(self, id: str) -> None:
        with get_engine().begin() as conn:
            self.delete_with(conn, id)

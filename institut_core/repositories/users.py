"""
User Repository - Data access for the ``dd-users`` profile table.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Protocol, Sequence

from sqlalchemy import text

from institut_core.data_repository import df_records, get_engine, query_df

_USER_COLUMNS = (
    'id, auth_user_id, email, pseudo, first_name, last_name, phone, role, salary, hire_date, '
    'is_active, created_at'
)


@dataclass
class UserProfile:
    """Profile row linked to a Supabase auth user."""

    id: str
    email: str
    role: str
    auth_user_id: str | None = None
    pseudo: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    salary: float = 0
    hire_date: date | None = None
    is_active: bool = True
    created_at: datetime | None = None

    @property
    def display_name(self) -> str:
        full = " ".join(part for part in (self.first_name, self.last_name) if part)
        return full or self.pseudo or self.email


class UserRepository(Protocol):
    """User repository interface."""

    def get_by_id(self, id: str) -> UserProfile | None:
        ...

    def get_by_email(self, email: str) -> UserProfile | None:
        ...

    def get_by_pseudo(self, pseudo: str) -> UserProfile | None:
        ...

    def get_by_auth_id(self, auth_user_id: str) -> UserProfile | None:
        ...

    def list_active(self) -> Sequence[UserProfile]:
        ...


class SqlUserRepository:
    """SQLAlchemy implementation of UserRepository."""

    def _fetch_one(self, where: str, params: dict) -> UserProfile | None:
        sql = text(f'SELECT {_USER_COLUMNS} FROM "dd-users" WHERE {where} LIMIT 1')
        records = df_records(query_df(sql, params))
        if not records:
            return None
        return self.to_profile(records[0])

    def get_by_id(self, id: str) -> UserProfile | None:
        return self._fetch_one("id = :id", {"id": id})

    def get_by_email(self, email: str) -> UserProfile | None:
        return self._fetch_one("LOWER(email) = LOWER(:email)", {"email": email.strip()})

    def get_by_pseudo(self, pseudo: str) -> UserProfile | None:
        return self._fetch_one("LOWER(pseudo) = LOWER(:pseudo)", {"pseudo": pseudo.strip()})

    def get_by_auth_id(self, auth_user_id: str) -> UserProfile | None:
        return self._fetch_one("auth_user_id = :auth_id", {"auth_id": auth_user_id})

    def list_active(self) -> Sequence[UserProfile]:
        sql = text(
            f"""
            SELECT {_USER_COLUMNS}
            FROM "dd-users"
            WHERE is_active = TRUE
            ORDER BY first_name ASC, last_name ASC
            """
        )
        return [self.to_profile(row) for row in df_records(query_df(sql))]

    def deactivate(self, id: str) -> bool:
        sql = text('UPDATE "dd-users" SET is_active = FALSE WHERE id = :id RETURNING id')
        with get_engine().begin() as conn:
            return conn.execute(sql, {"id": id}).fetchone() is not None

    def to_profile(self, row: dict) -> UserProfile:
        return UserProfile(
            id=str(row["id"]),
            email=row.get("email") or "",
            role=(row.get("role") or "employee").lower(),
            auth_user_id=str(row["auth_user_id"]) if row.get("auth_user_id") else None,
            pseudo=row.get("pseudo"),
            first_name=row.get("first_name"),
            last_name=row.get("last_name"),
            phone=row.get("phone"),
            salary=float(row.get("salary") or 0),
            hire_date=row.get("hire_date"),
            is_active=bool(row.get("is_active", True)),
            created_at=row.get("created_at"),
        )

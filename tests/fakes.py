"""In-memory stand-ins for SQLAlchemy engines used by service tests.

Each executed statement is passed to a ``handler(sql, params)`` that returns
the rows (list of dicts) the statement should yield.
"""

from __future__ import annotations

from typing import Any, Callable


class FakeRow:
    def __init__(self, data: dict[str, Any]):
        self._mapping = dict(data)

    def __getitem__(self, key):
        if isinstance(key, int):
            return list(self._mapping.values())[key]
        return self._mapping[key]

    def __iter__(self):
        return iter(self._mapping.values())


class FakeResult:
    def __init__(self, rows: list[dict[str, Any]] | None):
        self._rows = [FakeRow(row) for row in rows or []]
        self.rowcount = len(self._rows)

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return list(self._rows)

    def keys(self):
        return list(self._rows[0]._mapping.keys()) if self._rows else []


class FakeConnection:
    def __init__(self, engine: "FakeEngine"):
        self.engine = engine

    def execute(self, statement, params=None):
        sql = " ".join(str(statement).split())
        params = dict(params or {})
        self.engine.executed.append((sql, params))
        return FakeResult(self.engine.handler(sql, params))


class _Context:
    def __init__(self, engine: "FakeEngine"):
        self.conn = FakeConnection(engine)

    def __enter__(self):
        return self.conn

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False


def echo_inserts(sql: str, params: dict[str, Any]) -> list[dict[str, Any]] | None:
    """Renvoie la ligne insérée / mise à jour avec un identifiant ; None pour les autres requêtes."""
    if sql.startswith("INSERT INTO"):
        return [{"id": f"new-{len(params)}", **params}]
    if sql.startswith("UPDATE") and "RETURNING" in sql:
        return [dict(params)]
    return None


class FakeEngine:
    def __init__(self, handler: Callable[[str, dict[str, Any]], list[dict[str, Any]] | None] = echo_inserts):
        self.handler = handler
        self.executed: list[tuple[str, dict[str, Any]]] = []

    def begin(self):
        return _Context(self)

    def connect(self):
        return _Context(self)

    def statements(self, fragment: str) -> list[tuple[str, dict[str, Any]]]:
        return [(sql, params) for sql, params in self.executed if fragment in sql]


def install(monkeypatch, *modules, handler=echo_inserts) -> FakeEngine:
    """Remplace ``get_engine`` dans les modules donnés (et le dépôt générique)."""
    from institut_core.repositories import base

    engine = FakeEngine(handler)
    for module in (base, *modules):
        monkeypatch.setattr(module, "get_engine", lambda: engine)
    return engine

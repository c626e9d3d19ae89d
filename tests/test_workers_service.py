from datetime import datetime, timezone

import pytest

from institut_backend.services import workers
from tests import fakes

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)
WORKER = {
    "id": "t1",
    "first_name": "Mariam",
    "last_name": "Coulibaly",
    "salaire": 80000,
    "jours_travailles": 10,
    "heures_travailles": 4.5,
    "total_montants_recus": 20000,
    "salary_history": [{"date": "2026-01-01", "amount": 80000}],
    "work_history": None,
    "payments_history": [],
    "notes_history": [],
}


def test_activity_accumulates_counters_and_histories():
    changes = workers.build_activity_changes(
        WORKER,
        {"salaire": 90000, "jours_travailles": 3, "heures_travailles": 2, "montant_recu": 15000, "note": "mars"},
        added_by="a1",
        now=NOW,
    )

    assert changes["salaire"] == 90000
    assert changes["jours_travailles"] == 13
    assert changes["heures_travailles"] == 6.5
    assert changes["total_montants_recus"] == 35000
    assert len(changes["salary_history"]) == 2
    assert [entry["days"] for entry in changes["work_history"]] == [3, 0]
    assert changes["payments_history"][0]["note"] == "mars"
    assert "notes_history" not in changes


def test_note_alone_goes_to_notes_history():
    changes = workers.build_activity_changes(WORKER, {"note": "Formation kératine"}, added_by="a1", now=NOW)
    assert list(changes) == ["notes_history"]
    assert changes["notes_history"][0]["note"] == "Formation kératine"


def test_zero_values_change_nothing():
    assert workers.build_activity_changes(WORKER, {"salaire": 0, "jours_travailles": 0}, added_by=None) == {}


def test_record_activity_locks_and_serializes_histories(monkeypatch):
    def handler(sql, params):
        if "FOR UPDATE" in sql:
            return [dict(WORKER)]
        return fakes.echo_inserts(sql, params)

    engine = fakes.install(monkeypatch, workers, handler=handler)
    record = workers.record_activity("t1", {"montant_recu": 5000}, added_by="a1")

    assert record["total_montants_recus"] == 25000
    assert isinstance(record["payments_history"], str)
    assert engine.statements('FROM "dd-travailleurs" WHERE id = :id FOR UPDATE')


def test_record_activity_without_content(monkeypatch):
    fakes.install(monkeypatch, workers, handler=lambda sql, params: [dict(WORKER)])
    with pytest.raises(ValueError):
        workers.record_activity("t1", {}, added_by="a1")


def test_create_worker_initialises_counters(monkeypatch):
    fakes.install(monkeypatch, workers)
    record = workers.create_worker({"first_name": "Kadi", "last_name": "Diallo", "competence": ["tresses"], "notes": None})
    assert record["jours_travailles"] == 0
    assert record["work_history"] == "[]"
    assert "notes" not in record

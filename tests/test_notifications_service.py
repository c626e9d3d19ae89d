import pytest

from institut_backend.services import notifications
from tests import fakes


@pytest.mark.parametrize(
    "notification, user_id, role, visible",
    [
        ({"target_user_id": None, "target_role": None}, "u1", "employee", True),
        ({"target_user_id": "u1", "target_role": None}, "u1", "employee", True),
        ({"target_user_id": "u2", "target_role": None}, "u1", "employee", False),
        ({"target_user_id": None, "target_role": "caissiere"}, "u1", "Caissiere", True),
        ({"target_user_id": "u2", "target_role": "manager"}, "u1", "admin", True),
    ],
)
def test_visibility(notification, user_id, role, visible):
    assert notifications.is_visible(notification, user_id, role) is visible


def _page_handler(sql, params):
    if sql.startswith("SELECT COUNT(*)"):
        return [{"count": 41}]
    return [{"id": "n1", "title": "Stock bas", "message": "Crème karité : 2 restants", "status": "unread"}]


def test_list_is_scoped_to_user_and_role(monkeypatch):
    engine = fakes.install(monkeypatch, notifications, handler=_page_handler)

    result = notifications.list_notifications_page(user_id="u1", role="caissiere", status="unread", page=2)

    assert result.total == 41
    assert result.total_pages == 3
    count_sql, params = engine.statements("SELECT COUNT(*)")[0]
    assert "target_user_id = :user_id OR target_role = :role" in count_sql
    assert params == {"user_id": "u1", "role": "caissiere", "f_status": "unread"}
    _, page_params = engine.statements("ORDER BY created_at DESC")[0]
    assert page_params["offset"] == 20


def test_admin_sees_every_notification(monkeypatch):
    engine = fakes.install(monkeypatch, notifications, handler=_page_handler)
    notifications.list_notifications_page(user_id="a1", role="admin")
    count_sql, params = engine.statements("SELECT COUNT(*)")[0]
    assert "WHERE" not in count_sql
    assert params == {}


def _notification(target_user_id):
    def handler(sql, params):
        if "FOR UPDATE" in sql:
            return [{"id": "n1", "target_user_id": target_user_id, "target_role": None, "status": "unread"}]
        return fakes.echo_inserts(sql, params)

    return handler


def test_mark_read_sets_timestamp(monkeypatch):
    fakes.install(monkeypatch, notifications, handler=_notification("u1"))
    record = notifications.mark_read("n1", user_id="u1", role="employee")
    assert record["status"] == "read"
    assert record["read_at"] is not None


def test_archive_foreign_notification_is_refused(monkeypatch):
    engine = fakes.install(monkeypatch, notifications, handler=_notification("u2"))
    with pytest.raises(notifications.NotificationForbidden):
        notifications.archive("n1", user_id="u1", role="employee")
    assert not engine.statements("UPDATE")


def test_create_notification_is_unread(monkeypatch):
    fakes.install(monkeypatch, notifications)
    record = notifications.create_notification(
        {"title": "RDV annulé", "message": "Awa a annulé", "target_role": "Manager", "metadata": {"rdv": "r1"}},
        user_id="u9",
    )
    assert record["status"] == "unread"
    assert record["target_role"] == "manager"
    assert record["metadata"] == '{"rdv": "r1"}'

import pytest

from institut_core import permissions


@pytest.mark.parametrize(
    "role, resource, expected",
    [
        ("admin", "finances", True),
        ("superadmin", "anything", True),
        ("manager", "clients", True),
        ("manager", "finances", False),
        ("caissiere", "sales", True),
        ("caissiere", "stock", False),
        ("employee", "products", True),
        ("employee", "sales", False),
        ("inconnu", "products", False),
        (None, "products", False),
    ],
)
def test_can_access(role, resource, expected):
    assert permissions.can_access(role, resource) is expected


def test_admin_roles_include_manager():
    assert permissions.is_admin_role("Manager")
    assert not permissions.is_admin_role("caissiere")


def test_effective_role_never_exceeds_token_role():
    assert permissions.effective_role("admin", "employee") == "employee"
    assert permissions.effective_role("caissiere", "admin") == "caissiere"
    assert permissions.effective_role(None, "manager") == "manager"
    assert permissions.effective_role("pirate", "manager") == "manager"

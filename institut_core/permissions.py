"""Table statique des permissions par rôle."""

from __future__ import annotations

ALLOWED_ROLES: tuple[str, ...] = ("superadmin", "admin", "manager", "caissiere", "employee")
ADMIN_ROLES: frozenset[str] = frozenset({"admin", "superadmin", "manager"})
RESOURCES: tuple[str, ...] = ("sales", "clients", "products", "stock", "finances", "appointments")

ROLE_PERMISSIONS: dict[str, tuple[str, ...]] = {
    "superadmin": ("sales", "clients", "products", "stock", "finances", "appointments", "all"),
    "admin": ("sales", "clients", "products", "stock", "finances", "appointments", "all"),
    "manager": ("sales", "clients", "products", "appointments"),
    "caissiere": ("sales", "products"),
    "employee": ("products",),
}

ROLE_RANK: dict[str, int] = {
    "employee": 0,
    "caissiere": 1,
    "manager": 2,
    "admin": 3,
    "superadmin": 4,
}


def normalize_role(role: str | None) -> str:
    return (role or "").strip().lower()


def can_access(role: str | None, resource: str) -> bool:
    """Vrai si le rôle possède ``resource`` ou ``all`` dans sa liste de permissions."""
    permissions = ROLE_PERMISSIONS.get(normalize_role(role))
    if not permissions:
        return False
    return "all" in permissions or resource in permissions


def is_admin_role(role: str | None) -> bool:
    return normalize_role(role) in ADMIN_ROLES


def role_rank(role: str | None) -> int:
    return ROLE_RANK.get(normalize_role(role), -1)


def effective_role(requested: str | None, authenticated: str) -> str:
    """Rôle retenu pour une requête IA : jamais au-dessus du rôle authentifié."""
    requested_role = normalize_role(requested)
    if not requested_role or requested_role not in ROLE_RANK:
        return normalize_role(authenticated)
    if role_rank(requested_role) > role_rank(authenticated):
        return normalize_role(authenticated)
    return requested_role

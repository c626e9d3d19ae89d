import logging  # Journalisation
from typing import Any, Optional  # Typage

from institut_core import supabase_client  # Accès Supabase Auth
from institut_core.permissions import ALLOWED_ROLES, normalize_role  # Rôles connus
from institut_core.repositories.base import PagedResult, SqlTableRepository  # Accès générique aux tables
from institut_core.repositories.tables import USERS  # Spécification de dd-users
from institut_core.repositories.users import SqlUserRepository, UserProfile  # Profils utilisateurs


logger = logging.getLogger(__name__)

_FULL_ADMIN_ROLES = ("admin", "superadmin")  # Rôles comptés pour le dernier admin

_profiles = SqlUserRepository()  # Lectures typées des profils
_table = SqlTableRepository(USERS)  # Écritures génériques sur dd-users


class UserServiceError(ValueError):
    """Erreur métier sur la gestion des comptes (email déjà pris, rôle invalide...)."""


def _normalize_identifier(value: str) -> str:
    return (value or "").strip()  # Nettoie un identifiant (email/pseudo)


def resolve_login_email(identifier: str) -> Optional[str]:
    """Retourne l'email de connexion : l'identifiant lui-même ou l'email associé au pseudo."""

    cleaned = _normalize_identifier(identifier)  # Normalise l'identifiant
    if not cleaned:  # Identifiant vide
        return None
    if "@" in cleaned:  # Déjà un email
        return cleaned.lower()
    profile = _profiles.get_by_pseudo(cleaned)  # Recherche par pseudo
    return profile.email.lower() if profile and profile.email else None


def authenticate_user(identifier: str, password: str) -> Optional[UserProfile]:
    """Valide les identifiants auprès de Supabase et retourne le profil actif associé."""

    if not identifier or not password:  # Vérifie que l'entrée est fournie
        return None

    email = resolve_login_email(identifier)  # Pseudo -> email
    if not email:  # Pseudo inconnu
        return None

    try:
        identity = supabase_client.sign_in(email, password)  # Vérifie le mot de passe côté Supabase
    except supabase_client.SupabaseAuthFailed:
        return None  # Identifiants refusés

    profile = _profiles.get_by_auth_id(identity.id) or _profiles.get_by_email(identity.email)  # Charge le profil
    if profile is None or not profile.is_active:  # Profil absent ou désactivé
        logger.info("Connexion refusée pour %s : profil absent ou inactif", email)
        return None
    return profile


def get_user(user_id: str) -> Optional[UserProfile]:
    return _profiles.get_by_id(user_id)


def list_users_page(
    *,
    role: Optional[str] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None,
    page: int = 1,
    per_page: int = 20,
) -> PagedResult[dict[str, Any]]:
    """Liste paginée des profils (sans donnée d'authentification)."""

    return _table.list_page(page=page, per_page=per_page, search=search, role=role, is_active=is_active)


def create_user(
    email: str,
    password: str,
    *,
    role: str = "employee",
    pseudo: Optional[str] = None,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    phone: Optional[str] = None,
    hire_date: Any = None,
    created_by: Optional[str] = None,
) -> UserProfile:
    """Crée le compte Supabase puis le profil dd-users ; supprime le compte auth si le profil échoue."""

    email = _normalize_identifier(email).lower()  # Nettoie et met l'email en minuscules
    role = normalize_role(role)  # Nettoie le rôle
    if "@" not in email:  # Validation simple de l'email
        raise UserServiceError("Adresse e-mail invalide.")
    if len(password or "") < 6:  # Longueur minimale imposée par Supabase
        raise UserServiceError("Le mot de passe doit contenir au moins 6 caractères.")
    if role not in ALLOWED_ROLES:  # Validation du rôle
        raise UserServiceError(f"Rôle invalide. Choisissez parmi {', '.join(ALLOWED_ROLES)}.")
    if _profiles.get_by_email(email) is not None:  # Email déjà présent dans les profils
        raise UserServiceError("Un utilisateur avec cet email existe déjà.")

    identity = supabase_client.create_auth_user(
        email,
        password,
        {"pseudo": pseudo, "first_name": first_name, "last_name": last_name, "role": role},
    )  # Compte Supabase confirmé d'office

    values = {
        "auth_user_id": identity.id,
        "email": email,
        "pseudo": pseudo,
        "first_name": first_name,
        "last_name": last_name,
        "phone": phone,
        "role": role,
        "salary": 0,
        "hire_date": hire_date,
        "created_by": created_by,
        "is_active": True,
    }
    try:
        record = _table.insert(values)  # Insère le profil
    except Exception:
        logger.error("Profil %s non créé, suppression du compte auth %s", email, identity.id)
        supabase_client.delete_auth_user(identity.id)  # Annule le compte auth orphelin
        raise

    return _profiles.to_profile(record)


def _count_admins() -> int:
    return sum(1 for profile in _profiles.list_active() if profile.role in _FULL_ADMIN_ROLES)


def update_user(user_id: str, changes: dict[str, Any]) -> UserProfile:
    """Met à jour un profil tout en protégeant le dernier administrateur actif."""

    user = _profiles.get_by_id(user_id)  # Charge l'utilisateur
    if user is None:
        raise LookupError("Utilisateur introuvable.")

    if "role" in changes and changes["role"] is not None:
        changes["role"] = normalize_role(changes["role"])
        if changes["role"] not in ALLOWED_ROLES:
            raise UserServiceError(f"Rôle invalide. Choisissez parmi {', '.join(ALLOWED_ROLES)}.")

    # Un admin déjà désactivé ne compte pas parmi les admins restants.
    loses_admin = user.is_active and user.role in _FULL_ADMIN_ROLES and (
        changes.get("role") not in (None, *_FULL_ADMIN_ROLES) or changes.get("is_active") is False
    )
    if loses_admin and _count_admins() <= 1:  # Vérifie s'il reste au moins un autre admin
        raise UserServiceError("Impossible de retirer le dernier administrateur restant.")

    record = _table.update(user_id, changes)
    return _profiles.to_profile(record)


__all__ = [
    "UserServiceError",
    "authenticate_user",
    "create_user",
    "get_user",
    "list_users_page",
    "resolve_login_email",
    "update_user",
]

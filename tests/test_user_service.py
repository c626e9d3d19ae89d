import pytest

from institut_core import supabase_client, user_service
from institut_core.repositories.users import UserProfile


class FakeProfiles:
    def __init__(self, profiles=()):
        self.profiles = list(profiles)

    def _find(self, **criteria):
        for profile in self.profiles:
            if all(getattr(profile, key) == value for key, value in criteria.items()):
                return profile
        return None

    def get_by_id(self, id):
        return self._find(id=id)

    def get_by_email(self, email):
        return self._find(email=email)

    def get_by_pseudo(self, pseudo):
        return self._find(pseudo=pseudo)

    def get_by_auth_id(self, auth_user_id):
        return self._find(auth_user_id=auth_user_id)

    def list_active(self):
        return [profile for profile in self.profiles if profile.is_active]

    def to_profile(self, row):
        return UserProfile(id=str(row["id"]), email=row["email"], role=row["role"])


class FakeTable:
    def __init__(self, fail=False):
        self.fail = fail
        self.inserted = []
        self.updated = []

    def insert(self, values):
        if self.fail:
            raise RuntimeError("insert refusé")
        self.inserted.append(values)
        return {"id": "new", **values}

    def update(self, id, changes):
        self.updated.append((id, changes))
        return {"id": id, "email": "x@institut.ml", "role": changes.get("role", "admin")}


ADMIN = UserProfile(id="a1", email="admin@institut.ml", role="admin", auth_user_id="auth-a1", pseudo="awa")


@pytest.fixture
def profiles(monkeypatch):
    fake = FakeProfiles([ADMIN])
    monkeypatch.setattr(user_service, "_profiles", fake)
    return fake


def test_resolve_login_email_from_pseudo(profiles):
    assert user_service.resolve_login_email("awa") == "admin@institut.ml"
    assert user_service.resolve_login_email("Someone@Mail.com") == "someone@mail.com"
    assert user_service.resolve_login_email("inconnu") is None


def test_authenticate_user_rejects_bad_password(profiles, monkeypatch):
    def refuse(email, password):
        raise supabase_client.SupabaseAuthFailed("Identifiants invalides")

    monkeypatch.setattr(supabase_client, "sign_in", refuse)
    assert user_service.authenticate_user("awa", "wrong") is None


def test_authenticate_user_returns_active_profile(profiles, monkeypatch):
    monkeypatch.setattr(
        supabase_client, "sign_in", lambda email, password: supabase_client.AuthIdentity("auth-a1", email)
    )
    assert user_service.authenticate_user("admin@institut.ml", "secret") is ADMIN


@pytest.mark.parametrize(
    "email, password, role",
    [("pas-un-email", "secret1", "employee"), ("new@institut.ml", "123", "employee"), ("new@institut.ml", "secret1", "boss")],
)
def test_create_user_validates_input(profiles, email, password, role):
    with pytest.raises(user_service.UserServiceError):
        user_service.create_user(email, password, role=role)


def test_create_user_rejects_duplicate_email(profiles):
    with pytest.raises(user_service.UserServiceError):
        user_service.create_user("ADMIN@institut.ml", "secret1")


def test_create_user_rolls_back_auth_account(profiles, monkeypatch):
    deleted = []
    monkeypatch.setattr(user_service, "_table", FakeTable(fail=True))
    monkeypatch.setattr(
        supabase_client, "create_auth_user", lambda email, password, metadata: supabase_client.AuthIdentity("auth-9", email)
    )
    monkeypatch.setattr(supabase_client, "delete_auth_user", deleted.append)

    with pytest.raises(RuntimeError):
        user_service.create_user("new@institut.ml", "secret1", role="caissiere")
    assert deleted == ["auth-9"]


def test_create_user_inserts_profile(profiles, monkeypatch):
    table = FakeTable()
    monkeypatch.setattr(user_service, "_table", table)
    monkeypatch.setattr(
        supabase_client, "create_auth_user", lambda email, password, metadata: supabase_client.AuthIdentity("auth-9", email)
    )

    user = user_service.create_user(" New@Institut.ml ", "secret1", role="Manager", created_by="a1")

    assert user.email == "new@institut.ml"
    assert table.inserted[0]["auth_user_id"] == "auth-9"
    assert table.inserted[0]["role"] == "manager"


def test_last_admin_cannot_be_demoted(profiles, monkeypatch):
    monkeypatch.setattr(user_service, "_table", FakeTable())
    with pytest.raises(user_service.UserServiceError):
        user_service.update_user("a1", {"role": "employee"})
    with pytest.raises(user_service.UserServiceError):
        user_service.update_user("a1", {"is_active": False})


def test_admin_can_be_demoted_when_another_remains(profiles, monkeypatch):
    profiles.profiles.append(UserProfile(id="a2", email="boss@institut.ml", role="superadmin"))
    table = FakeTable()
    monkeypatch.setattr(user_service, "_table", table)

    user = user_service.update_user("a1", {"role": "Manager"})

    assert user.role == "manager"
    assert table.updated == [("a1", {"role": "manager"})]


def test_update_unknown_user(profiles):
    with pytest.raises(LookupError):
        user_service.update_user("ghost", {"pseudo": "x"})


def test_inactive_admin_can_be_demoted_while_last_active_admin_remains(profiles, monkeypatch):
    dormant = UserProfile(id="a2", email="ancien@institut.ml", role="admin", is_active=False)
    profiles.profiles.append(dormant)
    table = FakeTable()
    monkeypatch.setattr(user_service, "_table", table)

    user_service.update_user("a2", {"role": "employee"})
    user_service.update_user("a2", {"is_active": False})

    assert [id for id, _ in table.updated] == ["a2", "a2"]
    with pytest.raises(user_service.UserServiceError):
        user_service.update_user("a1", {"role": "employee"})

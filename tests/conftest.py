"""Shared pytest fixtures for backend tests."""

from __future__ import annotations

import os

import pytest

os.environ.setdefault("APP_ENV", "test")


@pytest.fixture
def client():
    """Create a TestClient instance for the FastAPI app."""
    from fastapi.testclient import TestClient

    from institut_backend.main import app

    return TestClient(app)


@pytest.fixture
def mock_user():
    """Mock user for testing."""
    from institut_backend.dependencies.security import AuthenticatedUser

    return AuthenticatedUser(id="u1", username="test_user", role="admin")


@pytest.fixture
def authenticated_client(client, mock_user):
    """Client with mocked authentication."""
    from institut_backend.dependencies.security import get_current_user
    from institut_backend.main import app

    app.dependency_overrides[get_current_user] = lambda: mock_user
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def as_role(client):
    """Authentifie le client avec le rôle demandé : ``as_role("caissiere")``."""
    from institut_backend.dependencies.security import AuthenticatedUser, get_current_user
    from institut_backend.main import app

    def _login(role: str):
        user = AuthenticatedUser(id=f"{role}-1", username=role, role=role)
        app.dependency_overrides[get_current_user] = lambda: user
        return client

    yield _login
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    from institut_backend.middleware import rate_limiter

    rate_limiter._rate_limiter = None
    yield
    rate_limiter._rate_limiter = None

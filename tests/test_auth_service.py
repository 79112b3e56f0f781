from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

# Garante que o pacote days seja importável durante os testes locais
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from days.core.errors import NetworkError, ValidationError  # noqa: E402
from days.repositories.base import MemoryStore  # noqa: E402
from days.services.auth_service import AuthService  # noqa: E402
from days.services.session_service import AuthStatus, UserSessionManager  # noqa: E402


@pytest.fixture()
def auth(api_client_factory):
    return AuthService(UserSessionManager(MemoryStore("user_session")), api_client_factory)


def test_login_stores_session(auth):
    user = asyncio.run(auth.login(" alice@example.com ", "secret"))

    manager = auth.session_manager
    assert user.id == "user-alice"
    assert manager.get_auth_token() == "token-user-alice"
    assert manager.current_user.value == user
    assert manager.is_authenticated()


def test_login_failure_sets_error_state(auth):
    with pytest.raises(NetworkError) as exc_info:
        asyncio.run(auth.login("alice@example.com", "wrong"))

    assert exc_info.value.status_code == 401
    state = auth.session_manager.auth_state.value
    assert state.status is AuthStatus.ERROR
    assert state.message.startswith("Login failed")
    assert auth.session_manager.get_auth_token() is None


@pytest.mark.parametrize("email,password", [("", "secret"), ("   ", "secret"), ("alice@example.com", "")])
def test_blank_credentials_are_rejected_before_any_request(auth, fake_api, email, password):
    states = []
    auth.session_manager.auth_state.subscribe(states.append)

    with pytest.raises(ValidationError):
        asyncio.run(auth.login(email, password))

    assert [s.status for s in states] == [AuthStatus.UNAUTHENTICATED]


def test_create_user_does_not_sign_in(auth, fake_api):
    user = asyncio.run(auth.create_user("bob@example.com", "secret"))

    assert user.email == "bob@example.com"
    assert "bob@example.com" in fake_api.state.users
    assert auth.session_manager.auth_state.value.status is AuthStatus.UNAUTHENTICATED
    assert auth.session_manager.get_auth_token() is None


def test_duplicate_registration_fails(auth):
    with pytest.raises(NetworkError) as exc_info:
        asyncio.run(auth.create_user("alice@example.com", "secret"))
    assert exc_info.value.status_code == 409
    assert auth.session_manager.auth_state.value.status is AuthStatus.ERROR


def test_logout_clears_session(auth):
    asyncio.run(auth.login("alice@example.com", "secret"))
    auth.logout()
    assert auth.session_manager.get_auth_token() is None
    assert auth.session_manager.current_user.value is None
    assert not auth.session_manager.is_authenticated()

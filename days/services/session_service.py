"""Session helpers (bearer token and signed-in user, persisted in a store)."""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from days.core.state import StateFlow
from days.repositories.base import KeyValueStore

logger = logging.getLogger(__name__)

KEY_JWT_TOKEN = "jwt_token"
KEY_USER_ID = "user_id"
KEY_USER_EMAIL = "user_email"
KEY_USER_CREATED_AT = "user_created_at"


class AuthStatus(enum.Enum):
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"
    ERROR = "error"


@dataclass(frozen=True)
class AuthState:
    status: AuthStatus
    message: Optional[str] = None


@dataclass(frozen=True)
class User:
    id: str
    email: str
    created_at: str


UNAUTHENTICATED = AuthState(AuthStatus.UNAUTHENTICATED)


class UserSessionManager:
    """Keeps the API token and current user, restoring them at construction."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store
        self.auth_state: StateFlow[AuthState] = StateFlow(UNAUTHENTICATED)
        self.current_user: StateFlow[Optional[User]] = StateFlow(None)
        if self._has_valid_session():
            self.current_user.publish(
                User(
                    id=self.store.get(KEY_USER_ID) or "",
                    email=self.store.get(KEY_USER_EMAIL) or "",
                    created_at=self.store.get(KEY_USER_CREATED_AT) or "",
                )
            )
            self.auth_state.publish(AuthState(AuthStatus.AUTHENTICATED))

    def _has_valid_session(self) -> bool:
        return bool(self.store.get(KEY_JWT_TOKEN)) and bool(self.store.get(KEY_USER_ID))

    def get_auth_token(self) -> Optional[str]:
        return self.store.get(KEY_JWT_TOKEN)

    def save_user_session(self, token: str, user: User) -> None:
        self.store.put(KEY_JWT_TOKEN, token)
        self.store.put(KEY_USER_ID, user.id)
        self.store.put(KEY_USER_EMAIL, user.email)
        self.store.put(KEY_USER_CREATED_AT, user.created_at)
        self.current_user.publish(user)
        self.auth_state.publish(AuthState(AuthStatus.AUTHENTICATED))

    def clear_session(self) -> None:
        self.store.clear()
        self.current_user.publish(None)
        self.auth_state.publish(UNAUTHENTICATED)

    def set_loading(self) -> None:
        self.auth_state.publish(AuthState(AuthStatus.LOADING))

    def set_error(self, message: str) -> None:
        logger.warning("Auth error: %s", message)
        self.auth_state.publish(AuthState(AuthStatus.ERROR, message))

    def is_authenticated(self) -> bool:
        return self.auth_state.value.status is AuthStatus.AUTHENTICATED

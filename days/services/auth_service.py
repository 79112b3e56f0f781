"""
Authentication use cases against the remote Days API.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

from days.core.errors import NetworkError, ValidationError
from days.services.api_client import DaysApiClient
from days.services.session_service import User, UserSessionManager

ClientFactory = Callable[[Optional[str]], DaysApiClient]


class AuthService:
    """Handles login, registration and logout; the token lives in the session manager."""

    def __init__(self, session_manager: UserSessionManager, client_factory: ClientFactory) -> None:
        self.session_manager = session_manager
        self.client_factory = client_factory

    def _validate(self, email: str, password: str) -> tuple[str, str]:
        email = (email or "").strip()
        if not email:
            raise ValidationError("E-mail is required")
        if not password:
            raise ValidationError("Password is required")
        return email, password

    async def login(self, email: str, password: str) -> User:
        email, password = self._validate(email, password)
        self.session_manager.set_loading()
        client = self.client_factory(None)
        try:
            response = await asyncio.to_thread(client.login, email, password)
        except NetworkError as exc:
            self.session_manager.set_error(f"Login failed: {exc.message}")
            raise
        user = User(id=response.user.id, email=response.user.email, created_at=response.user.created_at)
        self.session_manager.save_user_session(response.token, user)
        return user

    async def create_user(self, email: str, password: str) -> User:
        """Register without signing in; registration never sends a token."""
        email, password = self._validate(email, password)
        previous = self.session_manager.auth_state.value
        self.session_manager.set_loading()
        client = self.client_factory(None)
        try:
            response = await asyncio.to_thread(client.create_user, email, password)
        except NetworkError as exc:
            self.session_manager.set_error(f"Registration failed: {exc.message}")
            raise
        self.session_manager.auth_state.publish(previous)
        return User(id=response.id, email=response.email, created_at=response.created_at)

    def logout(self) -> None:
        self.session_manager.clear_session()

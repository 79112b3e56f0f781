"""
HTTP client for the remote Days API.

Thin request/response wrapper: transport failures, non-2xx answers and
unreadable bodies all surface as NetworkError so callers can fall back to
local storage.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Type, TypeVar
from urllib.parse import urljoin

import requests
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from days.core.errors import NetworkError
from days.services.schemas import (
    CalendarResponse,
    CreateCalendarRequest,
    CreateUserRequest,
    LoginRequest,
    LoginResponse,
    UpdateCalendarRequest,
    UserResponse,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

DEFAULT_TIMEOUT = 30


class DaysApiClient:
    """Calls the auth, users and calendars endpoints with an optional bearer token."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        session: Any = None,
    ) -> None:
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.token = token
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, path: str, payload: BaseModel | None = None):
        url = urljoin(self.base_url, path)
        body = payload.model_dump(exclude_none=True) if payload is not None else None
        try:
            response = self.session.request(
                method,
                url,
                json=body,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise NetworkError(f"{method} {path} failed: {exc}") from exc
        if not 200 <= response.status_code < 300:
            raise NetworkError(f"{method} {path} returned {response.status_code}", response.status_code)
        logger.debug("%s %s -> %s", method, path, response.status_code)
        return response

    def _parse(self, response, model: Type[M]) -> M:
        try:
            return model.model_validate(response.json())
        except (ValueError, SchemaError) as exc:
            raise NetworkError(f"Unexpected response body for {model.__name__}", response.status_code) from exc

    # -------------------------- auth / users --------------------------
    def login(self, email: str, password: str) -> LoginResponse:
        response = self._request("POST", "api/auth/login", LoginRequest(email=email, password=password))
        return self._parse(response, LoginResponse)

    def create_user(self, email: str, password: str) -> UserResponse:
        response = self._request("POST", "api/users", CreateUserRequest(email=email, password=password))
        return self._parse(response, UserResponse)

    def get_user(self, user_id: str) -> UserResponse:
        return self._parse(self._request("GET", f"api/users/{user_id}"), UserResponse)

    # -------------------------- calendars --------------------------
    def list_calendars(self) -> list[CalendarResponse]:
        response = self._request("GET", "api/calendars")
        try:
            items = response.json()
            if items is None:
                return []
            return [CalendarResponse.model_validate(item) for item in items]
        except (TypeError, ValueError, SchemaError) as exc:
            raise NetworkError("Unexpected response body for calendar list", response.status_code) from exc

    def get_calendar(self, calendar_id: str) -> CalendarResponse:
        return self._parse(self._request("GET", f"api/calendars/{calendar_id}"), CalendarResponse)

    def create_calendar(self, name: str, description: str | None = None) -> CalendarResponse:
        payload = CreateCalendarRequest(name=name, description=description)
        return self._parse(self._request("POST", "api/calendars", payload), CalendarResponse)

    def update_calendar(self, calendar_id: str, name: str, description: str | None = None) -> CalendarResponse:
        payload = UpdateCalendarRequest(name=name, description=description)
        return self._parse(self._request("PUT", f"api/calendars/{calendar_id}", payload), CalendarResponse)

    def delete_calendar(self, calendar_id: str) -> None:
        self._request("DELETE", f"api/calendars/{calendar_id}")

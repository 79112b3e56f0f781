"""
Shared fixtures: an in-process stand-in for the remote Days API.
"""
from __future__ import annotations

import sys
import uuid
from pathlib import Path
from typing import Optional

import pytest
from fastapi import FastAPI, Header, HTTPException, Response
from fastapi.testclient import TestClient

# Garante que o pacote days seja importável durante os testes locais
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from days.services.api_client import DaysApiClient  # noqa: E402
from days.services.schemas import (  # noqa: E402
    CreateCalendarRequest,
    CreateUserRequest,
    LoginRequest,
    UpdateCalendarRequest,
)

PASSWORD = "secret"
CREATED_AT = "2025-08-06T10:00:00Z"


def build_fake_api() -> FastAPI:
    app = FastAPI()
    app.state.users = {"alice@example.com": "user-alice"}
    app.state.calendars = {}
    app.state.auth_headers = []
    app.state.fail = False

    def _check(authorization: Optional[str]) -> None:
        app.state.auth_headers.append(authorization)
        if app.state.fail:
            raise HTTPException(status_code=500, detail="boom")

    def _user(email: str) -> dict:
        return {"id": app.state.users[email], "email": email, "created_at": CREATED_AT}

    @app.post("/api/auth/login")
    def login(body: LoginRequest):
        if body.email not in app.state.users or body.password != PASSWORD:
            raise HTTPException(status_code=401, detail="invalid credentials")
        return {"token": f"token-{app.state.users[body.email]}", "user": _user(body.email)}

    @app.post("/api/users", status_code=201)
    def create_user(body: CreateUserRequest):
        if body.email in app.state.users:
            raise HTTPException(status_code=409, detail="email already registered")
        app.state.users[body.email] = f"user-{uuid.uuid4().hex[:8]}"
        return _user(body.email)

    @app.get("/api/users/{user_id}")
    def get_user(user_id: str, authorization: Optional[str] = Header(None)):
        _check(authorization)
        for email, known_id in app.state.users.items():
            if known_id == user_id:
                return _user(email)
        raise HTTPException(status_code=404, detail="not found")

    @app.get("/api/calendars")
    def list_calendars(authorization: Optional[str] = Header(None)):
        _check(authorization)
        return list(app.state.calendars.values())

    @app.get("/api/calendars/{calendar_id}")
    def get_calendar(calendar_id: str, authorization: Optional[str] = Header(None)):
        _check(authorization)
        if calendar_id not in app.state.calendars:
            raise HTTPException(status_code=404, detail="not found")
        return app.state.calendars[calendar_id]

    @app.post("/api/calendars", status_code=201)
    def create_calendar(body: CreateCalendarRequest, authorization: Optional[str] = Header(None)):
        _check(authorization)
        calendar_id = str(uuid.uuid4())
        app.state.calendars[calendar_id] = {
            "id": calendar_id,
            "user_id": "user-alice",
            "name": body.name,
            "description": body.description,
            "created_at": CREATED_AT,
            "updated_at": CREATED_AT,
        }
        return app.state.calendars[calendar_id]

    @app.put("/api/calendars/{calendar_id}")
    def update_calendar(calendar_id: str, body: UpdateCalendarRequest, authorization: Optional[str] = Header(None)):
        _check(authorization)
        if calendar_id not in app.state.calendars:
            raise HTTPException(status_code=404, detail="not found")
        app.state.calendars[calendar_id].update(name=body.name, description=body.description)
        return app.state.calendars[calendar_id]

    @app.delete("/api/calendars/{calendar_id}", status_code=204)
    def delete_calendar(calendar_id: str, authorization: Optional[str] = Header(None)):
        _check(authorization)
        if app.state.calendars.pop(calendar_id, None) is None:
            raise HTTPException(status_code=404, detail="not found")
        return Response(status_code=204)

    return app


@pytest.fixture()
def fake_api():
    return build_fake_api()


@pytest.fixture()
def api_client_factory(fake_api):
    """Client factory wired to the fake API (same shape as app_factory.client_factory)."""
    http = TestClient(fake_api)

    def factory(token: Optional[str]) -> DaysApiClient:
        return DaysApiClient("http://testserver/", token, session=http)

    yield factory
    http.close()

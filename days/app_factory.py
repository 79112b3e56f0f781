"""
Composition root: builds stores, repositories and services from Settings.

Nothing here is cached globally; whoever composes the application owns the
returned objects and their lifecycle.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Optional

from days.core.config import Settings, get_settings
from days.repositories.base import DataRepository, KeyValueStore, MemoryStore
from days.repositories.json_storage import JsonFileStore
from days.repositories.local_repository import LocalDataRepository
from days.repositories.remote_repository import RemoteDataRepository
from days.services.api_client import DaysApiClient
from days.services.auth_service import AuthService
from days.services.session_service import UserSessionManager
from days.services.tracker_service import DayTrackerService

logger = logging.getLogger(__name__)


def build_store(settings: Settings, namespace: str) -> KeyValueStore:
    if settings.storage_backend == "sql":
        from days.db.create_tables import create_all
        from days.repositories.sql_repository import SQLPreferenceStore

        create_all()
        return SQLPreferenceStore(namespace)
    if settings.storage_backend == "memory":
        return MemoryStore(namespace)
    return JsonFileStore(settings.data_file, namespace)


def client_factory(settings: Settings):
    """Callable building a DaysApiClient for an optional bearer token."""
    return partial(_make_client, settings.api_base_url, settings.api_timeout_seconds)


def _make_client(base_url: str, timeout: int, token: Optional[str]) -> DaysApiClient:
    return DaysApiClient(base_url, token, timeout=timeout)


def create_local_repository(settings: Settings | None = None) -> LocalDataRepository:
    settings = settings or get_settings()
    return LocalDataRepository(build_store(settings, settings.prefs_namespace))


def create_session_manager(settings: Settings | None = None) -> UserSessionManager:
    settings = settings or get_settings()
    return UserSessionManager(build_store(settings, settings.session_namespace))


def create_repository(
    settings: Settings | None = None,
    local: LocalDataRepository | None = None,
    session_manager: UserSessionManager | None = None,
) -> DataRepository:
    """Local repository, wrapped for remote calendar CRUD when DAYS_REMOTE_ENABLED is set."""
    settings = settings or get_settings()
    local = local or create_local_repository(settings)
    if not settings.remote_enabled:
        return local
    session_manager = session_manager or create_session_manager(settings)
    return RemoteDataRepository(local, session_manager, client_factory(settings))


@dataclass
class DaysApp:
    settings: Settings
    local: LocalDataRepository
    repository: DataRepository
    session_manager: UserSessionManager
    auth: AuthService
    tracker: DayTrackerService

    async def start(self) -> None:
        """Load settings and the calendar document (running the legacy migration)."""
        await self.local.wait_ready()


def create_app(settings: Settings | None = None) -> DaysApp:
    settings = settings or get_settings()
    local = create_local_repository(settings)
    session_manager = create_session_manager(settings)
    repository = create_repository(settings, local, session_manager)
    logger.info("Using %s storage (%s backend)", repository.storage_type.value, settings.storage_backend)
    return DaysApp(
        settings=settings,
        local=local,
        repository=repository,
        session_manager=session_manager,
        auth=AuthService(session_manager, client_factory(settings)),
        tracker=DayTrackerService(repository),
    )

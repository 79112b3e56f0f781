"""SQL backend: engine, sessions and the preference table."""

from .session import Base, get_engine, get_session, session_scope

__all__ = ["Base", "get_engine", "get_session", "session_scope"]

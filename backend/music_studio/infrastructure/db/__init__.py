"""
Database Infrastructure Module

Async SQLModel engine, sessions, models and repositories.
"""

from music_studio.infrastructure.db.database import (
    get_db_manager,
    get_session,
    init_db,
    close_db,
)

__all__ = [
    "get_db_manager",
    "get_session",
    "init_db",
    "close_db",
]

"""Persistence layer: models, repositories and the entity store."""
from database.base import Base, create_engine, create_session_maker, init_db, drop_db, close_db

__all__ = [
    "Base",
    "create_engine",
    "create_session_maker",
    "init_db",
    "drop_db",
    "close_db",
]

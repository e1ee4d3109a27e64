"""Database connection and session management."""
from resume_optimizer.database.connection import get_db_session, init_db, close_db, check_db

__all__ = [
    "get_db_session",
    "init_db",
    "close_db",
    "check_db",
]

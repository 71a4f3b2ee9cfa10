"""
Database infrastructure components.
"""

from healthtracker.infrastructure.database.connection import (
    Base,
    DatabaseManager,
    get_async_session,
    get_db_manager,
)

__all__ = [
    "Base",
    "DatabaseManager",
    "get_db_manager",
    "get_async_session",
]

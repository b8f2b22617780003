"""Database sub-package for the birthday-wisher project.

Exports the core database functions so that other modules can import
them directly from ``birthday_wisher.db``:

    from birthday_wisher.db import get_connection, init_db
"""

from birthday_wisher.db.adapters import SqliteGreetingStore, SqliteSendLedger
from birthday_wisher.db.manager import get_connection, init_db

__all__ = [
    "SqliteGreetingStore",
    "SqliteSendLedger",
    "get_connection",
    "init_db",
]

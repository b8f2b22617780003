"""Connection-bound adapters handed to the greeting orchestrator.

They expose the roster, template lookup and send ledger as objects so the
orchestrator never touches SQL, and so tests can swap in in-memory fakes.
"""

import datetime
import sqlite3
from typing import Optional

from birthday_wisher.db import manager
from birthday_wisher.models import Employee, Template


class SqliteGreetingStore:
    """Roster and template lookup backed by a SQLite connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def get_roster(self) -> list[Employee]:
        return manager.get_employees(self.conn)

    def get_template_by_id(self, template_id: int) -> Optional[Template]:
        return manager.get_template_by_id(self.conn, template_id)


class SqliteSendLedger:
    """Send ledger stored in the ``send_ledger`` table."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def has_sent(self, employee_id: int, send_date: datetime.date) -> bool:
        return manager.has_sent(self.conn, employee_id, send_date)

    def mark_sent(self, employee_id: int, send_date: datetime.date) -> bool:
        return manager.mark_sent(self.conn, employee_id, send_date)

    def unmark(self, employee_id: int, send_date: datetime.date) -> None:
        manager.unmark_sent(self.conn, employee_id, send_date)

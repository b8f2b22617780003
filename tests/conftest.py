"""Shared pytest fixtures for the birthday-wisher test suite.

Provides:
    tmp_db          -- in-memory SQLite connection with full schema applied
    make_employee   -- factory for ``Employee`` values
    make_template   -- factory for ``Template`` values
    fake_transport  -- recording mail transport with scriptable failures
    memory_ledger   -- dict-backed send ledger
    memory_store    -- list-backed roster + template lookup
"""

import datetime
import pathlib
import sqlite3

import pytest

from birthday_wisher.models import Employee, SendResult, Template

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


# ---------------------------------------------------------------------------
# tmp_db fixture
# ---------------------------------------------------------------------------

@pytest.fixture()
def tmp_db():
    """Create an in-memory SQLite connection with the full schema applied.

    Yields the connection and closes it after the test.
    """
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")

    schema_path = (
        pathlib.Path(__file__).resolve().parent.parent
        / "src" / "birthday_wisher" / "db" / "schema.sql"
    )
    schema_sql = schema_path.read_text(encoding="utf-8")
    conn.executescript(schema_sql)

    yield conn
    conn.close()


# ---------------------------------------------------------------------------
# Value factories
# ---------------------------------------------------------------------------

@pytest.fixture()
def make_employee():
    """Return a factory building ``Employee`` values with sensible defaults."""

    def _make(
        employee_id: int,
        dob: str = "1990-03-14",
        name: str | None = None,
        message: str | None = None,
        template_id: int | None = None,
        email: str | None = None,
    ) -> Employee:
        return Employee(
            id=employee_id,
            name=name or f"Employee {employee_id}",
            email=email or f"employee{employee_id}@example.com",
            dob=datetime.date.fromisoformat(dob),
            designation="Engineer",
            team="Platform",
            message=message,
            template_id=template_id,
        )

    return _make


@pytest.fixture()
def make_template():
    """Return a factory building ``Template`` values."""

    def _make(
        template_id: int,
        message: str | None = None,
        content_type: str = "image/png",
        filename: str | None = "confetti.png",
    ) -> Template:
        return Template(
            id=template_id,
            name=f"Template {template_id}",
            description="Confetti",
            message=message,
            file=PNG_BYTES,
            content_type=content_type,
            filename=filename,
        )

    return _make


# ---------------------------------------------------------------------------
# In-memory collaborators
# ---------------------------------------------------------------------------

class FakeTransport:
    """Records every send; fails or raises for scripted addresses."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, object, float | None]] = []
        self.fail_for: dict[str, str] = {}
        self.raise_for: dict[str, Exception] = {}

    def send(self, to_email, message, timeout=None):
        self.calls.append((to_email, message, timeout))
        if to_email in self.raise_for:
            raise self.raise_for[to_email]
        if to_email in self.fail_for:
            return SendResult(
                recipient=to_email,
                success=False,
                error_message=self.fail_for[to_email],
            )
        return SendResult(recipient=to_email, success=True)

    @property
    def recipients(self) -> list[str]:
        return [call[0] for call in self.calls]


class MemoryLedger:
    """Send ledger backed by a set of ``(employee_id, date)`` keys."""

    def __init__(self) -> None:
        self.records: set[tuple[int, datetime.date]] = set()

    def has_sent(self, employee_id, send_date):
        return (employee_id, send_date) in self.records

    def mark_sent(self, employee_id, send_date):
        key = (employee_id, send_date)
        if key in self.records:
            return False
        self.records.add(key)
        return True

    def unmark(self, employee_id, send_date):
        self.records.discard((employee_id, send_date))


class MemoryStore:
    """Roster and template lookup held in plain Python collections."""

    def __init__(self, employees=(), templates=()) -> None:
        self.employees = list(employees)
        self.templates = {t.id: t for t in templates}

    def get_roster(self):
        return list(self.employees)

    def get_template_by_id(self, template_id):
        return self.templates.get(template_id)


@pytest.fixture()
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def memory_ledger() -> MemoryLedger:
    return MemoryLedger()


@pytest.fixture()
def memory_store():
    """Return the ``MemoryStore`` class so tests can build their own."""
    return MemoryStore

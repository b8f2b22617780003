"""Tests for the birthday_wisher.db package.

All tests use an in-memory SQLite database (`:memory:`) so they run
quickly, require no filesystem access, and leave no artefacts behind.
"""

import datetime
import sqlite3

import pytest

from birthday_wisher.db.adapters import SqliteGreetingStore, SqliteSendLedger
from birthday_wisher.db.manager import (
    create_employee,
    create_template,
    delete_employee,
    delete_template,
    get_connection,
    get_employee_by_id,
    get_employees,
    get_ledger_count,
    get_template_by_id,
    get_templates,
    has_sent,
    init_db,
    mark_sent,
    prune_ledger,
    unmark_sent,
    update_employee,
)

TODAY = datetime.date(2024, 3, 14)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def conn():
    """Yield an initialised in-memory database connection."""
    connection = get_connection(":memory:")
    init_db(connection)
    yield connection
    connection.close()


def _employee_fields(**overrides) -> dict:
    """Helper to create employee column values with sensible defaults."""
    fields = {
        "name": "Ada Lovelace",
        "designation": "Engineer",
        "team": "Platform",
        "email": "ada@example.com",
        "dob": datetime.date(1990, 3, 14),
        "message": None,
        "template_id": None,
    }
    fields.update(overrides)
    return fields


def _template(conn, message="Have a great one!"):
    return create_template(
        conn,
        name="Confetti",
        file=b"artwork",
        content_type="image/png",
        message=message,
        filename="confetti.png",
    )


# ---------------------------------------------------------------------------
# Schema creation tests
# ---------------------------------------------------------------------------

class TestSchemaCreation:
    """Verify that init_db creates all expected tables and indexes."""

    EXPECTED_TABLES = ["employees", "templates", "send_ledger"]

    def test_all_tables_exist(self, conn: sqlite3.Connection):
        rows = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
        ).fetchall()
        table_names = {row["name"] for row in rows}

        for expected in self.EXPECTED_TABLES:
            assert expected in table_names, f"Table '{expected}' not found"

    def test_indexes_exist(self, conn: sqlite3.Connection):
        rows = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='index'"
        ).fetchall()
        index_names = {row["name"] for row in rows}

        for expected in [
            "idx_employee_template",
            "idx_employee_dob",
            "idx_ledger_send_date",
        ]:
            assert expected in index_names, f"Index '{expected}' not found"

    def test_idempotent_init(self, conn: sqlite3.Connection):
        """Calling init_db twice must not raise."""
        init_db(conn)
        rows = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table'"
        ).fetchall()
        assert {"employees", "templates", "send_ledger"} <= {
            row["name"] for row in rows
        }


# ---------------------------------------------------------------------------
# Employee CRUD
# ---------------------------------------------------------------------------

class TestEmployees:

    def test_create_and_fetch(self, conn):
        employee = create_employee(conn, **_employee_fields())

        assert employee.id > 0
        assert employee.dob == datetime.date(1990, 3, 14)
        assert get_employee_by_id(conn, employee.id) == employee

    def test_dob_accepts_iso_string(self, conn):
        employee = create_employee(conn, **_employee_fields(dob="1985-12-01"))
        assert employee.dob == datetime.date(1985, 12, 1)

    def test_list_ordered_by_id(self, conn):
        first = create_employee(conn, **_employee_fields(name="A"))
        second = create_employee(conn, **_employee_fields(name="B"))

        assert [e.id for e in get_employees(conn)] == [first.id, second.id]

    def test_update(self, conn):
        employee = create_employee(
            conn, **_employee_fields(), photo=b"img",
            photo_content_type="image/jpeg",
        )

        updated = update_employee(
            conn, employee.id,
            **_employee_fields(name="Ada King", message="Cheers"),
            photo=None, photo_content_type=None,
        )

        assert updated.name == "Ada King"
        assert updated.message == "Cheers"
        assert updated.photo is None

    def test_update_unknown_returns_none(self, conn):
        assert update_employee(conn, 999, **_employee_fields()) is None

    def test_delete(self, conn):
        employee = create_employee(conn, **_employee_fields())

        assert delete_employee(conn, employee.id) is True
        assert get_employee_by_id(conn, employee.id) is None
        assert delete_employee(conn, employee.id) is False

    def test_unknown_template_rejected_by_foreign_key(self, conn):
        with pytest.raises(sqlite3.IntegrityError):
            create_employee(conn, **_employee_fields(template_id=42))


# ---------------------------------------------------------------------------
# Template CRUD
# ---------------------------------------------------------------------------

class TestTemplates:

    def test_create_and_fetch(self, conn):
        template = _template(conn)

        assert get_template_by_id(conn, template.id) == template
        assert template.file == b"artwork"
        assert get_templates(conn) == [template]

    def test_missing_template_is_none(self, conn):
        assert get_template_by_id(conn, 123) is None

    def test_delete_clears_employee_references(self, conn):
        template = _template(conn)
        linked = create_employee(
            conn, **_employee_fields(template_id=template.id)
        )
        other = create_employee(conn, **_employee_fields(name="Other"))

        assert delete_template(conn, template.id) is True

        assert get_employee_by_id(conn, linked.id).template_id is None
        assert get_employee_by_id(conn, other.id).template_id is None
        assert get_template_by_id(conn, template.id) is None

    def test_delete_unknown_returns_false(self, conn):
        assert delete_template(conn, 77) is False


# ---------------------------------------------------------------------------
# Send ledger
# ---------------------------------------------------------------------------

class TestSendLedger:

    @pytest.fixture()
    def employee_id(self, conn):
        return create_employee(conn, **_employee_fields()).id

    def test_mark_is_compare_and_set(self, conn, employee_id):
        assert has_sent(conn, employee_id, TODAY) is False
        assert mark_sent(conn, employee_id, TODAY) is True
        assert mark_sent(conn, employee_id, TODAY) is False
        assert has_sent(conn, employee_id, TODAY) is True

    def test_keys_are_per_day(self, conn, employee_id):
        mark_sent(conn, employee_id, TODAY)
        tomorrow = TODAY + datetime.timedelta(days=1)

        assert has_sent(conn, employee_id, tomorrow) is False

    def test_unmark(self, conn, employee_id):
        mark_sent(conn, employee_id, TODAY)
        unmark_sent(conn, employee_id, TODAY)

        assert has_sent(conn, employee_id, TODAY) is False
        unmark_sent(conn, employee_id, TODAY)  # no-op when absent

    def test_prune(self, conn, employee_id):
        for days_ago in (0, 1, 2, 30):
            mark_sent(conn, employee_id,
                      TODAY - datetime.timedelta(days=days_ago))

        removed = prune_ledger(conn, TODAY)

        assert removed == 3
        assert get_ledger_count(conn) == 1
        assert has_sent(conn, employee_id, TODAY) is True

    def test_deleting_employee_removes_records(self, conn, employee_id):
        mark_sent(conn, employee_id, TODAY)
        delete_employee(conn, employee_id)

        assert get_ledger_count(conn) == 0


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------

class TestAdapters:

    def test_store_roster_and_lookup(self, conn):
        template = _template(conn)
        employee = create_employee(
            conn, **_employee_fields(template_id=template.id)
        )
        store = SqliteGreetingStore(conn)

        assert store.get_roster() == [employee]
        assert store.get_template_by_id(template.id) == template
        assert store.get_template_by_id(template.id + 1) is None

    def test_ledger_adapter(self, conn):
        employee = create_employee(conn, **_employee_fields())
        ledger = SqliteSendLedger(conn)

        assert ledger.mark_sent(employee.id, TODAY) is True
        assert ledger.has_sent(employee.id, TODAY) is True
        ledger.unmark(employee.id, TODAY)
        assert ledger.has_sent(employee.id, TODAY) is False

"""Database manager for the birthday-wisher project.

Provides connection management, schema initialization, CRUD helpers for
employees and templates, and the send-ledger queries.  All functions take
a connection object as their first parameter and do not manage global
state.
"""

import datetime
import logging
import pathlib
import sqlite3
from typing import Optional

from birthday_wisher.models import Employee, Template

logger = logging.getLogger(__name__)

_EMPLOYEE_FIELDS = (
    "name",
    "designation",
    "team",
    "email",
    "dob",
    "message",
    "template_id",
    "photo",
    "photo_content_type",
)


def get_connection(db_path: str) -> sqlite3.Connection:
    """Open a SQLite connection with Row factory enabled.

    Args:
        db_path: Filesystem path to the SQLite database file, or ":memory:"
                 for an in-memory database.

    Returns:
        A ``sqlite3.Connection`` configured with ``sqlite3.Row`` as
        ``row_factory`` and foreign-key enforcement turned on.  The
        connection may be handed between threads (the API opens one per
        request and FastAPI may run dependencies on a worker thread).
    """
    conn = sqlite3.connect(db_path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes by executing ``schema.sql``.

    Args:
        conn: An open SQLite connection.
    """
    schema_path = pathlib.Path(__file__).with_name("schema.sql")
    schema_sql = schema_path.read_text(encoding="utf-8")
    conn.executescript(schema_sql)
    logger.info("Database schema initialized from %s", schema_path)


# ---------------------------------------------------------------------------
# Row mapping
# ---------------------------------------------------------------------------

def _row_to_employee(row: sqlite3.Row) -> Employee:
    return Employee(
        id=row["id"],
        name=row["name"],
        designation=row["designation"],
        team=row["team"],
        email=row["email"],
        dob=datetime.date.fromisoformat(row["dob"]),
        message=row["message"],
        template_id=row["template_id"],
        photo=row["photo"],
        photo_content_type=row["photo_content_type"],
    )


def _row_to_template(row: sqlite3.Row) -> Template:
    return Template(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        message=row["message"],
        file=row["file"],
        content_type=row["content_type"],
        filename=row["filename"],
    )


def _employee_params(fields: dict) -> dict:
    params = {k: fields.get(k) for k in _EMPLOYEE_FIELDS}
    dob = params["dob"]
    if isinstance(dob, datetime.date):
        params["dob"] = dob.isoformat()
    params["designation"] = params["designation"] or ""
    params["team"] = params["team"] or ""
    return params


# ---------------------------------------------------------------------------
# Employees
# ---------------------------------------------------------------------------

def get_employees(conn: sqlite3.Connection) -> list[Employee]:
    """Return every employee ordered by ascending id."""
    rows = conn.execute("SELECT * FROM employees ORDER BY id").fetchall()
    return [_row_to_employee(row) for row in rows]


def get_employee_by_id(
    conn: sqlite3.Connection,
    employee_id: int,
) -> Optional[Employee]:
    """Return the employee with *employee_id*, or ``None``."""
    row = conn.execute(
        "SELECT * FROM employees WHERE id = ?", (employee_id,)
    ).fetchone()
    return _row_to_employee(row) if row is not None else None


def create_employee(conn: sqlite3.Connection, **fields) -> Employee:
    """Insert an employee and return it.

    Args:
        conn: An open SQLite connection.
        **fields: Column values.  ``name``, ``email`` and ``dob`` are
                  required; ``dob`` may be a ``datetime.date`` or an ISO
                  string.

    Returns:
        The stored ``Employee`` including its new ``id``.
    """
    sql = """
        INSERT INTO employees
            (name, designation, team, email, dob, message, template_id,
             photo, photo_content_type)
        VALUES
            (:name, :designation, :team, :email, :dob, :message,
             :template_id, :photo, :photo_content_type)
    """
    cursor = conn.execute(sql, _employee_params(fields))
    conn.commit()
    logger.info("Created employee id=%d (%s)", cursor.lastrowid,
                fields.get("name"))
    return get_employee_by_id(conn, cursor.lastrowid)


def update_employee(
    conn: sqlite3.Connection,
    employee_id: int,
    **fields,
) -> Optional[Employee]:
    """Replace every editable column of an employee.

    Photo handling (keep / replace / remove) is decided by the caller:
    whatever ``photo`` and ``photo_content_type`` are passed are stored.

    Returns:
        The updated ``Employee``, or ``None`` if *employee_id* is unknown.
    """
    sql = """
        UPDATE employees SET
            name = :name,
            designation = :designation,
            team = :team,
            email = :email,
            dob = :dob,
            message = :message,
            template_id = :template_id,
            photo = :photo,
            photo_content_type = :photo_content_type,
            updated_at = datetime('now')
        WHERE id = :id
    """
    params = {**_employee_params(fields), "id": employee_id}
    cursor = conn.execute(sql, params)
    conn.commit()
    if cursor.rowcount == 0:
        return None
    logger.info("Updated employee id=%d", employee_id)
    return get_employee_by_id(conn, employee_id)


def delete_employee(conn: sqlite3.Connection, employee_id: int) -> bool:
    """Delete an employee.  Returns ``False`` if it did not exist."""
    cursor = conn.execute("DELETE FROM employees WHERE id = ?", (employee_id,))
    conn.commit()
    deleted = cursor.rowcount > 0
    if deleted:
        logger.info("Deleted employee id=%d", employee_id)
    return deleted


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

def get_templates(conn: sqlite3.Connection) -> list[Template]:
    """Return every template ordered by ascending id."""
    rows = conn.execute("SELECT * FROM templates ORDER BY id").fetchall()
    return [_row_to_template(row) for row in rows]


def get_template_by_id(
    conn: sqlite3.Connection,
    template_id: int,
) -> Optional[Template]:
    """Return the template with *template_id*, or ``None``."""
    row = conn.execute(
        "SELECT * FROM templates WHERE id = ?", (template_id,)
    ).fetchone()
    return _row_to_template(row) if row is not None else None


def create_template(
    conn: sqlite3.Connection,
    name: str,
    file: bytes,
    content_type: str,
    description: Optional[str] = None,
    message: Optional[str] = None,
    filename: Optional[str] = None,
) -> Template:
    """Insert a template and return it."""
    sql = """
        INSERT INTO templates
            (name, description, message, file, content_type, filename)
        VALUES
            (:name, :description, :message, :file, :content_type, :filename)
    """
    cursor = conn.execute(sql, {
        "name": name,
        "description": description,
        "message": message,
        "file": file,
        "content_type": content_type,
        "filename": filename,
    })
    conn.commit()
    logger.info("Created template id=%d (%s, %d bytes)",
                cursor.lastrowid, name, len(file))
    return get_template_by_id(conn, cursor.lastrowid)


def delete_template(conn: sqlite3.Connection, template_id: int) -> bool:
    """Delete a template and clear every employee reference to it.

    Returns:
        ``False`` if the template did not exist.
    """
    cleared = conn.execute(
        "UPDATE employees SET template_id = NULL WHERE template_id = ?",
        (template_id,),
    ).rowcount
    cursor = conn.execute("DELETE FROM templates WHERE id = ?", (template_id,))
    conn.commit()
    deleted = cursor.rowcount > 0
    if deleted:
        logger.info("Deleted template id=%d (%d employee references cleared)",
                    template_id, cleared)
    return deleted


# ---------------------------------------------------------------------------
# Send ledger
# ---------------------------------------------------------------------------

def has_sent(
    conn: sqlite3.Connection,
    employee_id: int,
    send_date: datetime.date,
) -> bool:
    """Return ``True`` if a send is recorded for the employee on that day."""
    row = conn.execute(
        "SELECT 1 FROM send_ledger WHERE employee_id = ? AND send_date = ?",
        (employee_id, send_date.isoformat()),
    ).fetchone()
    return row is not None


def mark_sent(
    conn: sqlite3.Connection,
    employee_id: int,
    send_date: datetime.date,
) -> bool:
    """Record a send for ``(employee_id, send_date)`` if none exists.

    The insert is a single ``INSERT OR IGNORE`` against the primary key,
    so of two concurrent callers exactly one gets ``True``.

    Returns:
        ``True`` if this call created the record, ``False`` if it was
        already marked.
    """
    cursor = conn.execute(
        "INSERT OR IGNORE INTO send_ledger (employee_id, send_date) "
        "VALUES (?, ?)",
        (employee_id, send_date.isoformat()),
    )
    conn.commit()
    return cursor.rowcount == 1


def unmark_sent(
    conn: sqlite3.Connection,
    employee_id: int,
    send_date: datetime.date,
) -> None:
    """Remove the record for ``(employee_id, send_date)`` if present."""
    conn.execute(
        "DELETE FROM send_ledger WHERE employee_id = ? AND send_date = ?",
        (employee_id, send_date.isoformat()),
    )
    conn.commit()


def prune_ledger(conn: sqlite3.Connection, before: datetime.date) -> int:
    """Delete ledger records dated strictly before *before*.

    Returns:
        The number of records removed.
    """
    cursor = conn.execute(
        "DELETE FROM send_ledger WHERE send_date < ?",
        (before.isoformat(),),
    )
    conn.commit()
    logger.info("Pruned %d send ledger records older than %s",
                cursor.rowcount, before.isoformat())
    return cursor.rowcount


def get_ledger_count(conn: sqlite3.Connection) -> int:
    """Return the total number of rows in the ``send_ledger`` table."""
    row = conn.execute("SELECT COUNT(*) AS cnt FROM send_ledger").fetchone()
    return row["cnt"]

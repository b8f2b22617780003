"""pypyr step: show_summary

Prints the send report produced by ``send_birthdays`` and closes the
database connection.
"""

from __future__ import annotations

import logging

from birthday_wisher.db.manager import get_employees, get_ledger_count

logger = logging.getLogger(__name__)


def run_step(context: dict) -> None:
    """Print a summary of the send run and close the DB connection.

    Expects the following keys in *context*:
        conn         -- open sqlite3 connection
        send_report  -- (optional) report dict from send_birthdays
        pruned_count -- (optional) ledger rows removed this run
    """
    conn = context.get("conn")
    if conn is None:
        logger.warning("show_summary: no database connection in context")
        return

    report = context.get("send_report") or {}
    counts = report.get("counts", {})

    try:
        names = {e.id: e.name for e in get_employees(conn)}

        separator = "-" * 55
        print(separator)
        print(f"  Send date              : {report.get('date', '(not run)')}")
        print(f"  Greetings sent         : {counts.get('sent', 0)}")
        print(f"  Transport failures     : {counts.get('failed', 0)}")
        print(f"  Ledger records kept    : {get_ledger_count(conn)}")
        print(f"  Ledger records pruned  : {context.get('pruned_count', 0)}")
        print(separator)

        for employee_id in report.get("sent", []):
            print(f"  sent    {employee_id:<5} {names.get(employee_id, '?')}")
        for entry in report.get("skipped", []):
            if entry["reason"] == "not birthday":
                continue
            employee_id = entry["employee_id"]
            name = names.get(employee_id, "?")
            # Truncate long names
            if len(name) > 25:
                name = name[:22] + "..."
            print(f"  skipped {employee_id:<5} {name:<25} {entry['reason']}")
        print(separator)

    finally:
        conn.close()
        logger.info("Database connection closed by show_summary step.")

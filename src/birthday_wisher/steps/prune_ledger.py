"""pypyr step: drop send-ledger records from days that have passed.

Context keys consumed:
    conn (sqlite3.Connection): An initialised database connection.
    reference_date (str, optional): ISO date; records dated before it
        are removed.  Defaults to today.

Context keys produced:
    pruned_count (int): Number of records removed.
"""

import datetime
import logging

from birthday_wisher.db.manager import prune_ledger

logger = logging.getLogger(__name__)


def run_step(context: dict) -> None:
    """pypyr entry-point."""
    conn = context["conn"]
    value = context.get("reference_date")
    before = (
        datetime.date.fromisoformat(str(value)) if value
        else datetime.date.today()
    )

    context["pruned_count"] = prune_ledger(conn, before)

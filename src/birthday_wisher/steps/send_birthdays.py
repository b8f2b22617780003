"""pypyr step: send today's birthday greetings.

Runs the greeting orchestrator against the database connection in the
context, delivering through SMTP unless a transport object is supplied.

Usage in a pipeline YAML::

    steps:
      - name: birthday_wisher.steps.send_birthdays

Context keys consumed:
    conn (sqlite3.Connection): An initialised database connection.
    reference_date (str | datetime.date, optional): Day to process.
        Defaults to today.
    send_timeout (float, optional): Per-send timeout in seconds.  Falls
        back to the ``SEND_TIMEOUT`` env var.
    transport (object, optional): Mail transport override.

Context keys produced:
    reference_date (str): The ISO date that was processed.
    send_report (dict): The run report (``sent``, ``skipped``, ``counts``).

If the send raises, ``conn`` is closed and removed from the context
before the error propagates.
"""

import datetime
import logging
import os

from birthday_wisher import DEFAULT_SEND_TIMEOUT
from birthday_wisher.db.adapters import SqliteGreetingStore, SqliteSendLedger
from birthday_wisher.delivery.sender import SmtpTransport
from birthday_wisher.greetings.orchestrator import run_daily_send

logger = logging.getLogger(__name__)


def _resolve_date(value) -> datetime.date:
    if not value:
        return datetime.date.today()
    if isinstance(value, datetime.date):
        return value
    return datetime.date.fromisoformat(str(value))


def run_step(context: dict) -> None:
    """pypyr entry-point: run the daily birthday send.

    Args:
        context: The mutable pypyr context dictionary.
    """
    conn = context["conn"]
    reference_date = _resolve_date(context.get("reference_date"))
    timeout = float(context.get(
        "send_timeout",
        os.environ.get("SEND_TIMEOUT", DEFAULT_SEND_TIMEOUT),
    ))
    transport = context.get("transport") or SmtpTransport.from_env()

    try:
        report = run_daily_send(
            reference_date,
            SqliteGreetingStore(conn),
            transport,
            SqliteSendLedger(conn),
            timeout=timeout,
        )
    except Exception:
        # show_summary will not run, so release the connection here.
        conn.close()
        context.pop("conn", None)
        logger.info("Database connection closed after failed send step.")
        raise

    context["reference_date"] = reference_date.isoformat()
    context["send_report"] = report

    logger.info(
        "Birthday send for %s: %d sent, %d skipped (%d failed)",
        report["date"],
        report["counts"]["sent"],
        report["counts"]["skipped"],
        report["counts"]["failed"],
    )

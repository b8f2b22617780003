"""Trigger the birthday send run."""

import datetime
import logging
import sqlite3
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from birthday_wisher.api.deps import get_db, get_send_timeout, get_transport
from birthday_wisher.db.adapters import SqliteGreetingStore, SqliteSendLedger
from birthday_wisher.greetings.orchestrator import run_daily_send

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/send", tags=["send"])


@router.post("")
def trigger_send(
    date: Optional[datetime.date] = None,
    conn: sqlite3.Connection = Depends(get_db),
    transport=Depends(get_transport),
    timeout: float = Depends(get_send_timeout),
):
    """Send greetings for *date* (default: today) and return the report."""
    reference_date = date or datetime.date.today()
    try:
        report = run_daily_send(
            reference_date,
            SqliteGreetingStore(conn),
            transport,
            SqliteSendLedger(conn),
            timeout=timeout,
        )
    except Exception as exc:
        logger.exception("Email send failed for %s", reference_date)
        return JSONResponse(status_code=500, content={"error": str(exc)})
    return {"data": report}

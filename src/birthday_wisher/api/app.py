"""FastAPI application for the birthday-wisher HTTP API.

All routes live under ``/api``.  Responses wrap payloads as
``{"data": ...}``; failures answer ``{"error": ...}`` with 400, 404 or
500.
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from birthday_wisher import DEFAULT_DB_PATH, DEFAULT_SEND_TIMEOUT, __version__
from birthday_wisher.api.routes import employees, send, templates
from birthday_wisher.api.schemas import flatten_errors
from birthday_wisher.db.manager import get_connection, init_db
from birthday_wisher.delivery.sender import SmtpTransport

logger = logging.getLogger(__name__)


async def _validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": flatten_errors(exc)})


def create_app(
    db_path: Optional[str] = None,
    transport=None,
    send_timeout: Optional[float] = None,
) -> FastAPI:
    """Build the API app.

    Args:
        db_path: SQLite file; defaults to ``BIRTHDAY_WISHER_DB`` or
                 ``DEFAULT_DB_PATH``.  The schema is applied on startup.
        transport: Mail transport; defaults to ``SmtpTransport.from_env()``.
        send_timeout: Per-send timeout in seconds; defaults to
                      ``SEND_TIMEOUT`` or ``DEFAULT_SEND_TIMEOUT``.
    """
    load_dotenv()

    db_path = db_path or os.environ.get("BIRTHDAY_WISHER_DB", DEFAULT_DB_PATH)
    if send_timeout is None:
        send_timeout = float(
            os.environ.get("SEND_TIMEOUT", DEFAULT_SEND_TIMEOUT)
        )

    if db_path != ":memory:":
        parent = os.path.dirname(db_path)
        if parent:
            os.makedirs(parent, exist_ok=True)

    conn = get_connection(db_path)
    try:
        init_db(conn)
    finally:
        conn.close()

    app = FastAPI(
        title="birthday-wisher",
        description="Birthday roster, greeting templates and daily send trigger",
        version=__version__,
    )
    app.state.db_path = db_path
    app.state.transport = transport or SmtpTransport.from_env()
    app.state.send_timeout = send_timeout

    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.include_router(employees.router, prefix="/api")
    app.include_router(templates.router, prefix="/api")
    app.include_router(send.router, prefix="/api")

    @app.get("/")
    def root():
        return {
            "service": "birthday-wisher",
            "version": __version__,
            "docs": "/docs",
        }

    logger.info("API ready (db=%s, send_timeout=%ss)", db_path, send_timeout)
    return app

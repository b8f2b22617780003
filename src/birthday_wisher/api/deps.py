"""FastAPI dependencies: database connection and mail transport."""

from fastapi import Request

from birthday_wisher.db.manager import get_connection


def get_db(request: Request):
    """Yield a connection to the app's database, closed after the request."""
    conn = get_connection(request.app.state.db_path)
    try:
        yield conn
    finally:
        conn.close()


def get_transport(request: Request):
    return request.app.state.transport


def get_send_timeout(request: Request) -> float:
    return request.app.state.send_timeout

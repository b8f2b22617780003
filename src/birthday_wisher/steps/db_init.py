"""pypyr step: initialize the SQLite database.

Reads ``db_path`` from the pypyr context (defaulting to the
``BIRTHDAY_WISHER_DB`` env var, then ``DEFAULT_DB_PATH``), opens a
connection, applies the schema, and stores the live connection back into
the context so that downstream steps can reuse it.

Usage in a pipeline YAML::

    steps:
      - name: birthday_wisher.steps.db_init

Context keys consumed:
    db_path (str, optional): Path to the SQLite database file.

Context keys produced:
    conn (sqlite3.Connection): The initialised database connection.
    db_path (str): The resolved database path.
"""

import logging
import os
import pathlib

from birthday_wisher import DEFAULT_DB_PATH
from birthday_wisher.db.manager import get_connection, init_db

logger = logging.getLogger(__name__)


def run_step(context: dict) -> None:
    """pypyr entry-point: open DB connection and initialise schema.

    Args:
        context: The mutable pypyr context dictionary.
    """
    db_path: str = context.get(
        "db_path", os.environ.get("BIRTHDAY_WISHER_DB", DEFAULT_DB_PATH)
    )

    if db_path != ":memory:":
        parent = pathlib.Path(db_path).parent
        parent.mkdir(parents=True, exist_ok=True)

    conn = get_connection(db_path)
    init_db(conn)

    context["conn"] = conn
    context["db_path"] = db_path

    logger.info("Database initialised at %s", db_path)

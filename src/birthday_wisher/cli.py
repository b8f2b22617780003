"""Click CLI for birthday-wisher.

Commands:
    init-db      -- Create the database schema.
    send         -- Send greetings for today's (or a given) date.
    prune-ledger -- Drop send-ledger records from past days.
    serve        -- Run the HTTP API with uvicorn.
    pipeline     -- Invoke the pypyr daily pipeline.
"""

from __future__ import annotations

import datetime
import logging
import os

import click
from dotenv import load_dotenv

from birthday_wisher import DEFAULT_DB_PATH, DEFAULT_SEND_TIMEOUT
from birthday_wisher.logging_config import setup_logging

logger = logging.getLogger("birthday_wisher.cli")


def _resolve_db_path(ctx_db: str | None) -> str:
    """Return the database path from --db flag, env var, or default."""
    if ctx_db:
        return ctx_db
    env_path = os.environ.get("BIRTHDAY_WISHER_DB")
    if env_path:
        return env_path
    return DEFAULT_DB_PATH


def _ensure_db_dir(db_path: str) -> None:
    """Create parent directory for the database file if it does not exist."""
    parent = os.path.dirname(db_path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def _open_db(ctx: click.Context):
    from birthday_wisher.db.manager import get_connection, init_db

    db_path = ctx.obj["db_path"]
    _ensure_db_dir(db_path)
    conn = get_connection(db_path)
    init_db(conn)
    return conn


@click.group()
@click.option(
    "--db",
    default=None,
    envvar="BIRTHDAY_WISHER_DB",
    help="Path to the SQLite database file.",
)
@click.option(
    "--log-level",
    default=None,
    envvar="LOG_LEVEL",
    help="Logging level (DEBUG, INFO, WARNING, ...).",
)
@click.pass_context
def main(ctx: click.Context, db: str | None, log_level: str | None) -> None:
    """birthday-wisher: Birthday greetings for the team roster."""
    load_dotenv()
    setup_logging(log_level)
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = _resolve_db_path(db)


@main.command("init-db")
@click.pass_context
def init_db_command(ctx: click.Context) -> None:
    """Create the database schema."""
    conn = _open_db(ctx)
    conn.close()
    click.echo(click.style(f"Database ready at {ctx.obj['db_path']}", fg="green"))


@main.command()
@click.option(
    "--date",
    "reference_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Send for this date (YYYY-MM-DD) instead of today.",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    envvar="SEND_TIMEOUT",
    show_default=str(DEFAULT_SEND_TIMEOUT),
    help="Per-email SMTP timeout in seconds.",
)
@click.pass_context
def send(
    ctx: click.Context,
    reference_date: datetime.datetime | None,
    timeout: float | None,
) -> None:
    """Send birthday greetings for today's birthdays."""
    from birthday_wisher.db.adapters import SqliteGreetingStore, SqliteSendLedger
    from birthday_wisher.delivery.sender import SmtpTransport
    from birthday_wisher.greetings.orchestrator import run_daily_send

    day = reference_date.date() if reference_date else datetime.date.today()
    conn = _open_db(ctx)

    click.echo(click.style(f"Sending birthday greetings for {day}...", fg="cyan"))

    try:
        report = run_daily_send(
            day,
            SqliteGreetingStore(conn),
            SmtpTransport.from_env(),
            SqliteSendLedger(conn),
            timeout=timeout if timeout is not None else DEFAULT_SEND_TIMEOUT,
        )
    except Exception as exc:
        logger.error("Send run failed: %s", exc)
        click.echo(click.style(f"Send run failed: {exc}", fg="red"))
        raise SystemExit(1)
    finally:
        conn.close()

    counts = report["counts"]
    click.echo(
        click.style(f"Sent: {counts['sent']}", fg="green")
        + " | "
        + click.style(f"Skipped: {counts['skipped']}", fg="yellow")
        + " | "
        + click.style(f"Failed: {counts['failed']}", fg="red")
    )
    for entry in report["skipped"]:
        if entry["reason"] != "not birthday":
            click.echo(f"  employee {entry['employee_id']}: {entry['reason']}")


@main.command("prune-ledger")
@click.option(
    "--before",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Remove records dated before this day (default: today).",
)
@click.pass_context
def prune_ledger_command(
    ctx: click.Context,
    before: datetime.datetime | None,
) -> None:
    """Remove send-ledger records from past days."""
    from birthday_wisher.db.manager import prune_ledger

    cutoff = before.date() if before else datetime.date.today()
    conn = _open_db(ctx)
    try:
        removed = prune_ledger(conn, cutoff)
    finally:
        conn.close()
    click.echo(f"Removed {removed} ledger records older than {cutoff}.")


@main.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.pass_context
def serve(ctx: click.Context, host: str, port: int) -> None:
    """Run the HTTP API."""
    import uvicorn

    from birthday_wisher.api.app import create_app

    db_path = ctx.obj["db_path"]
    _ensure_db_dir(db_path)

    app = create_app(db_path=db_path)
    click.echo(click.style(f"Serving on http://{host}:{port}", fg="cyan"))
    uvicorn.run(app, host=host, port=port, log_config=None)


@main.command()
@click.argument("name", type=click.Choice(["daily"]))
@click.option(
    "--date",
    "reference_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Run the pipeline for this date (YYYY-MM-DD).",
)
@click.pass_context
def pipeline(
    ctx: click.Context,
    name: str,
    reference_date: datetime.datetime | None,
) -> None:
    """Run a full pypyr pipeline (daily)."""
    from pypyr import pipelinerunner
    from birthday_wisher import PACKAGE_DIR

    db_path = ctx.obj["db_path"]
    _ensure_db_dir(db_path)

    pipeline_map = {
        "daily": "daily_send",
    }

    pipeline_name = pipeline_map[name]
    pipeline_path = str(PACKAGE_DIR / "pipelines" / pipeline_name)
    click.echo(
        click.style(f"Running pipeline: {pipeline_name}", fg="cyan")
    )

    dict_in = {"db_path": db_path}
    if reference_date:
        dict_in["reference_date"] = reference_date.date().isoformat()

    try:
        pipelinerunner.run(pipeline_name=pipeline_path, dict_in=dict_in)
        click.echo(
            click.style(f"Pipeline '{pipeline_name}' completed.", fg="green")
        )
    except Exception as exc:
        logger.error("Pipeline failed: %s", exc)
        click.echo(
            click.style(f"Pipeline failed: {exc}", fg="red")
        )
        raise SystemExit(1)

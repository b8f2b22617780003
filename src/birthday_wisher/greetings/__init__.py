"""Greeting sub-package: birthday matching, composition and send runs.

Usage::

    from birthday_wisher.greetings import run_daily_send

    report = run_daily_send(datetime.date.today(), store, transport, ledger)
"""

from birthday_wisher.greetings.composer import compose
from birthday_wisher.greetings.matcher import is_birthday
from birthday_wisher.greetings.orchestrator import run, run_daily_send
from birthday_wisher.greetings.report import to_report

__all__ = ["compose", "is_birthday", "run", "run_daily_send", "to_report"]

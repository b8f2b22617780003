"""Run the daily birthday send across the roster.

The orchestrator walks the roster in ascending id order and, for every
employee, either sends a greeting or records why it was skipped.  The
send ledger guarantees at most one greeting per employee per calendar
day, including when two runs overlap: a ledger slot is claimed with an
atomic ``mark_sent`` before the transport is called, and released again
if delivery fails so the next run retries.

A transport failure only affects its own employee.  Errors raised by the
roster, template lookup or ledger propagate to the caller.
"""

from __future__ import annotations

import datetime
import logging
from typing import Iterable, Optional, Protocol

from birthday_wisher import DEFAULT_SEND_TIMEOUT
from birthday_wisher.greetings.composer import TemplateLookup, compose
from birthday_wisher.greetings.matcher import is_birthday
from birthday_wisher.greetings.report import to_report
from birthday_wisher.models import (
    Employee,
    GreetingMessage,
    SendOutcome,
    SendResult,
    SkippedSend,
    Template,
)

logger = logging.getLogger(__name__)

REASON_ALREADY_SENT = "already sent today"
REASON_NOT_BIRTHDAY = "not birthday"


class MailTransport(Protocol):
    def send(
        self,
        to_email: str,
        message: GreetingMessage,
        timeout: Optional[float] = None,
    ) -> SendResult:
        ...


class SendLedger(Protocol):
    def has_sent(self, employee_id: int, send_date: datetime.date) -> bool:
        ...

    def mark_sent(self, employee_id: int, send_date: datetime.date) -> bool:
        ...

    def unmark(self, employee_id: int, send_date: datetime.date) -> None:
        ...


class GreetingStore(Protocol):
    def get_roster(self) -> list[Employee]:
        ...

    def get_template_by_id(self, template_id: int) -> Optional[Template]:
        ...


def _deliver(
    transport: MailTransport,
    employee: Employee,
    message: GreetingMessage,
    timeout: Optional[float],
) -> SendResult:
    """Call the transport, turning any exception into a failed result."""
    try:
        return transport.send(employee.email, message, timeout=timeout)
    except TimeoutError:
        return SendResult(
            recipient=employee.email,
            success=False,
            error_message=f"transport timed out after {timeout}s",
        )
    except Exception as exc:
        logger.exception(
            "Transport raised while sending to employee id=%d", employee.id
        )
        return SendResult(
            recipient=employee.email,
            success=False,
            error_message=str(exc) or exc.__class__.__name__,
        )


def run(
    reference_date: datetime.date,
    roster: Iterable[Employee],
    template_lookup: TemplateLookup,
    transport: MailTransport,
    ledger: SendLedger,
    timeout: Optional[float] = DEFAULT_SEND_TIMEOUT,
) -> SendOutcome:
    """Send greetings to everyone whose birthday is *reference_date*.

    Args:
        reference_date: The calendar day being processed.
        roster: Employees to consider.  Processed in ascending id order.
        template_lookup: Resolves a template id, ``None`` when missing.
        transport: Mail transport with a ``send(to, message, timeout=)``
            method returning a ``SendResult``.
        ledger: Send ledger keyed by ``(employee_id, date)``.
        timeout: Seconds each transport call may take.

    Returns:
        A ``SendOutcome`` listing sent ids and skipped entries in roster
        order.
    """
    outcome = SendOutcome(reference_date=reference_date)

    for employee in sorted(roster, key=lambda e: e.id):
        if ledger.has_sent(employee.id, reference_date):
            outcome.skipped.append(
                SkippedSend(employee.id, REASON_ALREADY_SENT)
            )
            continue

        if not is_birthday(reference_date, employee.dob):
            outcome.skipped.append(
                SkippedSend(employee.id, REASON_NOT_BIRTHDAY)
            )
            continue

        message = compose(employee, template_lookup)

        if not ledger.mark_sent(employee.id, reference_date):
            logger.info(
                "Employee id=%d was claimed by a concurrent run", employee.id
            )
            outcome.skipped.append(
                SkippedSend(employee.id, REASON_ALREADY_SENT)
            )
            continue

        # The claim survives only a completed delivery, including when an
        # interrupt escapes the transport.
        delivered = False
        try:
            result = _deliver(transport, employee, message, timeout)
            delivered = result.success
        finally:
            if not delivered:
                ledger.unmark(employee.id, reference_date)

        if delivered:
            outcome.sent.append(employee.id)
            logger.info(
                "Birthday greeting sent to %s (employee id=%d)",
                employee.email, employee.id,
            )
        else:
            reason = result.error_message or "transport error"
            outcome.skipped.append(
                SkippedSend(employee.id, reason, transport_failure=True)
            )
            logger.warning(
                "Birthday greeting to %s (employee id=%d) failed: %s",
                employee.email, employee.id, reason,
            )

    logger.info(
        "Send run for %s complete: %d sent, %d skipped",
        reference_date.isoformat(), len(outcome.sent), len(outcome.skipped),
    )
    return outcome


def run_daily_send(
    reference_date: datetime.date,
    store: GreetingStore,
    transport: MailTransport,
    ledger: SendLedger,
    timeout: Optional[float] = DEFAULT_SEND_TIMEOUT,
) -> dict:
    """Run the send for *reference_date* and return the report dict.

    The roster is read once at the start of the run.
    """
    roster = store.get_roster()
    outcome = run(
        reference_date,
        roster,
        store.get_template_by_id,
        transport,
        ledger,
        timeout=timeout,
    )
    return to_report(outcome)

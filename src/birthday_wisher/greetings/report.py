"""Shape a ``SendOutcome`` into the dict returned to callers."""

from birthday_wisher.models import SendOutcome


def to_report(outcome: SendOutcome) -> dict:
    """Return a JSON-ready summary of *outcome*, preserving its order.

    Returns:
        A dict with keys:
            - ``date`` (str): ISO reference date.
            - ``sent`` (list[int]): Employee ids greeted.
            - ``skipped`` (list[dict]): ``employee_id`` / ``reason`` pairs.
            - ``counts`` (dict): ``sent``, ``skipped`` and ``failed``
              totals, where ``failed`` counts transport failures.
    """
    skipped = [
        {"employee_id": entry.employee_id, "reason": entry.reason}
        for entry in outcome.skipped
    ]
    failed = sum(1 for entry in outcome.skipped if entry.transport_failure)

    return {
        "date": outcome.reference_date.isoformat(),
        "sent": list(outcome.sent),
        "skipped": skipped,
        "counts": {
            "sent": len(outcome.sent),
            "skipped": len(outcome.skipped),
            "failed": failed,
        },
    }

"""Compose the birthday email for a single employee.

The plain-text body is chosen by a fallback chain (personal message,
then template message, then a default greeting) and rendered into HTML
with the Jinja2 template at ``templates/greeting.html``.
"""

import logging
import mimetypes
import pathlib
from typing import Callable, Optional

from jinja2 import Environment, FileSystemLoader

from birthday_wisher.models import Attachment, Employee, GreetingMessage, Template

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = pathlib.Path(__file__).parent / "templates"

DEFAULT_GREETING = (
    "Wishing you a wonderful birthday and a fantastic year ahead!"
)

TemplateLookup = Callable[[int], Optional[Template]]

_env = Environment(
    loader=FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=True,
)


def build_subject(name: str) -> str:
    return f"Happy Birthday, {name}!"


def _non_blank(text: Optional[str]) -> Optional[str]:
    if text and text.strip():
        return text.strip()
    return None


def _attachment_from(template: Template) -> Attachment:
    """Wrap template artwork as an attachment with a usable filename."""
    filename = template.filename
    if not filename:
        extension = mimetypes.guess_extension(template.content_type) or ""
        filename = f"template-{template.id}{extension}"
    return Attachment(
        content=template.file,
        content_type=template.content_type,
        filename=filename,
    )


def resolve_template(
    employee: Employee,
    template_lookup: TemplateLookup,
) -> Optional[Template]:
    """Return the employee's template, or ``None`` if unset or dangling."""
    if employee.template_id is None:
        return None
    template = template_lookup(employee.template_id)
    if template is None:
        logger.warning(
            "Employee id=%d references missing template id=%d; "
            "composing without it",
            employee.id, employee.template_id,
        )
    return template


def compose(
    employee: Employee,
    template_lookup: TemplateLookup,
) -> GreetingMessage:
    """Build the greeting for *employee*.

    Args:
        employee: The birthday person.
        template_lookup: Callable returning a ``Template`` for an id, or
            ``None`` when the template no longer exists.

    Returns:
        A ``GreetingMessage``.  A dangling ``template_id`` composes
        exactly as if no template were assigned.
    """
    template = resolve_template(employee, template_lookup)

    attachment = None
    body = _non_blank(employee.message)
    if template is not None:
        attachment = _attachment_from(template)
        body = body or _non_blank(template.message)
    body = body or DEFAULT_GREETING

    html_body = _env.get_template("greeting.html").render(
        name=employee.name,
        paragraphs=body.splitlines(),
        attachment=attachment,
    )

    return GreetingMessage(
        subject=build_subject(employee.name),
        body=body,
        html_body=html_body,
        attachment=attachment,
    )

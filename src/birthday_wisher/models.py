"""Value types shared by the store, the greeting core and the transport."""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Template:
    """A greeting template: reusable message text plus artwork."""

    id: int
    name: str
    file: bytes
    content_type: str
    description: Optional[str] = None
    message: Optional[str] = None
    filename: Optional[str] = None


@dataclass(frozen=True)
class Employee:
    """A roster entry."""

    id: int
    name: str
    email: str
    dob: datetime.date
    designation: str = ""
    team: str = ""
    message: Optional[str] = None
    template_id: Optional[int] = None
    photo: Optional[bytes] = None
    photo_content_type: Optional[str] = None


@dataclass(frozen=True)
class Attachment:
    """Binary payload attached to an outgoing greeting."""

    content: bytes
    content_type: str
    filename: str

    @property
    def is_image(self) -> bool:
        return self.content_type.startswith("image/")


@dataclass(frozen=True)
class GreetingMessage:
    """A fully composed birthday email."""

    subject: str
    body: str
    html_body: str
    attachment: Optional[Attachment] = None


@dataclass
class SendResult:
    """Outcome of a single transport call."""

    recipient: str
    success: bool
    error_message: Optional[str] = None


@dataclass(frozen=True)
class SkippedSend:
    """An employee the orchestrator did not send to, with the reason."""

    employee_id: int
    reason: str
    transport_failure: bool = False


@dataclass
class SendOutcome:
    """Result of one orchestration run, in roster order."""

    reference_date: datetime.date
    sent: list[int] = field(default_factory=list)
    skipped: list[SkippedSend] = field(default_factory=list)

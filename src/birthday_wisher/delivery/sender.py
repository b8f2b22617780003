"""Deliver birthday greetings via SMTP.

Uses stdlib ``smtplib`` and ``email.mime`` to send multipart emails with
a plain-text part, an HTML part and the template artwork.  Image artwork
is embedded inline (``cid:greeting-artwork``); anything else is attached.

SMTP credentials are read from environment variables:

- ``SMTP_EMAIL`` -- sender email address (required)
- ``SMTP_PASSWORD`` -- sender password / app password (required)
- ``SMTP_HOST`` -- SMTP server hostname (default: ``smtp.gmail.com``)
- ``SMTP_PORT`` -- SMTP server port (default: ``465``)
- ``SMTP_SENDER_NAME`` -- display name (default: ``Birthday Wisher``)

``SmtpTransport.send`` never raises; every failure is logged and returned
as an unsuccessful ``SendResult`` so the caller can retry later.
"""

import logging
import os
import smtplib
from email import encoders
from email.header import Header
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from birthday_wisher.models import Attachment, GreetingMessage, SendResult

logger = logging.getLogger(__name__)

INLINE_CONTENT_ID = "greeting-artwork"


def _attachment_part(attachment: Attachment, inline: bool) -> MIMEBase:
    maintype, _, subtype = attachment.content_type.partition("/")
    if not subtype:
        maintype, subtype = "application", "octet-stream"

    part = MIMEBase(maintype, subtype)
    part.set_payload(attachment.content)
    encoders.encode_base64(part)

    disposition = "inline" if inline else "attachment"
    part.add_header(
        "Content-Disposition", disposition, filename=attachment.filename
    )
    if inline:
        part.add_header("Content-ID", f"<{INLINE_CONTENT_ID}>")
    return part


def build_mime_message(
    sender: str,
    recipient: str,
    message: GreetingMessage,
) -> MIMEMultipart:
    """Assemble the MIME tree for *message*.

    Layout:
        no attachment    -> multipart/alternative (text, html)
        image attachment -> multipart/related (alternative, inline image)
        other attachment -> multipart/mixed (alternative, attachment)
    """
    alternative = MIMEMultipart("alternative")
    alternative.attach(MIMEText(message.body, "plain", "utf-8"))
    alternative.attach(MIMEText(message.html_body, "html", "utf-8"))

    attachment = message.attachment
    if attachment is None:
        mime = alternative
    elif attachment.is_image:
        mime = MIMEMultipart("related")
        mime.attach(alternative)
        mime.attach(_attachment_part(attachment, inline=True))
    else:
        mime = MIMEMultipart("mixed")
        mime.attach(alternative)
        mime.attach(_attachment_part(attachment, inline=False))

    mime["Subject"] = Header(message.subject, "utf-8")
    mime["From"] = sender
    mime["To"] = recipient
    return mime


class SmtpTransport:
    """SMTP_SSL mail transport."""

    def __init__(
        self,
        sender_email: str = "",
        sender_password: str = "",
        host: str = "smtp.gmail.com",
        port: int = 465,
        sender_name: str = "Birthday Wisher",
    ) -> None:
        self.sender_email = sender_email
        self.sender_password = sender_password
        self.host = host
        self.port = port
        self.sender_name = sender_name

    @classmethod
    def from_env(cls) -> "SmtpTransport":
        """Build a transport from the ``SMTP_*`` environment variables."""
        return cls(
            sender_email=os.environ.get("SMTP_EMAIL", ""),
            sender_password=os.environ.get("SMTP_PASSWORD", ""),
            host=os.environ.get("SMTP_HOST", "smtp.gmail.com"),
            port=int(os.environ.get("SMTP_PORT", "465")),
            sender_name=os.environ.get("SMTP_SENDER_NAME", "Birthday Wisher"),
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.sender_email and self.sender_password)

    def send(
        self,
        to_email: str,
        message: GreetingMessage,
        timeout: Optional[float] = None,
    ) -> SendResult:
        """Send *message* to *to_email*.

        Args:
            to_email: The destination email address.
            message: The composed greeting.
            timeout: Socket timeout in seconds, applied to each blocking
                SMTP operation (connect, each command and reply), not to
                the session as a whole.

        Returns:
            A ``SendResult``; ``error_message`` explains any failure.
        """
        # --- guard: missing credentials ----------------------------------
        if not self.is_configured:
            logger.warning(
                "SMTP credentials not configured. "
                "Set SMTP_EMAIL and SMTP_PASSWORD environment variables to "
                "enable email delivery."
            )
            return SendResult(
                recipient=to_email,
                success=False,
                error_message="SMTP credentials not configured",
            )

        if not to_email:
            logger.warning("No recipient email address provided; skipping send.")
            return SendResult(
                recipient=to_email,
                success=False,
                error_message="missing recipient address",
            )

        sender = f"{self.sender_name} <{self.sender_email}>"
        mime = build_mime_message(sender, to_email, message)

        # --- send via SMTP_SSL -------------------------------------------
        try:
            kwargs = {"timeout": timeout} if timeout is not None else {}
            with smtplib.SMTP_SSL(self.host, self.port, **kwargs) as server:
                server.login(self.sender_email, self.sender_password)
                server.sendmail(self.sender_email, [to_email], mime.as_string())

            logger.info("Email sent successfully to %s", to_email)
            return SendResult(recipient=to_email, success=True)

        except smtplib.SMTPAuthenticationError:
            error_msg = "SMTP authentication failed"
            logger.error(
                "SMTP authentication failed. Check SMTP_EMAIL and "
                "SMTP_PASSWORD environment variables."
            )

        except smtplib.SMTPRecipientsRefused:
            error_msg = f"recipient refused: {to_email}"
            logger.error("SMTP server refused recipient %s", to_email)

        except smtplib.SMTPException as exc:
            error_msg = f"SMTP error: {exc}"
            logger.error("SMTP error while sending email: %s", exc)

        except TimeoutError:
            error_msg = f"SMTP timed out after {timeout}s"
            logger.error(
                "Timed out talking to %s:%d after %ss",
                self.host, self.port, timeout,
            )

        except OSError as exc:
            error_msg = f"network error: {exc}"
            logger.error(
                "Network error while connecting to %s:%d: %s",
                self.host, self.port, exc,
            )

        return SendResult(recipient=to_email, success=False,
                          error_message=error_msg)

"""Delivery sub-package: the SMTP mail transport.

Usage::

    from birthday_wisher.delivery import SmtpTransport

    transport = SmtpTransport.from_env()
    result = transport.send("ada@example.com", message, timeout=30)
"""

from birthday_wisher.delivery.sender import SmtpTransport, build_mime_message

__all__ = ["SmtpTransport", "build_mime_message"]

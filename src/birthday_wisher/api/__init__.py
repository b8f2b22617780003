"""HTTP API sub-package.

Usage::

    from birthday_wisher.api import create_app

    app = create_app(db_path="birthdays.db")
"""

from birthday_wisher.api.app import create_app

__all__ = ["create_app"]

"""birthday-wisher: Email birthday greetings to the team roster."""

__version__ = "0.1.0"

import os
import pathlib

DEFAULT_DB_PATH = os.path.join(
    os.path.expanduser("~"), ".birthday-wisher", "birthday_wisher.db"
)

DEFAULT_SEND_TIMEOUT = 30.0

PACKAGE_DIR = pathlib.Path(__file__).parent

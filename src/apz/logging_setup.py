"""Logging configuration for apz.

The player owns the terminal while it runs, so almost everything goes to a
rotating log file at ~/.config/apz/apz.log (5 MB cap, 2 backups). Only
warnings and errors reach stderr unless ``--debug`` is given.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_DIR = Path.home() / ".config" / "apz"
LOG_FILE = LOG_DIR / "apz.log"

_LOG_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
_LOG_BACKUP_COUNT = 2

_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [%(threadName)s]: %(message)s"


def setup_logging(debug: bool = False) -> logging.Logger:
    """Attach file and stderr handlers to the ``apz`` logger.

    Calling this again replaces the handlers from the previous call instead
    of stacking duplicates.
    """
    LOG_DIR.mkdir(parents=True, exist_ok=True)

    log = logging.getLogger("apz")
    log.setLevel(logging.DEBUG if debug else logging.INFO)
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()

    # Audio callback warnings land here too; threadName tells them apart.
    fh = RotatingFileHandler(
        str(LOG_FILE),
        maxBytes=_LOG_MAX_BYTES,
        backupCount=_LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    log.addHandler(fh)

    sh = logging.StreamHandler()
    sh.setLevel(logging.DEBUG if debug else logging.WARNING)
    sh.setFormatter(logging.Formatter("apz %(levelname)s: %(message)s"))
    log.addHandler(sh)

    log.debug("Logging to %s (debug=%s)", LOG_FILE, debug)
    return log

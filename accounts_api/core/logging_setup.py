# File: accounts_api/core/logging_setup.py

import logging

from accounts_api.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Attach a stream handler to the ``accounts_api`` logger (once)."""
    logger = logging.getLogger("accounts_api")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel((level or settings.log_level).upper())

"""Logging setup for the service."""
import logging
from typing import Optional

from timebill.config import settings


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure logging once for the whole process."""
    log_level = level or settings.log_level
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(
        format=LOG_FORMAT,
        level=numeric_level,
        force=True,  # override handlers installed by the ASGI server
    )

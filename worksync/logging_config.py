"""Process-wide logging setup."""

import logging
from typing import Optional

from worksync.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Apply LOG_LEVEL to the root logger. Safe to call more than once."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )

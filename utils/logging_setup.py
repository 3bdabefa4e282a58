"""
Logging setup for entry-point scripts.

Library modules only create module-level loggers; scripts call
setup_logging() once at startup.
"""

import os
import logging
from typing import Optional

from dotenv import load_dotenv

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging with timestamps.

    Args:
        level: Level name (e.g. "DEBUG"). Falls back to the LOG_LEVEL
               environment variable, then INFO.
    """
    load_dotenv()
    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    numeric_level = getattr(logging, level_name, None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT
    )

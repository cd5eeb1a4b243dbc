"""
Logging setup - one call at startup, modules use logging.getLogger(__name__).
"""

import logging

from admissions.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging() -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)
    # pymongo heartbeat chatter
    logging.getLogger("pymongo").setLevel(logging.WARNING)

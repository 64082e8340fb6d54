"""
Logger - Shared logging setup for regionfence modules

Every module obtains its logger through get_logger() so that handlers and
levels are configured in one place.
"""

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_LEVEL = os.environ.get("REGIONFENCE_LOG_LEVEL", "INFO")

_configured = False

def configure_logging(level: Optional[str] = None) -> None:
    """Configure the root regionfence logger"""

    global _configured

    root = logging.getLogger("regionfence")
    root.setLevel((level or DEFAULT_LEVEL).upper())

    if not _configured:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        _configured = True

def get_logger(name: str) -> logging.Logger:
    """Get a logger under the regionfence namespace"""

    if not _configured:
        configure_logging()

    if not name.startswith("regionfence"):
        name = f"regionfence.{name}"

    return logging.getLogger(name)

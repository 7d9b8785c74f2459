from __future__ import annotations

import logging
from typing import Optional

from cifstruct.config import load_settings


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Return a module logger with a sensible default configuration.

    The root handler is configured once, at ``level`` or CIFSTRUCT_LOG_LEVEL.
    """
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers:
        level = level or load_settings().log_level
        logging.basicConfig(
            level=getattr(logging, level.upper(), logging.INFO),
            format="%(asctime)s %(levelname)s %(name)s - %(message)s",
        )
    return logger

"""
Logging utilities for the Invoice Dashboard backend.

Provides standardized logger configuration.

SECURITY RULES:
- NEVER log passwords submitted through the login form
- NEVER log Supabase Auth access tokens, API keys, or secrets
- Log high-level events and identifiers (invoice ids, user ids), not form bodies
"""

import logging
from typing import Optional

from invoice_dashboard.config import settings


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a configured logger for the specified module.

    Args:
        name: Module name (typically __name__)
        level: Optional logging level (defaults to settings.LOG_LEVEL)

    Returns:
        Configured logger instance

    Usage:
        >>> from invoice_dashboard.utils.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Invoice created")
    """
    logger = logging.getLogger(name)

    if level is None:
        level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logger.setLevel(level)

    # Add handler if not already configured (avoid duplicate handlers)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        # main.py configures the root handler too; don't print twice
        logger.propagate = False

    return logger

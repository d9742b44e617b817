"""Logging helpers for rulewrite.

Wraps the standard library logging so every logger lives under the
"rulewrite." namespace. The library never installs handlers; applications
decide where records go.

Example:
    >>> from rulewrite.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("Expanding rule")
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger namespaced under "rulewrite."

    Example:
        >>> get_logger("matcher").name
        'rulewrite.matcher'
    """
    if not (name == "rulewrite" or name.startswith("rulewrite.")):
        name = f"rulewrite.{name}"
    return logging.getLogger(name)

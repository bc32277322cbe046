"""Shared logger for the calculator packages."""
import logging
import os
from typing import Optional


LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def build_logger(name: str = "prodcalc", level: Optional[str] = None) -> logging.Logger:
    """
    Return the named logger with a single stderr handler attached.

    Calling it again with the same name only updates the level, so importing
    modules never stack duplicate handlers.

    :param str name: Logger name
    :param str level: Level name, defaults to $PRODCALC_LOG_LEVEL or INFO

    :return: Configured logger
    :rtype: logging.Logger
    """
    log = logging.getLogger(name)
    if not log.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)
    try:
        log.setLevel((level or os.environ.get("PRODCALC_LOG_LEVEL", "INFO")).upper())
    except ValueError:
        # unknown level names fall back to INFO
        log.setLevel(logging.INFO)
    return log


logger = build_logger()

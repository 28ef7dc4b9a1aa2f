"""Timestamped console logging for the CLI."""

import logging
import sys

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def configure_logging(level: int | str = logging.INFO) -> None:
    """Install one stderr handler on the package logger; safe to call repeatedly."""
    logger = logging.getLogger("partner_master")
    for handler in list(logger.handlers):
        if getattr(handler, "_partner_master", False):
            logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler._partner_master = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

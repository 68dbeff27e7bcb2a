"""Logging setup for applications embedding instaupload."""
import logging
import os
from typing import Optional

from rich.logging import RichHandler


def configure_logging(
    debug: bool = False,
    log_level: Optional[str] = None,
    silent: bool = False,
) -> str:
    """
    Configure root logging.

    Silent unless debug, log_level or the LOG_LEVEL env variable is set.
    Returns a string describing effective mode.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    logging.disable(logging.NOTSET)
    log_level = log_level or os.getenv("LOG_LEVEL")

    if silent or (not debug and not log_level):
        logging.disable(logging.CRITICAL)
        root_logger.setLevel(logging.CRITICAL + 1)
        return "silent"

    if debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, log_level.upper(), logging.INFO)

    handler = RichHandler(
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return logging.getLevelName(level)

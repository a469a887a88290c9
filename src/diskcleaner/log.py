"""Logging setup: rich console output plus a timestamped log file."""

import logging
import time
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "diskcleaner"

FILE_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class UTCFormatter(logging.Formatter):
    """Formatter that stamps records in UTC."""

    converter = time.gmtime


def setup_logging(
    log_path: Path | None = None,
    verbose: bool = False,
    no_color: bool = False,
) -> logging.Logger:
    """
    Configure the ``diskcleaner`` logger.

    Console output goes through rich (INFO, or DEBUG when verbose). When a
    log path is given every record is also appended to that file; a log file
    that cannot be opened only produces a warning.

    Returns:
        The configured logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True, no_color=no_color),
        show_time=False,
        show_path=False,
        markup=False,
    )
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.addHandler(console_handler)

    if log_path is not None:
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
        except OSError as e:
            logger.warning("Cannot write log file %s: %s", log_path, e)
        else:
            file_handler.setFormatter(UTCFormatter(FILE_FORMAT, datefmt=FILE_DATE_FORMAT))
            file_handler.setLevel(logging.DEBUG)
            logger.addHandler(file_handler)

    logger.propagate = False
    return logger

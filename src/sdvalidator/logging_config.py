"""Logging setup for the sdvalidator command line and library users."""

import logging
import sys
from pathlib import Path
from typing import IO, Optional

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Third-party loggers capped at ERROR: bs4 warns about parser guesses
QUIET_LOGGERS = ('bs4', 'charset_normalizer')


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
    stream: Optional[IO[str]] = None,
) -> None:
    """Configure the root logger.

    Records go to ``stream`` (stderr by default, so JSON written to stdout
    stays machine readable) and, when given, to ``log_file``.

    Args:
        level: Log level name; unknown names fall back to INFO
        log_file: Optional log file path, parent directories are created
        format_string: Optional custom format string
        stream: Console stream, defaults to sys.stderr
    """
    handlers = [logging.StreamHandler(stream or sys.stderr)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding='utf-8'))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=format_string or DEFAULT_FORMAT,
        handlers=handlers,
        force=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.ERROR)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)

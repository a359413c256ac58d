"""
Opt-in log output for thinplatesplines.

The library only emits records through module-level loggers under the
``thinplatesplines`` namespace (solve sizes at DEBUG, negative stiffness at
WARNING). Applications that want to see them call ``setup_logging``.
"""

from __future__ import annotations

import logging
import sys
from typing import IO

NAMESPACE = "thinplatesplines"

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Marks handlers installed here so a repeated call replaces only those
_OWNED = "_thinplatesplines_owned"


def setup_logging(
    level: int | str = logging.INFO,
    log_file: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Send thinplatesplines log records to a stream and optionally a file.

    Handlers from a previous call are closed and replaced. Handlers added by
    the application itself are left alone.

    Args:
        level: Level for the namespace logger and its handlers, either a
            number (``logging.DEBUG``) or a name (``"DEBUG"``)
        log_file: Optional path; the file is truncated and written as UTF-8
        stream: Stream for console output, defaults to ``sys.stdout``

    Returns:
        The namespace logger
    """
    logger = logging.getLogger(NAMESPACE)
    logger.setLevel(level)

    for handler in [h for h in logger.handlers if getattr(h, _OWNED, False)]:
        logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(stream or sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        setattr(handler, _OWNED, True)
        logger.addHandler(handler)

    return logger

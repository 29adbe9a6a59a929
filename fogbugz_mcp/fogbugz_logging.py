"""Logging helpers for the FogBugz integration.

All modules obtain their logger through :func:`get_logger` so that a single
call to :func:`setup_logging` configures output for the whole package.
Output goes to stderr because stdout is reserved for host protocols.
"""

import logging
import sys
from pathlib import Path

LOGGER_NAME = "fogbugz_mcp"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the package logger, or a named child of it."""
    if name and name != LOGGER_NAME:
        return logging.getLogger(f"{LOGGER_NAME}.{name}")
    return logging.getLogger(LOGGER_NAME)


def setup_logging(
    debug: bool = False,
    log_file: Path | str | None = None,
) -> logging.Logger:
    """Configure the package logger.

    Safe to call more than once: handlers installed by a previous call are
    replaced rather than stacked.

    Args:
        debug: Emit DEBUG records (request tracing) when True
        log_file: Optional file that receives the same records

    Returns:
        The configured package logger
    """
    logger = get_logger()
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    for handler in list(logger.handlers):
        if getattr(handler, "_fogbugz_handler", False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    stream_handler._fogbugz_handler = True  # type: ignore[attr-defined]
    logger.addHandler(stream_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        file_handler._fogbugz_handler = True  # type: ignore[attr-defined]
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger

"""Package-wide settings: the shiftsleep logger and installed version."""

import logging
from importlib import metadata

LOGGER_NAME = "shiftsleep"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s [%(module)s.%(funcName)s] %(message)s"


def get_version() -> str:
    """Version of the installed shiftsleep distribution, or "unknown"."""
    try:
        return metadata.version("shiftsleep")
    except metadata.PackageNotFoundError:
        return "unknown"


def get_logger(level: int = logging.INFO) -> logging.Logger:
    """Shared logger for engine modules and the CLI.

    The stream handler is attached once; *level* applies only on that first
    call, so later callers (every module at import) do not reset a level the
    CLI has raised or lowered.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger

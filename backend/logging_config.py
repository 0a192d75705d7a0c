"""Process-wide logging setup shared by the API and its modules."""

import logging

from config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def resolve_level(level: int | str) -> int:
    """Turn a level name ("info", "WARNING") or number into a logging level."""
    if isinstance(level, bool):
        raise ValueError(f"Invalid log level: {level!r}")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def configure_logging(level: int | str = LOG_LEVEL) -> None:
    """Configure root logging once; later calls are no-ops."""
    numeric_level = resolve_level(level)
    if logging.getLogger().handlers:
        return

    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)


def get_logger(name: str | None = None) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)

"""Logging helpers shared by all AutoResponder modules."""

import logging

ROOT_LOGGER_NAME = "autoresponder"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name."""
    return logging.getLogger(name)


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """
    Attach a stream handler to the package root logger.

    Safe to call more than once: an existing handler is reused and only
    the level is updated.

    Args:
        level: Level name ("DEBUG", "INFO", ...) or numeric level

    Returns:
        The configured package root logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)
    if not any(getattr(h, "_autoresponder", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._autoresponder = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    return root

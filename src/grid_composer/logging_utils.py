"""
Centralized logging utilities for the grid composer.

The engine modules, the request API and the CLI all log through the
one ``grid_composer`` logger defined here, which also keeps them free
of circular imports.
"""

import logging

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def setup_logger(
        name: str = __name__,
        level: int = logging.INFO,
        formatter: logging.Formatter | None = None,
        handler: logging.Handler | None = None,
) -> logging.Logger:
    """
    Configure a named logger once and return it.

    A stream handler with a timestamped format is attached the first
    time a name is seen; later calls only update the level. Records do
    not propagate to the root logger.

    Args:
        name: Logger name, typically set to __name__.
        level: Logging level (e.g., logging.INFO, logging.DEBUG).
        formatter: Optional custom formatter.
        handler: Optional custom handler.

    Returns:
        The configured logger.

    """
    logger_instance = logging.getLogger(name)
    logger_instance.setLevel(level)
    if logger_instance.handlers:
        return logger_instance

    handler = handler or logging.StreamHandler()
    handler.setFormatter(formatter or logging.Formatter(_LOG_FORMAT))
    logger_instance.addHandler(handler)
    logger_instance.propagate = False
    return logger_instance


def set_verbosity(*, verbose: bool) -> None:
    """Switch the shared logger between INFO and DEBUG output."""
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


# Shared logger used across modules
logger = setup_logger("grid_composer")

import logging
import os
import sys
from typing import Optional


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _resolve_level(log_level: Optional[str]) -> int:
    if log_level is None:
        log_level = os.getenv('DABBA_LOG_LEVEL', os.getenv('LOG_LEVEL', 'INFO'))
    return getattr(logging, log_level.upper(), logging.INFO)


def setup_logging(
    component_name: str,
    log_level: Optional[str] = None,
    stream=None
) -> logging.Logger:
    """
    Set up logging configuration for a component.

    Args:
        component_name: Name of the component (e.g., 'objectstore', 'dabba')
        log_level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to
            DABBA_LOG_LEVEL, then LOG_LEVEL env var, then INFO
        stream: Output stream for the handler. Defaults to stdout

    Returns:
        Configured logger instance
    """
    level = _resolve_level(log_level)

    logger = logging.getLogger(component_name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def short_hash(object_id: str) -> str:
    """Abbreviate an object hash for log lines."""
    return object_id[:10]

"""Logging configuration and utilities using Loguru.

Key Components:
--------------
- Structured logging with Loguru
- Error handling decorator for boundary operations
- Startup information logging

Public API:
----------
setup_loguru_logger(settings: Settings, verbose: bool = False) -> None
    Configure Loguru sinks for the application

get_logger(name: str) -> Logger
    Get a context-aware logger for your module
    Usage: logger = get_logger(__name__)

log_startup_info(settings: Settings) -> None
    Log the effective configuration once at startup

@resilient_operation(operation_name: str)
    Decorator that logs and re-raises errors from boundary calls
"""

from collections.abc import Callable
import functools
from pathlib import Path
import sys
from typing import Any, ParamSpec, TypeVar

from loguru import logger

from .settings import Settings

P = ParamSpec("P")
R = TypeVar("R")

# Keys that must never reach a log sink
_SECRET_KEYS = frozenset({"spotify_client_secret"})

# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================


def setup_loguru_logger(settings: Settings, verbose: bool = False) -> None:
    """Configure Loguru logger for the application.

    Args:
        settings: Application settings carrying the logging group
        verbose: Enable verbose logging with debug level and detailed tracebacks

    Note:
        - Removes default logger and sets up console and file handlers
        - Console format is colorized and simplified
        - File format is serialized JSON with rotation and retention
    """
    logger.remove()

    log_file_path = Path(settings.logging.log_file)
    log_file_path.parent.mkdir(parents=True, exist_ok=True)

    # Add contextual info to all log records
    logger.configure(extra={"service": "top100", "module": "root"})

    # -------------------------------------------------------------------------
    # Console Handler
    # -------------------------------------------------------------------------
    console_level = "DEBUG" if verbose else settings.logging.console_level
    logger.add(
        sink=sys.stderr,
        level=console_level,
        format=(
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:"
            "<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
        backtrace=verbose,
        diagnose=verbose,
    )

    # -------------------------------------------------------------------------
    # File Handler
    # -------------------------------------------------------------------------
    logger.add(
        sink=str(log_file_path),
        level=settings.logging.file_level,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {process}:{thread} | {extra[service]} | {extra[module]} | {name}:{function}:{line} | {message}",
        rotation="10 MB",
        retention="1 week",
        compression="zip",
        backtrace=True,
        diagnose=False,  # never write locals to disk
        enqueue=not settings.logging.real_time_debug,
        catch=True,
        serialize=True,
    )


# =============================================================================
# LOGGER FACTORY
# =============================================================================


def get_logger(name: str) -> Any:  # Use Any for Loguru logger type
    """Get a pre-configured logger instance for the given module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Loguru logger bound with module context

    Example:
        ```python
        logger = get_logger(__name__).bind(service="spotify")
        logger.info("Search complete", candidates=3)
        ```
    """
    return logger.bind(module=name, service="top100")


# =============================================================================
# STARTUP LOGGING
# =============================================================================


def log_startup_info(settings: Settings) -> None:
    """Log application configuration on startup.

    Displays a startup banner and logs all configuration values at debug level.
    Credential values are masked.
    """
    local_logger = get_logger(__name__)
    separator = "=" * 50

    local_logger.info(separator)
    local_logger.info("Top 100 Rankings")
    local_logger.info(separator)

    local_logger.debug("Configuration:")
    for section_name, section_values in settings.model_dump().items():
        local_logger.debug("  {}:", section_name.upper())
        if not isinstance(section_values, dict):
            local_logger.debug("    {}", section_values)
            continue
        for key, value in section_values.items():
            if key in _SECRET_KEYS and value:
                value = "********"
            elif isinstance(value, Path):
                value = str(value)
            local_logger.debug("    {}: {}", key.upper(), value)


# =============================================================================
# ERROR HANDLING DECORATORS
# =============================================================================


def resilient_operation(
    operation_name: str | None = None,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Decorator for service boundary operations with standardized error logging.

    The wrapped function's exceptions are logged with the operation name and
    then re-raised unchanged.

    Example:
        >>> @resilient_operation("spotify_search")
        >>> def search(query):
        >>>     return client.search(query)
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        op_name = operation_name or func.__name__

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.bind(operation=op_name).error(
                    "Error in {}: {!s}", op_name, e, error_type=type(e).__name__
                )
                raise

        return wrapper

    return decorator

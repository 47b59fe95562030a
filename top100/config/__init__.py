"""Configuration module for Top 100.

Public API:
----------
Settings / load_settings()
    Pydantic settings object with nested configuration groups

get_logger(name: str) -> Logger
    Get a context-aware logger for your module

setup_loguru_logger(settings, verbose: bool = False) -> None
    Configure Loguru logger for the application

resilient_operation(operation_name: str)
    Decorator for logging errors in external calls

log_startup_info(settings) -> None
    Log the effective configuration at startup

Usage:
------
```python
from top100.config import get_logger, load_settings
settings = load_settings()
logger = get_logger(__name__)
logger.info("Threshold {}", settings.matching.confidence_threshold)
```
"""

from .logging import (
    get_logger,
    log_startup_info,
    resilient_operation,
    setup_loguru_logger,
)
from .settings import (
    APIConfig,
    CredentialsConfig,
    LoggingConfig,
    MatchingConfig,
    RankingConfig,
    ReportConfig,
    ScanConfig,
    Settings,
    load_settings,
)

__all__ = [
    "APIConfig",
    "CredentialsConfig",
    "LoggingConfig",
    "MatchingConfig",
    "RankingConfig",
    "ReportConfig",
    "ScanConfig",
    "Settings",
    "get_logger",
    "load_settings",
    "log_startup_info",
    "resilient_operation",
    "setup_loguru_logger",
]

"""Configuration management using Pydantic Settings.

Settings are loaded once at process start with :func:`load_settings` and the
resulting object is handed to each component's constructor. Nothing else in
the package reads the environment.

The configuration is organized into logical groups:
- MatchingConfig: Confidence threshold, duration tolerances, search limits
- APIConfig: Spotify request pacing and retry policy
- RankingConfig: Leaderboard size and upload eligibility window
- ScanConfig: Where to look for audio files and which ones to skip
- ReportConfig: Where CSV reports are written
- LoggingConfig: Logging levels, files, and debugging options
- CredentialsConfig: Spotify client credentials
"""

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MatchingConfig(BaseModel):
    """Track matching thresholds and search sizes."""

    confidence_threshold: float = Field(default=0.85, ge=0.0, le=1.0)
    strict_duration_tolerance_sec: float = Field(default=5, ge=0)
    loose_duration_tolerance_sec: float = Field(default=10, ge=0)
    search_limit: int = Field(default=10, gt=0, le=50)
    isrc_search_limit: int = Field(default=1, gt=0, le=50)

    @model_validator(mode="after")
    def check_tolerances(self) -> "MatchingConfig":
        if self.loose_duration_tolerance_sec < self.strict_duration_tolerance_sec:
            raise ValueError(
                "loose_duration_tolerance_sec must be >= strict_duration_tolerance_sec"
            )
        return self


class APIConfig(BaseModel):
    """Spotify API pacing and retry configuration."""

    spotify_requests_per_second: int = Field(default=10, gt=0)
    spotify_max_retries: int = Field(default=5, ge=1)
    spotify_retry_base_delay_ms: int = Field(default=500, ge=0)
    spotify_request_timeout: int = Field(default=30, gt=0)
    spotify_market: str | None = None


class RankingConfig(BaseModel):
    """Leaderboard configuration."""

    top_n: int = Field(default=100, gt=0)
    eligibility_months: int = Field(default=3, ge=0)  # 0 disables the window


class ScanConfig(BaseModel):
    """Uploads directory scanning configuration."""

    uploads_path: Path = Path("uploads")
    exclude_dirs: list[str] = ["backup", "cache", "tmp"]
    extensions: list[str] = [".mp3"]
    source_url_prefix: str = "/wp-content/uploads/"


class ReportConfig(BaseModel):
    """CSV report output configuration."""

    output_dir: Path = Path("reports")


class LoggingConfig(BaseModel):
    """Logging configuration for console and file output."""

    console_level: str = "INFO"
    file_level: str = "DEBUG"
    log_file: Path = Path("logs/top100.log")
    real_time_debug: bool = True


class CredentialsConfig(BaseModel):
    """API credentials."""

    spotify_client_id: str = ""
    spotify_client_secret: str = ""


# Flat environment names used by existing deployments, mapped to (group, field)
_FLAT_ENV_MAP: dict[str, tuple[str, str]] = {
    # Matching
    "match_confidence_threshold": ("matching", "confidence_threshold"),
    "match_duration_tolerance_strict": ("matching", "strict_duration_tolerance_sec"),
    "match_duration_tolerance_loose": ("matching", "loose_duration_tolerance_sec"),
    # API
    "spotify_rate_limit_per_second": ("api", "spotify_requests_per_second"),
    "spotify_retry_max_attempts": ("api", "spotify_max_retries"),
    "spotify_retry_base_delay_ms": ("api", "spotify_retry_base_delay_ms"),
    "spotify_request_timeout": ("api", "spotify_request_timeout"),
    "spotify_market": ("api", "spotify_market"),
    # Ranking
    "top_n_tracks": ("ranking", "top_n"),
    "eligibility_months": ("ranking", "eligibility_months"),
    # Scan and report
    "uploads_path": ("scan", "uploads_path"),
    "report_dir": ("report", "output_dir"),
    # Logging
    "console_log_level": ("logging", "console_level"),
    "file_log_level": ("logging", "file_level"),
    "log_file": ("logging", "log_file"),
    "log_real_time_debug": ("logging", "real_time_debug"),
    # Credentials
    "spotify_client_id": ("credentials", "spotify_client_id"),
    "spotify_client_secret": ("credentials", "spotify_client_secret"),
}


class Settings(BaseSettings):
    """Main application settings with environment variable support.

    Environment variables can be set using flat naming or nested naming:
    - Flat: MATCH_CONFIDENCE_THRESHOLD, TOP_N_TRACKS, SPOTIFY_CLIENT_ID
    - Nested: MATCHING__CONFIDENCE_THRESHOLD, RANKING__TOP_N

    The .env file is automatically loaded for development convenience.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    matching: MatchingConfig = MatchingConfig()
    api: APIConfig = APIConfig()
    ranking: RankingConfig = RankingConfig()
    scan: ScanConfig = ScanConfig()
    report: ReportConfig = ReportConfig()
    logging: LoggingConfig = LoggingConfig()
    credentials: CredentialsConfig = CredentialsConfig()

    @model_validator(mode="before")
    @classmethod
    def transform_flat_env_vars(cls, data: Any) -> Any:
        """Map flat environment variables onto the nested groups.

        Handles flat env vars (TOP_N_TRACKS) and maps them to the nested
        structure expected by the models (ranking.top_n).
        """
        if not isinstance(data, dict):
            return data

        transformed: dict[str, dict[str, Any]] = {}
        for env_key, (group, field_key) in _FLAT_ENV_MAP.items():
            if env_key in data:
                transformed.setdefault(group, {})[field_key] = data.pop(env_key)
            elif env_key.upper() in os.environ:
                # Flat names are not model fields, so the env source skips them
                transformed.setdefault(group, {})[field_key] = os.environ[
                    env_key.upper()
                ]

        for group, values in transformed.items():
            existing = data.get(group)
            if isinstance(existing, dict):
                data[group] = {**values, **existing}
            else:
                data[group] = values

        return data


def load_settings(**overrides: Any) -> Settings:
    """Build the settings object for this process.

    Args:
        **overrides: Explicit values that take precedence over the environment
            (nested groups may be passed as dicts)

    Returns:
        Validated Settings instance

    Raises:
        pydantic.ValidationError: If any value is out of range
    """
    return Settings(**overrides)

"""Configuration management using Pydantic Settings."""

from enum import Enum

from pydantic_settings import BaseSettings


DEFAULT_EXPORT_PATH = "instagram_check_results.xlsx"
DEFAULT_SHEET_NAME = "Results"


class LogFormat(str, Enum):
    """Log output format."""
    JSON = "json"
    CONSOLE = "console"


class CheckerConfig(BaseSettings):
    """Configuration for the instacheck username checker."""

    # Classifier settings
    api_key: str | None = None
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 1024
    max_searches: int = 3
    request_timeout_seconds: float = 120.0

    # Pacing between classifications
    request_delay_ms: int = 1000

    # Export settings
    export_path: str = DEFAULT_EXPORT_PATH
    export_sheet_name: str = DEFAULT_SHEET_NAME

    # Logging
    log_level: str = "INFO"
    log_format: LogFormat = LogFormat.CONSOLE
    # SDK and HTTP client loggers held at library_log_level
    quiet_loggers: list[str] = ["httpx", "httpcore", "anthropic", "uvicorn.access"]
    library_log_level: str = "WARNING"

    # HTTP service
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    model_config = {
        "env_prefix": "INSTACHECK_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

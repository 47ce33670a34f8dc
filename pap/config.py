"""Application configuration loaded from environment variables."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings

# Check if .env file exists and is readable
_env_file = None
try:
    env_path = Path(".env")
    if env_path.exists() and os.access(env_path, os.R_OK):
        _env_file = ".env"
except (OSError, PermissionError):
    pass


class Settings(BaseSettings):
    """All configuration for the prediction accountability platform.

    Values are loaded from environment variables or a .env file. Missing
    remote or AI credentials are not errors: they switch the application
    into its offline/heuristic paths.
    """

    # Application
    app_name: str = "pap"
    debug: bool = False
    json_logs: bool = False
    log_level: str = "INFO"
    allowed_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Local cache (one SQLite row per cache key)
    cache_database_url: str = "sqlite:///./data/pap_cache.db"

    # Firebase Realtime Database (REST)
    firebase_database_url: str = ""
    firebase_auth_token: str = ""
    remote_namespace: str = "pap"
    remote_fetch_timeout: float = 8.0  # bounded wait for the startup fetch
    remote_request_timeout: float = 10.0

    # Anthropic Claude API
    anthropic_api_key: str = ""
    claude_model: str = "claude-sonnet-4-20250514"
    ai_timeout: float = 12.0  # after this the heuristic analyzer answers
    language_hint: str = "en"

    retry_max_attempts: int = 2

    model_config = {
        "env_file": _env_file,
        "env_file_encoding": "utf-8",
        "env_file_ignore_empty": True,
    }

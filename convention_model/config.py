from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

_PROJECT_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _PROJECT_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Builder settings loaded from environment variables."""

    # Schema naming
    default_namespace: str = "Default"
    container_name: str = "Container"

    # Build behaviour
    query_composition_mode: bool = False
    model_aliasing_enabled: bool = False

    # Logging: per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                     # Root
    log_level_classification: str = "INFO"      # classification engine
    log_level_inheritance: str = "INFO"         # inheritance resolver
    log_level_conventions: str = "INFO"         # convention engine
    log_level_binding: str = "INFO"             # navigation binding resolver
    log_level_pruning: str = "INFO"             # pruner
    log_level_metadata: str = "WARNING"         # metadata providers

    model_config = {
        "env_prefix": "CONVENTION_MODEL_",
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance; reads .env once."""
    return Settings()

"""Configuration module for the products API.

Loads settings from environment-specific config files:
- APP_ENV=dev  → config_dev.yaml (SQLite backend, local development)
- APP_ENV=test → config_test.yaml (MongoDB backend, production-like testing)
- Default      → config.yaml

The MongoDB connection string is loaded from .env file.
Fails fast with clear error messages if required configuration is missing.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv


SUPPORTED_BACKENDS = ("sqlite", "mongodb")


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def _get_project_root() -> Path:
    """Get the project root directory (where config.yaml lives)."""
    # Navigate from src/config/ up to project root
    return Path(__file__).parent.parent.parent


def _get_config_filename() -> str:
    """Get config filename based on APP_ENV environment variable.

    Returns:
        Config filename:
        - APP_ENV=dev  → config_dev.yaml
        - APP_ENV=test → config_test.yaml
        - Default      → config.yaml
    """
    app_env = os.environ.get("APP_ENV", "").lower()

    if app_env == "dev":
        return "config_dev.yaml"
    elif app_env == "test":
        return "config_test.yaml"
    else:
        return "config.yaml"


def _load_yaml_config() -> dict:
    """Load configuration from environment-specific config file."""
    config_filename = _get_config_filename()
    config_path = _get_project_root() / config_filename

    if not config_path.exists():
        raise ConfigurationError(
            f"Configuration file not found: {config_path}. "
            f"Set APP_ENV to 'dev' or 'test', or create {config_filename}."
        )

    with open(config_path, "r") as f:
        return yaml.safe_load(f) or {}


def _get_required_env(key: str) -> str:
    """Get required environment variable or raise ConfigurationError."""
    value = os.environ.get(key)
    if not value:
        raise ConfigurationError(
            f"Required environment variable '{key}' is not set. "
            f"Please add it to your .env file."
        )
    return value


@dataclass(frozen=True)
class StorageConfig:
    """Product storage configuration with backend toggle."""
    backend: str  # "sqlite" or "mongodb"
    sqlite_path: str


@dataclass(frozen=True)
class MongoDBConfig:
    """MongoDB configuration for the products collection."""
    url: str
    database_name: str
    collection_name: str


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""
    level: str


@dataclass(frozen=True)
class ServerConfig:
    """HTTP server configuration."""
    host: str
    port: int


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration container."""
    storage: StorageConfig
    logging: LoggingConfig
    server: ServerConfig
    mongodb: Optional[MongoDBConfig]  # Only required when storage.backend == "mongodb"


def load_config() -> AppConfig:
    """
    Load and validate all application configuration.

    Loads from the YAML config file for non-sensitive settings and .env for
    the MongoDB connection string. Fails fast if required configuration is missing.

    Returns:
        AppConfig: Validated application configuration.

    Raises:
        ConfigurationError: If required configuration is missing or invalid.
    """
    # Load environment variables from .env file
    load_dotenv()

    yaml_config = _load_yaml_config()

    # Build Storage config
    storage_section = yaml_config.get("storage", {})
    backend = storage_section.get("backend", "sqlite")

    if backend not in SUPPORTED_BACKENDS:
        raise ConfigurationError(
            f"Unknown storage backend '{backend}'. "
            f"Expected one of: {', '.join(SUPPORTED_BACKENDS)}."
        )

    storage_config = StorageConfig(
        backend=backend,
        sqlite_path=storage_section.get("sqlite_path", "products.db"),
    )

    # Build Logging config
    logging_section = yaml_config.get("logging", {})

    logging_config = LoggingConfig(
        level=logging_section.get("level", "INFO"),
    )

    # Build Server config
    server_section = yaml_config.get("server", {})

    try:
        port = int(server_section.get("port", 8000))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid server port: {server_section.get('port')!r}") from e

    server_config = ServerConfig(
        host=server_section.get("host", "127.0.0.1"),
        port=port,
    )

    # Build MongoDB config (only if backend is mongodb)
    mongodb_config: Optional[MongoDBConfig] = None
    if backend == "mongodb":
        mongodb_section = yaml_config.get("mongodb", {})
        mongodb_config = MongoDBConfig(
            url=_get_required_env("MONGO_URL"),
            database_name=mongodb_section.get("database_name", "catalog"),
            collection_name=mongodb_section.get("collection_name", "products"),
        )

    return AppConfig(
        storage=storage_config,
        logging=logging_config,
        server=server_config,
        mongodb=mongodb_config,
    )


# Module-level singleton for convenience
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get the application configuration singleton.

    Lazy-loads configuration on first access.
    Config file is selected based on APP_ENV environment variable.

    Returns:
        AppConfig: Application configuration.

    Raises:
        ConfigurationError: If required configuration is missing.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def get_environment() -> str:
    """Get current environment name.

    Returns:
        'dev', 'test', or 'default' based on APP_ENV.
    """
    app_env = os.environ.get("APP_ENV", "").lower()
    return app_env if app_env in ("dev", "test") else "default"


def reset_config() -> None:
    """Reset the config singleton. Useful for testing."""
    global _config
    _config = None

"""Configuration module."""

from src.config.configuration import (
    AppConfig,
    ConfigurationError,
    MongoDBConfig,
    LoggingConfig,
    ServerConfig,
    StorageConfig,
    get_config,
    get_environment,
    load_config,
    reset_config,
)

__all__ = [
    "AppConfig",
    "ConfigurationError",
    "MongoDBConfig",
    "LoggingConfig",
    "ServerConfig",
    "StorageConfig",
    "get_config",
    "get_environment",
    "load_config",
    "reset_config",
]

"""
Configuration Management for StarREST Clients

Dataclass based configuration for the HTTP transport and logging, with
presets per environment and overrides from ``STARREST_*`` environment
variables.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional


class Environment(Enum):
    """Application environments"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


@dataclass
class TransportConfig:
    """HTTP transport configuration"""
    base_url: str = ""
    timeout: float = 30.0
    headers: Dict[str, str] = field(default_factory=lambda: {"Accept": "application/json"})


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass
class StarRestConfig:
    """Complete client configuration"""
    environment: Environment = Environment.DEVELOPMENT
    transport: TransportConfig = field(default_factory=TransportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def for_environment(cls, environment: Environment) -> 'StarRestConfig':
        """Create configuration for specific environment"""
        config = cls(environment=environment)

        if environment == Environment.DEVELOPMENT:
            config.logging.level = "DEBUG"
        elif environment == Environment.TESTING:
            config.logging.level = "WARNING"
            config.transport.timeout = 5.0
        elif environment == Environment.PRODUCTION:
            config.logging.level = "INFO"

        return config

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> 'StarRestConfig':
        """
        Build configuration from environment variables.

        Reads ``STARREST_ENV`` for the preset, then applies
        ``STARREST_BASE_URL``, ``STARREST_TIMEOUT`` and ``STARREST_LOG_LEVEL``
        on top of it.
        """
        environ = os.environ if environ is None else environ

        environment = Environment(environ.get("STARREST_ENV", Environment.DEVELOPMENT.value).lower())
        config = cls.for_environment(environment)

        if "STARREST_BASE_URL" in environ:
            config.transport.base_url = environ["STARREST_BASE_URL"]
        if "STARREST_TIMEOUT" in environ:
            config.transport.timeout = float(environ["STARREST_TIMEOUT"])
        if "STARREST_LOG_LEVEL" in environ:
            config.logging.level = environ["STARREST_LOG_LEVEL"].upper()

        return config

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'StarRestConfig':
        """Create configuration from dictionary"""
        config = cls()

        if "environment" in config_dict:
            config = cls.for_environment(Environment(config_dict["environment"]))

        for section in ("transport", "logging"):
            for key, value in config_dict.get(section, {}).items():
                target = getattr(config, section)
                if hasattr(target, key):
                    setattr(target, key, value)

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary"""
        return {
            "environment": self.environment.value,
            "transport": {
                "base_url": self.transport.base_url,
                "timeout": self.transport.timeout,
                "headers": dict(self.transport.headers),
            },
            "logging": {
                "level": self.logging.level,
                "format": self.logging.format,
                "file_path": self.logging.file_path,
                "max_file_size": self.logging.max_file_size,
                "backup_count": self.logging.backup_count,
            },
        }


def configure_logging(config: LoggingConfig) -> logging.Logger:
    """Apply a LoggingConfig to the ``starrest`` logger and return it."""
    logger = logging.getLogger("starrest")
    logger.setLevel(config.level)

    formatter = logging.Formatter(config.format)
    for handler in list(logger.handlers):
        if getattr(handler, "_starrest_handler", False):
            logger.removeHandler(handler)
            handler.close()

    handlers = [logging.StreamHandler()]
    if config.file_path:
        handlers.append(RotatingFileHandler(config.file_path,
                                            maxBytes=config.max_file_size,
                                            backupCount=config.backup_count))
    for handler in handlers:
        handler.setFormatter(formatter)
        handler._starrest_handler = True
        logger.addHandler(handler)

    return logger

"""
DataProvider Configuration

This module provides configuration management for the data provider layer
using Pydantic Settings. All configuration values can be set via environment
variables or .env file.
"""

import logging
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field


class DPConfig(BaseSettings):
    """
    DataProvider Configuration

    All settings can be overridden via environment variables.
    Example: MYSQL_HOST=10.0.0.5 MYSQL_PORT=3307 LOG_SQL=true
    """

    # ========== MySQL Connection ==========
    mysql_host: str = Field(
        default="127.0.0.1",
        description="MySQL server host address"
    )
    mysql_port: int = Field(
        default=33061,
        description="MySQL server port"
    )
    mysql_user: str = Field(
        default="root",
        description="MySQL user"
    )
    mysql_password: str = Field(
        default="1234",
        description="MySQL password"
    )
    mysql_database: str = Field(
        default="dp_db",
        description="Default schema"
    )
    mysql_charset: str = Field(
        default="utf8mb4",
        description="Connection character set"
    )
    mysql_autocommit: bool = Field(
        default=True,
        description="Commit every statement immediately"
    )
    mysql_connect_timeout: int = Field(
        default=5,
        description="Connection timeout in seconds"
    )

    # ========== Logging Configuration ==========
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_sql: bool = Field(
        default=False,
        description="Log every generated statement at DEBUG level"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global configuration instance
config = DPConfig()


def get_config() -> DPConfig:
    """
    Get the global configuration instance.

    Returns:
        DPConfig: The global configuration instance
    """
    return config


def configure_logging(cfg: Optional[DPConfig] = None) -> None:
    """
    Configure root logging from the given (or global) configuration.
    """
    cfg = cfg or get_config()
    logging.basicConfig(
        level=getattr(logging, cfg.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

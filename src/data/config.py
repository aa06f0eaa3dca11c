"""
Review Analysis Configuration Module
====================================

Centralized runtime configuration from environment variables.
Supports both .env files and system environment variables.

Environment Variables:
    ANALYSIS_PARALLEL: Run the four analyzers on a thread pool (default: false)
    ANALYSIS_MIN_SEASON_REVIEWS: Reviews needed to report a season (default: 10)
    ANALYSIS_MIN_THEME_REVIEWS: Reviews needed for a theme cluster (default: 5)
    ANALYSIS_MIN_SPECIALTY_REVIEWS: Same, for business specialties (default: 3)

    DATABASE_HOST: PostgreSQL host (default: localhost)
    DATABASE_PORT: PostgreSQL port (default: 5432)
    DATABASE_NAME: Database name (default: reviews)
    DATABASE_USER: Database user (default: reviews_app)
    DATABASE_PASSWORD: Database password (default: empty)
    DATABASE_POOL_MIN: Minimum pool connections (default: 1)
    DATABASE_POOL_MAX: Maximum pool connections (default: 5)

    LOG_LEVEL: Root log level (default: INFO)
    LOG_JSON: JSON log lines (default: false)
    LOG_FILE: Optional rotating log file
"""

import os
from dataclasses import dataclass, field, replace
from typing import Optional
from pathlib import Path
from dotenv import load_dotenv

from src.reviews.analysis_config import AnalysisConfig


# Load environment variables from .env file if present
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def get_env(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    """
    Get environment variable with optional default and required validation.

    Raises:
        ValueError: If required=True and variable is not set
    """
    value = os.getenv(key, default)
    if required and value is None:
        raise ValueError(f"Required environment variable '{key}' is not set")
    return value


def get_env_int(key: str, default: int) -> int:
    """Get environment variable as integer."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable '{key}' must be an integer, got: {value}")


def get_env_bool(key: str, default: bool) -> bool:
    """Get environment variable as boolean."""
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


@dataclass
class AnalysisSettings:
    """Engine settings that may be tuned per deployment."""

    parallel: bool = field(default_factory=lambda: get_env_bool("ANALYSIS_PARALLEL", False))
    min_season_reviews: int = field(default_factory=lambda: get_env_int("ANALYSIS_MIN_SEASON_REVIEWS", 10))
    min_theme_reviews: int = field(default_factory=lambda: get_env_int("ANALYSIS_MIN_THEME_REVIEWS", 5))
    min_specialty_reviews: int = field(default_factory=lambda: get_env_int("ANALYSIS_MIN_SPECIALTY_REVIEWS", 3))

    def __post_init__(self):
        """Validate configuration."""
        if self.min_season_reviews < 1:
            raise ValueError("min_season_reviews must be at least 1")
        if self.min_theme_reviews < 1 or self.min_specialty_reviews < 1:
            raise ValueError("theme cluster minimums must be at least 1")

    def to_analysis_config(self, base: Optional[AnalysisConfig] = None) -> AnalysisConfig:
        """Overlay these settings on an engine configuration."""
        base = base or AnalysisConfig()
        return replace(
            base,
            parallel=self.parallel,
            seasonal=replace(base.seasonal, min_season_reviews=self.min_season_reviews),
            clustering=replace(
                base.clustering,
                min_theme_reviews=self.min_theme_reviews,
                min_specialty_theme_reviews=self.min_specialty_reviews,
            ),
        )


@dataclass
class DatabaseConfig:
    """PostgreSQL database configuration (review source)."""

    host: str = field(default_factory=lambda: get_env("DATABASE_HOST", "localhost"))
    port: int = field(default_factory=lambda: get_env_int("DATABASE_PORT", 5432))
    name: str = field(default_factory=lambda: get_env("DATABASE_NAME", "reviews"))
    user: str = field(default_factory=lambda: get_env("DATABASE_USER", "reviews_app"))
    password: str = field(default_factory=lambda: get_env("DATABASE_PASSWORD", ""))

    # Connection pool settings
    pool_min_size: int = field(default_factory=lambda: get_env_int("DATABASE_POOL_MIN", 1))
    pool_max_size: int = field(default_factory=lambda: get_env_int("DATABASE_POOL_MAX", 5))

    connect_timeout: int = field(default_factory=lambda: get_env_int("DATABASE_CONNECT_TIMEOUT", 10))

    # SSL mode: disable, allow, prefer, require, verify-ca, verify-full
    ssl_mode: str = field(default_factory=lambda: get_env("DATABASE_SSL_MODE", "prefer"))

    @property
    def connection_dict(self) -> dict:
        """Connection parameters as dictionary for psycopg2."""
        return {
            "host": self.host,
            "port": self.port,
            "dbname": self.name,
            "user": self.user,
            "password": self.password,
            "sslmode": self.ssl_mode,
            "connect_timeout": self.connect_timeout,
        }

    def __post_init__(self):
        """Validate configuration."""
        if self.pool_min_size > self.pool_max_size:
            raise ValueError("pool_min_size cannot exceed pool_max_size")


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = field(default_factory=lambda: get_env("LOG_LEVEL", "INFO"))
    log_file: Optional[str] = field(default_factory=lambda: get_env("LOG_FILE"))

    # Structured logging
    json_logs: bool = field(default_factory=lambda: get_env_bool("LOG_JSON", False))


@dataclass
class Settings:
    """Main application settings container."""

    analysis: AnalysisSettings = field(default_factory=AnalysisSettings)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    app_name: str = "review-insights"
    app_version: str = "1.0.0"
    environment: str = field(default_factory=lambda: get_env("ENVIRONMENT", "development"))

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() in ("production", "prod")


def load_settings() -> Settings:
    """
    Load and validate all application settings.

    Raises:
        ValueError: If configuration is invalid
    """
    return Settings()


# Global settings instance (lazy-loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


class _SettingsProxy:
    """Proxy class for lazy settings access."""

    def __getattr__(self, name):
        return getattr(get_settings(), name)


settings = _SettingsProxy()

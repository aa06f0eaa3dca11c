"""
Runtime Configuration
=====================

Environment-driven settings for the review analysis service.

Quick Start:
    from src.data import get_settings

    settings = get_settings()
    config = settings.analysis.to_analysis_config()

Configuration:
    Set environment variables or create a .env file.
    See .env.example for all available options.
"""

from .config import settings, get_settings, Settings, AnalysisSettings, DatabaseConfig, LoggingConfig

"""
Orchestrator Module
===================

Operational entry points around the analysis engine.

Components:
    - logging_config: Human-readable or JSON structured logging, per-business tagging
    - cli: Command-line interface (analyze, settings)

Usage:
    python -m src.orchestrator.cli analyze --input reviews.json
"""

from .logging_config import setup_logging, configure_logging, business_context, JSONFormatter

"""Utility modules for the trading kit.

Sub-modules:
- logging: configure_logging() for structlog setup
- parsing: tolerant float/JSON/field helpers (import directly from src.utils.parsing)
"""

from .logging import configure_logging

__all__ = [
    "configure_logging",
]

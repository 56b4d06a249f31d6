"""
Error types raised by the forecasting core.
"""

from __future__ import annotations


class ForecastError(Exception):
    """Base class for forecasting errors."""


class InvalidParameter(ForecastError, ValueError):
    """A model parameter is outside its valid domain (e.g. alpha <= 0)."""

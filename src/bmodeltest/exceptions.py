"""Error taxonomy for trace summaries and rate priors."""

from typing import Any, Dict, Optional


class BModelTestError(Exception):
    """
    Base class for errors raised by bmodeltest.

    Attributes:
        message: Human readable description
        context: Extra values describing the failing call (model ID, threshold, ...)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)


class InvalidInput(BModelTestError, ValueError):
    """Malformed trace, threshold, model ID or log file."""


class ConsistencyError(BModelTestError, RuntimeError):
    """Rate vector violates the weighted sum-to-6 constraint."""


class UnsupportedPriorType(BModelTestError, ValueError):
    """Rate prior type is not one of the known parameterizations."""

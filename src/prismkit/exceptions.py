"""Custom exception hierarchy for prismkit.

These exceptions allow callers to discriminate error categories
and handle them appropriately while preserving the original context.
"""

from __future__ import annotations

from typing import Optional


class PrismkitError(Exception):
    """Base class for all prismkit exceptions."""


class ConfigError(PrismkitError):
    """Raised when configuration loading or validation fails."""


class InvalidPredicateArgument(PrismkitError, ValueError):
    """Raised when a predicate is built from an argument of the wrong type or shape."""


class RequestFailedError(PrismkitError):
    """Raised when a request to the content API fails.

    Covers transport errors, non-2xx statuses and bodies that are not the
    expected JSON. The underlying exception, if any, is chained.
    """

    def __init__(
        self, message: str, *, url: Optional[str] = None, status_code: Optional[int] = None
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class UnknownFormError(PrismkitError, KeyError):
    """Raised when a form name is not declared by the API."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class UnknownFieldError(PrismkitError, KeyError):
    """Raised when setting a field that the search form does not declare."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""

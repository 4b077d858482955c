"""
Exceptions raised by the 1cart API client and domain parsers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


class OneCartError(Exception):
    """Base class for all library errors."""


class InvalidArgument(OneCartError, ValueError):
    """Domain data is missing a required field or has a malformed value."""


class UnknownVariant(InvalidArgument):
    """A discriminated structure carries a `type` this library does not know."""

    def __init__(self, family: str, variant: Any):
        super().__init__(f'Unknown {family} type "{variant}"')
        self.family = family
        self.variant = variant


@dataclass(frozen=True)
class ApiError:
    """
    Single error entry returned by the API.

    Attributes:
        field: Name of the offending request field (may be empty)
        message: Human readable description
    """
    field: str
    message: str

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "ApiError":
        return cls(str(data.get("field", "")), str(data.get("message", "")))


class ApiException(OneCartError):
    """The API returned a response the client cannot use."""

    def __init__(
        self,
        message: str,
        errors: list[ApiError] | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.errors = errors or []
        self.status_code = status_code

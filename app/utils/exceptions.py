# app/utils/exceptions.py — Identity client error taxonomy

from __future__ import annotations

from typing import Literal

TransportErrorKind = Literal["timeout", "network", "cancelled"]


class IdentityError(Exception):
    """Base class for every failure raised by the identity client."""

    def __init__(self, message: str, *, operation: str | None = None):
        super().__init__(message)
        self.message = message
        self.operation = operation


class ValidationError(IdentityError):
    """Caller input was rejected before any provider call."""


class TransportError(IdentityError):
    """The request never reached the provider or never came back."""

    def __init__(self, message: str, *, kind: TransportErrorKind, operation: str | None = None):
        super().__init__(message, operation=operation)
        self.kind = kind

    @property
    def is_timeout(self) -> bool:
        return self.kind == "timeout"


class ProviderError(IdentityError):
    """The provider answered but rejected the operation."""

    def __init__(
        self,
        message: str,
        *,
        status: int,
        code: str | None = None,
        summary: str | None = None,
        link: str | None = None,
        error_id: str | None = None,
        causes: list[str] | None = None,
        operation: str | None = None,
    ):
        super().__init__(message, operation=operation)
        self.status = status
        self.code = code
        self.summary = summary
        self.link = link
        self.error_id = error_id
        self.causes = causes or []


class FactorNotFoundError(IdentityError):
    """No enrolled factor satisfies the matching constraints."""

    def __init__(self, message: str = "email or SMS factor not found for user", *, operation: str | None = None):
        super().__init__(message, operation=operation)


class DecodeError(IdentityError):
    """A response body did not have the expected shape."""

    def __init__(self, message: str, *, status: int | None = None, operation: str | None = None):
        super().__init__(message, operation=operation)
        self.status = status


class UserNotFoundError(IdentityError):
    """A profile search returned no users."""

    def __init__(self, message: str = "user not found", *, operation: str | None = None):
        super().__init__(message, operation=operation)

"""Exception types raised and surfaced by mediaproxy."""

from __future__ import annotations

from typing import Any


class MediaProxyError(Exception):
    """Base class for all mediaproxy errors."""


class MediaServerError(MediaProxyError):
    """Raised (or surfaced through an ``error`` event) when an RPC fails.

    Attributes:
        operation: Operation kind that failed (``subscribe``, ``invoke``...).
        code: Error code reported by the media server, if any.
        data: Extra error payload reported by the media server, if any.
    """

    operation: str | None
    code: int | None
    data: Any

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        code: int | None = None,
        data: Any = None,
    ) -> None:
        self.operation = operation
        self.code = code
        self.data = data
        super().__init__(message)

    def __str__(self) -> str:
        message = super().__str__()
        if self.code is not None:
            message = f"[{self.code}] {message}"
        if self.operation is not None:
            message = f"{self.operation}: {message}"
        return message


class InvokeArgumentError(MediaProxyError, TypeError):
    """Raised synchronously when ``invoke`` arguments are given in the wrong order."""


class ReleasedObjectError(MediaProxyError, RuntimeError):
    """Raised when a released media object is used again."""

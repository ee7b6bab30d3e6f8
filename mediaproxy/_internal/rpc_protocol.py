"""
Outbound request contract between a media object and its RPC gateway.

This module contains:
- the ``_rpc`` channel name and the operation kinds sent through it
- TypedDict payloads for every operation
- helpers that build invoke payloads and unwrap invoke results
"""

from __future__ import annotations

from typing import Any, Literal, TypedDict

from ..errors import MediaServerError

# Event name the transport layer listens on for outbound requests
RPC_EVENT = "_rpc"

# Local event emitted once a release completed
RELEASE_EVENT = "release"

# Event emitted on the parent when a media object is created
MEDIA_OBJECT_EVENT = "media_object"

Operation = Literal["subscribe", "unsubscribe", "invoke", "release"]

OPERATIONS: frozenset[str] = frozenset({"subscribe", "unsubscribe", "invoke", "release"})

# Event types that are never subscribed on the server
LOCAL_EVENTS: frozenset[str] = frozenset({RELEASE_EVENT, RPC_EVENT})


class SubscribeParams(TypedDict):
    type: str


class UnsubscribeParams(TypedDict):
    subscription: Any


class _InvokeParamsBase(TypedDict):
    operation: str


class InvokeParams(_InvokeParamsBase, total=False):
    operationParams: dict[str, Any]


class InvokeResult(TypedDict, total=False):
    value: Any


class ReleaseParams(TypedDict):
    pass


def build_invoke_params(method: str, params: dict[str, Any] | None = None) -> InvokeParams:
    """Build the invoke payload; params are left out only when missing."""
    if not isinstance(method, str) or not method:
        raise TypeError(f"Operation name must be a non-empty string, got {method!r}")

    request: InvokeParams = {"operation": method}
    if params is not None:
        request["operationParams"] = params
    return request


def unwrap_invoke_result(result: InvokeResult | None) -> Any:
    """Return the ``value`` carried by an invoke response envelope."""
    if result is None:
        return None
    return result.get("value")


def as_exception(error: Any, operation: str | None = None) -> BaseException:
    """Normalise a gateway-reported failure into an exception."""
    if isinstance(error, BaseException):
        return error
    if isinstance(error, dict):
        return MediaServerError(
            str(error.get("message", error)),
            operation=operation,
            code=error.get("code"),
            data=error.get("data"),
        )
    return MediaServerError(str(error), operation=operation)

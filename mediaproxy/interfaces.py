"""Structural contracts for the collaborators a media object talks to.

Nothing here needs to be inherited from: factories, caches and transports
only have to provide the methods below.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

Completion = Callable[[BaseException | None, Any], None]
"""Completion handler ``(error, result)`` invoked at most once per request."""


@runtime_checkable
class MediaObjectParent(Protocol):
    """Anything that can be told about the media objects it created."""

    def emit(self, event: str, *args: Any) -> bool:
        """Emit *event* with *args* to local listeners."""
        ...


@runtime_checkable
class RPCHandler(Protocol):
    """Listener attached to a media object's ``_rpc`` channel.

    The transport layer performs the request and calls *callback* with
    ``(error, result)`` once it completes.
    """

    def __call__(self, operation: str, params: dict[str, Any], callback: Completion | None) -> None:
        ...


@runtime_checkable
class RPCSender(Protocol):
    """Awaitable transport used by :class:`~mediaproxy.AsyncGateway`."""

    async def __call__(self, operation: str, params: dict[str, Any]) -> Any:
        """Send one request and return the raw result, raising on failure."""
        ...

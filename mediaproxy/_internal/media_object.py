"""Local proxy for an object living on the media server.

A :class:`MediaObject` never talks to the network itself. Every request is
emitted on its ``_rpc`` channel as ``(operation, params, callback)``; the
transport listening there performs it and calls ``callback(error, result)``
when done. Server push notifications come back the other way: the
transport emits them on the proxy like any local event.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from ..config import MediaObjectParams, validate_params
from ..errors import InvokeArgumentError, MediaProxyError, ReleasedObjectError
from ..interfaces import Completion, MediaObjectParent
from .events import ERROR_EVENT, EventEmitter, Listener
from .rpc_protocol import (
    MEDIA_OBJECT_EVENT,
    RELEASE_EVENT,
    RPC_EVENT,
    ReleaseParams,
    as_exception,
    build_invoke_params,
    unwrap_invoke_result,
)
from .subscriptions import SubscriptionLedger

logger = logging.getLogger(__name__)

_IDENTITY_ATTRIBUTES = frozenset({"id", "parent", "pipeline", "properties"})


class MediaObject:
    """Represent an instance of a server-side media object.

    Adding the first listener for an event type subscribes it on the server
    and removing the last one unsubscribes it, so application code only ever
    deals with listeners.

    Args:
        id: Identifier assigned by the media server.
        parent: Object that created this one. It is told about the new
            object through a ``media_object`` event.
        pipeline: Pipeline this object belongs to. Defaults to the object
            itself, which is what a pipeline is.
        params: Construction parameters, see :class:`~mediaproxy.MediaObjectParams`.

    Attributes:
        id: Server-side identifier (read-only).
        parent: Creator of this object (read-only).
        pipeline: Owning pipeline (read-only).
        properties: Read-only mapping of the construction parameters, each of
            which is also readable as an attribute.
    """

    def __init__(
        self,
        id: str,
        parent: MediaObjectParent,
        pipeline: MediaObject | None = None,
        params: MediaObjectParams | Mapping[str, Any] | None = None,
    ) -> None:
        if parent is None:
            raise TypeError("A media object needs a parent")

        object.__setattr__(self, "_properties", MappingProxyType(dict(validate_params(params))))
        object.__setattr__(self, "_id", id)
        object.__setattr__(self, "_parent", parent)
        object.__setattr__(self, "_pipeline", pipeline if pipeline is not None else self)
        object.__setattr__(self, "_released", False)

        ledger = SubscriptionLedger(
            request=self._request,
            listener_count=self.listener_count,
            on_error=self._emit_error,
            owner=self,
        )
        object.__setattr__(self, "_ledger", ledger)
        object.__setattr__(
            self,
            "_events",
            EventEmitter(
                on_listener_added=ledger.listener_added,
                on_listener_removed=ledger.listener_removed,
            ),
        )

        # Notify that this media object has been created
        parent.emit(MEDIA_OBJECT_EVENT, self)

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def id(self) -> str:
        """Unique identifier of this object."""
        return self._id

    @property
    def parent(self) -> MediaObjectParent:
        """Parent (object that created it) of this media object."""
        return self._parent

    @property
    def pipeline(self) -> MediaObject:
        """Pipeline this object belongs to; a pipeline returns itself."""
        return self._pipeline

    @property
    def properties(self) -> Mapping[str, Any]:
        return self._properties

    @property
    def released(self) -> bool:
        """True once a release completed successfully."""
        return self._released

    @property
    def subscriptions(self) -> dict[str, Any]:
        """Copy of the event type -> server subscription token mapping."""
        return self._ledger.tokens

    def __getattr__(self, name: str) -> Any:
        # Only reached for names not found the normal way
        properties = self.__dict__.get("_properties")
        if properties is not None and name in properties:
            return properties[name]
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _IDENTITY_ATTRIBUTES or name in self.__dict__.get("_properties", ()):
            raise AttributeError(f"{name} is read-only")
        object.__setattr__(self, name, value)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self._id}>"

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on(self, event: str, listener: Listener) -> Listener:
        """Add *listener* for *event*, subscribing it on the server if needed."""
        self._check_alive(f"listen to {event!r}")
        return self._events.on(event, listener)

    def once(self, event: str, listener: Listener) -> Listener:
        """Add *listener* for the next emission of *event* only."""
        self._check_alive(f"listen to {event!r}")
        return self._events.once(event, listener)

    def off(self, event: str, listener: Listener) -> bool:
        """Remove *listener*, unsubscribing *event* on the server if it was the last one."""
        return self._events.off(event, listener)

    remove_listener = off

    def emit(self, event: str, *args: Any) -> bool:
        """Deliver *event* to local listeners.

        Used by the transport to hand over server push notifications.
        """
        return self._events.emit(event, *args)

    def listener_count(self, event: str) -> int:
        return self._events.listener_count(event)

    def listeners(self, event: str) -> list[Listener]:
        return self._events.listeners(event)

    def event_names(self) -> list[str]:
        return self._events.event_names()

    # ------------------------------------------------------------------
    # Remote operations
    # ------------------------------------------------------------------

    def invoke(
        self,
        method: str,
        params: dict[str, Any] | Callable[..., Any] | None = None,
        callback: Callable[[BaseException | None, Any], Any] | None = None,
    ) -> None:
        """Send a command to the media object.

        *params* may be omitted, in which case the callback can be passed in
        its place. The callback receives ``(error, value)``, ``value`` being
        the result with its response envelope already removed.

        Raises:
            InvokeArgumentError: If a callback is given in place of *params*
                and another argument follows it.
            ReleasedObjectError: If the object was released.
        """
        if callable(params):
            if callback is not None:
                raise InvokeArgumentError("Nothing can be defined after the callback")
            callback = params
            params = None

        self._check_alive(f"invoke {method!r}")
        request = build_invoke_params(method, params)

        completion: Completion | None = None
        if callback is not None:
            user_callback = callback

            def completion(error: Any, result: Any = None) -> None:
                if error is not None:
                    user_callback(error, None)
                    return
                user_callback(None, unwrap_invoke_result(result))

        self._request("invoke", dict(request), completion)

    def release(self, callback: Callable[[BaseException | None], Any] | None = None) -> None:
        """Explicitly release this object on the media server.

        All its descendants are released and collected by the server too.
        Once the release completes a ``release`` event is emitted and every
        listener is removed from this object. A failed release is logged and
        handed to *callback*, it is not emitted as an ``error`` event.
        """
        self._check_alive("release")

        def completion(error: Any, result: Any = None) -> None:
            if error is not None:
                error = as_exception(error, "release")
                logger.error("Failed to release %r: %s", self, error)
                if callback is not None:
                    callback(error)
                return

            object.__setattr__(self, "_released", True)
            self._events.emit(RELEASE_EVENT)

            # The server dropped the subscriptions along with the object
            self._events.remove_all_listeners(notify=False)
            self._ledger.clear()
            logger.debug("Released %r", self)
            if callback is not None:
                callback(None)

        params: ReleaseParams = {}
        self._request("release", dict(params), completion)

    async def invoke_async(self, method: str, params: dict[str, Any] | None = None) -> Any:
        """Awaitable form of :meth:`invoke`; raises the RPC failure."""
        future = asyncio.get_running_loop().create_future()

        def done(error: Any, value: Any) -> None:
            if future.done():
                return
            if error is not None:
                future.set_exception(as_exception(error, "invoke"))
            else:
                future.set_result(value)

        self.invoke(method, params, done)
        return await future

    async def release_async(self) -> None:
        """Awaitable form of :meth:`release`; raises the RPC failure."""
        future = asyncio.get_running_loop().create_future()

        def done(error: BaseException | None) -> None:
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(None)

        self.release(done)
        await future

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _request(self, operation: str, params: dict[str, Any], callback: Completion | None) -> None:
        if self._events.emit(RPC_EVENT, operation, params, callback):
            return

        error = MediaProxyError(f"No RPC gateway attached to {self!r}, cannot {operation}")
        logger.warning("%s", error)
        if callback is not None:
            callback(error, None)

    def _emit_error(self, error: BaseException) -> None:
        self._events.emit(ERROR_EVENT, error)

    def _check_alive(self, action: str) -> None:
        if self._released:
            raise ReleasedObjectError(f"Cannot {action} on released {self!r}")

"""
Asyncio bridge between media objects and an awaitable transport.

AsyncGateway serves the ``_rpc`` channel of every attached media object:
each request becomes a task awaiting the transport, and its outcome is
delivered to the request's completion handler. Server push notifications
are routed back to the attached object by id.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from ..interfaces import Completion, RPCSender
from .rpc_protocol import OPERATIONS, RELEASE_EVENT, RPC_EVENT

if TYPE_CHECKING:
    from .media_object import MediaObject

logger = logging.getLogger(__name__)


class AsyncGateway:
    """Perform media object requests through an ``async (operation, params)`` callable.

    Every request payload gets the target object id under ``object``.

    Args:
        send: Coroutine function performing one request; it returns the raw
            result or raises on failure.
        loop: Loop to schedule requests on. Defaults to the running loop at
            the time of each request.
    """

    def __init__(self, send: RPCSender, *, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._send = send
        self._loop = loop
        self._objects: dict[str, MediaObject] = {}
        self._handlers: dict[str, Any] = {}
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        """Number of requests still awaiting the transport."""
        return len(self._tasks)

    def __contains__(self, object_id: object) -> bool:
        return object_id in self._objects

    def get(self, object_id: str) -> MediaObject | None:
        return self._objects.get(object_id)

    def attach(self, media_object: MediaObject) -> None:
        """Start serving *media_object*'s requests and routing its pushes.

        Raises:
            ValueError: If an object with the same id is already attached.
        """
        object_id = media_object.id
        if object_id in self._objects:
            raise ValueError(f"Object ID {object_id} already attached")

        def handle(operation: str, params: dict[str, Any], callback: Completion | None) -> None:
            self._dispatch(object_id, operation, params, callback)

        def on_release() -> None:
            self.detach(media_object)

        self._objects[object_id] = media_object
        self._handlers[object_id] = handle
        media_object.on(RPC_EVENT, handle)
        media_object.once(RELEASE_EVENT, on_release)
        logger.debug("Attached %r", media_object)

    def detach(self, media_object: MediaObject) -> None:
        object_id = media_object.id
        if self._objects.get(object_id) is not media_object:
            return
        del self._objects[object_id]
        handler = self._handlers.pop(object_id)
        media_object.off(RPC_EVENT, handler)
        logger.debug("Detached %r", media_object)

    def notify(self, object_id: str, event_type: str, data: Any = None) -> bool:
        """Deliver a server push notification to the attached object.

        Returns False if no object with *object_id* is attached.
        """
        media_object = self._objects.get(object_id)
        if media_object is None:
            logger.debug("Dropping %r notification for unknown object %s", event_type, object_id)
            return False
        media_object.emit(event_type, data)
        return True

    async def aclose(self) -> None:
        """Cancel every pending request; their completion handlers never fire."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _dispatch(
        self,
        object_id: str,
        operation: str,
        params: dict[str, Any],
        callback: Completion | None,
    ) -> None:
        if operation not in OPERATIONS:
            raise ValueError(
                f"Unknown RPC operation: {operation}. "
                f"Valid operations are: {', '.join(sorted(OPERATIONS))}"
            )

        payload = dict(params)
        payload["object"] = object_id
        loop = self._loop if self._loop is not None else asyncio.get_running_loop()
        task = loop.create_task(self._perform(operation, payload, callback))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _perform(self, operation: str, payload: dict[str, Any], callback: Completion | None) -> None:
        logger.debug("RPC %s -> %s", operation, payload)
        try:
            result = await self._send(operation, payload)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            error: BaseException | None = exc
            result = None
            logger.debug("RPC %s on %s failed: %s", operation, payload["object"], exc)
        else:
            error = None

        if callback is None:
            if error is not None:
                logger.warning("RPC %s on %s failed with no handler: %s", operation, payload["object"], error)
            return

        try:
            callback(error, result)
        except Exception:
            logger.exception("Completion handler for %s on %s raised", operation, payload["object"])

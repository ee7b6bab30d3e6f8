"""
mediaproxy - Local proxies for objects living on a remote media server.

Each :class:`MediaObject` mirrors one server-side object. Listeners added on
the proxy are subscribed on the server lazily, method calls and releases are
forwarded as RPC requests, and server push notifications are emitted back
as local events. The transport is pluggable: anything listening on the
proxy's ``_rpc`` channel can serve it, and :class:`AsyncGateway` does so on
top of an awaitable ``send(operation, params)`` callable.

Basic Usage:
    >>> import asyncio
    >>> import mediaproxy
    >>> async def main(send):
    ...     client = mediaproxy.EventEmitter()
    ...     gateway = mediaproxy.AsyncGateway(send)
    ...     client.on("media_object", gateway.attach)
    ...     pipeline = mediaproxy.MediaObject("pipeline-1", client)
    ...     pipeline.on("Error", lambda event: print(event))
    ...     uri = await pipeline.invoke_async("getGstreamerDot")
    ...     await pipeline.release_async()
"""

from ._internal.events import EventEmitter
from ._internal.gateway import AsyncGateway
from ._internal.media_object import MediaObject
from ._internal.rpc_protocol import LOCAL_EVENTS, MEDIA_OBJECT_EVENT, RELEASE_EVENT, RPC_EVENT
from .config import PARAMS_SCHEME, MediaObjectParams, params_from_remote, validate_params
from .errors import InvokeArgumentError, MediaProxyError, MediaServerError, ReleasedObjectError

__version__ = "0.1.0"

__all__ = [
    "AsyncGateway",
    "EventEmitter",
    "InvokeArgumentError",
    "LOCAL_EVENTS",
    "MEDIA_OBJECT_EVENT",
    "MediaObject",
    "MediaObjectParams",
    "MediaProxyError",
    "MediaServerError",
    "PARAMS_SCHEME",
    "RELEASE_EVENT",
    "RPC_EVENT",
    "ReleasedObjectError",
    "params_from_remote",
    "validate_params",
]

"""Local event emission for media objects.

The emitter keeps an explicit per-event listener count and reports every
count transition to optional hooks, which is how a media object learns that
the first listener for an event arrived or the last one left.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..errors import MediaProxyError

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]
CountHook = Callable[[str, int], None]

ERROR_EVENT = "error"


class _OnceWrapper:
    """Listener wrapper that detaches itself before its first call."""

    def __init__(self, emitter: EventEmitter, event: str, listener: Listener) -> None:
        self.emitter = emitter
        self.event = event
        self.listener = listener

    def __call__(self, *args: Any) -> Any:
        self.emitter._discard(self.event, lambda candidate: candidate is self)
        return self.listener(*args)

    def __repr__(self) -> str:
        return f"<once {self.listener!r}>"


class EventEmitter:
    """Named-event listener registry.

    Args:
        on_listener_added: Called with ``(event, count)`` after a listener was
            added, ``count`` being the number of listeners for ``event`` once
            the addition is done.
        on_listener_removed: Same, after a listener was removed.
    """

    def __init__(
        self,
        on_listener_added: CountHook | None = None,
        on_listener_removed: CountHook | None = None,
    ) -> None:
        self._listeners: dict[str, list[Listener]] = {}
        self._on_listener_added = on_listener_added
        self._on_listener_removed = on_listener_removed

    def on(self, event: str, listener: Listener) -> Listener:
        """Register *listener* for *event*. Returns the listener."""
        if not callable(listener):
            raise TypeError(f"Listener for {event!r} must be callable, got {type(listener).__name__}")
        listeners = self._listeners.setdefault(event, [])
        listeners.append(listener)
        if self._on_listener_added is not None:
            self._on_listener_added(event, len(listeners))
        return listener

    def once(self, event: str, listener: Listener) -> Listener:
        """Register *listener* for a single emission of *event*."""
        if not callable(listener):
            raise TypeError(f"Listener for {event!r} must be callable, got {type(listener).__name__}")
        self.on(event, _OnceWrapper(self, event, listener))
        return listener

    def off(self, event: str, listener: Listener) -> bool:
        """Remove the most recently added registration of *listener*.

        Returns False when *listener* was not registered for *event*.
        """
        return self._discard(
            event,
            lambda candidate: candidate is listener
            or (isinstance(candidate, _OnceWrapper) and candidate.listener is listener),
        )

    def _discard(self, event: str, match: Callable[[Listener], bool]) -> bool:
        listeners = self._listeners.get(event)
        if not listeners:
            return False

        for index in range(len(listeners) - 1, -1, -1):
            if match(listeners[index]):
                del listeners[index]
                break
        else:
            return False

        count = len(listeners)
        if not count:
            del self._listeners[event]
        if self._on_listener_removed is not None:
            self._on_listener_removed(event, count)
        return True

    def emit(self, event: str, *args: Any) -> bool:
        """Call every listener of *event* with *args*.

        Returns True if at least one listener was called. Emitting ``error``
        with no listener raises the error instead of dropping it.
        """
        listeners = self._listeners.get(event)
        if not listeners:
            if event == ERROR_EVENT:
                error = args[0] if args else None
                if isinstance(error, BaseException):
                    raise error
                raise MediaProxyError(f"Unhandled error event: {error!r}")
            return False

        for listener in list(listeners):
            listener(*args)
        return True

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def listeners(self, event: str) -> list[Listener]:
        """Return a copy of the listeners registered for *event*."""
        return [
            item.listener if isinstance(item, _OnceWrapper) else item
            for item in self._listeners.get(event, ())
        ]

    def event_names(self) -> list[str]:
        return list(self._listeners)

    def remove_all_listeners(self, event: str | None = None, *, notify: bool = True) -> None:
        """Remove every listener, or every listener of *event*.

        With ``notify=False`` the count hooks are not called.
        """
        events = [event] if event is not None else list(self._listeners)
        for name in events:
            removed = self._listeners.pop(name, None)
            if removed and notify and self._on_listener_removed is not None:
                self._on_listener_removed(name, 0)
        logger.debug("Removed all listeners for %s", events)

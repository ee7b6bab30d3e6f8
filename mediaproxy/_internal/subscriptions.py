"""Server-side event subscriptions driven by local listener counts.

A media object owns one :class:`SubscriptionLedger`. The ledger subscribes
an event type on the server when its first local listener arrives and
unsubscribes it when the last one leaves, keeping the token the server
returned in between.

At most one subscribe/unsubscribe request is in flight per event type.
Listener churn that happens while a request is pending is not sent right
away; when the request completes the ledger compares the current listener
count with what the server knows and issues the single request needed to
catch up, if any. A failed request is reported and left alone until the
next 0 -> 1 or 1 -> 0 transition.

A token whose unsubscribe failed is kept but marked stale: the next first
listener subscribes again and the new token replaces it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..interfaces import Completion
from .rpc_protocol import LOCAL_EVENTS, SubscribeParams, UnsubscribeParams, as_exception

logger = logging.getLogger(__name__)

Requester = Callable[[str, dict[str, Any], Completion], None]


class SubscriptionLedger:
    """Map of event type -> server subscription token.

    Args:
        request: Sends ``(operation, params, callback)`` to the RPC gateway.
        listener_count: Returns the current local listener count of an event.
        on_error: Receives subscribe/unsubscribe failures.
        owner: Only used in log messages.
    """

    def __init__(
        self,
        request: Requester,
        listener_count: Callable[[str], int],
        on_error: Callable[[BaseException], None],
        owner: Any = None,
    ) -> None:
        self._request = request
        self._listener_count = listener_count
        self._on_error = on_error
        self._owner = owner
        self._tokens: dict[str, Any] = {}
        self._in_flight: set[str] = set()
        # Tokens kept after a failed unsubscribe
        self._stale: set[str] = set()
        # Bumped by clear(); completions from an older generation are dropped
        self._generation = 0

    @property
    def tokens(self) -> dict[str, Any]:
        """Copy of the current event type -> token mapping."""
        return dict(self._tokens)

    def token(self, event: str) -> Any:
        return self._tokens.get(event)

    def __contains__(self, event: object) -> bool:
        return event in self._tokens

    def __len__(self) -> int:
        return len(self._tokens)

    def is_pending(self, event: str) -> bool:
        """True while a subscribe or unsubscribe for *event* awaits completion."""
        return event in self._in_flight

    def listener_added(self, event: str, count: int) -> None:
        if event in LOCAL_EVENTS or count != 1:
            return
        self._reconcile(event)

    def listener_removed(self, event: str, count: int) -> None:
        if event in LOCAL_EVENTS or count != 0:
            return
        self._reconcile(event)

    def clear(self) -> None:
        """Forget every token without contacting the server."""
        self._tokens.clear()
        self._in_flight.clear()
        self._stale.clear()
        self._generation += 1

    def _reconcile(self, event: str) -> None:
        if event in self._in_flight:
            logger.debug("%s: %r transition coalesced with pending request", self._owner, event)
            return

        wanted = self._listener_count(event) > 0
        if wanted and (event not in self._tokens or event in self._stale):
            self._subscribe(event)
        elif not wanted and event in self._tokens:
            self._unsubscribe(event)

    def _subscribe(self, event: str) -> None:
        generation = self._generation
        completed = False

        def done(error: Any, token: Any = None) -> None:
            nonlocal completed
            if completed or generation != self._generation:
                logger.debug("%s: ignoring stale subscribe completion for %r", self._owner, event)
                return
            completed = True
            self._in_flight.discard(event)

            if error is not None:
                self._on_error(as_exception(error, "subscribe"))
                return

            self._tokens[event] = token
            self._stale.discard(event)
            logger.debug("%s: subscribed %r (token=%r)", self._owner, event, token)
            self._reconcile(event)

        self._in_flight.add(event)
        logger.debug("%s: subscribing %r", self._owner, event)
        params: SubscribeParams = {"type": event}
        self._request("subscribe", dict(params), done)

    def _unsubscribe(self, event: str) -> None:
        generation = self._generation
        completed = False

        def done(error: Any, result: Any = None) -> None:
            nonlocal completed
            if completed or generation != self._generation:
                logger.debug("%s: ignoring stale unsubscribe completion for %r", self._owner, event)
                return
            completed = True
            self._in_flight.discard(event)

            if error is not None:
                # The token is kept: the server may still hold the subscription
                self._stale.add(event)
                self._on_error(as_exception(error, "unsubscribe"))
                if self._listener_count(event) > 0:
                    self._reconcile(event)
                return

            self._tokens.pop(event, None)
            self._stale.discard(event)
            logger.debug("%s: unsubscribed %r", self._owner, event)
            self._reconcile(event)

        self._in_flight.add(event)
        logger.debug("%s: unsubscribing %r", self._owner, event)
        params: UnsubscribeParams = {"subscription": self._tokens[event]}
        self._request("unsubscribe", dict(params), done)

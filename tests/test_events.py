"""Tests for the EventEmitter listener registry.

These tests verify listener bookkeeping and count hooks without any RPC.
"""

from unittest.mock import Mock

import pytest

from mediaproxy import EventEmitter, MediaProxyError


class TestListenerRegistration:
    """Tests for on/once/off."""

    def test_emit_calls_listeners_in_order(self):
        """Listeners run in registration order with the emitted arguments."""
        emitter = EventEmitter()
        calls = []
        emitter.on("Tick", lambda value: calls.append(("a", value)))
        emitter.on("Tick", lambda value: calls.append(("b", value)))

        assert emitter.emit("Tick", 7) is True
        assert calls == [("a", 7), ("b", 7)]

    def test_emit_without_listeners_returns_false(self):
        """Emitting an event nobody listens to is a no-op."""
        emitter = EventEmitter()

        assert emitter.emit("Tick") is False

    def test_on_returns_listener(self):
        """on() hands the listener back so it can be used as a decorator."""
        emitter = EventEmitter()
        listener = Mock()

        assert emitter.on("Tick", listener) is listener

    def test_non_callable_listener_rejected(self):
        """Listeners must be callable."""
        emitter = EventEmitter()

        with pytest.raises(TypeError):
            emitter.on("Tick", "not callable")

    def test_off_removes_listener(self):
        """A removed listener is no longer called."""
        emitter = EventEmitter()
        listener = Mock()
        emitter.on("Tick", listener)

        assert emitter.off("Tick", listener) is True
        emitter.emit("Tick")

        listener.assert_not_called()
        assert emitter.listener_count("Tick") == 0
        assert emitter.event_names() == []

    def test_off_unknown_listener_returns_false(self):
        """Removing a listener that was never added reports False."""
        emitter = EventEmitter()
        emitter.on("Tick", Mock())

        assert emitter.off("Tick", Mock()) is False
        assert emitter.off("Other", Mock()) is False
        assert emitter.listener_count("Tick") == 1

    def test_same_listener_added_twice_counts_twice(self):
        """Each registration is counted and removed separately."""
        emitter = EventEmitter()
        listener = Mock()
        emitter.on("Tick", listener)
        emitter.on("Tick", listener)

        emitter.emit("Tick")
        assert listener.call_count == 2

        emitter.off("Tick", listener)
        assert emitter.listener_count("Tick") == 1

    def test_once_fires_a_single_time(self):
        """once() listeners are detached before they run."""
        emitter = EventEmitter()
        listener = Mock()
        emitter.once("Tick", listener)

        emitter.emit("Tick", 1)
        emitter.emit("Tick", 2)

        listener.assert_called_once_with(1)
        assert emitter.listener_count("Tick") == 0

    def test_once_listener_can_be_removed_by_original(self):
        """off() accepts the function given to once()."""
        emitter = EventEmitter()
        listener = Mock()
        emitter.once("Tick", listener)

        assert emitter.listeners("Tick") == [listener]
        assert emitter.off("Tick", listener) is True
        emitter.emit("Tick")

        listener.assert_not_called()

    def test_listener_added_during_emit_waits_for_next_emit(self):
        """Listeners are snapshotted when an emission starts."""
        emitter = EventEmitter()
        late = Mock()
        emitter.on("Tick", lambda: emitter.on("Tick", late))

        emitter.emit("Tick")
        late.assert_not_called()

        emitter.emit("Tick")
        late.assert_called_once_with()


class TestErrorEvent:
    """Tests for the unhandled ``error`` convention."""

    def test_unhandled_error_is_raised(self):
        """An error nobody listens to is raised from emit()."""
        emitter = EventEmitter()
        error = ValueError("boom")

        with pytest.raises(ValueError, match="boom"):
            emitter.emit("error", error)

    def test_unhandled_non_exception_error_is_wrapped(self):
        """Non-exception error payloads are raised as MediaProxyError."""
        emitter = EventEmitter()

        with pytest.raises(MediaProxyError, match="boom"):
            emitter.emit("error", "boom")

    def test_handled_error_is_delivered(self):
        """With a listener, errors are delivered and not raised."""
        emitter = EventEmitter()
        listener = Mock()
        emitter.on("error", listener)
        error = ValueError("boom")

        assert emitter.emit("error", error) is True
        listener.assert_called_once_with(error)


class TestCountHooks:
    """Tests for listener count transition hooks."""

    def test_added_hook_receives_post_addition_count(self):
        """The added hook sees the count after the addition."""
        added = Mock()
        emitter = EventEmitter(on_listener_added=added)

        emitter.on("Tick", Mock())
        emitter.on("Tick", Mock())

        assert added.call_args_list[0].args == ("Tick", 1)
        assert added.call_args_list[1].args == ("Tick", 2)

    def test_removed_hook_receives_post_removal_count(self):
        """The removed hook sees the count after the removal."""
        removed = Mock()
        emitter = EventEmitter(on_listener_removed=removed)
        first, second = Mock(), Mock()
        emitter.on("Tick", first)
        emitter.on("Tick", second)

        emitter.off("Tick", first)
        emitter.off("Tick", second)

        assert [c.args for c in removed.call_args_list] == [("Tick", 1), ("Tick", 0)]

    def test_failed_removal_does_not_call_hook(self):
        """Removing an unknown listener is not a transition."""
        removed = Mock()
        emitter = EventEmitter(on_listener_removed=removed)

        emitter.off("Tick", Mock())

        removed.assert_not_called()

    def test_once_firing_reports_removal(self):
        """A once() listener firing is a removal like any other."""
        removed = Mock()
        emitter = EventEmitter(on_listener_removed=removed)
        emitter.once("Tick", Mock())

        emitter.emit("Tick")

        removed.assert_called_once_with("Tick", 0)

    def test_remove_all_listeners_notifies_each_event(self):
        """remove_all_listeners() reports every emptied event."""
        removed = Mock()
        emitter = EventEmitter(on_listener_removed=removed)
        emitter.on("A", Mock())
        emitter.on("A", Mock())
        emitter.on("B", Mock())

        emitter.remove_all_listeners()

        assert sorted(c.args for c in removed.call_args_list) == [("A", 0), ("B", 0)]
        assert emitter.event_names() == []

    def test_remove_all_listeners_for_one_event(self):
        """remove_all_listeners(event) leaves other events alone."""
        emitter = EventEmitter()
        emitter.on("A", Mock())
        emitter.on("B", Mock())

        emitter.remove_all_listeners("A")

        assert emitter.event_names() == ["B"]

    def test_remove_all_listeners_silently(self):
        """notify=False skips the hooks."""
        removed = Mock()
        emitter = EventEmitter(on_listener_removed=removed)
        emitter.on("A", Mock())

        emitter.remove_all_listeners(notify=False)

        removed.assert_not_called()
        assert emitter.listener_count("A") == 0

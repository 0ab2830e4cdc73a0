"""Application store: one immutable state value behind one dispatch entry point."""

import logging
from collections import deque
from typing import Any, Callable, Deque, List

from .actions import CompoundAction, flatten
from .models import ApplicationState
from .reducers import Reducer, app_reducer


logger = logging.getLogger(__name__)

StateListener = Callable[[ApplicationState], None]
EventListener = Callable[[Any], None]


class Store:
    """Serializes every state transition for one client session.

    Events dispatched from inside a listener are queued and applied once the
    current event has been fully delivered, so listeners never observe an
    interleaved transition.
    """

    def __init__(self, reducer: Reducer = app_reducer, initial_state: ApplicationState = None):
        self._reducer = reducer
        self._state = initial_state if initial_state is not None else ApplicationState()
        self._listeners: List[StateListener] = []
        self._event_listeners: List[EventListener] = []
        self._pending: Deque[Any] = deque()
        self._dispatching = False

    @property
    def state(self) -> ApplicationState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with the new state after every changing dispatch."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def add_event_listener(self, listener: EventListener) -> Callable[[], None]:
        """Call ``listener`` with every leaf event after it has been reduced."""
        self._event_listeners.append(listener)

        def remove():
            if listener in self._event_listeners:
                self._event_listeners.remove(listener)

        return remove

    def dispatch(self, event: Any) -> ApplicationState:
        self._pending.append(event)
        if self._dispatching:
            return self._state

        self._dispatching = True
        try:
            while self._pending:
                self._apply(self._pending.popleft())
        except Exception:
            # Events queued behind a failed one belong to the aborted transition
            self._pending.clear()
            raise
        finally:
            self._dispatching = False
        return self._state

    def dispatch_all(self, *events: Any) -> ApplicationState:
        """Apply several events as one transition."""
        return self.dispatch(CompoundAction(tuple(events)))

    def _apply(self, event: Any):
        previous = self._state
        self._state = self._reducer(previous, event)

        if self._state is not previous:
            for listener in list(self._listeners):
                try:
                    listener(self._state)
                except Exception as e:
                    logger.error(f"State listener {listener!r} failed: {e}", exc_info=True)

        for leaf in flatten(event):
            for listener in list(self._event_listeners):
                try:
                    listener(leaf)
                except Exception as e:
                    logger.error(f"Event listener {listener!r} failed on {type(leaf).__name__}: {e}", exc_info=True)

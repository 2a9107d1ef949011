"""Holds the current MapViewState and notifies subscribers on every transition."""

import logging
from typing import Callable, List, Optional

from memorymap.mapview.state import Action, MapViewState, reduce

logger = logging.getLogger(__name__)

Listener = Callable[[MapViewState, MapViewState], None]


class MapViewStore:
    """
    Single owner of the map view state.

    dispatch() runs the reducer, swaps the state, then calls each listener
    with (previous, current). Listeners run synchronously in subscription
    order.
    """

    def __init__(self, initial: Optional[MapViewState] = None):
        self._state = initial or MapViewState()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> MapViewState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: Action) -> MapViewState:
        previous = self._state
        self._state = reduce(previous, action)
        logger.debug("Dispatched %s", type(action).__name__)
        for listener in list(self._listeners):
            listener(previous, self._state)
        return self._state

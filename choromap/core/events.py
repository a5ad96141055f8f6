from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

Callback = Callable[..., Any]

DATA_DID_CHANGE = "data-did-change"
MAP_SELECTION_WILL_CHANGE = "map-selection-will-change"
MAP_SELECTION_DID_CHANGE = "map-selection-did-change"


def filter_did_change(dimension: str) -> str:
    """Event name published after the filter set of `dimension` changed."""
    return f"{dimension}-filter-did-change"


class EventBus:
    """
    Namespaced, synchronous publish/subscribe channel.

    Design Notes:
    - A subscription is keyed by (event_name, namespace). One owner (e.g. a chart) uses its
      id as namespace for all its subscriptions so {@link unsubscribe(namespace)} drops them at once
    - Callbacks are invoked in registration order as `callback(sender, *payload)`
    - The bus never filters on sender. Every subscriber must compare the received sender with
      its own identity and ignore its own broadcasts
    - Callback exceptions are not caught; they surface to whoever called {@link publish}
    """

    def __init__(self) -> None:
        self._subscriptions: Dict[str, Dict[str, Callback]] = {}

    def subscribe(self, event_name: str, namespace: str, callback: Optional[Callback]) -> None:
        """
        Register `callback` for `event_name` under `namespace`.

        Re-subscribing the same (event_name, namespace) pair replaces the previous callback,
        which then runs after every other subscriber of that event. Passing None removes the pair.
        """
        if callback is not None and not callable(callback):
            raise TypeError(f"Callback for '{event_name}.{namespace}' must be callable")

        by_namespace = self._subscriptions.setdefault(event_name, {})
        by_namespace.pop(namespace, None)

        if callback is None:
            if not by_namespace:
                del self._subscriptions[event_name]
            return

        by_namespace[namespace] = callback
        logger.debug(
            "Subscribed",
            extra={"event_name": event_name, "namespace": namespace},
        )

    def unsubscribe(self, namespace: str, event_name: Optional[str] = None) -> int:
        """
        Remove the subscriptions held by `namespace`.

        :param namespace: the owner namespace
        :param event_name: when given, only the subscription for this event is removed
        :return: number of removed subscriptions
        """
        names = [event_name] if event_name is not None else list(self._subscriptions)
        removed = 0

        for name in names:
            by_namespace = self._subscriptions.get(name)
            if not by_namespace or namespace not in by_namespace:
                continue
            del by_namespace[namespace]
            removed += 1
            if not by_namespace:
                del self._subscriptions[name]

        logger.debug(
            "Unsubscribed",
            extra={"namespace": namespace, "event_name": event_name, "n_removed": removed},
        )
        return removed

    def publish(self, event_name: str, sender: Any, *payload: Any) -> None:
        # Snapshot so callbacks may (un)subscribe while we dispatch
        callbacks = list(self._subscriptions.get(event_name, {}).values())

        logger.debug(
            "Publishing event",
            extra={"event_name": event_name, "n_subscribers": len(callbacks)},
        )

        for callback in callbacks:
            callback(sender, *payload)

    def has_subscribers(self, event_name: str) -> bool:
        return bool(self._subscriptions.get(event_name))

    def namespaces(self, event_name: str) -> List[str]:
        """Namespaces subscribed to `event_name`, in dispatch order."""
        return list(self._subscriptions.get(event_name, {}))

    def clear(self) -> None:
        self._subscriptions.clear()


# Process-wide bus shared by every DataController and chart unless one is passed explicitly
events = EventBus()

"""Synchronous event bus the composition container publishes lifecycle events on.

Payloads emitted by ``CompositionContainer``:

``pre_realization``
    ``{"catalogs": int}``, before the first catalog is queried.
``post_realization``
    ``{"providers": tuple[ProviderInstance, ...]}``, while the realization
    lock is still held; handlers must not call back into the container.
``pre_dispose``
    ``{"providers": int}``, once the container is retired and before any
    provider is disposed.
``post_dispose``
    ``{"providers": int, "failures": int}``, before ``DisposalError`` is
    raised.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, DefaultDict

__all__ = [
    "Event",
    "EventHandler",
    "EventBus",
    "PRE_REALIZATION_EVENT",
    "POST_REALIZATION_EVENT",
    "PRE_DISPOSE_EVENT",
    "POST_DISPOSE_EVENT",
    "STANDARD_EVENTS",
]

PRE_REALIZATION_EVENT = "pre_realization"
POST_REALIZATION_EVENT = "post_realization"
PRE_DISPOSE_EVENT = "pre_dispose"
POST_DISPOSE_EVENT = "post_dispose"

STANDARD_EVENTS = (
    PRE_REALIZATION_EVENT,
    POST_REALIZATION_EVENT,
    PRE_DISPOSE_EVENT,
    POST_DISPOSE_EVENT,
)


@dataclass(frozen=True)
class Event:
    """Lightweight event descriptor."""

    name: str
    payload: dict[str, Any]


EventHandler = Callable[[Event], None]


@dataclass(frozen=True)
class _EventSubscription:
    priority: int
    order: int
    handler: EventHandler


class EventBus:
    """Synchronous event bus with deterministic delivery."""

    def __init__(self) -> None:
        self._handlers: DefaultDict[str, list[_EventSubscription]] = defaultdict(list)
        self._sequence: DefaultDict[str, int] = defaultdict(int)

    def on(self, event_name: str, handler: EventHandler, priority: int = 0) -> None:
        """Register a handler for `event_name`; higher priority runs first."""
        order = self._sequence[event_name]
        self._sequence[event_name] = order + 1
        self._handlers[event_name].append(
            _EventSubscription(priority=priority, order=order, handler=handler)
        )

    def off(self, event_name: str, handler: EventHandler) -> None:
        """Remove every subscription of `handler` for `event_name`."""
        self._handlers[event_name] = [
            subscription
            for subscription in self._handlers[event_name]
            if subscription.handler is not handler
        ]

    def emit(self, event_name: str, payload: dict[str, Any]) -> None:
        event = Event(event_name, payload)
        subscriptions = sorted(
            self._handlers[event_name],
            key=lambda item: (-item.priority, item.order),
        )
        for subscription in subscriptions:
            subscription.handler(event)

"""
In-process publish/subscribe hub for real-time tournament events.

Subscriptions are keyed by (division, channel, event name); ``"*"`` as the
event name receives every event of the channel. Delivery is synchronous and
in emission order. A handler that raises is logged and skipped so one bad
subscriber never blocks the others.
"""

import threading
from collections import defaultdict
from typing import Any, Callable, Dict, List, Tuple

from lems.core.config import CHANNELS
from lems.core.logging_config import get_logger

logger = get_logger(__name__)

WILDCARD = "*"

Handler = Callable[..., Any]

# Channel each known event is published on
EVENT_CHANNELS: Dict[str, str] = {
    "sessionStarted": "judging",
    "sessionCompleted": "judging",
    "sessionAborted": "judging",
    "sessionUpdated": "judging",
    "rubricUpdated": "judging",
    "cvFormCreated": "judging",
    "cvFormUpdated": "judging",
    "judgingDeliberationStarted": "judging",
    "judgingDeliberationUpdated": "judging",
    "judgingDeliberationCompleted": "judging",
    "matchStarted": "field",
    "matchCompleted": "field",
    "matchAborted": "field",
    "matchUpdated": "field",
    "scoresheetStatusChanged": "field",
    "eventStateUpdated": "field",
    "teamRegistered": "pit-admin",
    "ticketCreated": "pit-admin",
    "ticketUpdated": "pit-admin",
    "awardsUpdated": "audience",
}


class Subscription:
    """Handle returned by ``Notifier.subscribe``."""

    def __init__(self, notifier: "Notifier", key: Tuple[str, str, str], handler: Handler):
        self._notifier = notifier
        self.key = key
        self.handler = handler
        self.active = True

    @property
    def division_id(self) -> str:
        return self.key[0]

    @property
    def channel(self) -> str:
        return self.key[1]

    @property
    def event_name(self) -> str:
        return self.key[2]

    def unsubscribe(self):
        if self.active:
            self._notifier._remove(self)
            self.active = False


class Notifier:
    """Typed, per-division event fan-out."""

    def __init__(self):
        self._subscriptions: Dict[Tuple[str, str, str], List[Subscription]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, division_id: str, channel: str, event_name: str,
                  handler: Handler) -> Subscription:
        """Register ``handler(channel, event_name, *args)``."""
        if channel not in CHANNELS:
            raise ValueError(f"Unknown channel: {channel}")
        key = (division_id, channel, event_name)
        subscription = Subscription(self, key, handler)
        with self._lock:
            self._subscriptions[key].append(subscription)
        logger.debug(f"Subscribed to {channel}/{event_name} in division {division_id}")
        return subscription

    def _remove(self, subscription: Subscription):
        with self._lock:
            handlers = self._subscriptions.get(subscription.key, [])
            if subscription in handlers:
                handlers.remove(subscription)
            if not handlers:
                self._subscriptions.pop(subscription.key, None)

    def publish(self, division_id: str, channel: str, event_name: str, *args) -> int:
        """
        Deliver an event to every matching handler.

        Returns:
            Number of handlers that received the event without raising
        """
        with self._lock:
            targets = list(self._subscriptions.get((division_id, channel, event_name), []))
            if event_name != WILDCARD:
                targets += self._subscriptions.get((division_id, channel, WILDCARD), [])

        delivered = 0
        for subscription in targets:
            try:
                subscription.handler(channel, event_name, *args)
                delivered += 1
            except Exception as e:
                logger.error(f"Handler for {channel}/{event_name} failed: {e}", exc_info=True)

        logger.debug(f"Published {channel}/{event_name} in division {division_id} to {delivered} handler(s)")
        return delivered

    def emit(self, division_id: str, event_name: str, *args) -> int:
        """Publish a known event on its registered channel."""
        return self.publish(division_id, EVENT_CHANNELS[event_name], event_name, *args)

    def subscriber_count(self, division_id: str = None) -> int:
        with self._lock:
            return sum(
                len(handlers) for key, handlers in self._subscriptions.items()
                if division_id is None or key[0] == division_id
            )

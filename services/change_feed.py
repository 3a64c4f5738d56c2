"""
Change Feed - In-process delivery of row change events.

Stores publish an event after every committed insert, update or delete.
Subscribers register a table, a row predicate and a callback; delivery is
best-effort, a failing callback is logged and skipped.
"""

import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

INSERT = 'INSERT'
UPDATE = 'UPDATE'
DELETE = 'DELETE'
EVENT_TYPES = (INSERT, UPDATE, DELETE)


@dataclass(frozen=True)
class ChangeEvent:
    """A single row change on a table."""
    table: str
    event_type: str
    new: Optional[Dict[str, Any]] = None
    old: Optional[Dict[str, Any]] = None
    origin: Optional[str] = None

    @property
    def record(self) -> Dict[str, Any]:
        """The row the event is about: the new image, or the old one for deletes."""
        return self.new or self.old or {}


class Subscription:
    """Handle returned by ChangeFeed.register."""

    def __init__(self, feed, table: str, predicate: Callable, callback: Callable):
        self.id = str(uuid.uuid4())
        self.table = table
        self.predicate = predicate
        self.callback = callback
        self._feed = feed
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        """Stop delivery. Safe to call any number of times."""
        if not self._active:
            return
        self._active = False
        self._feed._remove(self)
        logger.debug(f"Unsubscribed {self.id} from {self.table}")

    def deliver(self, event: ChangeEvent) -> bool:
        """Invoke the callback if still active and the predicate matches."""
        if not self._active:
            return False
        if self.predicate is not None and not self.predicate(event.record):
            return False
        self.callback(event)
        return True


class ChangeFeed:
    """Registry of subscriptions keyed by table."""

    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: Dict[str, List[Subscription]] = {}

    def register(self, table: str, predicate: Optional[Callable], callback: Callable) -> Subscription:
        """
        Register interest in changes to a table.

        Args:
            table: Table name
            predicate: Called with the changed row; None accepts every row
            callback: Called with the ChangeEvent

        Returns:
            Subscription handle
        """
        subscription = Subscription(self, table, predicate, callback)
        with self._lock:
            self._subscriptions.setdefault(table, []).append(subscription)
        logger.debug(f"Subscription {subscription.id} registered on {table}")
        return subscription

    def publish(self, event: ChangeEvent) -> int:
        """
        Deliver an event to matching subscribers.

        Returns:
            Number of callbacks invoked
        """
        if event.event_type not in EVENT_TYPES:
            raise ValueError(f"Unknown change event type: {event.event_type}")

        with self._lock:
            subscribers = list(self._subscriptions.get(event.table, []))

        delivered = 0
        for subscription in subscribers:
            try:
                if subscription.deliver(event):
                    delivered += 1
            except Exception as e:
                logger.error(f"Change callback {subscription.id} failed on {event.table}: {e}")

        logger.debug(f"{event.event_type} on {event.table} delivered to {delivered} subscriber(s)")
        return delivered

    def subscriber_count(self, table: str = None) -> int:
        with self._lock:
            if table is not None:
                return len(self._subscriptions.get(table, []))
            return sum(len(subs) for subs in self._subscriptions.values())

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            subs = self._subscriptions.get(subscription.table, [])
            if subscription in subs:
                subs.remove(subscription)

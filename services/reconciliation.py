"""
Reconciliation - Full reload of a local projection when the remote side changes.
"""

import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class ReconciliationHook:
    """
    Keeps a local projection in step with a remote table.

    start() performs the authoritative load and registers the subscription;
    every matching change event from another origin triggers reload() again.
    Events are never merged into local state.
    """

    def __init__(self, store, table: str, predicate: Optional[Callable], reload: Callable,
                 ignore_own_events: bool = True):
        self.store = store
        self.table = table
        self.predicate = predicate
        self.reload = reload
        self.ignore_own_events = ignore_own_events
        self._subscription = None
        self.reload_count = 0

    @property
    def running(self) -> bool:
        return self._subscription is not None

    def start(self):
        if self.running:
            return
        self.reload()
        self._subscription = self.store.subscribe(self.table, self.predicate, self._on_change)
        logger.debug(f"Reconciliation started on {self.table}")

    def stop(self):
        """Unsubscribe. Safe to call repeatedly."""
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            subscription.unsubscribe()
            logger.debug(f"Reconciliation stopped on {self.table}")

    def _on_change(self, event):
        if self.ignore_own_events and event.origin == self.store.origin:
            logger.debug(f"Skipping own {event.event_type} on {self.table}")
            return
        logger.info(f"Remote {event.event_type} on {self.table}, reloading")
        self.reload_count += 1
        self.reload()

"""Notification feed with ordered refreshes, and a background poller.

Refreshes may overlap: the poller and an explicit client refresh can both be
in flight. Every fetch takes a ticket from a monotonic sequence; a response is
applied only if its ticket is newer than the last applied one, so a slow,
older response can never overwrite fresher state.
"""
from __future__ import annotations
import logging
import threading
from typing import Callable, Dict, List, Optional

from grocer.domain.Notification import Notification
from grocer.utilities.config import NOTIFICATION_POLL_SECONDS

logger = logging.getLogger(__name__)

Fetcher = Callable[[], List[Notification]]


class NotificationFeed:
    def __init__(self):
        self._lock = threading.Lock()
        self._issued = 0
        self._applied = 0
        self._items: List[Notification] = []

    def begin(self) -> int:
        """Take a ticket for a fetch about to start."""
        with self._lock:
            self._issued += 1
            return self._issued

    def apply(self, ticket: int, notifications: List[Notification]) -> bool:
        """Store a fetch result unless a newer one was already applied."""
        with self._lock:
            if ticket <= self._applied:
                logger.debug("Discarding stale notification response %s (applied %s)", ticket, self._applied)
                return False
            self._applied = ticket
            self._items = list(notifications)
            return True

    def refresh(self, fetch: Fetcher) -> bool:
        ticket = self.begin()
        return self.apply(ticket, fetch())

    def _supersede(self):
        # local edits are newer than any fetch already in flight
        self._issued += 1
        self._applied = self._issued

    def mark_read(self, notification_id: str):
        with self._lock:
            for n in self._items:
                if n.id == notification_id:
                    n.is_read = True
            self._supersede()

    def remove(self, notification_id: str):
        with self._lock:
            self._items = [n for n in self._items if n.id != notification_id]
            self._supersede()

    @property
    def applied_ticket(self) -> int:
        return self._applied

    def items(self) -> List[Notification]:
        with self._lock:
            return list(self._items)

    def unread(self) -> List[Notification]:
        return [n for n in self.items() if not n.is_read]

    def unread_count(self) -> int:
        return len(self.unread())


class NotificationPoller:
    """Re-fetches a feed on a fixed interval until stopped."""

    def __init__(self, feed: NotificationFeed, fetch: Fetcher,
                 interval: float = NOTIFICATION_POLL_SECONDS, name: str = "notifications",
                 token: Optional[str] = None):
        self.feed = feed
        self.fetch = fetch
        self.interval = interval
        self.token = token
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._name = name

    def poll_once(self) -> bool:
        try:
            return self.feed.refresh(self.fetch)
        except Exception as e:  # keep the last good state and try again next tick
            logger.error("Notification poll %s failed: %s", self._name, e)
            return False

    def _run(self):
        while not self._stop.is_set():
            self.poll_once()
            self._stop.wait(self.interval)

    def start(self):
        if self._thread is not None and self._thread.is_alive():
            return self
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name=f"poller-{self._name}", daemon=True)
        self._thread.start()
        return self

    def stop(self, timeout: Optional[float] = None):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()


class FeedRegistry:
    """One feed (and at most one poller) per user."""

    def __init__(self):
        self._lock = threading.Lock()
        self._feeds: Dict[str, NotificationFeed] = {}
        self._pollers: Dict[str, NotificationPoller] = {}

    def feed_for(self, user_id: str) -> NotificationFeed:
        with self._lock:
            return self._feeds.setdefault(user_id, NotificationFeed())

    def watch(self, user_id: str, fetch: Fetcher, interval: float = NOTIFICATION_POLL_SECONDS,
              token: Optional[str] = None) -> NotificationPoller:
        """Start polling for a user; a poller holding other credentials is replaced."""
        feed = self.feed_for(user_id)
        stale = None
        with self._lock:
            poller = self._pollers.get(user_id)
            if poller is not None and poller.running and poller.token != token:
                stale, poller = poller, None
            if poller is None or not poller.running:
                poller = NotificationPoller(feed, fetch, interval, name=user_id, token=token)
                self._pollers[user_id] = poller
        if stale is not None:
            logger.info("Replacing notification poller for %s after a credential change", user_id)
            stale.stop(timeout=1)
        return poller.start()

    def unwatch(self, user_id: str) -> bool:
        """Stop the user's poller and drop the cached feed. True when a poller was running."""
        with self._lock:
            poller = self._pollers.pop(user_id, None)
            self._feeds.pop(user_id, None)
        if poller is None:
            return False
        was_running = poller.running
        poller.stop(timeout=1)
        return was_running

    def stop_all(self):
        with self._lock:
            pollers = list(self._pollers.values())
            self._pollers.clear()
        for poller in pollers:
            poller.stop(timeout=1)


FEEDS = FeedRegistry()

__all__ = ['NotificationFeed', 'NotificationPoller', 'FeedRegistry', 'FEEDS']

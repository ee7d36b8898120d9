"""In-process activity log fed by the event bus.

Records order and refill events in a bounded ring buffer. Each entry gets an
auto-increment id so clients can ask only for newer entries (since=<cursor>).
"""
from __future__ import annotations
from typing import List, Dict, Any, Optional
from threading import Lock
from datetime import datetime, timezone

from grocer.domain.PantryItem import PantryItem
from .Event_Bus import ALL_EVENTS, EventBus, GLOBAL_EVENT_BUS

MAX_EVENTS = 300


class ActivityLog:
    def __init__(self, max_events: int = MAX_EVENTS):
        self._lock = Lock()
        self._events: List[Dict[str, Any]] = []
        self._next_id = 1
        self._max_events = max_events
        self._bus: Optional[EventBus] = None

    def record(self, event_name: str, payload: Any):  # signature expected by EventBus
        entry: Dict[str, Any] = {'type': event_name, 'ts': datetime.now(timezone.utc).isoformat()}
        if isinstance(payload, dict):
            item = payload.get('item')
            if isinstance(item, PantryItem):
                entry.update({
                    'itemId': item.id, 'productName': item.product_name,
                    'status': item.status, 'userId': item.user_id, 'shopId': item.shop_id,
                })
            order = payload.get('order')
            if isinstance(order, dict):
                entry.update({'shopId': order.get('shopId'), 'totalAmount': order.get('totalAmount')})
            for k in ('order_id', 'item_id', 'status', 'actor', 'shop_id', 'customer_id'):
                if k in payload and payload[k] is not None:
                    entry[k] = payload[k]
        with self._lock:
            entry['id'] = self._next_id
            self._next_id += 1
            self._events.append(entry)
            if len(self._events) > self._max_events:
                del self._events[: len(self._events) - self._max_events]

    def start(self, bus: EventBus = GLOBAL_EVENT_BUS):
        """Idempotent: subscribe once to every activity event."""
        if self._bus is bus:
            return self
        for name in ALL_EVENTS:
            bus.subscribe(name, self.record)
        self._bus = bus
        return self

    def stop(self):
        """Detach from the bus; recorded entries are kept."""
        if self._bus is None:
            return self
        for name in ALL_EVENTS:
            self._bus.unsubscribe(name, self.record)
        self._bus = None
        return self

    def get_events(self, since: Optional[int] = None) -> Dict[str, Any]:
        """Entries newer than 'since' (exclusive), plus next_cursor for the following poll."""
        with self._lock:
            if since is None:
                data = list(self._events)
            else:
                data = [e for e in self._events if e['id'] > since]
            next_cursor = self._events[-1]['id'] if self._events else since or 0
        return {'events': data, 'next_cursor': next_cursor}


ACTIVITY_LOG = ActivityLog()

__all__ = ['ActivityLog', 'ACTIVITY_LOG', 'MAX_EVENTS']

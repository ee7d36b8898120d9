"""Simple Event Bus / Observer implementation for order and refill activity.

Event names:
  order.placed            -> payload {"order": dict, "shop_id": str, "customer_id": str}
  order.status_changed    -> payload {"order_id": str, "status": str, "actor": str}
  pantry.refill_requested -> payload {"item": PantryItem, "actor": str}
  pantry.refill_advanced  -> payload {"item": PantryItem, "actor": str}
  pantry.item_removed     -> payload {"item_id": str, "actor": str}

Subscribers are callables taking (event_name, payload).
"""
from __future__ import annotations
import logging
from collections import defaultdict
from typing import Callable, Any, Dict, List

ORDER_PLACED = "order.placed"
ORDER_STATUS_CHANGED = "order.status_changed"
REFILL_REQUESTED_EVENT = "pantry.refill_requested"
REFILL_ADVANCED_EVENT = "pantry.refill_advanced"
PANTRY_ITEM_REMOVED = "pantry.item_removed"

ALL_EVENTS = (ORDER_PLACED, ORDER_STATUS_CHANGED, REFILL_REQUESTED_EVENT,
              REFILL_ADVANCED_EVENT, PANTRY_ITEM_REMOVED)

logger = logging.getLogger(__name__)


class EventBus:
	def __init__(self):
		self._subscribers: Dict[str, List[Callable[[str, Any], None]]] = defaultdict(list)

	def subscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		if callback not in self._subscribers[event_name]:
			self._subscribers[event_name].append(callback)

	def unsubscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		try:
			self._subscribers[event_name].remove(callback)
		except (ValueError, KeyError):
			pass

	def publish(self, event_name: str, payload: Any):
		for cb in list(self._subscribers.get(event_name, [])):
			try:
				cb(event_name, payload)
			except Exception:  # a failing observer must not break the caller's action
				logger.exception("Error delivering %s to %r", event_name, cb)


GLOBAL_EVENT_BUS = EventBus()


def publish(event_name: str, payload: Any = None) -> None:
	"""Publish an event on the global bus."""
	GLOBAL_EVENT_BUS.publish(event_name, payload)


__all__ = [
	'EventBus', 'GLOBAL_EVENT_BUS', 'publish', 'ALL_EVENTS',
	'ORDER_PLACED', 'ORDER_STATUS_CHANGED', 'REFILL_REQUESTED_EVENT',
	'REFILL_ADVANCED_EVENT', 'PANTRY_ITEM_REMOVED'
]

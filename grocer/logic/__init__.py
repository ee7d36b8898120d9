"""Core business logic layer.

Subpackages:
- geo: matching shops to a delivery coordinate
- pantry: refill lifecycle and shop refill queue
- orders: order lifecycle and cart handling
- reporting: expense aggregation

Everything here is pure: inputs are domain objects, nothing talks to the
remote store.
"""
__all__ = ["geo", "pantry", "orders", "reporting"]

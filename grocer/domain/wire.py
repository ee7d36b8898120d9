"""Helpers applied once when records arrive from the remote store.

Reference fields (``shopId``, ``ownerId``, ``userId``, ...) may come back either
as a raw identifier or populated as an embedded object. ``normalize_id`` turns
both shapes into one canonical string so later comparisons are plain ``==``.
"""
import math
from datetime import datetime, timezone
from typing import Any, Optional


def normalize_id(value: Any) -> Optional[str]:
    '''Return the canonical string id of a raw id or an embedded record.'''
    if value is None:
        return None
    if isinstance(value, dict):
        return normalize_id(value.get("_id", value.get("id")))
    text = str(value).strip()
    return text or None


def embedded_name(value: Any) -> str:
    '''Name carried by a populated reference, "" for a raw id.'''
    if isinstance(value, dict):
        return str(value.get("name") or "")
    return ""


def parse_timestamp(value: Any) -> Optional[datetime]:
    '''Parse an ISO-8601 timestamp (or epoch millis) into an aware UTC datetime.'''
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)):
        dt = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    else:
        try:
            dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def to_number(value: Any, default: float = 0.0) -> float:
    '''Coerce a loosely typed numeric field; non-finite or malformed values give the default.'''
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def to_count(value: Any, default: int = 0) -> int:
    return int(to_number(value, default))

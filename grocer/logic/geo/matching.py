"""Nearby-shop matching by delivery radius.

Provides match_shops(consumer_coordinates, shops) and helpers.
"""
from __future__ import annotations
import logging
import math
from typing import Iterable, List, Sequence

from grocer.domain.Location import parse_coordinates
from grocer.domain.Shop import Shop
from grocer.utilities.constants import DISTANCE_DECIMALS, EARTH_RADIUS_KM

__all__ = ["haversine_km", "MatchedShop", "match_shops", "partition_subscribed"]

logger = logging.getLogger(__name__)


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres between two points given in degrees."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (math.sin(d_lat / 2) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2)
    a = min(1.0, a)  # rounding near antipodes
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


class MatchedShop:
    """A shop able to deliver, with the distance that qualified it."""

    def __init__(self, shop: Shop, distance_km: float):
        self.shop = shop
        self.distance_km = distance_km

    @property
    def distance(self) -> float:
        """Display distance; comparisons use distance_km."""
        return round(self.distance_km, DISTANCE_DECIMALS)

    def to_dict(self):
        return {**self.shop.to_dict(), "distance": self.distance, "canDeliver": True}

    def __repr__(self) -> str:
        return f"MatchedShop({self.shop.name!r}, {self.distance} km)"


def match_shops(consumer_coordinates: Sequence[float], shops: Iterable[Shop]) -> List[MatchedShop]:
    """Return the shops whose delivery radius covers the consumer, nearest first.

    Args:
        consumer_coordinates: [longitude, latitude] in decimal degrees.
        shops: Shop instances; those without valid coordinates are skipped.

    Returns:
        MatchedShop list sorted by unrounded distance; ties keep input order.

    Raises:
        ValueError: consumer_coordinates is not a finite [lng, lat] pair.
    """
    coords = parse_coordinates(consumer_coordinates)
    if coords is None:
        raise ValueError(f"Invalid consumer coordinates: {consumer_coordinates!r}")
    user_lng, user_lat = coords

    matches: List[MatchedShop] = []
    for shop in shops:
        if shop.coordinates is None:
            logger.debug("Shop missing location data: %s", shop.name)
            continue
        shop_lng, shop_lat = shop.coordinates
        distance = haversine_km(user_lat, user_lng, shop_lat, shop_lng)
        if distance <= shop.delivery_radius:
            matches.append(MatchedShop(shop, distance))
    # list.sort is stable, so equal distances keep input order
    matches.sort(key=lambda m: m.distance_km)
    return matches


def partition_subscribed(matches: Iterable, subscriptions: Iterable[str]):
    """Split matches (MatchedShop or Shop) into (subscribed, available), order preserved."""
    subscribed_ids = set(subscriptions or [])
    subscribed, available = [], []
    for match in matches:
        shop = match.shop if isinstance(match, MatchedShop) else match
        (subscribed if shop.id in subscribed_ids else available).append(match)
    return subscribed, available

"""Thin async wrapper over the Google Maps geocoding API."""
import logging
from typing import Any, Dict, Optional

import httpx

from grocer.utilities.config import GEOCODE_REGION, GEOCODE_URL, GOOGLE_MAPS_API_KEY

logger = logging.getLogger(__name__)

# address component type -> result field
_COMPONENTS = {
    "locality": "city",
    "sublocality_level_1": "area",
    "administrative_area_level_1": "state",
    "postal_code": "pincode",
}


class GeocodingError(ValueError):
    pass


class GeocodingClient:
    def __init__(self, api_key: str = GOOGLE_MAPS_API_KEY, url: str = GEOCODE_URL,
                 region: str = GEOCODE_REGION, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key
        self.url = url
        self.region = region
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def _lookup(self, params: Dict[str, str]) -> Optional[Dict[str, Any]]:
        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.get(self.url, params={**params, "key": self.api_key})
        if response.status_code != 200:
            logger.error("Geocoding HTTP %s: %s", response.status_code, response.text[:200])
            return None
        try:
            data = response.json()
        except ValueError:
            logger.error("Geocoding returned a non-JSON body: %s", response.text[:200])
            return None
        if not isinstance(data, dict):
            logger.error("Geocoding returned an unexpected body: %r", data)
            return None
        results = data.get("results")
        if data.get("status") != "OK" or not isinstance(results, list) or not results:
            logger.info("Geocoding returned %s", data.get("status"))
            return None
        return results[0] if isinstance(results[0], dict) else None

    async def geocode_address(self, address: str) -> Dict[str, Any]:
        """Resolve a free-text address.

        Returns:
            { coordinates: [lng, lat], formattedAddress, city, state, pincode, area }

        Raises:
            GeocodingError: the address could not be located.
        """
        try:
            result = await self._lookup({"address": address, "region": self.region})
        except httpx.HTTPError as e:
            logger.error("Geocoding error: %s", e)
            result = None
        if result is None:
            raise GeocodingError("Failed to find address location")

        try:
            location = result["geometry"]["location"]
            coordinates = [float(location["lng"]), float(location["lat"])]
        except (KeyError, TypeError, ValueError):
            logger.error("Geocoding result without a usable location: %r", result)
            raise GeocodingError("Failed to find address location")
        parsed = {
            "coordinates": coordinates,
            "formattedAddress": result.get("formatted_address", ""),
            "city": "", "state": "", "pincode": "", "area": "",
        }
        for component in result.get("address_components", []):
            for kind in component.get("types", []):
                if kind in _COMPONENTS:
                    parsed[_COMPONENTS[kind]] = component.get("long_name", "")
        return parsed

    async def reverse_geocode(self, latitude: float, longitude: float) -> Optional[Dict[str, str]]:
        try:
            result = await self._lookup({"latlng": f"{latitude},{longitude}"})
        except httpx.HTTPError as e:
            logger.error("Reverse geocoding error: %s", e)
            return None
        if result is None:
            return None
        return {"address": result.get("formatted_address", ""), "placeId": result.get("place_id", "")}

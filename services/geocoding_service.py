"""
Reverse Geocoding Service
Resolves coordinates to a place name through Nominatim (OpenStreetMap)
"""
from typing import Any, Dict, Optional

import httpx

from models.base import Coordinate
from services.base_service import BaseService

UNKNOWN_PLACE = "Unknown"


class GeocodingService(BaseService):
    """
    Best-effort reverse geocoder.

    Lookups are retried on timeouts and HTTP errors; once retries are
    exhausted, or when geocoding is disabled, the place resolves to
    ``UNKNOWN_PLACE`` instead of raising. Malformed responses and unexpected
    errors resolve the same way.
    """

    def __init__(self, settings=None, client: Optional[httpx.AsyncClient] = None):
        self._client = client
        self._owns_client = client is None
        super().__init__(settings=settings)

    def _setup(self):
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.settings.geocoding_timeout_seconds,
                headers={"User-Agent": self.settings.geocoding_user_agent},
            )

    async def close(self):
        """Close the HTTP client if this service created it."""
        if self._owns_client:
            await self._client.aclose()

    async def _fetch(self, coord: Coordinate) -> Dict[str, Any]:
        params = {
            "format": "json",
            "lat": coord.latitude,
            "lon": coord.longitude,
        }
        response = await self._client.get(
            self.settings.geocoding_url,
            params=params,
            headers={"User-Agent": self.settings.geocoding_user_agent},
        )
        response.raise_for_status()
        return response.json()

    async def reverse_geocode(self, coord: Coordinate) -> str:
        """
        Get the district (or state) name for a coordinate

        Args:
            coord: Point to resolve

        Returns:
            Place name, or "Unknown" when it cannot be resolved
        """
        if not self.settings.geocoding_enabled:
            return UNKNOWN_PLACE

        try:
            data = await self._api_call_with_retry(
                self._fetch,
                coord,
                max_attempts=self.settings.geocoding_max_attempts,
                min_wait=self.settings.geocoding_retry_min_wait_seconds,
            )
            address = data.get("address") if isinstance(data, dict) else None
            if not isinstance(address, dict):
                return UNKNOWN_PLACE
            place = address.get("state_district") or address.get("state")
        except Exception as e:
            self._handle_error(
                e,
                {"latitude": coord.latitude, "longitude": coord.longitude},
                reraise=False,
            )
            return UNKNOWN_PLACE

        return place if isinstance(place, str) and place.strip() else UNKNOWN_PLACE

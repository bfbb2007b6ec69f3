import logging
from typing import Optional, Tuple

import requests
from geopy.exc import GeopyError
from geopy.geocoders import Nominatim

from listings.core.config import settings
from listings.core.exceptions import GeocodingError

logger = logging.getLogger(__name__)

GOOGLE_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"


def format_address(*parts: Optional[str]) -> str:
    """Join the non-empty address parts with commas."""
    return ", ".join(p.strip() for p in parts if p and p.strip())


class GeocodingService:
    """
    Service for geocoding addresses to lat/lng coordinates.

    Uses the Google Geocoding API when an API key is configured and falls back
    to Nominatim otherwise. One request per call: no retries, no backoff.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_MAPS_API_KEY
        self.timeout = timeout or settings.GEOCODING_TIMEOUT
        self.geolocator = None
        if not self.api_key:
            self.geolocator = Nominatim(user_agent=user_agent or settings.GEOCODING_USER_AGENT)

    @property
    def provider(self) -> str:
        return "google" if self.api_key else "nominatim"

    def geocode(self, address: str) -> Tuple[float, float]:
        """
        Geocode an address.

        Returns:
            Tuple of (latitude, longitude).

        Raises:
            GeocodingError: no match, a non-OK status, or a transport error.
        """
        if not address:
            raise GeocodingError(address, "EMPTY_ADDRESS")
        if self.api_key:
            return self._geocode_google(address)
        return self._geocode_nominatim(address)

    def _geocode_google(self, address: str) -> Tuple[float, float]:
        params = {
            "address": address,
            "key": self.api_key,
        }
        try:
            response = requests.get(GOOGLE_GEOCODE_URL, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise GeocodingError(address, str(e)) from e

        status = data.get("status", "UNKNOWN_ERROR")
        if status != "OK" or not data.get("results"):
            raise GeocodingError(address, status)

        location = data["results"][0]["geometry"]["location"]
        logger.debug(f"Geocoded '{address}' -> ({location['lat']}, {location['lng']})")
        return (location["lat"], location["lng"])

    def _geocode_nominatim(self, address: str) -> Tuple[float, float]:
        try:
            location = self.geolocator.geocode(address, timeout=self.timeout)
        except GeopyError as e:
            raise GeocodingError(address, str(e)) from e

        if not location:
            raise GeocodingError(address, "ZERO_RESULTS")
        logger.debug(f"Geocoded '{address}' -> ({location.latitude}, {location.longitude})")
        return (location.latitude, location.longitude)

"""
City autocomplete using the Open-Meteo geocoding API.
Turns a partial city name into a short list of candidate places.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from travel_planner.config import settings
from travel_planner.domain.errors import ExternalServiceError

logger = logging.getLogger(__name__)


@dataclass
class CityCandidate:
    """One autocomplete candidate."""
    name: str
    latitude: float
    longitude: float
    country: Optional[str] = None
    admin1: Optional[str] = None


class GeocodingService:
    """
    Service for city name autocomplete.
    Debouncing keystrokes is the client's concern; every call hits the API.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        language: Optional[str] = None,
        max_results: Optional[int] = None,
        min_query_length: Optional[int] = None,
        timeout_seconds: Optional[int] = None,
    ):
        self.base_url = base_url or settings.geocoding_base_url
        self.language = language or settings.geocoding_language
        self.max_results = max_results or settings.geocoding_max_results
        self.min_query_length = min_query_length or settings.geocoding_min_query_length
        self.timeout_seconds = timeout_seconds or settings.http_timeout_seconds

    async def search_cities(self, query: str) -> list[CityCandidate]:
        """
        Look up cities whose name starts with the query.

        Returns an empty list for queries shorter than the minimum length
        (no request is made).

        Raises:
            ExternalServiceError: the API could not be reached or answered with an error
        """
        text = (query or "").strip()
        if len(text) < self.min_query_length:
            return []

        params = {
            "name": text,
            "count": self.max_results,
            "language": self.language,
            "format": "json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(self.base_url, params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException:
            logger.warning(f"Geocoding API timeout for query: {text}")
            raise ExternalServiceError("City search timed out")
        except httpx.HTTPStatusError as e:
            logger.warning(f"Geocoding API HTTP error: {e.response.status_code}")
            raise ExternalServiceError(f"City search failed with status {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.warning(f"Geocoding API request failed: {e}")
            raise ExternalServiceError("City search is unavailable")
        except ValueError as e:
            logger.warning(f"Geocoding API returned invalid JSON: {e}")
            raise ExternalServiceError("City search returned an unreadable answer")

        if not isinstance(data, dict):
            logger.warning(f"Unexpected geocoding response for query: {text}")
            return []

        # Open-Meteo omits "results" entirely when nothing matches
        results = data.get("results")
        if not isinstance(results, list):
            results = []

        candidates = []
        for item in results:
            if not isinstance(item, dict):
                continue
            lat = item.get("latitude")
            lon = item.get("longitude")
            name = item.get("name")
            if lat is None or lon is None or not name:
                continue
            candidates.append(CityCandidate(
                name=name,
                latitude=lat,
                longitude=lon,
                country=item.get("country"),
                admin1=item.get("admin1"),
            ))

        logger.debug(f"City search '{text}' returned {len(candidates)} candidates")
        return candidates[: self.max_results]


# Global service instance
_geocoding_service: Optional[GeocodingService] = None


def get_geocoding_service() -> GeocodingService:
    """Get or create the geocoding service singleton."""
    global _geocoding_service
    if _geocoding_service is None:
        _geocoding_service = GeocodingService()
    return _geocoding_service

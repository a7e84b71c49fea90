"""
Trip cover images: Unsplash photo search plus an image loader used by the
PDF export to fetch the cover bytes.
"""
import logging
from typing import Optional, Protocol

import httpx

from travel_planner.config import settings

logger = logging.getLogger(__name__)


class ImageSearchService:
    """
    Finds one landscape photo for a destination.

    Never fails the caller: a missing API key, an empty result set or an
    API error all fall back to the default placeholder image.
    """

    def __init__(
        self,
        access_key: Optional[str] = None,
        base_url: Optional[str] = None,
        default_image_url: Optional[str] = None,
        timeout_seconds: Optional[int] = None,
    ):
        self.access_key = access_key or settings.unsplash_access_key
        self.base_url = base_url or settings.unsplash_base_url
        self.default_image_url = default_image_url or settings.default_cover_image_url
        self.timeout_seconds = timeout_seconds or settings.http_timeout_seconds

    async def search_photo(self, query: str) -> Optional[str]:
        """URL of the first landscape result, or None."""
        if not self.access_key:
            logger.warning("Unsplash access key not configured, skipping image search")
            return None

        text = (query or "").strip()
        if not text:
            return None

        params = {
            "query": text,
            "orientation": "landscape",
            "per_page": 1,
        }
        headers = {"Authorization": f"Client-ID {self.access_key}"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(self.base_url, params=params, headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException:
            logger.warning(f"Unsplash API timeout for query: {text}")
            return None
        except httpx.HTTPStatusError as e:
            logger.warning(f"Unsplash API HTTP error: {e.response.status_code}")
            return None
        except httpx.HTTPError as e:
            logger.warning(f"Unsplash API request failed: {e}")
            return None
        except ValueError as e:
            logger.warning(f"Unsplash API returned invalid JSON: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Unexpected Unsplash response for: {text}")
            return None

        results = data.get("results") or []
        if not isinstance(results, list) or not results:
            logger.info(f"No Unsplash photos for: {text}")
            return None

        first = results[0] if isinstance(results[0], dict) else {}
        urls = first.get("urls")
        return urls.get("regular") if isinstance(urls, dict) else None

    async def cover_image_for(self, destination: str) -> str:
        """Photo URL for the destination, or the default placeholder."""
        url = await self.search_photo(destination)
        return url or self.default_image_url


class ImageLoader(Protocol):
    """Fetches image bytes for embedding in an export. None means 'skip the image'."""

    async def load(self, url: str) -> Optional[bytes]:
        ...


class HttpImageLoader:
    """Downloads images over HTTP; failures are logged and yield None."""

    def __init__(self, timeout_seconds: Optional[int] = None):
        self.timeout_seconds = timeout_seconds or settings.http_timeout_seconds

    async def load(self, url: str) -> Optional[bytes]:
        if not url:
            return None
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, follow_redirects=True) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Could not download cover image {url}: {e}")
            return None

        content_type = response.headers.get("content-type", "")
        if content_type and not content_type.startswith("image/"):
            logger.warning(f"Cover image {url} has unexpected content type {content_type}")
            return None
        return response.content


# Global service instance
_image_search_service: Optional[ImageSearchService] = None


def get_image_search_service() -> ImageSearchService:
    """Get or create the image search service singleton."""
    global _image_search_service
    if _image_search_service is None:
        _image_search_service = ImageSearchService()
    return _image_search_service


def get_image_loader() -> ImageLoader:
    return HttpImageLoader()

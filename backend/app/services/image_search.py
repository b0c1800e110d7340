"""Pexels image search pass-through."""
from typing import Optional

import httpx

from app.config import settings
from app.schemas.images import ImageResult, ImageSearchResponse
from app.utils.exceptions import ImageSearchError, service_unavailable_error
from app.utils.logger import logger


class ImageSearchClient:
    """Service for searching stock photos using the Pexels REST API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.pexels.com/v1",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.transport = transport

    async def search(self, query: str, per_page: int = 5, orientation: str = "landscape") -> ImageSearchResponse:
        """
        Search photos and keep only the fields generated sites use.

        Args:
            query: Free-text search
            per_page: Number of results
            orientation: landscape, portrait or square

        Returns:
            ImageSearchResponse
        """
        params = {"query": query, "per_page": per_page, "orientation": orientation}
        headers = {"Authorization": self.api_key}
        try:
            async with httpx.AsyncClient(timeout=10.0, transport=self.transport) as client:
                response = await client.get(f"{self.base_url}/search", params=params, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Image search request failed: {e}", exc_info=True)
            raise ImageSearchError(f"Image search unavailable: {e}")

        if response.status_code != 200:
            logger.error(f"Pexels API error {response.status_code}: {response.text[:500]}")
            raise ImageSearchError(f"Pexels API error: HTTP {response.status_code}")

        data = response.json()
        images = [
            ImageResult(
                id=photo["id"],
                url=photo["src"]["large"],
                alt=photo.get("alt"),
                photographer=photo.get("photographer"),
                photographerUrl=photo.get("photographer_url"),
                width=photo.get("width"),
                height=photo.get("height"),
            )
            for photo in data.get("photos", [])
        ]
        return ImageSearchResponse(images=images, total=data.get("total_results", len(images)))


def get_image_search_client() -> ImageSearchClient:
    """Dependency for getting the configured image search client."""
    if not settings.pexels_api_key:
        raise service_unavailable_error("Image search is not configured: PEXELS_API_KEY is missing")
    return ImageSearchClient(settings.pexels_api_key, settings.pexels_api_url)

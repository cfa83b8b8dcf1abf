"""
Photo storage access.
Fetches raw photo bytes from object storage URLs.
"""

import httpx

from core.exceptions import ValidationError
from core.logging import get_logger

logger = get_logger(__name__)


class PhotoFetcher:
    """Downloads photo bytes for the face pipeline."""

    def __init__(self, timeout: float = 30.0, transport: httpx.AsyncBaseTransport = None):
        self.timeout = timeout
        self._transport = transport

    async def fetch(self, url: str) -> bytes:
        """
        Download a photo.

        Raises:
            ValidationError: URL missing, unreachable or returned no bytes
        """
        if not url:
            raise ValidationError("Image URL is required", field="imageUrl")

        try:
            async with httpx.AsyncClient(transport=self._transport, follow_redirects=True) as client:
                response = await client.get(url, timeout=self.timeout)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to download photo: {url} - {e}")
            raise ValidationError(f"Failed to fetch image: {e}", field="imageUrl")

        if not response.content:
            raise ValidationError("Fetched image is empty", field="imageUrl")

        logger.debug(f"Downloaded {len(response.content)} bytes from {url}")
        return response.content

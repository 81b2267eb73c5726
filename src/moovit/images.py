"""Transit images (agency logos, line icons) with an in-memory cache."""

import logging
from typing import Any, Dict, List, Optional, Sequence

from .config import ResolvedConfig
from .headers import build_headers
from .http_client import HttpClient
from .models import TransitImage

logger = logging.getLogger(__name__)

IMAGE_ENDPOINT = "/image"

MIME_TYPES = {
    1: "image/png",
    2: "image/jpeg",
    3: "image/gif",
    4: "image/svg+xml",
}
DEFAULT_MIME_TYPE = "image/png"


class ImagesService:
    """
    Fetches images by id and memoizes them for the client's lifetime.

    Images are assumed immutable, so the cache has no TTL or eviction;
    call clear_cache() to drop it.
    """

    def __init__(self, config: ResolvedConfig, http: HttpClient):
        self.config = config
        self.http = http
        self._cache: Dict[int, TransitImage] = {}

    def get_images(self, ids: Sequence[int]) -> List[TransitImage]:
        """
        Get images in the requested order.

        Only ids missing from the cache are fetched, in one request. Ids the
        server does not return are left out of the result.
        """
        uncached: List[int] = []
        for image_id in ids:
            if image_id not in self._cache and image_id not in uncached:
                uncached.append(image_id)

        if uncached:
            logger.debug(f"Fetching {len(uncached)} images ({len(ids) - len(uncached)} cached)")
            data = self.http.get(
                IMAGE_ENDPOINT,
                params={"ids": ",".join(str(i) for i in uncached)},
                headers=build_headers(self.config),
            )
            for image in parse_images_response(data):
                self._cache[image.id] = image

        return [self._cache[image_id] for image_id in ids if image_id in self._cache]

    def get_image(self, image_id: int) -> Optional[TransitImage]:
        images = self.get_images([image_id])
        return images[0] if images else None

    def clear_cache(self) -> None:
        """Manually clear the cache."""
        self._cache.clear()

    @property
    def cache_size(self) -> int:
        return len(self._cache)


def parse_images_response(data: Any) -> List[TransitImage]:
    if not isinstance(data, list):
        return []

    images: List[TransitImage] = []
    for r in data:
        image = (r.get("entity") or {}).get("image")
        if image:
            images.append(
                TransitImage(
                    id=image.get("imageId") or 0,
                    data=image.get("imageData") or "",
                    mime_type=MIME_TYPES.get(image.get("imageType"), DEFAULT_MIME_TYPE),
                )
            )
        else:
            images.append(
                TransitImage(
                    id=r.get("id") or 0,
                    data=r.get("imageData") or "",
                    mime_type=r.get("mimeType") or DEFAULT_MIME_TYPE,
                )
            )
    return images

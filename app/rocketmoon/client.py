from typing import Any, Dict, Optional
from app.cache import RedisCache
import httpx
import logging
from app.config import settings

logger = logging.getLogger(__name__)

class ApiClient:
    """
    ApiClient fetches JSON from an upstream REST API and, when given a RedisCache, keeps responses for CACHE_TTL_SECONDS to avoid repeated external API calls.
    """
    def __init__(
            self,
            base_url: str,
            cache: Optional[RedisCache] = None,
            ttl: int = settings.CACHE_TTL_SECONDS,
            timeout: float = settings.HTTP_TIMEOUT,
            transport: Optional[httpx.AsyncBaseTransport] = None,
        ):
        self.base_url = base_url.rstrip("/")
        self.cache = cache
        self.ttl = ttl
        self.timeout = timeout
        self.transport = transport

    async def fetch(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not url.startswith(("http://", "https://")):
            url = f"{self.base_url}/{url.lstrip('/')}"
        key = str(httpx.URL(url, params=params) if params else httpx.URL(url))
        try:
            if self.cache:
                cached_value = self.cache.get(key)
                if cached_value:
                    logger.info(f"Returning Cached Value for {key}")
                    return cached_value
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                logger.info(f"Returning External API Call response for {key}")
                response = await client.get(key)
                response.raise_for_status()
                data = response.json()
                if self.cache:
                    self.cache.set(key, data, ex=self.ttl)
                return data
        except Exception as e:
            logger.exception(f"Error while fetching {key}: {str(e)}")
            raise


class LaunchLibraryClient(ApiClient):
    """Launch Library 2 (thespacedevs) launch listings."""

    def __init__(self, base_url: str = settings.LAUNCH_LIBRARY_URL, **kwargs):
        super().__init__(base_url, **kwargs)

    async def get_launches_page(self, year: int, limit: int = settings.LAUNCH_PAGE_LIMIT) -> Dict[str, Any]:
        return await self.fetch("launch/", {
            "net__gte": f"{year}-01-01",
            "net__lt": f"{year + 1}-01-01",
            "include_suborbital": "false",
            "limit": limit,
        })

    async def get_page(self, url: str) -> Dict[str, Any]:
        return await self.fetch(url)

    async def get_oldest_launch(self) -> Dict[str, Any]:
        return await self.fetch("launch/", {"ordering": "net", "limit": 1})


class MoonPhaseClient(ApiClient):
    """USNO Astronomical Applications moon phase tables."""

    def __init__(self, base_url: str = settings.USNO_URL, **kwargs):
        super().__init__(base_url, **kwargs)

    async def get_moon_phases(self, year: int) -> Dict[str, Any]:
        return await self.fetch("moon/phases/year", {"year": year})

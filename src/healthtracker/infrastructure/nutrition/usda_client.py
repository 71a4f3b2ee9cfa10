"""
USDA FoodData Central Client

Proxies food searches to FoodData Central so the API key stays on the
server. Searches cover Foundation (generic) and Branded (packaged) foods.
"""

from typing import Any, Optional

import httpx

from healthtracker.config import get_settings
from healthtracker.config.logging_config import get_logger

logger = get_logger(__name__)

SEARCH_DATA_TYPES = "Foundation,Branded"


class UsdaApiError(Exception):
    """FoodData Central request failed or returned an error status."""


class UsdaClient:
    """Async FoodData Central search client."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        page_size: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        settings = get_settings().usda
        self._api_key = api_key or settings.api_key.get_secret_value()
        self._api_url = api_url or settings.api_url
        self._page_size = page_size or settings.page_size
        self._timeout = timeout_seconds or settings.timeout_seconds
        self._transport = transport

    async def search_foods(self, query: str) -> dict[str, Any]:
        """
        Search foods by free text.

        Args:
            query: Search text

        Returns:
            FoodData Central search response, unchanged

        Raises:
            UsdaApiError: On transport errors or non-2xx responses
        """
        params = {
            "api_key": self._api_key,
            "query": query,
            "pageSize": self._page_size,
            "dataType": SEARCH_DATA_TYPES,
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(self._api_url, params=params)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("USDA search failed", error=str(e))
            raise UsdaApiError("Failed to fetch data from USDA API") from e

        logger.debug("USDA search completed", total_hits=data.get("totalHits"))
        return data

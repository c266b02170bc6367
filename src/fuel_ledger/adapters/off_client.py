"""Open Food Facts API client."""

from dataclasses import dataclass
from typing import Protocol
from urllib.parse import quote

import httpx

PRODUCT_FIELDS = (
    "code,product_name,brands,nutriments,serving_quantity,serving_size,"
    "image_small_url,completeness"
)


class OffClient(Protocol):
    """Interface for Open Food Facts interactions."""

    async def search_products(
        self, query: str, page_size: int = 15
    ) -> dict[str, object]:
        """Search packaged products and return raw API data."""

    async def get_product(self, barcode: str) -> dict[str, object]:
        """Fetch a product by barcode and return raw API data."""


@dataclass
class HttpxOffClient(OffClient):
    """HTTPX-backed Open Food Facts client."""

    base_url: str
    user_agent: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str, user_agent: str) -> "HttpxOffClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            user_agent=user_agent,
            http_client=httpx.AsyncClient(),
        )

    async def search_products(
        self, query: str, page_size: int = 15
    ) -> dict[str, object]:
        """Full-text product search."""
        response = await self.http_client.get(
            f"{self.base_url}/cgi/search.pl",
            params={
                "search_terms": query,
                "json": "1",
                "page_size": str(page_size),
                "fields": PRODUCT_FIELDS,
            },
            headers={"User-Agent": self.user_agent},
            timeout=15,
        )
        response.raise_for_status()
        return response.json()

    async def get_product(self, barcode: str) -> dict[str, object]:
        """Fetch one product by barcode."""
        response = await self.http_client.get(
            f"{self.base_url}/api/v2/product/{quote(barcode, safe='')}.json",
            params={"fields": PRODUCT_FIELDS},
            headers={"User-Agent": self.user_agent},
            timeout=15,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

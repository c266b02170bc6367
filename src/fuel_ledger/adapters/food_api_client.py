"""Client for the food search endpoints."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from fuel_ledger.domain.remote import Provider

SEARCH_PATHS = {
    Provider.PRIMARY: "/foods/search",
    Provider.SECONDARY: "/foods/alt-search",
}


class FoodApiClient(Protocol):
    """Interface for remote food lookups."""

    async def search_foods(self, provider: Provider, query: str) -> dict[str, object]:
        """Search one provider by free text and return raw API data."""

    async def lookup_barcode(self, code: str) -> dict[str, object]:
        """Look up a barcode and return raw API data."""


@dataclass
class HttpxFoodApiClient(FoodApiClient):
    """HTTPX-backed food endpoint client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 15

    @classmethod
    def create(cls, base_url: str, timeout_seconds: float = 15) -> "HttpxFoodApiClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def search_foods(self, provider: Provider, query: str) -> dict[str, object]:
        """Search foods through the provider's endpoint."""
        response = await self.http_client.get(
            f"{self.base_url}{SEARCH_PATHS[provider]}",
            params={"q": query},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def lookup_barcode(self, code: str) -> dict[str, object]:
        """Look up a product by barcode."""
        response = await self.http_client.get(
            f"{self.base_url}/foods/barcode",
            params={"code": code},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

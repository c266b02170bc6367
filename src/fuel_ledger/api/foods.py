"""Food search endpoints backed by the upstream nutrition providers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from fuel_ledger.services.food_search import PrimarySearchUnavailableError
from fuel_ledger.services.remote_search import MIN_BARCODE_LENGTH
from fuel_ledger.services.serialization import remote_food_to_dict

if TYPE_CHECKING:
    from fuel_ledger.containers import AppContainer

MIN_UPSTREAM_QUERY_LENGTH = 2

router = APIRouter(prefix="/foods", tags=["foods"])
_logger = logging.getLogger(__name__)


def _container(request: Request) -> AppContainer:
    return request.app.state.container


@router.get("/search", response_model=None)
async def search_foods(request: Request, q: str = "") -> dict[str, object] | JSONResponse:
    """Search the primary provider."""
    query = q.strip()
    if len(query) < MIN_UPSTREAM_QUERY_LENGTH:
        return {"foods": []}
    service = _container(request).food_search_service
    try:
        foods = await service.search_primary(query)
    except PrimarySearchUnavailableError:
        _logger.error("Primary food search is not configured")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": "Food search service not configured", "foods": []},
        )
    except (httpx.HTTPError, ValueError) as exc:
        _logger.warning("Primary food search failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"error": "Primary provider error", "foods": []},
        )
    return {"foods": [remote_food_to_dict(food) for food in foods]}


@router.get("/alt-search", response_model=None)
async def alt_search_foods(
    request: Request, q: str = ""
) -> dict[str, object] | JSONResponse:
    """Search the secondary provider for packaged foods."""
    query = q.strip()
    if len(query) < MIN_UPSTREAM_QUERY_LENGTH:
        return {"foods": []}
    service = _container(request).food_search_service
    try:
        foods = await service.search_secondary(query)
    except (httpx.HTTPError, ValueError) as exc:
        _logger.warning("Secondary food search failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"error": "Secondary provider error", "foods": []},
        )
    return {"foods": [remote_food_to_dict(food) for food in foods]}


@router.get("/barcode", response_model=None)
async def barcode_lookup(
    request: Request, code: str = ""
) -> dict[str, object] | JSONResponse:
    """Look up a packaged food by barcode."""
    barcode = code.strip()
    if len(barcode) < MIN_BARCODE_LENGTH:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"found": False, "error": "Invalid barcode"},
        )
    service = _container(request).food_search_service
    try:
        food = await service.lookup_barcode(barcode)
    except (httpx.HTTPError, ValueError) as exc:
        _logger.warning("Barcode lookup failed for %s: %s", barcode, exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"found": False, "error": "Barcode provider error"},
        )
    if food is None:
        return {"found": False}
    return {"found": True, "food": remote_food_to_dict(food)}

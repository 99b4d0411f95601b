"""Live price search endpoint."""

from __future__ import annotations

import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from pricecompare.models.search_models import (
    ErrorResponse,
    PriceQuoteModel,
    SearchRequest,
    SearchResponse,
)
from pricecompare.services.history.search_history_service import (
    SearchHistoryService,
    get_search_history_service,
)
from pricecompare.services.price_search.service import (
    PriceSearchService,
    get_price_search_service,
)

logger = logging.getLogger("price_search.controller")

PRODUCT_NAME_REQUIRED = "productName required"
RETRY_MESSAGE = "Unable to fetch live prices right now. Please retry."

search_router = APIRouter(tags=["Search"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=ErrorResponse(error=message).model_dump()
    )


@search_router.post(
    "/search",
    response_model=SearchResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing product name"},
        502: {"model": ErrorResponse, "description": "Live prices unavailable"},
    },
)
async def search_prices(
    payload: Optional[SearchRequest] = None,
    price_search: PriceSearchService = Depends(get_price_search_service),
    history: SearchHistoryService = Depends(get_search_history_service),
) -> Union[SearchResponse, JSONResponse]:
    """
    Look up live prices for a product in every supported store.

    Args:
        payload (SearchRequest): Body carrying the product name.

    Returns:
        SearchResponse with one quote per store, 400 when the product name is
        missing, or 502 when no store could be queried at all.
    """
    product_name = payload.productName if payload else None
    if not product_name or not product_name.strip():
        return _error(status.HTTP_400_BAD_REQUEST, PRODUCT_NAME_REQUIRED)

    quotes = await price_search.fetch(product_name)
    if not quotes:
        logger.warning("No live prices could be fetched for '%s'", product_name)
        return _error(status.HTTP_502_BAD_GATEWAY, RETRY_MESSAGE)

    await run_in_threadpool(history.record, product_name, quotes)

    return SearchResponse(
        product=product_name,
        prices=[PriceQuoteModel(**quote.as_dict()) for quote in quotes],
    )

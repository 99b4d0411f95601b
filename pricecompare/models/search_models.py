"""Request and response models for the search controller."""

from typing import List, Optional

from pydantic import BaseModel, Field


class SearchRequest(BaseModel):
    """Body of a live price search."""

    productName: Optional[str] = Field(
        default=None, description="Product name to look up in every store."
    )


class PriceQuoteModel(BaseModel):
    """One store's answer for the searched product."""

    store: str = Field(..., description="Store the quote comes from.")
    title: str = Field(..., description="Product title as shown by the store.")
    price: Optional[float] = Field(..., description="Numeric price, if found.")
    displayPrice: Optional[str] = Field(
        ..., description="Price as rendered by the store, or 'Not available'."
    )
    link: Optional[str] = Field(..., description="Product or listing URL.")
    unavailable: bool = Field(..., description="Whether no price could be read.")
    message: Optional[str] = Field(..., description="Reason when unavailable.")
    approximate: bool = Field(
        ..., description="Whether the product title did not fully match the query."
    )


class SearchResponse(BaseModel):
    """Successful search response."""

    product: str = Field(..., description="Product name as requested.")
    prices: List[PriceQuoteModel] = Field(..., description="One quote per store.")


class ErrorResponse(BaseModel):
    """Error payload for rejected or failed searches."""

    error: str = Field(..., description="Human readable error message.")

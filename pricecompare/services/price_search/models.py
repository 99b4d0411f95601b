"""Domain models for price search results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .utils import UNAVAILABLE_LABEL


@dataclass(slots=True)
class PriceQuote:
    """Outcome of one store lookup, either priced or unavailable."""

    store: str
    title: str
    price: Optional[float] = None
    display_price: Optional[str] = None
    link: Optional[str] = None
    unavailable: bool = False
    message: Optional[str] = None
    approximate: bool = False

    @classmethod
    def unavailable_for(
        cls, store: str, query: str, reason: str = UNAVAILABLE_LABEL
    ) -> "PriceQuote":
        """Build the placeholder quote used whenever a store yields no price."""
        return cls(
            store=store,
            title=query,
            price=None,
            display_price=UNAVAILABLE_LABEL,
            link=None,
            unavailable=True,
            message=reason,
            approximate=False,
        )

    def as_dict(self) -> Dict[str, Any]:
        """Return the JSON wire representation."""
        return {
            "store": self.store,
            "title": self.title,
            "price": self.price,
            "displayPrice": self.display_price,
            "link": self.link,
            "unavailable": self.unavailable,
            "message": self.message,
            "approximate": self.approximate,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PriceQuote":
        return cls(
            store=data["store"],
            title=data["title"],
            price=data.get("price"),
            display_price=data.get("displayPrice"),
            link=data.get("link"),
            unavailable=bool(data.get("unavailable", False)),
            message=data.get("message"),
            approximate=bool(data.get("approximate", False)),
        )


@dataclass(slots=True)
class AggregateResult:
    """Quotes for a query, one per store in store order."""

    query: str
    quotes: List[PriceQuote] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "quotes": [quote.as_dict() for quote in self.quotes],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AggregateResult":
        return cls(
            query=data["query"],
            quotes=[PriceQuote.from_dict(item) for item in data.get("quotes", [])],
        )


@dataclass(slots=True)
class ListingChoice:
    """Search result entry picked as the best candidate for a query."""

    href: str
    title: Optional[str] = None
    display_price: Optional[str] = None
    approximate: bool = False
    alternate_results: bool = False


class SessionLaunchError(RuntimeError):
    """Raised when the browser process cannot be started."""


class StoreExtractionError(RuntimeError):
    """Raised when a store lookup reaches a terminal failure state."""

    def __init__(self, store: str, message: str) -> None:
        super().__init__(message)
        self.store = store
        self.message = message

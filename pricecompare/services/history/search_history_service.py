"""Optional persistence of answered searches."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Callable, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from configs import settings

from pricecompare.repositories.history.crud.product_search_crud import CRUDProductSearch
from pricecompare.repositories.history.database import create_session_factory
from pricecompare.services.price_search.models import PriceQuote

logger = logging.getLogger("search_history")


class SearchHistoryService:
    """Store product searches; a disabled service silently does nothing."""

    def __init__(
        self,
        session_factory: Optional[Callable[[], Session]] = None,
        crud: Optional[CRUDProductSearch] = None,
    ) -> None:
        self.session_factory = session_factory
        self.crud = crud or CRUDProductSearch()

    @property
    def enabled(self) -> bool:
        return self.session_factory is not None

    def record(self, product: str, quotes: Sequence[PriceQuote]) -> None:
        """Persist the search; failures are logged and never raised."""
        if self.session_factory is None:
            return

        db = self.session_factory()
        try:
            self.crud.create(db, product, [quote.as_dict() for quote in quotes])
        except SQLAlchemyError as exc:
            logger.warning("Failed to save product search '%s': %s", product, exc)
            db.rollback()
        finally:
            db.close()


def create_search_history_service(
    enabled: bool, database_url: Optional[str]
) -> SearchHistoryService:
    """Build the history service, disabled unless explicitly configured."""
    if not enabled or not database_url:
        logger.info("Skipping search history persistence.")
        return SearchHistoryService()

    try:
        session_factory = create_session_factory(database_url)
    except SQLAlchemyError as exc:
        logger.warning("Search history database unavailable: %s", exc)
        return SearchHistoryService()
    logger.info("Search history persistence enabled.")
    return SearchHistoryService(session_factory)


@lru_cache(maxsize=None)
def get_search_history_service() -> SearchHistoryService:
    """FastAPI dependency returning the process wide history service."""
    return create_search_history_service(
        settings.SEARCH_HISTORY_ENABLED, settings.DATABASE_URL
    )

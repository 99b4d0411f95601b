"""CRUD helpers for product searches."""

from typing import Any, Dict, List

from sqlalchemy.orm import Session

from pricecompare.repositories.history.models.product_search_model import ProductSearch


class CRUDProductSearch:
    """Database access for product searches."""

    def create(
        self, db: Session, name: str, prices: List[Dict[str, Any]]
    ) -> ProductSearch:
        search = ProductSearch(name=name, prices=prices)
        db.add(search)
        db.commit()
        db.refresh(search)
        return search

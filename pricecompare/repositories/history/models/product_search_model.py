"""SQLAlchemy model for product searches answered with live prices."""

from sqlalchemy import JSON, Column, Integer, String, TIMESTAMP
from sqlalchemy.sql import func

from pricecompare.repositories.history.database import Base


class ProductSearch(Base):  # type: ignore[misc]
    """A product name and the quotes returned for it."""

    __tablename__ = "product_searches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    prices = Column(JSON, nullable=False)
    created_at = Column(TIMESTAMP(timezone=False), server_default=func.now())

    __mapper_args__ = {"eager_defaults": True}

"""Croma store profile."""

from __future__ import annotations

from .base import StoreProfile

CROMA = StoreProfile(
    name="Croma",
    origin="https://www.croma.com",
    search_url="https://www.croma.com/searchB?q={query}%3Arelevance&text={query}",
    results_wait_selector="li.product-item a[href*='/p/']",
    listing_link_selectors=("li.product-item a[href*='/p/']",),
    listing_container_selectors=("li.product-item",),
    listing_title_selectors=(
        "h3",
        ".product-title",
        "[data-testid='product-title']",
    ),
    listing_price_selectors=(
        ".new-price",
        ".cp-price",
        "[data-testid='prod-price']",
        ".product-price",
    ),
    product_wait_selectors=(
        "span.price",
        ".product-info-price .special-price .price",
        ".new-price",
        ".cp-price",
    ),
    product_title_selectors=("h1.page-title span", "h1.product-name"),
    product_price_selectors=(
        "span.price",
        ".product-info-price .special-price .price",
        ".new-price",
        ".cp-price",
    ),
    prefer_canonical_link=True,
    search_timeout_ms=15000,
    results_wait_timeout_ms=15000,
    product_timeout_ms=15000,
    product_wait_timeout_ms=12000,
    settle_ms=800,
)

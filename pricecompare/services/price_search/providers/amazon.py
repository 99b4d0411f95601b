"""Amazon India store profile."""

from __future__ import annotations

from .base import StoreProfile

AMAZON = StoreProfile(
    name="Amazon",
    origin="https://www.amazon.in",
    search_url="https://www.amazon.in/s?k={query}",
    results_wait_selector="div.s-main-slot div[data-component-type='s-search-result']",
    listing_link_selectors=(
        "div.s-main-slot div[data-component-type='s-search-result'] h2 a",
        "div.s-main-slot div[data-component-type='s-search-result'] a:has(> h2)",
        "div.s-main-slot a.a-link-normal.a-text-normal",
    ),
    listing_container_selectors=("div[data-component-type='s-search-result']",),
    listing_title_selectors=("h2 a span", "h2 span"),
    # Search cards never carry a trustworthy price, always open the product page.
    listing_price_selectors=(),
    product_wait_selectors=(
        "#priceblock_ourprice",
        "#priceblock_dealprice",
        ".a-price .a-offscreen",
    ),
    product_title_selectors=("#productTitle",),
    product_price_selectors=(
        "#priceblock_ourprice",
        "#priceblock_dealprice",
        ".a-price .a-offscreen",
    ),
    prefer_canonical_link=True,
    search_timeout_ms=15000,
    results_wait_timeout_ms=15000,
    product_timeout_ms=15000,
    product_wait_timeout_ms=8000,
    settle_ms=1000,
)

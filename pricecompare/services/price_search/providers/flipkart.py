"""Flipkart store profile."""

from __future__ import annotations

import re

from .base import StoreProfile

RUPEE_PRICE_PATTERN = re.compile(r"₹\s*\d")

# Class names on Flipkart are obfuscated and rotate between deploys, so every
# field lists every variant seen so far.
LISTING_LINK_SELECTORS = (
    "div[data-id] a._1fQZEK",
    "div[data-id] a.s1Q9rs",
    "div._1AtVbE a._1fQZEK",
    "div._1AtVbE a.s1Q9rs",
    "div._13oc-S a",
    "div[data-id] a",
    "div._1AtVbE a",
)
CONTAINER_SELECTORS = ("div[data-id]", "div._1AtVbE", "div._13oc-S")
LISTING_TITLE_SELECTORS = ("div._4rR01T", "a.s1Q9rs", "div.KzDlHZ", "div._2WkVRV")
PRODUCT_TITLE_SELECTORS = ("span.B_NuCI", "span._35KyD6", "span.VU-ZEz")
PRIMARY_PRICE_SELECTORS = (
    "div._30jeq3._16Jk6d",
    "div._25b18c",
    "div.Nx9bqj",
    "span.Nx9bqj",
)
PRICE_SELECTORS = (
    "div._30jeq3._1_WHN1",
    "div._30jeq3._16Jk6d",
    "div._30jeq3",
    "div._25b18c",
    "div.Nx9bqj",
    "div.hl05eU",
    "div.cN1yYO",
    "span.Nx9bqj",
    "div._2Tpdn3",
)

FLIPKART = StoreProfile(
    name="Flipkart",
    origin="https://www.flipkart.com",
    search_url="https://www.flipkart.com/search?q={query}",
    results_wait_selector="div[data-id] a, div._1AtVbE a, div._13oc-S a",
    listing_link_selectors=LISTING_LINK_SELECTORS,
    listing_container_selectors=CONTAINER_SELECTORS,
    listing_title_selectors=LISTING_TITLE_SELECTORS,
    listing_price_selectors=PRICE_SELECTORS,
    price_pattern=RUPEE_PRICE_PATTERN,
    loose_price_scan=True,
    alternate_results_marker="Showing results for",
    product_wait_selectors=PRICE_SELECTORS,
    product_title_selectors=PRODUCT_TITLE_SELECTORS,
    product_price_selectors=PRIMARY_PRICE_SELECTORS,
    product_fallback_root="div.cPHDOP",
    prefer_canonical_link=False,
    search_timeout_ms=45000,
    results_wait_timeout_ms=15000,
    product_timeout_ms=15000,
    product_wait_timeout_ms=8000,
    settle_ms=800,
)

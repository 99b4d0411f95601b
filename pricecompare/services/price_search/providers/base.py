"""Generic navigate, select and extract flow shared by every store."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Pattern, Sequence, Tuple
from urllib.parse import quote, urljoin

from bs4 import BeautifulSoup, Tag
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from ..matching import title_matches_query
from ..models import ListingChoice, PriceQuote, StoreExtractionError
from ..utils import normalize_whitespace, parse_price

if TYPE_CHECKING:
    from ..browser import BrowserSession

logger = logging.getLogger("price_search.provider")


@dataclass(frozen=True)
class StoreProfile:
    """Selectors, URLs and timeouts describing how to scrape one store.

    Selector tuples are ordered by priority: the first selector that yields
    something wins, so reordering them changes which data gets extracted.
    Timeouts are in milliseconds.
    """

    name: str
    origin: str
    search_url: str
    results_wait_selector: str
    listing_link_selectors: Tuple[str, ...]
    listing_container_selectors: Tuple[str, ...] = ()
    listing_title_selectors: Tuple[str, ...] = ()
    listing_price_selectors: Tuple[str, ...] = ()
    price_pattern: Optional[Pattern[str]] = None
    loose_price_scan: bool = False
    alternate_results_marker: Optional[str] = None
    product_wait_selectors: Tuple[str, ...] = ()
    product_title_selectors: Tuple[str, ...] = ()
    product_price_selectors: Tuple[str, ...] = ()
    product_fallback_root: Optional[str] = None
    prefer_canonical_link: bool = True
    search_timeout_ms: int = 15000
    results_wait_timeout_ms: int = 15000
    product_timeout_ms: int = 15000
    product_wait_timeout_ms: int = 8000
    evaluate_timeout_ms: int = 10000
    settle_ms: int = 800

    def build_search_url(self, query: str) -> str:
        return self.search_url.format(query=quote(query, safe=""))

    def resolve_link(self, href: str) -> str:
        """Resolve listing hrefs relative to the store origin."""
        return urljoin(self.origin, href)


@dataclass(slots=True)
class ProductDetails:
    """Fields read from a product page."""

    title: Optional[str]
    display_price: Optional[str]
    link: Optional[str]


def element_text(element: Optional[Tag]) -> str:
    if element is None:
        return ""
    return normalize_whitespace(element.get_text(" ", strip=True))


def first_text(
    root: Tag,
    selectors: Sequence[str],
    pattern: Optional[Pattern[str]] = None,
) -> Optional[str]:
    """Return the text of the first selector whose element has usable text."""
    for selector in selectors:
        element = root.select_one(selector)
        text = element_text(element)
        if not text:
            continue
        if pattern is not None and not pattern.search(text):
            continue
        return text
    return None


def scan_for_price(root: Tag, pattern: Pattern[str]) -> Optional[str]:
    """Find the innermost ``div``/``span`` whose text looks like a price."""
    for element in root.find_all(["div", "span"]):
        text = element_text(element)
        if not pattern.search(text):
            continue
        nested = element.find_all(["div", "span"])
        if any(pattern.search(element_text(child)) for child in nested):
            continue
        return text
    return None


def extract_price_text(root: Optional[Tag], profile: StoreProfile) -> Optional[str]:
    if root is None:
        return None
    text = first_text(root, profile.listing_price_selectors, profile.price_pattern)
    if text is None and profile.loose_price_scan and profile.price_pattern is not None:
        text = scan_for_price(root, profile.price_pattern)
    return text


def _resolve_container(anchor: Tag, profile: StoreProfile) -> Tag:
    if profile.listing_container_selectors:
        container = anchor.css.closest(", ".join(profile.listing_container_selectors))
        if container is not None:
            return container
    return anchor.parent or anchor


def _candidate_title(anchor: Tag, container: Tag, profile: StoreProfile) -> Optional[str]:
    title = first_text(container, profile.listing_title_selectors)
    if title:
        return title
    title = element_text(anchor)
    if title:
        return title
    image = container.find("img")
    if image is not None and image.get("alt"):
        return normalize_whitespace(str(image["alt"]))
    return None


def collect_listing_anchors(soup: BeautifulSoup, profile: StoreProfile) -> List[Tag]:
    """Apply the link selectors in order; the first non-empty match set wins."""
    for selector in profile.listing_link_selectors:
        anchors = soup.select(selector)
        if anchors:
            return anchors
    return []


def select_listing(
    soup: BeautifulSoup, profile: StoreProfile, query: str
) -> Optional[ListingChoice]:
    """Pick the first listing whose title matches the query.

    Falls back to the first listing, flagged as approximate, when nothing
    matches. Returns None when the page has no usable listing at all.
    """
    candidates: List[Tuple[Tag, Tag, Optional[str]]] = []
    seen_containers: set[int] = set()
    for anchor in collect_listing_anchors(soup, profile):
        if not anchor.get("href"):
            continue
        container = _resolve_container(anchor, profile)
        if id(container) in seen_containers:
            continue
        seen_containers.add(id(container))
        candidates.append((anchor, container, _candidate_title(anchor, container, profile)))

    if not candidates:
        return None

    approximate = False
    chosen = next(
        (item for item in candidates if title_matches_query(item[2], query)), None
    )
    if chosen is None:
        chosen = candidates[0]
        approximate = True

    anchor, container, title = chosen
    display_price = None
    if profile.listing_price_selectors:
        display_price = extract_price_text(container, profile)
        if display_price is None and profile.loose_price_scan:
            display_price = extract_price_text(soup.body or soup, profile)

    marker = profile.alternate_results_marker
    return ListingChoice(
        href=str(anchor["href"]),
        title=title,
        display_price=display_price,
        approximate=approximate,
        alternate_results=bool(marker and marker in element_text(container)),
    )


def extract_product(
    soup: BeautifulSoup, profile: StoreProfile, page_url: Optional[str]
) -> ProductDetails:
    """Read title, price text and link from a rendered product page."""
    title = first_text(soup, profile.product_title_selectors)
    display_price = first_text(soup, profile.product_price_selectors)

    if display_price is None and profile.product_fallback_root:
        root: Optional[Tag] = None
        for selector in profile.product_title_selectors:
            title_element = soup.select_one(selector)
            if title_element is not None:
                root = title_element.css.closest(profile.product_fallback_root)
                break
        root = root or soup.select_one(profile.product_fallback_root) or soup.body or soup
        display_price = extract_price_text(root, profile)

    link = page_url
    if profile.prefer_canonical_link:
        canonical = soup.select_one("link[rel='canonical']")
        if canonical is not None and canonical.get("href"):
            link = urljoin(page_url or profile.origin, str(canonical["href"]))

    return ProductDetails(title=title, display_price=display_price, link=link)


def _clean_display_price(value: Optional[str]) -> Optional[str]:
    return value.strip() if value else None


class StoreExtractor:
    """Run the search, listing and product page flow for one store."""

    def __init__(self, profile: StoreProfile) -> None:
        self.profile = profile

    @property
    def name(self) -> str:
        return self.profile.name

    async def fetch(self, session: "BrowserSession", query: str) -> PriceQuote:
        """Public entry point; every failure becomes an unavailable quote."""
        try:
            async with session.open_page() as page:
                return await self._fetch_impl(page, query)
        except StoreExtractionError as exc:
            logger.info(
                "%s lookup for '%s' ended without a price: %s",
                exc.store,
                query,
                exc.message,
            )
            return PriceQuote.unavailable_for(self.name, query)
        except Exception:
            logger.exception("%s scrape failed for '%s'", self.name, query)
            return PriceQuote.unavailable_for(self.name, query)

    async def _fetch_impl(self, page: Page, query: str) -> PriceQuote:
        profile = self.profile

        await page.goto(
            profile.build_search_url(query),
            wait_until="domcontentloaded",
            timeout=profile.search_timeout_ms,
        )
        await self._wait_best_effort(
            page, profile.results_wait_selector, profile.results_wait_timeout_ms
        )

        listing = select_listing(await self._snapshot(page), profile, query)
        if listing is None:
            raise StoreExtractionError(self.name, "search returned no listings")

        listing_link = profile.resolve_link(listing.href)
        logger.info(
            "%s listing pick: query=%r title=%r price=%r link=%s approximate=%s",
            self.name,
            query,
            listing.title,
            listing.display_price,
            listing_link,
            listing.approximate,
        )
        if listing.alternate_results:
            logger.info("%s listing indicates alternate results for '%s'", self.name, query)

        listing_price = parse_price(listing.display_price)
        if listing_price is not None and listing_price > 0:
            return PriceQuote(
                store=self.name,
                title=listing.title or query,
                price=listing_price,
                display_price=_clean_display_price(listing.display_price),
                link=listing_link,
                approximate=listing.approximate
                or not title_matches_query(listing.title, query),
            )

        try:
            await page.goto(
                listing_link,
                wait_until="domcontentloaded",
                timeout=profile.product_timeout_ms,
            )
        except PlaywrightError as exc:
            raise StoreExtractionError(
                self.name, f"product navigation failed: {exc}"
            ) from exc

        if profile.product_wait_selectors:
            await self._wait_best_effort(
                page,
                ", ".join(profile.product_wait_selectors),
                profile.product_wait_timeout_ms,
            )
        if profile.settle_ms:
            await page.wait_for_timeout(profile.settle_ms)

        product = extract_product(await self._snapshot(page), profile, page.url)
        price = parse_price(product.display_price)
        if price is None or price <= 0:
            raise StoreExtractionError(
                self.name, f"product page missing price ({product.display_price!r})"
            )

        quote = PriceQuote(
            store=self.name,
            title=product.title or listing.title or query,
            price=price,
            display_price=_clean_display_price(product.display_price),
            link=product.link or listing_link,
            approximate=listing.approximate
            or not title_matches_query(product.title or listing.title, query),
        )
        logger.info(
            "%s product scrape: query=%r title=%r price=%r link=%s",
            self.name,
            query,
            quote.title,
            quote.display_price,
            quote.link,
        )
        return quote

    async def _wait_best_effort(self, page: Page, selector: str, timeout_ms: int) -> None:
        try:
            await page.wait_for_selector(selector, timeout=timeout_ms)
        except PlaywrightError as exc:
            logger.debug("%s wait for %r gave up: %s", self.name, selector, exc)

    async def _snapshot(self, page: Page) -> BeautifulSoup:
        html = await asyncio.wait_for(
            page.content(), timeout=self.profile.evaluate_timeout_ms / 1000
        )
        return BeautifulSoup(html, "html.parser")

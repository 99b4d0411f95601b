"""Test the store extraction flow against canned store markup."""

import pytest
from bs4 import BeautifulSoup

from pricecompare.services.price_search.providers.amazon import AMAZON
from pricecompare.services.price_search.providers.base import (
    StoreExtractor,
    extract_product,
    scan_for_price,
    select_listing,
)
from pricecompare.services.price_search.providers.croma import CROMA
from pricecompare.services.price_search.providers.flipkart import (
    FLIPKART,
    RUPEE_PRICE_PATTERN,
)
from tests import html_fixtures as html
from tests.fakes import FakePage, FakeSession


def _soup(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup, "html.parser")


async def _run(extractor: StoreExtractor, session: FakeSession, query: str = "iPhone 15"):
    return await extractor.fetch(session, query)


class TestSelectListing:
    """Listing selection on search result pages."""

    def test_picks_first_matching_amazon_listing(self) -> None:
        listing = select_listing(_soup(html.AMAZON_SEARCH), AMAZON, "iPhone 15")

        assert listing is not None
        assert listing.href == "/Apple-iPhone-15-128-GB/dp/B0CHX1W1XY"
        assert listing.title == "Apple iPhone 15 (128 GB) - Black"
        assert listing.approximate is False
        assert listing.display_price is None

    def test_falls_back_to_first_listing_as_approximate(self) -> None:
        listing = select_listing(_soup(html.CROMA_SEARCH_OTHER_PRODUCT), CROMA, "iPhone 15")

        assert listing is not None
        assert listing.href == "/samsung-galaxy-s23/p/268826"
        assert listing.approximate is True
        assert listing.display_price == "₹54,999.00"

    def test_returns_none_without_candidates(self) -> None:
        for profile in (AMAZON, FLIPKART, CROMA):
            assert select_listing(_soup(html.NO_RESULTS), profile, "iPhone 15") is None

    def test_one_candidate_per_result_card(self) -> None:
        markup = """
        <ul>
          <li class="product-item">
            <a href="/case-for-iphone/p/1"><img alt="Case"></a>
            <h3><a href="/case-for-iphone/p/1">Case for Apple iPhone 13</a></h3>
          </li>
          <li class="product-item">
            <a href="/apple-iphone-15/p/2"><img alt="iPhone"></a>
            <h3><a href="/apple-iphone-15/p/2">Apple iPhone 15</a></h3>
          </li>
        </ul>
        """
        listing = select_listing(_soup(markup), CROMA, "iPhone 15")

        assert listing is not None
        assert listing.href == "/apple-iphone-15/p/2"
        assert listing.approximate is False

    def test_first_non_empty_link_selector_wins(self) -> None:
        # The generic anchor selector would also match the sponsored link, but
        # the more specific selector already found a candidate.
        markup = """
        <div data-id="A"><a class="s1Q9rs" href="/apple-iphone-13/p/a">Apple iPhone 13</a></div>
        <div data-id="B"><a class="sponsored" href="/apple-iphone-15/p/b">Apple iPhone 15</a></div>
        """
        listing = select_listing(_soup(markup), FLIPKART, "iPhone 15")

        assert listing is not None
        assert listing.href == "/apple-iphone-13/p/a"
        assert listing.approximate is True

    def test_skips_anchors_without_href(self) -> None:
        markup = """
        <div class="s-main-slot">
          <div data-component-type="s-search-result"><h2><a><span>Apple iPhone 15</span></a></h2></div>
          <div data-component-type="s-search-result"><h2><a href="/dp/X"><span>Apple iPhone 15 Plus</span></a></h2></div>
        </div>
        """
        listing = select_listing(_soup(markup), AMAZON, "iPhone 15")

        assert listing is not None
        assert listing.href == "/dp/X"

    def test_flipkart_listing_reads_rupee_price_and_alternate_results(self) -> None:
        markup = html.FLIPKART_SEARCH.replace(
            "Apple iPhone 15 (Black, 128 GB)</div>",
            "Apple iPhone 15 (Black, 128 GB)</div><span>Showing results for iphone 15</span>",
        )
        listing = select_listing(_soup(markup), FLIPKART, "iPhone 15")

        assert listing is not None
        assert listing.display_price == "₹65,999"
        assert listing.alternate_results is True


class TestExtractProduct:
    """Field extraction on product pages."""

    def test_amazon_uses_canonical_link(self) -> None:
        details = extract_product(_soup(html.AMAZON_PRODUCT), AMAZON, html.AMAZON_PRODUCT_URL)

        assert details.title == "Apple iPhone 15 (128 GB) - Black"
        assert details.display_price == "₹69,900.00"
        assert details.link == html.AMAZON_CANONICAL_URL

    def test_falls_back_to_current_url_without_canonical(self) -> None:
        details = extract_product(
            _soup(html.AMAZON_PRODUCT_NO_PRICE), AMAZON, html.AMAZON_PRODUCT_URL
        )

        assert details.display_price is None
        assert details.link == html.AMAZON_PRODUCT_URL

    def test_flipkart_scans_for_unlabelled_price(self) -> None:
        details = extract_product(
            _soup(html.FLIPKART_PRODUCT_UNLABELLED_PRICE), FLIPKART, html.FLIPKART_PRODUCT_URL
        )

        assert details.display_price == "₹61,999"
        assert details.link == html.FLIPKART_PRODUCT_URL

    def test_scan_for_price_prefers_innermost_element(self) -> None:
        soup = _soup("<div><div>Deal <span>₹1,099</span></div><span>₹2,000</span></div>")

        assert scan_for_price(soup, RUPEE_PRICE_PATTERN) == "₹1,099"


class TestStoreExtractor:
    """End to end extractor runs on fake pages."""

    @pytest.mark.asyncio
    async def test_amazon_navigates_to_product_page(self) -> None:
        session = FakeSession(
            lambda: FakePage(
                {
                    html.AMAZON_SEARCH_URL: html.AMAZON_SEARCH,
                    html.AMAZON_PRODUCT_URL: html.AMAZON_PRODUCT,
                }
            )
        )

        quote = await _run(StoreExtractor(AMAZON), session)

        assert quote.store == "Amazon"
        assert quote.unavailable is False
        assert quote.price == 69900.0
        assert quote.display_price == "₹69,900.00"
        assert quote.title == "Apple iPhone 15 (128 GB) - Black"
        assert quote.link == html.AMAZON_CANONICAL_URL
        assert quote.approximate is False
        page = session.pages[0]
        assert page.visited == [html.AMAZON_SEARCH_URL, html.AMAZON_PRODUCT_URL]
        assert page.closed is True

    @pytest.mark.asyncio
    async def test_flipkart_uses_inline_listing_price(self) -> None:
        session = FakeSession(lambda: FakePage({html.FLIPKART_SEARCH_URL: html.FLIPKART_SEARCH}))

        quote = await _run(StoreExtractor(FLIPKART), session)

        assert quote.price == 65999.0
        assert quote.display_price == "₹65,999"
        assert quote.title == "Apple iPhone 15 (Black, 128 GB)"
        assert quote.link == html.FLIPKART_PRODUCT_URL
        assert quote.approximate is False
        assert session.pages[0].visited == [html.FLIPKART_SEARCH_URL]

    @pytest.mark.asyncio
    async def test_flipkart_without_listing_price_reads_product_page(self) -> None:
        session = FakeSession(
            lambda: FakePage(
                {
                    html.FLIPKART_SEARCH_URL: html.FLIPKART_SEARCH_NO_PRICE,
                    html.FLIPKART_PRODUCT_URL: html.FLIPKART_PRODUCT,
                }
            )
        )

        quote = await _run(StoreExtractor(FLIPKART), session)

        assert quote.price == 64999.0
        assert quote.link == html.FLIPKART_PRODUCT_URL
        assert session.pages[0].visited[-1] == html.FLIPKART_PRODUCT_URL

    @pytest.mark.asyncio
    async def test_croma_inline_price(self) -> None:
        session = FakeSession(lambda: FakePage({html.CROMA_SEARCH_URL: html.CROMA_SEARCH}))

        quote = await _run(StoreExtractor(CROMA), session)

        assert quote.price == 69900.0
        assert quote.link == "https://www.croma.com/apple-iphone-15-128gb-black-/p/300652"
        assert quote.approximate is False

    @pytest.mark.asyncio
    async def test_fallback_listing_is_marked_approximate(self) -> None:
        session = FakeSession(
            lambda: FakePage({html.CROMA_SEARCH_URL: html.CROMA_SEARCH_OTHER_PRODUCT})
        )

        quote = await _run(StoreExtractor(CROMA), session)

        assert quote.unavailable is False
        assert quote.price == 54999.0
        assert quote.approximate is True

    @pytest.mark.asyncio
    async def test_approximate_listing_is_never_cleared_by_product_title(self) -> None:
        search = html.AMAZON_SEARCH.replace(
            "Apple iPhone 15 (128 GB) - Black", "Apple Smartphone Black"
        ).replace("Apple iPhone 14 (128 GB) - Blue", "Apple Smartphone Blue")
        session = FakeSession(
            lambda: FakePage(
                {
                    html.AMAZON_SEARCH_URL: search,
                    "https://www.amazon.in/Apple-iPhone-14-128-GB/dp/B0BDK62PDX": html.AMAZON_PRODUCT,
                }
            )
        )

        quote = await _run(StoreExtractor(AMAZON), session)

        assert quote.title == "Apple iPhone 15 (128 GB) - Black"
        assert quote.approximate is True

    @pytest.mark.asyncio
    async def test_no_listings_yields_unavailable_quote(self) -> None:
        session = FakeSession(lambda: FakePage({}))

        quote = await _run(StoreExtractor(FLIPKART), session, "zzzznotarealproduct")

        assert quote.unavailable is True
        assert quote.price is None
        assert quote.display_price == "Not available"
        assert quote.message == "Not available"
        assert quote.title == "zzzznotarealproduct"
        assert session.pages[0].closed is True

    @pytest.mark.asyncio
    async def test_missing_product_price_yields_unavailable_quote(self) -> None:
        session = FakeSession(
            lambda: FakePage(
                {
                    html.AMAZON_SEARCH_URL: html.AMAZON_SEARCH,
                    html.AMAZON_PRODUCT_URL: html.AMAZON_PRODUCT_NO_PRICE,
                }
            )
        )

        quote = await _run(StoreExtractor(AMAZON), session)

        assert quote.unavailable is True
        assert quote.store == "Amazon"

    @pytest.mark.asyncio
    async def test_product_navigation_failure_yields_unavailable_quote(self) -> None:
        session = FakeSession(
            lambda: FakePage(
                {html.AMAZON_SEARCH_URL: html.AMAZON_SEARCH},
                fail_urls=[html.AMAZON_PRODUCT_URL],
            )
        )

        quote = await _run(StoreExtractor(AMAZON), session)

        assert quote.unavailable is True
        assert session.pages[0].closed is True

    @pytest.mark.asyncio
    async def test_page_errors_are_contained_and_page_closed(self) -> None:
        session = FakeSession(
            lambda: FakePage({}, content_error=RuntimeError("Target crashed"))
        )

        quote = await _run(StoreExtractor(CROMA), session)

        assert quote.unavailable is True
        assert quote.store == "Croma"
        assert session.pages[0].closed is True

    @pytest.mark.asyncio
    async def test_search_navigation_failure_yields_unavailable_quote(self) -> None:
        session = FakeSession(
            lambda: FakePage({}, fail_urls=[html.CROMA_SEARCH_URL])
        )

        quote = await _run(StoreExtractor(CROMA), session)

        assert quote.unavailable is True

    @pytest.mark.asyncio
    async def test_selector_wait_timeouts_are_best_effort(self) -> None:
        session = FakeSession(lambda: FakePage({html.CROMA_SEARCH_URL: html.CROMA_SEARCH}))

        quote = await _run(StoreExtractor(CROMA), session)

        assert session.pages[0].waited_for == [CROMA.results_wait_selector]
        assert quote.unavailable is False


def test_search_urls_encode_the_query() -> None:
    assert AMAZON.build_search_url("iPhone 15") == html.AMAZON_SEARCH_URL
    assert FLIPKART.build_search_url("iPhone 15") == html.FLIPKART_SEARCH_URL
    assert CROMA.build_search_url("iPhone 15") == html.CROMA_SEARCH_URL
    assert AMAZON.build_search_url("a&b/c") == "https://www.amazon.in/s?k=a%26b%2Fc"


def test_resolve_link_keeps_absolute_urls() -> None:
    assert CROMA.resolve_link("/p/1") == "https://www.croma.com/p/1"
    assert CROMA.resolve_link("https://cdn.example.com/p/1") == "https://cdn.example.com/p/1"

"""Tests for the shopping search scraper."""

import pytest

from fakes import FakeElement, FakePage, FakeSession
from vitrine.scrapers.search import SearchExtractor, SearchScraper, normalize_link
from vitrine.scrapers.session import NavigationError

ORIGIN = "https://www.google.com"


def card(name=None, alt_name=None, price=None, src=None, data_src=None, href=None):
    children = {}
    if name is not None:
        children["h3.tAxDx"] = [FakeElement(text=name)]
    if alt_name is not None:
        children[".Xjkr3b"] = [FakeElement(text=alt_name)]
    if price is not None:
        children[".a8Pemb"] = [FakeElement(text=price)]
    attrs = {k: v for k, v in (("src", src), ("data-src", data_src)) if v is not None}
    if attrs:
        children["img"] = [FakeElement(attrs=attrs)]
    if href is not None:
        children["a"] = [FakeElement(attrs={"href": href})]
    return FakeElement(children=children)


def results_page(*cards):
    return FakePage(url=f"{ORIGIN}/search", children={".sh-dgr__content": list(cards)})


class TestNormalizeLink:
    def test_absolute_kept(self):
        assert normalize_link("https://loja.com/p/1", ORIGIN) == "https://loja.com/p/1"

    def test_relative_prefixed_with_origin(self):
        assert normalize_link("/shopping/product/123", ORIGIN) == "https://www.google.com/shopping/product/123"

    def test_redirect_unwrapped(self):
        href = "/url?url=https://loja.com/p/1%3Fref%3Dx&sa=U"
        assert normalize_link(href, ORIGIN) == "https://loja.com/p/1?ref=x"
        assert normalize_link("/url?q=https://loja.com/p/2", ORIGIN) == "https://loja.com/p/2"

    def test_protocol_relative(self):
        assert normalize_link("//loja.com/p", ORIGIN) == "https://loja.com/p"

    def test_missing(self):
        assert normalize_link(None, ORIGIN) is None


class TestSearchExtractor:
    def setup_method(self):
        self.extractor = SearchExtractor()

    @pytest.mark.asyncio
    async def test_cards_without_name_are_dropped(self):
        page = results_page(
            card(name="Rolex Datejust", price="R$ 52.500,00", src="https://i/1.jpg", href="/shopping/product/1"),
            card(price="R$ 1,00", href="/shopping/product/x"),
            card(alt_name="iPhone 15 Pro", price="R$ 8.499,00", data_src="https://i/2.jpg", href="https://loja.com/iphone"),
            card(name="   ", price="R$ 2,00"),
            card(name="Notebook Dell", href="/url?q=https://loja.com/dell"),
        )
        items = await self.extractor.extract(page)

        assert [item.name for item in items] == ["Rolex Datejust", "iPhone 15 Pro", "Notebook Dell"]
        assert items[0].to_dict() == {
            "name": "Rolex Datejust",
            "price": "R$ 52.500,00",
            "imageUrl": "https://i/1.jpg",
            "link": "https://www.google.com/shopping/product/1",
        }
        assert items[1].imageUrl == "https://i/2.jpg"
        assert items[1].link == "https://loja.com/iphone"
        assert items[2].price is None
        assert items[2].imageUrl is None
        assert items[2].link == "https://loja.com/dell"

    @pytest.mark.asyncio
    async def test_primary_name_selector_first(self):
        page = results_page(card(name="Primário", alt_name="Secundário"))
        items = await self.extractor.extract(page)
        assert items[0].name == "Primário"

    @pytest.mark.asyncio
    async def test_image_urls_made_absolute(self):
        page = results_page(
            card(name="Relógio", src="//encrypted-tbn0.gstatic.com/img.jpg"),
            card(name="Bolsa", data_src="/images/bolsa.png"),
            card(name="Tênis", src="data:image/png;base64,iVBORw0KGgo="),
        )
        items = await self.extractor.extract(page)
        assert items[0].imageUrl == "https://encrypted-tbn0.gstatic.com/img.jpg"
        assert items[1].imageUrl == "https://www.google.com/images/bolsa.png"
        assert items[2].imageUrl == "data:image/png;base64,iVBORw0KGgo="

    @pytest.mark.asyncio
    async def test_no_results(self):
        assert await self.extractor.extract(results_page()) == []

    @pytest.mark.asyncio
    async def test_max_results(self, settings):
        settings.search_max_results = 2
        extractor = SearchExtractor(settings)
        page = results_page(*(card(name=f"Item {i}") for i in range(5)))
        assert len(await extractor.extract(page)) == 2


class TestSearchScraper:
    @pytest.mark.asyncio
    async def test_search_envelope(self, settings):
        session = FakeSession(results_page(card(name="Tênis Nike", price="R$ 599,90")))
        scraper = SearchScraper(settings, session_factory=lambda s: session)

        result = await scraper.search("tenis nike")

        assert result == {
            "success": True,
            "results": [
                {"name": "Tênis Nike", "price": "R$ 599,90", "imageUrl": None, "link": None},
            ],
        }
        url, timeout = session.navigated[0]
        assert "q=tenis+nike" in url
        assert timeout == settings.search_timeout
        assert session.steps == ["navigate", "settle"]
        assert session.closed == 1

    @pytest.mark.asyncio
    async def test_search_failure(self, settings):
        session = FakeSession(navigation_error=NavigationError("https://www.google.com", "net::ERR_NAME_NOT_RESOLVED"))
        scraper = SearchScraper(settings, session_factory=lambda s: session)

        result = await scraper.search("rolex")

        assert result == {
            "success": False,
            "error": "Falha na pesquisa",
            "details": "net::ERR_NAME_NOT_RESOLVED",
        }
        assert session.closed == 1

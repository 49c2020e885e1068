"""Pytest fixtures for Vitrine tests."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from vitrine.api.scraping import get_product_scraper, get_queue, get_search_scraper
from vitrine.config import Settings
from vitrine.jobs.queue import ScrapeQueue
from vitrine.main import app


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def queue() -> ScrapeQueue:
    return ScrapeQueue(concurrency=2)


class StubProductScraper:
    def __init__(self):
        self.urls = []

    async def scrape(self, url):
        self.urls.append(url)
        return {
            "success": True,
            "url": url,
            "title": "Widget",
            "price": "USD 19,90",
            "price_value": "19.90",
            "price_currency": "USD",
            "image": None,
        }


class StubSearchScraper:
    def __init__(self):
        self.queries = []

    async def search(self, query):
        self.queries.append(query)
        return {
            "success": True,
            "results": [
                {"name": "Tênis", "price": "R$ 599,90", "imageUrl": None, "link": "https://a/1"},
            ],
        }


@pytest.fixture
def product_scraper() -> StubProductScraper:
    return StubProductScraper()


@pytest.fixture
def search_scraper() -> StubSearchScraper:
    return StubSearchScraper()


@pytest_asyncio.fixture
async def client(queue, product_scraper, search_scraper):
    app.dependency_overrides[get_queue] = lambda: queue
    app.dependency_overrides[get_product_scraper] = lambda: product_scraper
    app.dependency_overrides[get_search_scraper] = lambda: search_scraper
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()

"""Vitrine scraping engine.

Exposes the product-page and search-results scrapers plus the pieces they
are built from.
"""

from vitrine.scrapers.product import ProductExtractor, ProductRecord, ProductScraper
from vitrine.scrapers.search import SearchExtractor, SearchResultItem, SearchScraper
from vitrine.scrapers.session import BrowserSession, NavigationError

__all__ = [
    "BrowserSession",
    "NavigationError",
    "ProductExtractor",
    "ProductRecord",
    "ProductScraper",
    "SearchExtractor",
    "SearchResultItem",
    "SearchScraper",
]

"""API routes for product scraping and shopping search."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from vitrine.config import get_settings
from vitrine.jobs.queue import QueueFullError, ScrapeQueue
from vitrine.scrapers.product import ProductScraper
from vitrine.scrapers.search import SearchScraper

router = APIRouter(tags=["scraping"])

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2


class ScrapeRequest(BaseModel):
    url: str | None = None


class SearchRequest(BaseModel):
    query: str | None = None


class ProductResponse(BaseModel):
    success: bool
    url: str | None = None
    title: str | None = None
    price: str | None = None
    price_value: str | None = None
    price_currency: str | None = None
    image: str | None = None
    error: str | None = None
    details: str | None = None


class SearchResultResponse(BaseModel):
    name: str
    price: str | None
    imageUrl: str | None
    link: str | None


class SearchResponse(BaseModel):
    success: bool
    results: list[SearchResultResponse] | None = None
    error: str | None = None
    details: str | None = None


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def get_queue(request: Request) -> ScrapeQueue:
    queue = getattr(request.app.state, "queue", None)
    if queue is None:
        raise HTTPException(status_code=503, detail="Scrape queue is not running")
    return queue


def get_product_scraper() -> ProductScraper:
    return ProductScraper(get_settings())


def get_search_scraper() -> SearchScraper:
    return SearchScraper(get_settings())


def normalize_target_url(raw: str) -> str:
    """Strip blanks and default to ``https://`` when no scheme is given."""
    url = raw.strip()
    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    return url


async def _run(queue: ScrapeQueue, job) -> dict:
    try:
        future = queue.submit(job)
    except QueueFullError as exc:
        logger.warning("Rejecting job: %s", exc)
        raise HTTPException(status_code=503, detail=str(exc))
    return await future


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.post(
    "/scrape",
    response_model=ProductResponse,
    response_model_exclude_unset=True,
)
async def scrape_product(
    req: ScrapeRequest,
    queue: ScrapeQueue = Depends(get_queue),
    scraper: ProductScraper = Depends(get_product_scraper),
):
    """Render a product page and return its title, price and image."""
    if not req.url or not req.url.strip():
        raise HTTPException(status_code=400, detail="Parameter 'url' is required")

    url = normalize_target_url(req.url)
    logger.info("Scrape requested for %s", url)
    return await _run(queue, lambda: scraper.scrape(url))


@router.post(
    "/search",
    response_model=SearchResponse,
    response_model_exclude_unset=True,
)
async def search_products(
    req: SearchRequest,
    queue: ScrapeQueue = Depends(get_queue),
    scraper: SearchScraper = Depends(get_search_scraper),
):
    """Search the shopping results page and return the ranked listings."""
    if req.query is None or not req.query.strip():
        raise HTTPException(status_code=400, detail="Parameter 'query' is required")

    query = req.query.strip()
    if len(query) < MIN_QUERY_LENGTH:
        return {"success": True, "results": []}

    logger.info("Search requested for '%s'", query)
    return await _run(queue, lambda: scraper.search(query))

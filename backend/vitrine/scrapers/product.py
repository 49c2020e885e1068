"""Product-page scraping: render one URL and build a :class:`ProductRecord`.

Workflow:
    1. Open a fresh :class:`BrowserSession` and navigate (network idle).
    2. Scroll the page so lazy images start loading, then let them settle.
    3. Run the extraction strategies in priority order, first value wins.
    4. Normalise the price and resolve the image to an absolute URL.
    5. Close the session, whatever happened.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Callable, Sequence
from urllib.parse import urljoin

from vitrine.config import Settings, get_settings
from vitrine.scrapers import strategies
from vitrine.scrapers.prices import format_price, normalize_price
from vitrine.scrapers.session import BrowserSession
from vitrine.scrapers.strategies import RawCandidate, merge_candidates

logger = logging.getLogger(__name__)

SCRAPE_ERROR = "Erro no scraping"

Strategy = Callable[[Any], Awaitable[RawCandidate | None]]

# (fields the strategy can fill, strategy) in priority order.  A strategy
# is skipped once every field it could provide is already known.
DEFAULT_STRATEGIES: tuple[tuple[tuple[str, ...], Strategy], ...] = (
    (("title", "price", "price_currency", "image"), strategies.structured_data),
    (("title",), strategies.meta_title),
    (("image",), strategies.meta_image),
    (("price",), strategies.visible_price),
    (("image",), strategies.image_candidates),
)


@dataclass(frozen=True, slots=True)
class ProductRecord:
    """Normalised result of a successful product scrape."""

    url: str
    title: str
    price: str | None
    price_value: str | None
    price_currency: str | None
    image: str | None
    success: bool = True

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def failure_record(error: str, exc: BaseException) -> dict[str, Any]:
    """The response shape for a job that could not complete."""
    details = getattr(exc, "message", None) or str(exc) or exc.__class__.__name__
    return {"success": False, "error": error, "details": details}


def absolute_url(base: str | None, href: str | None) -> str | None:
    if not href:
        return None
    if not base:
        return href
    return urljoin(base, href)


class ProductExtractor:
    """Runs the extraction strategies over a rendered page."""

    def __init__(
        self,
        settings: Settings | None = None,
        strategy_chain: Sequence[tuple[tuple[str, ...], Strategy]] = DEFAULT_STRATEGIES,
    ) -> None:
        self.settings = settings or get_settings()
        self.strategy_chain = strategy_chain

    async def collect(self, page: Any) -> RawCandidate:
        """Merge every strategy's partial result, first value per field wins."""
        merged = RawCandidate()
        for wanted, strategy in self.strategy_chain:
            if all(getattr(merged, name) is not None for name in wanted):
                continue
            candidate = await strategy(page)
            if candidate is not None:
                logger.debug("%s -> %s", getattr(strategy, "__name__", strategy), candidate)
                merged = merge_candidates([merged, candidate])
        return merged

    async def extract(self, page: Any, url: str | None = None) -> ProductRecord:
        merged = await self.collect(page)
        page_url = getattr(page, "url", None) or url

        currency, value = normalize_price(merged.price, merged.price_currency)
        return ProductRecord(
            url=url or page_url or "",
            title=merged.title or self.settings.title_placeholder,
            price=format_price(merged.price, currency, value),
            price_value=value,
            price_currency=currency,
            image=absolute_url(page_url, merged.image),
        )


class ProductScraper:
    """One product-page job: render, extract, release.

    :meth:`scrape` never raises; failures come back as failure records.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        session_factory: Callable[[Settings], BrowserSession] = BrowserSession,
        extractor: ProductExtractor | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._session_factory = session_factory
        self._extractor = extractor or ProductExtractor(self.settings)

    async def scrape(self, url: str) -> dict[str, Any]:
        logger.info("Scraping product page %s", url)
        session = self._session_factory(self.settings)
        try:
            await session.navigate(url, self.settings.scraping_timeout)
            await session.trigger_lazy_load()
            await session.settle()
            record = await self._extractor.extract(session.page, url=url)
        except Exception as exc:
            logger.warning("Scrape of %s failed: %s", url, exc)
            return failure_record(SCRAPE_ERROR, exc)
        finally:
            await session.close()

        logger.info(
            "Scraped %s: title=%r price=%r image=%s",
            url,
            record.title,
            record.price,
            "yes" if record.image else "no",
        )
        return record.to_dict()

"""Search-engine shopping results scraper.

Renders the shopping tab of the search engine for a query and reads every
result card in DOM order (which is the engine's ranking).  Cards without a
name are dropped.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Callable
from urllib.parse import parse_qs, quote_plus, urljoin, urlparse

from vitrine.config import Settings, get_settings
from vitrine.scrapers import dom
from vitrine.scrapers.product import absolute_url, failure_record
from vitrine.scrapers.session import BrowserSession

logger = logging.getLogger(__name__)

SEARCH_ERROR = "Falha na pesquisa"


@dataclass(frozen=True, slots=True)
class SearchSelectors:
    """CSS selectors describing one result card."""

    container: str = ".sh-dgr__content"
    names: tuple[str, ...] = ("h3.tAxDx", ".Xjkr3b")
    price: str = ".a8Pemb"
    image: str = "img"
    link: str = "a"


@dataclass(frozen=True, slots=True)
class SearchResultItem:
    name: str
    price: str | None
    imageUrl: str | None
    link: str | None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def normalize_link(href: str | None, origin: str) -> str | None:
    """Make a result link absolute.

    ``/url?q=<target>`` redirect links are unwrapped to their target.
    """
    if not href:
        return None
    if href.startswith(("http://", "https://")):
        return href
    if href.startswith("//"):
        return f"https:{href}"

    parsed = urlparse(href)
    if parsed.path == "/url":
        params = parse_qs(parsed.query)
        target = params.get("q") or params.get("url")
        if target and target[0].startswith(("http://", "https://")):
            return target[0]
    return urljoin(origin.rstrip("/") + "/", href)


class SearchExtractor:
    """Reads result cards off a rendered results page."""

    def __init__(
        self,
        settings: Settings | None = None,
        selectors: SearchSelectors | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.selectors = selectors or SearchSelectors()

    async def _name(self, card: Any) -> str | None:
        for selector in self.selectors.names:
            name = await dom.text(card, selector)
            if name:
                return name
        return None

    async def extract(self, page: Any) -> list[SearchResultItem]:
        sel = self.selectors
        base = getattr(page, "url", None) or self.settings.search_origin
        items: list[SearchResultItem] = []
        for card in await dom.query_all(page, sel.container):
            name = await self._name(card)
            if not name:
                continue
            items.append(
                SearchResultItem(
                    name=name,
                    price=await dom.text(card, sel.price),
                    imageUrl=absolute_url(base, await dom.attribute(card, sel.image, "src", "data-src")),
                    link=normalize_link(
                        await dom.attribute(card, sel.link, "href"),
                        self.settings.search_origin,
                    ),
                )
            )
            if self.settings.search_max_results and len(items) >= self.settings.search_max_results:
                break
        return items


class SearchScraper:
    """One search job.  :meth:`search` never raises."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        session_factory: Callable[[Settings], BrowserSession] = BrowserSession,
        extractor: SearchExtractor | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._session_factory = session_factory
        self._extractor = extractor or SearchExtractor(self.settings)

    def search_url(self, query: str) -> str:
        return self.settings.search_url.format(query=quote_plus(query.strip()))

    async def search(self, query: str) -> dict[str, Any]:
        url = self.search_url(query)
        logger.info("Searching '%s' via %s", query, url)
        session = self._session_factory(self.settings)
        try:
            await session.navigate(url, self.settings.search_timeout)
            await session.settle()
            items = await self._extractor.extract(session.page)
        except Exception as exc:
            logger.warning("Search for '%s' failed: %s", query, exc)
            return failure_record(SEARCH_ERROR, exc)
        finally:
            await session.close()

        logger.info("Search for '%s' returned %d results", query, len(items))
        return {"success": True, "results": [item.to_dict() for item in items]}

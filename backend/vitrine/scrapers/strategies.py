"""Independent product-extraction strategies.

Each strategy looks at the rendered page one way (structured data, meta
tags, visible elements, raw images) and returns a partial
:class:`RawCandidate`, or ``None`` when it finds nothing.  Strategies never
raise for a missing field: DOM access goes through :mod:`vitrine.scrapers.dom`
which already maps absence and Playwright errors to ``None``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields
from typing import Any, Iterator

from vitrine.scrapers import dom
from vitrine.scrapers.images import MAX_IMAGE_CANDIDATES, ImageCandidate, select_image

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RawCandidate:
    """Fields one strategy managed to read from the page."""

    title: str | None = None
    price: str | None = None
    price_currency: str | None = None
    image: str | None = None


def merge_candidates(candidates: list[RawCandidate | None]) -> RawCandidate:
    """Fold candidates left to right keeping the first non-null value per field."""
    merged: dict[str, Any] = {f.name: None for f in fields(RawCandidate)}
    for candidate in candidates:
        if candidate is None:
            continue
        for name, value in merged.items():
            if value is None:
                merged[name] = getattr(candidate, name)
    return RawCandidate(**merged)


def _string(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list, bool)):
        return None
    text = str(value).strip()
    return text or None


# ---------------------------------------------------------------------------
# 1. Structured data (JSON-LD)
# ---------------------------------------------------------------------------


def iter_json_ld(data: Any) -> Iterator[dict[str, Any]]:
    """Yield every object in a JSON-LD payload, flattening arrays and ``@graph``."""
    if isinstance(data, list):
        for item in data:
            yield from iter_json_ld(item)
    elif isinstance(data, dict):
        yield data
        graph = data.get("@graph")
        if isinstance(graph, list):
            yield from iter_json_ld(graph)


def _is_product(obj: dict[str, Any]) -> bool:
    kind = obj.get("@type")
    if isinstance(kind, list):
        return "Product" in kind
    return kind == "Product"


def _first(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else None
    return value


def parse_json_ld_product(obj: dict[str, Any]) -> RawCandidate:
    """Read title / image / price / currency from a ``Product`` object."""
    image = _first(obj.get("image"))
    if isinstance(image, dict):
        image = image.get("url") or image.get("contentUrl")

    offer = _first(obj.get("offers"))
    price = currency = None
    if isinstance(offer, dict):
        price = _string(offer.get("price"))
        if price is None:
            price = _string(offer.get("lowPrice"))
        currency = _string(offer.get("priceCurrency"))

    return RawCandidate(
        title=_string(obj.get("name")) or _string(obj.get("headline")),
        price=price,
        price_currency=currency,
        image=_string(image),
    )


def parse_json_ld_blocks(blocks: list[str]) -> RawCandidate | None:
    """Merge every ``Product`` found across raw JSON-LD *blocks*.

    A block that is not valid JSON is skipped.
    """
    products: list[RawCandidate | None] = []
    for block in blocks:
        try:
            data = json.loads(block)
        except json.JSONDecodeError:
            logger.debug("Skipping malformed JSON-LD block")
            continue
        products.extend(
            parse_json_ld_product(obj) for obj in iter_json_ld(data) if _is_product(obj)
        )
    if not products:
        return None
    return merge_candidates(products)


async def structured_data(page: Any) -> RawCandidate | None:
    scripts = await dom.query_all(page, 'script[type="application/ld+json"]')
    blocks = [block for block in [await dom.element_content(s) for s in scripts] if block]
    return parse_json_ld_blocks(blocks)


# ---------------------------------------------------------------------------
# 2. Title from meta tags / headings
# ---------------------------------------------------------------------------


async def meta_title(page: Any) -> RawCandidate | None:
    title = (
        await dom.attribute(page, 'meta[property="og:title"]', "content")
        or await dom.attribute(page, 'meta[name="title"]', "content")
        or await dom.text(page, "h1")
        or await dom.page_title(page)
    )
    return RawCandidate(title=title) if title else None


# ---------------------------------------------------------------------------
# 3. Image from meta tags
# ---------------------------------------------------------------------------


async def meta_image(page: Any) -> RawCandidate | None:
    image = (
        await dom.attribute(page, 'meta[property="og:image"]', "content")
        or await dom.attribute(page, 'link[rel="image_src"]', "href")
        or await dom.attribute(page, '[itemprop="image"]', "src", "content", "href")
    )
    return RawCandidate(image=image) if image else None


# ---------------------------------------------------------------------------
# 4. Visible price
# ---------------------------------------------------------------------------


async def visible_price(page: Any) -> RawCandidate | None:
    element = await dom.query(page, '[itemprop="price"]')
    price = (
        await dom.element_attribute(element, "content")
        or await dom.element_attribute(element, "data-price")
        or await dom.element_text(element)
        or await dom.text(page, '[class*="price"]')
    )
    return RawCandidate(price=price) if price else None


# ---------------------------------------------------------------------------
# 5. Largest-image fallback
# ---------------------------------------------------------------------------

_IMAGES_SCRIPT = """
(limit) => Array.from(document.images).slice(0, limit).map((img) => ({
    src: img.getAttribute('src') ? img.src : (img.getAttribute('data-src') || ''),
    width: img.naturalWidth || 0,
    height: img.naturalHeight || 0,
}))
"""


async def collect_images(page: Any) -> list[ImageCandidate]:
    """The first ``<img>`` elements of the page with their natural size."""
    raw = await dom.evaluate(page, _IMAGES_SCRIPT, MAX_IMAGE_CANDIDATES)
    if not isinstance(raw, list):
        return []
    return [ImageCandidate.from_dict(item) for item in raw if isinstance(item, dict)]


async def image_candidates(page: Any) -> RawCandidate | None:
    best = select_image(await collect_images(page))
    return RawCandidate(image=best.src) if best else None

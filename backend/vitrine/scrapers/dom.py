"""Read-only DOM access that never raises.

Every helper accepts a *root* that is either a Playwright ``Page`` or an
``ElementHandle`` (both expose ``query_selector`` / ``query_selector_all``)
and turns a missing element, a missing attribute, blank text or a
Playwright error into ``None`` (or an empty list).  Extraction code can then
treat "not there" as an ordinary value instead of catching exceptions.
"""

from __future__ import annotations

import logging
from typing import Any

from playwright.async_api import Error as PlaywrightError

logger = logging.getLogger(__name__)


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


async def query(root: Any, selector: str) -> Any | None:
    """Return the first element matching *selector*, or ``None``."""
    try:
        return await root.query_selector(selector)
    except PlaywrightError as exc:
        logger.debug("query(%r) failed: %s", selector, exc)
        return None


async def query_all(root: Any, selector: str) -> list[Any]:
    """Return every element matching *selector* (possibly empty)."""
    try:
        return list(await root.query_selector_all(selector))
    except PlaywrightError as exc:
        logger.debug("query_all(%r) failed: %s", selector, exc)
        return []


async def element_text(element: Any | None) -> str | None:
    """Visible text of *element*, stripped; ``None`` when blank."""
    if element is None:
        return None
    try:
        return _clean(await element.inner_text())
    except PlaywrightError as exc:
        logger.debug("inner_text failed: %s", exc)
        return None


async def element_attribute(element: Any | None, name: str) -> str | None:
    """Attribute *name* of *element*, stripped; ``None`` when absent or blank."""
    if element is None:
        return None
    try:
        return _clean(await element.get_attribute(name))
    except PlaywrightError as exc:
        logger.debug("get_attribute(%r) failed: %s", name, exc)
        return None


async def text(root: Any, selector: str) -> str | None:
    """Visible text of the first element matching *selector*."""
    return await element_text(await query(root, selector))


async def attribute(root: Any, selector: str, *names: str) -> str | None:
    """First non-blank attribute among *names* on the first match of *selector*."""
    element = await query(root, selector)
    for name in names:
        value = await element_attribute(element, name)
        if value:
            return value
    return None


async def evaluate(page: Any, expression: str, arg: Any = None) -> Any | None:
    """Run *expression* in the page; ``None`` if the page throws."""
    try:
        return await page.evaluate(expression, arg)
    except PlaywrightError as exc:
        logger.debug("evaluate failed: %s", exc)
        return None


async def page_title(page: Any) -> str | None:
    """The document ``<title>``, or ``None``."""
    try:
        return _clean(await page.title())
    except PlaywrightError as exc:
        logger.debug("title() failed: %s", exc)
        return None


async def element_content(element: Any | None) -> str | None:
    """Raw ``textContent`` of *element* (works for non-rendered ``<script>``)."""
    if element is None:
        return None
    try:
        return _clean(await element.text_content())
    except PlaywrightError as exc:
        logger.debug("text_content failed: %s", exc)
        return None

"""Price / currency normalisation helpers.

Raw price text comes from many places (JSON-LD offers, ``itemprop`` tags,
whatever element carries a ``price`` class) and is normalised into a
``(currency, value)`` pair where ``value`` is a canonical decimal string
using ``.`` as the decimal separator.

The grouping heuristic is tuned for Brazilian-Portuguese storefronts
(``1.234,56``: period for thousands, comma for decimals).  Prices written
the other way round (``1,234.56``) are misparsed; this is a known
limitation and deliberately left as is.
"""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

# Recognised currency tokens.  ``R$`` must be tried before the bare ``$``
# so that the leftmost match at the ``R`` picks up the full symbol.
_CURRENCY_RE = re.compile(r"R\$|BRL|USD|EUR|€|\$", re.IGNORECASE)

# Digits with optional embedded ``.`` / ``,`` separators.
_NUMBER_RE = re.compile(r"\d+(?:[.,]\d+)*")

# A period followed by exactly three digits and a word boundary is a
# thousands separator.
_THOUSANDS_RE = re.compile(r"\.(?=\d{3}\b)")


def detect_currency(raw: str | None) -> str | None:
    """Return the first recognised currency token in *raw*, upper-cased."""
    if not raw:
        return None
    match = _CURRENCY_RE.search(raw)
    if not match:
        return None
    return match.group(0).upper()


def parse_amount(raw: str | None) -> str | None:
    """Extract the first number in *raw* as a canonical decimal string.

    ``"R$ 1.234,56"`` -> ``"1234.56"``, ``"19.90"`` -> ``"19.90"``,
    ``"Grátis"`` -> ``None``.
    """
    if not raw:
        return None
    match = _NUMBER_RE.search(raw)
    if not match:
        logger.debug("No numeric token in price text '%s'", raw)
        return None
    number = _THOUSANDS_RE.sub("", match.group(0))
    return number.replace(",", ".")


def normalize_price(
    raw: str | int | float | None,
    known_currency: str | None = None,
) -> tuple[str | None, str | None]:
    """Normalise raw price text into ``(currency, value)``.

    A *known_currency* (typically ``priceCurrency`` from structured data)
    always wins over whatever token appears in the text.
    """
    text = "" if raw is None else str(raw).strip()
    currency = known_currency or detect_currency(text)
    return currency, parse_amount(text)


def format_price(
    raw: str | int | float | None,
    currency: str | None,
    value: str | None,
) -> str | None:
    """Build the display price shown to users.

    ``"<currency> <value with comma decimal>"`` when both parts are known,
    otherwise the raw text, otherwise ``None``.
    """
    if currency and value:
        return f"{currency} {value.replace('.', ',')}"
    if raw is None:
        return None
    text = str(raw).strip()
    return text or None

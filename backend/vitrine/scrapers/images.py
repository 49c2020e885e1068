"""Primary-image selection for product pages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

# Anything smaller is most likely a logo, an icon or a tracking pixel.
MIN_IMAGE_WIDTH = 200
MIN_IMAGE_HEIGHT = 200

# Only the first N <img> elements on the page are considered.
MAX_IMAGE_CANDIDATES = 30


@dataclass(frozen=True, slots=True)
class ImageCandidate:
    """An ``<img>`` found on the rendered page."""

    src: str = ""
    width: int = 0
    height: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ImageCandidate":
        return cls(
            src=str(data.get("src") or ""),
            width=int(data.get("width") or 0),
            height=int(data.get("height") or 0),
        )

    @property
    def is_large(self) -> bool:
        return self.width >= MIN_IMAGE_WIDTH and self.height >= MIN_IMAGE_HEIGHT


def select_image(candidates: Iterable[ImageCandidate]) -> Optional[ImageCandidate]:
    """Pick the best image among *candidates*.

    The first candidate of at least 200x200 px wins.  When none is that
    large the first candidate is returned anyway, and ``None`` only when
    there are no candidates at all.  Candidates without a source are
    never returned.
    """
    pool = [c for c in list(candidates)[:MAX_IMAGE_CANDIDATES] if c.src]
    if not pool:
        return None
    for candidate in pool:
        if candidate.is_large:
            return candidate
    return pool[0]

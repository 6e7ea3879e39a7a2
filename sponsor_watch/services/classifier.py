"""Keyword-based sponsored content classifier."""

import re
from typing import Iterable, List, Optional

from sponsor_watch.core.models import Classification


DEFAULT_SPONSOR_KEYWORDS = (
    "業配", "贊助", "合作", "sponsored", "ad ", "#ad",
    "partnership", "合作夥伴", "promotion", "推廣",
)

URL_PATTERN = re.compile(r"https?://[^\s)>\]]+")

MAX_LINKS = 3


class SponsorClassifier:
    """Decides whether a video is sponsored and extracts promotional links."""

    def __init__(self, keywords: Optional[Iterable[str]] = None, max_links: int = MAX_LINKS):
        self.keywords = [k.lower() for k in (keywords or DEFAULT_SPONSOR_KEYWORDS)]
        self.max_links = max_links

    def is_sponsored(self, title: str, description: str) -> bool:
        combined = f"{title} {description}".lower()
        return any(keyword in combined for keyword in self.keywords)

    def extract_links(self, description: str) -> List[str]:
        """Return the first URLs of the description, repeats included."""
        return URL_PATTERN.findall(description or "")[:self.max_links]

    def classify(self, title: str, description: str) -> Classification:
        if not self.is_sponsored(title or "", description or ""):
            return Classification(is_sponsor=False)
        return Classification(is_sponsor=True, links=self.extract_links(description))

"""
Image Scraper Data Models

- ImageCandidate: a (thumb, full) URL pair found on a page
- DiscoveryResult: one page of the merged, deduplicated candidate list
"""

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass(frozen=True)
class ImageCandidate:
    """A discovered image: preview URL and best guess at the full-size URL."""
    thumb: str
    full: str

    def to_dict(self) -> Dict[str, str]:
        return {"thumb": self.thumb, "full": self.full}


@dataclass
class DiscoveryResult:
    """A paginated view over the merged candidate list."""
    images: List[ImageCandidate] = field(default_factory=list)
    total: int = 0          # Length of the whole merged list
    has_more: bool = False  # True if the merged list continues past this page

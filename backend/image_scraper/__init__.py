"""
Image Scraper Module

Discovers candidate images referenced by a handful of web pages.

Features:
- Parallel page fetching with per-page timeout and size budget
- Heuristic thumb/full URL resolution per <img> element
- Cross-page deduplication by full URL
- Paginated results
"""

from .routes_fastapi import router
from .discovery import DiscoveryConfig, ImageDiscovery
from .models import DiscoveryResult, ImageCandidate

__all__ = ["router", "DiscoveryConfig", "ImageDiscovery", "DiscoveryResult", "ImageCandidate"]

"""
Image Scraper API Routes

Provides endpoints for:
- Discovering images on up to 5 pages (paginated)
- Health check
"""

import logging
import os
from typing import Any, Dict, List, Optional, Union

import httpx
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from .discovery import DiscoveryConfig, ImageDiscovery, normalize_page_inputs

logger = logging.getLogger(__name__)

# ============================================
# Configuration
# ============================================

MAX_PAGES = int(os.getenv("SCRAPER_MAX_PAGES", "5"))
PAGE_SIZE = int(os.getenv("SCRAPER_PAGE_SIZE", "200"))
MAX_IMAGES = int(os.getenv("SCRAPER_MAX_IMAGES", "10000"))
FETCH_TIMEOUT_S = float(os.getenv("SCRAPER_FETCH_TIMEOUT_S", "12"))
MAX_PAGE_MB = int(os.getenv("SCRAPER_MAX_PAGE_MB", "10"))


def get_discovery_config() -> DiscoveryConfig:
    return DiscoveryConfig(
        max_pages=MAX_PAGES,
        page_size=PAGE_SIZE,
        max_images=MAX_IMAGES,
        fetch_timeout=FETCH_TIMEOUT_S,
        max_page_bytes=MAX_PAGE_MB * 1024 * 1024,
    )


def get_scraper_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Outbound transport; None means httpx's default network transport."""
    return None


# ============================================
# Request/Response Models
# ============================================

UrlsField = Union[str, List[Any], None]


class ScrapeRequest(BaseModel):
    """Request model for image discovery."""
    urls: UrlsField = Field(None, description="Page URLs to scan (max 5)")
    url: UrlsField = Field(None, description="Single page URL (legacy clients)")


class ImageItem(BaseModel):
    thumb: str
    full: str


class ScrapeResponse(BaseModel):
    """Response model for image discovery."""
    images: List[ImageItem]
    hasMore: bool
    total: int


class ErrorResponse(BaseModel):
    error: str


async def read_json_body(request: Request) -> Dict[str, Any]:
    """Parse the request body as a JSON object; anything else reads as {}."""
    try:
        payload = await request.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def parse_page_param(page: Optional[str]) -> int:
    """Parse the `page` query parameter; missing, invalid or < 1 means page 1."""
    try:
        value = int(page) if page is not None else 1
    except ValueError:
        return 1
    return value if value >= 1 else 1


# ============================================
# Router
# ============================================

router = APIRouter(prefix="/api/scrape", tags=["Image Scraper"])


# ============================================
# Endpoints
# ============================================

@router.post("", response_model=ScrapeResponse, responses={400: {"model": ErrorResponse}})
async def scrape_images(
    request: Request,
    page: Optional[str] = Query(None, description="1-based result page"),
    config: DiscoveryConfig = Depends(get_discovery_config),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_scraper_transport),
):
    """
    Discover candidate images on the given pages.

    Example:
        POST /api/scrape?page=1
        {
            "urls": ["https://example.com/gallery", "https://example.org/"]
        }

    Returns:
        { "images": [{"thumb": ..., "full": ...}], "hasMore": false, "total": 42 }
    """
    payload = await read_json_body(request)
    try:
        body = ScrapeRequest.model_validate(payload)
    except ValidationError:
        body = ScrapeRequest()

    raw_urls = body.urls if body.urls is not None else body.url
    page_urls = normalize_page_inputs(raw_urls, config.max_pages)
    if not page_urls:
        return JSONResponse(status_code=400, content={"error": "urls are required"})

    discovery = ImageDiscovery(config, transport=transport)
    try:
        result = await discovery.discover(page_urls, page=parse_page_param(page))
    finally:
        await discovery.close()

    return ScrapeResponse(
        images=[ImageItem(**image.to_dict()) for image in result.images],
        hasMore=result.has_more,
        total=result.total,
    )


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return JSONResponse(content={
        "status": "healthy",
        "service": "image-scraper",
    })

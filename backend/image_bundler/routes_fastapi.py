"""
Image Bundler API Routes

Provides endpoints for:
- Downloading selected images as a single ZIP archive
- Health check
"""

import logging
import os
from typing import Any, Dict, List, Optional

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field, ValidationError

from .bundler import BundleConfig, BundleError, ImageBundler

logger = logging.getLogger(__name__)

# ============================================
# Configuration
# ============================================

MAX_ITEMS = int(os.getenv("BUNDLER_MAX_ITEMS", "100"))
MAX_TOTAL_MB = int(os.getenv("BUNDLER_MAX_TOTAL_MB", "50"))
FETCH_TIMEOUT_S = float(os.getenv("BUNDLER_FETCH_TIMEOUT_S", "30"))


def get_bundle_config() -> BundleConfig:
    return BundleConfig(
        max_items=MAX_ITEMS,
        max_total_bytes=MAX_TOTAL_MB * 1024 * 1024,
        fetch_timeout=FETCH_TIMEOUT_S,
    )


def get_bundler_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Outbound transport; None means httpx's default network transport."""
    return None


# ============================================
# Request/Response Models
# ============================================


class DownloadRequest(BaseModel):
    """Request model for bundle download."""
    urls: Optional[List[Any]] = Field(None, description="Full-size image URLs (max 100)")


class ErrorResponse(BaseModel):
    error: str


async def read_json_body(request: Request) -> Dict[str, Any]:
    """Parse the request body as a JSON object; anything else reads as {}."""
    try:
        payload = await request.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


# ============================================
# Router
# ============================================

router = APIRouter(prefix="/api/download", tags=["Image Bundler"])


# ============================================
# Endpoints
# ============================================

@router.post(
    "",
    response_class=Response,
    responses={
        200: {"content": {"application/zip": {}}},
        400: {"model": ErrorResponse},
    },
)
async def download_bundle(
    request: Request,
    config: BundleConfig = Depends(get_bundle_config),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_bundler_transport),
):
    """
    Download the selected images and return them as images.zip.

    Example:
        POST /api/download
        {
            "urls": ["https://example.com/a.jpg", "https://example.com/b.png"]
        }

    Archive entries are named image-<n>.<ext>, n being the URL's 1-based
    position in the request list.
    """
    payload = await read_json_body(request)
    try:
        body = DownloadRequest.model_validate(payload)
    except ValidationError:
        body = DownloadRequest()

    bundler = ImageBundler(config, transport=transport)
    try:
        result = await bundler.bundle(body.urls or [])
    except BundleError as e:
        logger.warning(f"[ImageBundler] Bundle rejected: {e}")
        return JSONResponse(status_code=400, content={"error": str(e)})
    finally:
        await bundler.close()

    return Response(
        content=result.data,
        media_type="application/zip",
        headers={
            "Content-Disposition": f'attachment; filename="{result.filename}"',
            "Content-Length": str(len(result.data)),
        },
    )


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return JSONResponse(content={
        "status": "healthy",
        "service": "image-bundler",
    })

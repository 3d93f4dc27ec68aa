"""
Image Harvest test configuration

Fixtures here stand in for the network: every outbound request goes through
an httpx.MockTransport that serves canned pages and images by URL.

Key pieces:
- FakeWeb: URL -> canned response table, records every request it sees
- small_discovery_config / small_bundle_config: tiny budgets for edge cases
"""

import asyncio
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

import httpx
import pytest

# Make the backend packages importable
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from image_bundler.bundler import BundleConfig
from image_scraper.discovery import DiscoveryConfig


# ============================================
# Fake Web
# ============================================

Handler = Callable[[httpx.Request], httpx.Response]


class FakeWeb:
    """
    A tiny in-memory web.

    Usage:
    ```python
    web = FakeWeb()
    web.page("https://site.test/", "<img src='a.jpg'>")
    web.image("https://site.test/a.jpg", b"...")
    discovery = ImageDiscovery(config, transport=web.transport)
    ```
    """

    def __init__(self):
        self.routes: Dict[str, Union[httpx.Response, Handler]] = {}
        self.delays: Dict[str, float] = {}
        self.requests: List[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def page(self, url: str, html: str, status: int = 200, delay: float = 0.0):
        self.routes[url] = httpx.Response(
            status, content=html.encode("utf-8"), headers={"Content-Type": "text/html; charset=utf-8"}
        )
        if delay:
            self.delays[url] = delay

    def image(self, url: str, data: bytes, status: int = 200, content_type: str = "image/jpeg"):
        self.routes[url] = httpx.Response(status, content=data, headers={"Content-Type": content_type})

    def redirect(self, url: str, location: str):
        self.routes[url] = httpx.Response(302, headers={"Location": location})

    def fail(self, url: str, exc: Optional[Exception] = None):
        def raise_error(request: httpx.Request) -> httpx.Response:
            raise exc or httpx.ConnectError("connection refused", request=request)

        self.routes[url] = raise_error

    @property
    def requested_urls(self) -> List[str]:
        return [str(request.url) for request in self.requests]

    async def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)

        delay = self.delays.get(url)
        if delay:
            await asyncio.sleep(delay)

        route = self.routes.get(url)
        if route is None:
            return httpx.Response(404, content=b"not found")
        if callable(route):
            return route(request)
        # Responses are single-use once streamed; hand out a fresh copy
        return httpx.Response(route.status_code, headers=route.headers, content=route.content)


@pytest.fixture
def web():
    return FakeWeb()


# ============================================
# Config Fixtures
# ============================================

@pytest.fixture
def discovery_config():
    return DiscoveryConfig()


@pytest.fixture
def small_discovery_config():
    """Tiny budgets so pagination and ceilings can be hit with a few images."""
    return DiscoveryConfig(max_pages=5, page_size=2, max_images=5, fetch_timeout=1.0, max_page_bytes=4096)


@pytest.fixture
def small_bundle_config():
    return BundleConfig(max_items=5, max_total_bytes=10, fetch_timeout=1.0)


# ============================================
# Helper Functions
# ============================================

def img_tags(*srcs: str) -> str:
    """Build a minimal page with one <img> per src."""
    body = "".join(f'<img src="{src}">' for src in srcs)
    return f"<html><body>{body}</body></html>"


def full_urls(images) -> List[str]:
    return [image.full for image in images]

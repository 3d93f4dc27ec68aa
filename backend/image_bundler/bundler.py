"""
Image Bundler Core Logic

Handles:
- Downloading a user-selected list of image URLs, one at a time
- Enforcing the item count and total byte budgets
- Packaging the downloaded images into a single ZIP archive
"""

import asyncio
import logging
import posixpath
import zipfile
from dataclasses import dataclass, field
from io import BytesIO
from typing import Any, List, Optional, Sequence
from urllib.parse import urlsplit

import httpx

from image_scraper.url_resolver import validate_http_url

logger = logging.getLogger(__name__)

ARCHIVE_FILENAME = "images.zip"
DEFAULT_EXTENSION = ".jpg"


@dataclass
class BundleConfig:
    """Configuration for bundle downloads."""
    max_items: int = 100                        # Hard cap on input list length
    max_total_bytes: int = 50 * 1024 * 1024     # Ceiling on all downloaded bytes
    fetch_timeout: float = 30.0                 # Seconds per item


# ============================================
# Errors
# ============================================


class BundleError(Exception):
    """Batch-level failure; the message is safe to show to the user."""


class EmptyInputError(BundleError):
    def __init__(self):
        super().__init__("No urls provided")


class TooManyItemsError(BundleError):
    def __init__(self, limit: int):
        super().__init__(f"Too many urls (max {limit})")
        self.limit = limit


class QuotaExceededError(BundleError):
    def __init__(self, limit_bytes: int):
        super().__init__(f"Total download exceeds limit ({limit_bytes / (1024 * 1024):g}MB)")
        self.limit_bytes = limit_bytes


class NoContentError(BundleError):
    def __init__(self):
        super().__init__("Failed to download any image")


# ============================================
# Results
# ============================================


@dataclass
class BundleEntry:
    """One image stored in the archive."""
    position: int       # 1-based index in the request list
    url: str
    filename: str
    size: int


@dataclass
class BundleResult:
    """A finished archive."""
    data: bytes
    entries: List[BundleEntry] = field(default_factory=list)
    requested: int = 0
    filename: str = ARCHIVE_FILENAME

    @property
    def skipped(self) -> int:
        return self.requested - len(self.entries)


def archive_entry_name(position: int, url: str) -> str:
    """
    Name an archive entry after the item's position in the request list.

    The extension comes from the URL path and defaults to .jpg.
    """
    ext = posixpath.splitext(urlsplit(url).path)[1] or DEFAULT_EXTENSION
    return f"image-{position}{ext}"


class ImageBundler:
    """
    Downloads images sequentially and zips them.

    Usage:
        bundler = ImageBundler(config)
        try:
            result = await bundler.bundle(urls)
        finally:
            await bundler.close()
    """

    def __init__(
        self,
        config: Optional[BundleConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or BundleConfig()

        self.browser_headers = {
            "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
            "Accept": "image/avif,image/webp,image/apng,image/svg+xml,image/*,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
            "Cache-Control": "no-cache",
            "Pragma": "no-cache",
        }

        self.http_client = httpx.AsyncClient(
            timeout=self.config.fetch_timeout,
            follow_redirects=True,
            headers=self.browser_headers,
            transport=transport,
        )

    async def close(self):
        """Close HTTP client."""
        await self.http_client.aclose()

    async def _download(self, url: str, budget: int) -> Optional[bytes]:
        """
        Stream one image body.

        Args:
            url: Absolute image URL
            budget: Bytes still allowed before the total ceiling is crossed

        Returns:
            Body bytes, or None on a non-2xx response

        Raises:
            QuotaExceededError: the body alone exceeds the remaining budget
        """
        async with self.http_client.stream("GET", url) as response:
            if not response.is_success:
                logger.warning(f"[ImageBundler] HTTP {response.status_code}: {url[:60]}...")
                return None

            buffer = BytesIO()
            async for chunk in response.aiter_bytes():
                buffer.write(chunk)
                if buffer.tell() > budget:
                    raise QuotaExceededError(self.config.max_total_bytes)
            return buffer.getvalue()

    async def download_single(self, url: str, budget: int) -> Optional[bytes]:
        """Download one image; network failures and timeouts skip the item."""
        try:
            return await asyncio.wait_for(self._download(url, budget), timeout=self.config.fetch_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"[ImageBundler] Timeout: {url[:60]}...")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"[ImageBundler] Fetch error: {url[:60]}... - {type(e).__name__}: {e}")
        return None

    async def bundle(self, urls: Sequence[Any]) -> BundleResult:
        """
        Download the given images and package them into one ZIP archive.

        Items are fetched in input order. Invalid entries and failed downloads
        leave a gap: entry names keep the item's original 1-based position.

        Raises:
            EmptyInputError: no URLs given
            TooManyItemsError: more than max_items URLs (checked before any fetch)
            QuotaExceededError: downloaded bytes crossed max_total_bytes
            NoContentError: nothing could be downloaded
        """
        if not urls:
            raise EmptyInputError()
        if len(urls) > self.config.max_items:
            raise TooManyItemsError(self.config.max_items)

        logger.info(f"[ImageBundler] Starting bundle of {len(urls)} images")

        total_bytes = 0
        entries: List[BundleEntry] = []
        output = BytesIO()

        with zipfile.ZipFile(output, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for position, raw in enumerate(urls, start=1):
                url = validate_http_url(raw)
                if url is None:
                    logger.info(f"[ImageBundler] Skipping invalid entry #{position}")
                    continue

                data = await self.download_single(url, self.config.max_total_bytes - total_bytes)
                if data is None:
                    continue

                total_bytes += len(data)
                filename = archive_entry_name(position, url)
                archive.writestr(filename, data)
                entries.append(BundleEntry(position=position, url=url, filename=filename, size=len(data)))

        if not entries:
            raise NoContentError()

        archive_data = output.getvalue()
        logger.info(
            f"[ImageBundler] Bundle complete: {len(entries)}/{len(urls)} images, "
            f"{total_bytes // 1024}KB downloaded, {len(archive_data) // 1024}KB archive"
        )

        return BundleResult(data=archive_data, entries=entries, requested=len(urls))

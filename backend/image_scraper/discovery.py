"""
Image Discovery Core Logic

Handles:
- Fetching up to N pages in parallel, each under its own time/byte budget
- Extracting image candidates from every fetched page
- Merging candidates in page order, deduplicated by full URL
- Paginating the merged list
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence, Set

import httpx

from .extractor import extract_from_html
from .models import DiscoveryResult, ImageCandidate
from .url_resolver import validate_http_url

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml",
    "Accept-Language": "en-US,en;q=0.9",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}


@dataclass
class DiscoveryConfig:
    """Configuration for page fetching and result pagination."""
    max_pages: int = 5                          # Page URLs considered per request
    page_size: int = 200                        # Images per result page
    max_images: int = 10_000                    # Merged list ceiling
    fetch_timeout: float = 12.0                 # Seconds per page fetch
    max_page_bytes: int = 10 * 1024 * 1024      # Pages larger than this are skipped


@dataclass
class FetchedPage:
    """A successfully fetched page body."""
    url: str                  # Final URL after redirects; base for relative references
    body: bytes
    encoding: Optional[str]   # Charset from Content-Type, if any


def normalize_page_inputs(raw: Any, max_pages: int) -> List[str]:
    """
    Turn the loosely typed `urls` input into a capped list of trimmed strings.

    A single string counts as a one-element list. Non-strings and blank
    strings are dropped before the cap is applied.
    """
    if isinstance(raw, str):
        items: Iterable[Any] = [raw]
    elif isinstance(raw, (list, tuple)):
        items = raw
    else:
        return []

    normalized = [item.strip() for item in items if isinstance(item, str) and item.strip()]
    return normalized[:max_pages]


def paginate(items: Sequence[ImageCandidate], page: int, page_size: int) -> DiscoveryResult:
    """Slice one 1-based page out of the merged list. Pages below 1 read as page 1."""
    page = max(1, page)
    start = (page - 1) * page_size
    end = start + page_size
    return DiscoveryResult(
        images=list(items[start:end]),
        total=len(items),
        has_more=len(items) > end,
    )


class CandidateMerger:
    """
    Accumulates candidates across pages.

    The first occurrence of a full URL wins; accumulation stops at `limit`.
    """

    def __init__(self, limit: int):
        self.limit = limit
        self.items: List[ImageCandidate] = []
        self._seen_full: Set[str] = set()

    @property
    def is_full(self) -> bool:
        return len(self.items) >= self.limit

    def extend(self, candidates: Iterable[ImageCandidate]) -> int:
        """Merge candidates in order; returns how many were new."""
        added = 0
        for candidate in candidates:
            if self.is_full:
                break
            if candidate.full in self._seen_full:
                continue
            self._seen_full.add(candidate.full)
            self.items.append(candidate)
            added += 1
        return added


class ImageDiscovery:
    """
    Discovers candidate images on a small set of pages.

    Usage:
        discovery = ImageDiscovery(config)
        try:
            result = await discovery.discover(urls, page=1)
        finally:
            await discovery.close()
    """

    def __init__(
        self,
        config: Optional[DiscoveryConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or DiscoveryConfig()

        self.http_client = httpx.AsyncClient(
            timeout=self.config.fetch_timeout,
            follow_redirects=True,
            headers=BROWSER_HEADERS,
            transport=transport,
        )

    async def close(self):
        """Close HTTP client."""
        await self.http_client.aclose()

    async def _read_page(self, url: str) -> Optional[FetchedPage]:
        """Stream a page body, giving up on non-2xx or oversized responses."""
        async with self.http_client.stream("GET", url) as response:
            if not response.is_success:
                logger.warning(f"[ImageDiscovery] HTTP {response.status_code}: {url[:80]}")
                return None

            received = 0
            chunks = []
            async for chunk in response.aiter_bytes():
                received += len(chunk)
                if received > self.config.max_page_bytes:
                    logger.warning(
                        f"[ImageDiscovery] Page exceeds {self.config.max_page_bytes} bytes, skipped: {url[:80]}"
                    )
                    return None
                chunks.append(chunk)

            return FetchedPage(
                url=str(response.url),
                body=b"".join(chunks),
                encoding=response.charset_encoding,
            )

    async def fetch_page(self, url: str) -> Optional[FetchedPage]:
        """
        Fetch one page under the configured timeout.

        Returns:
            FetchedPage with the full body, or None if the page is skipped
        """
        try:
            return await asyncio.wait_for(self._read_page(url), timeout=self.config.fetch_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"[ImageDiscovery] Timeout after {self.config.fetch_timeout}s: {url[:80]}")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"[ImageDiscovery] Fetch error: {url[:80]} - {type(e).__name__}: {e}")
        return None

    async def collect_page(self, url: str) -> List[ImageCandidate]:
        """Fetch a page and extract its candidates; a skipped page yields nothing."""
        fetched = await self.fetch_page(url)
        if fetched is None:
            return []

        candidates = await asyncio.to_thread(
            extract_from_html, fetched.body, fetched.url, fetched.encoding
        )
        logger.info(f"[ImageDiscovery] {len(candidates)} candidates on {fetched.url[:80]}")
        return candidates

    async def discover(self, pages: Sequence[Any], page: int = 1) -> DiscoveryResult:
        """
        Discover images on the given pages and return one result page.

        Args:
            pages: Raw page URLs; only the first `max_pages` are considered
            page: 1-based result page index

        Returns:
            DiscoveryResult over the merged, deduplicated candidate list
        """
        targets = []
        for raw in list(pages)[: self.config.max_pages]:
            url = validate_http_url(raw)
            if url is None:
                logger.info(f"[ImageDiscovery] Skipping invalid page URL: {str(raw)[:80]}")
                continue
            targets.append(url)

        merger = CandidateMerger(self.config.max_images)

        if targets:
            logger.info(f"[ImageDiscovery] Fetching {len(targets)} pages")
            semaphore = asyncio.Semaphore(self.config.max_pages)

            async def bounded(url: str) -> List[ImageCandidate]:
                async with semaphore:
                    return await self.collect_page(url)

            # Fetch in parallel, merge serially in input order
            tasks = [asyncio.create_task(bounded(url)) for url in targets]
            try:
                for url, task in zip(targets, tasks):
                    merger.extend(await task)
                    if merger.is_full:
                        logger.info(
                            f"[ImageDiscovery] Reached {merger.limit} images at {url[:80]}, "
                            f"remaining pages dropped"
                        )
                        break
            finally:
                for task in tasks:
                    if not task.done():
                        task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)

        result = paginate(merger.items, page, self.config.page_size)
        logger.info(
            f"[ImageDiscovery] Discovery complete: total={result.total}, "
            f"page={max(1, page)}, returned={len(result.images)}, has_more={result.has_more}"
        )
        return result

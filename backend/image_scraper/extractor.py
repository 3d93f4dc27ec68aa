"""
Image Candidate Extractor

Walks the <img> elements of a parsed page and guesses, for each one, a
lightweight preview URL ("thumb") and the highest resolution asset ("full").

The guessing is done by ordered tiers: each tier reads one source off the
element, the first tier whose value resolves (and passes the tier group's
filter) wins.

Full URL tiers:
1. href of the enclosing <a>
2. data-full / data-original / data-large
3. last srcset entry
4. src
5. data-src
-> accepted only if it looks like an image file or a full-size endpoint

Full URL fallback (no filter): src, data-src, last srcset, first srcset
Thumb URL tiers (no filter): src, data-src, first srcset, last srcset
"""

import re
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Optional, Protocol, Sequence, Tuple, Union

from bs4 import BeautifulSoup
from bs4.element import Tag

from .models import ImageCandidate
from .url_resolver import resolve_url

IMAGE_EXT_PATTERN = re.compile(r"\.(jpe?g|png|gif|webp|avif|svg)$", re.IGNORECASE)
FULL_SIZE_HINTS = ("/orig", "large")

LAZY_SRC_ATTR = "data-src"
EXPLICIT_FULL_ATTRS = ("data-full", "data-original", "data-large")


# ============================================
# Document Interface
# ============================================


class ImageElement(Protocol):
    """An image-bearing element of a parsed document."""

    def attr(self, name: str) -> Optional[str]:
        ...

    def link_href(self) -> Optional[str]:
        """href of the nearest enclosing link element, if any."""
        ...


class Document(Protocol):
    """A parsed page that can list its image elements in document order."""

    def image_elements(self) -> Iterable[ImageElement]:
        ...


class SoupImageElement:
    """ImageElement backed by a BeautifulSoup tag."""

    def __init__(self, tag: Tag):
        self._tag = tag

    def attr(self, name: str) -> Optional[str]:
        value = self._tag.get(name)
        if isinstance(value, list):
            # Multi-valued attributes come back as token lists
            value = " ".join(value)
        return value

    def link_href(self) -> Optional[str]:
        anchor = self._tag.find_parent("a")
        if anchor is None:
            return None
        href = anchor.get("href")
        return href if isinstance(href, str) else None


class HtmlDocument:
    """Document backed by BeautifulSoup's bundled html.parser."""

    def __init__(self, markup: Union[str, bytes], encoding: Optional[str] = None):
        if isinstance(markup, bytes):
            # bs4 sniffs <meta charset> itself when no header charset is known
            self._soup = BeautifulSoup(markup, "html.parser", from_encoding=encoding)
        else:
            self._soup = BeautifulSoup(markup, "html.parser")

    def image_elements(self) -> Iterator[SoupImageElement]:
        for tag in self._soup.find_all("img"):
            yield SoupImageElement(tag)


# ============================================
# Source Collection
# ============================================


def parse_srcset(srcset: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Return the first and last URL listed in a srcset attribute.

    Entries are comma separated; each entry's URL is its first
    whitespace-separated token. Descriptors are ignored.
    """
    if not srcset:
        return None, None

    urls = []
    for entry in srcset.split(","):
        tokens = entry.split()
        if tokens:
            urls.append(tokens[0])

    if not urls:
        return None, None
    return urls[0], urls[-1]


@dataclass
class ElementSources:
    """Raw (unresolved) source values read off one image element."""
    src: Optional[str] = None
    lazy_src: Optional[str] = None
    srcset_first: Optional[str] = None
    srcset_last: Optional[str] = None
    link_href: Optional[str] = None
    explicit_full: Optional[str] = None

    @classmethod
    def from_element(cls, element: ImageElement) -> "ElementSources":
        srcset_first, srcset_last = parse_srcset(element.attr("srcset"))
        explicit_full = None
        for name in EXPLICIT_FULL_ATTRS:
            value = element.attr(name)
            if value:
                explicit_full = value
                break

        return cls(
            src=element.attr("src"),
            lazy_src=element.attr(LAZY_SRC_ATTR),
            srcset_first=srcset_first,
            srcset_last=srcset_last,
            link_href=element.link_href(),
            explicit_full=explicit_full,
        )


# ============================================
# Tiers
# ============================================

SourceTier = Callable[[ElementSources], Optional[str]]


def from_link_href(sources: ElementSources) -> Optional[str]:
    return sources.link_href


def from_explicit_full(sources: ElementSources) -> Optional[str]:
    return sources.explicit_full


def from_srcset_last(sources: ElementSources) -> Optional[str]:
    return sources.srcset_last


def from_srcset_first(sources: ElementSources) -> Optional[str]:
    return sources.srcset_first


def from_src(sources: ElementSources) -> Optional[str]:
    return sources.src


def from_lazy_src(sources: ElementSources) -> Optional[str]:
    return sources.lazy_src


FULL_TIERS: Tuple[SourceTier, ...] = (
    from_link_href,
    from_explicit_full,
    from_srcset_last,
    from_src,
    from_lazy_src,
)

FULL_FALLBACK_TIERS: Tuple[SourceTier, ...] = (
    from_src,
    from_lazy_src,
    from_srcset_last,
    from_srcset_first,
)

THUMB_TIERS: Tuple[SourceTier, ...] = (
    from_src,
    from_lazy_src,
    from_srcset_first,
    from_srcset_last,
)


def looks_like_full_image(url: str) -> bool:
    """True if the URL ends in an image extension or hints at a full-size endpoint."""
    if IMAGE_EXT_PATTERN.search(url):
        return True
    return any(hint in url for hint in FULL_SIZE_HINTS)


def first_resolved(
    tiers: Sequence[SourceTier],
    sources: ElementSources,
    base: str,
    accept: Optional[Callable[[str], bool]] = None,
) -> Optional[str]:
    """Evaluate tiers in order, return the first value that resolves and is accepted."""
    for tier in tiers:
        resolved = resolve_url(tier(sources), base)
        if resolved is None:
            continue
        if accept is None or accept(resolved):
            return resolved
    return None


def candidate_for(sources: ElementSources, base: str) -> Optional[ImageCandidate]:
    """Pick the (thumb, full) pair for one element, or None if nothing resolves."""
    full = first_resolved(FULL_TIERS, sources, base, accept=looks_like_full_image)
    if full is None:
        full = first_resolved(FULL_FALLBACK_TIERS, sources, base)

    thumb = first_resolved(THUMB_TIERS, sources, base)

    # Whichever side resolved stands in for the missing one
    if full is None:
        full = thumb
    if thumb is None:
        thumb = full

    if full is None or thumb is None:
        return None
    return ImageCandidate(thumb=thumb, full=full)


def extract_candidates(document: Document, base: str) -> List[ImageCandidate]:
    """
    Extract image candidates from a parsed document.

    Args:
        document: Parsed page exposing its image elements
        base: Absolute URL the page was served from

    Returns:
        Candidates in document order (not deduplicated)
    """
    found: List[ImageCandidate] = []
    for element in document.image_elements():
        candidate = candidate_for(ElementSources.from_element(element), base)
        if candidate is not None:
            found.append(candidate)
    return found


def extract_from_html(
    markup: Union[str, bytes],
    base: str,
    encoding: Optional[str] = None,
) -> List[ImageCandidate]:
    """Parse raw HTML and extract its image candidates."""
    return extract_candidates(HtmlDocument(markup, encoding=encoding), base)

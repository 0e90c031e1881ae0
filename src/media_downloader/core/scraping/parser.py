"""HTML/CSS parsing helpers: media URL extraction and normalization.
"""

from __future__ import annotations

import re
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from bs4 import BeautifulSoup

from media_downloader.core.scraping.detector import (
    MediaCategory,
    detect_category,
    is_media_url,
)
from media_downloader.core.scraping.normalizer import normalize_url

CSS_URL_RE = re.compile(r"url\(\s*([\"']?)([^)\"']+)\1\s*\)", re.IGNORECASE)

# (raw url, category implied by the surface it was found on)
Candidate = Tuple[Optional[str], Optional[MediaCategory]]


def _is_data_uri(value: str) -> bool:
    return value.strip().lower().startswith("data:")


def extract_css_urls(text: str) -> List[str]:
    """Return every `url(...)` value in a CSS text, data URIs excluded."""
    urls: List[str] = []
    for m in CSS_URL_RE.finditer(text or ""):
        value = m.group(2).strip()
        if not value or _is_data_uri(value):
            continue
        urls.append(value)
    return urls


def _image_candidates(soup: BeautifulSoup) -> Iterator[Candidate]:
    for img in soup.find_all("img"):
        yield img.get("src"), MediaCategory.IMAGE


def _video_candidates(soup: BeautifulSoup) -> Iterator[Candidate]:
    for video in soup.find_all("video"):
        yield video.get("src"), MediaCategory.VIDEO
        for source in video.find_all("source"):
            yield source.get("src"), MediaCategory.VIDEO


def _embed_candidates(soup: BeautifulSoup) -> Iterator[Candidate]:
    for tag in soup.find_all(["embed", "object"]):
        yield tag.get("src"), None
        yield tag.get("data"), None


def _inline_css_candidates(soup: BeautifulSoup) -> Iterator[Candidate]:
    for tag in soup.find_all(style=True):
        for u in extract_css_urls(tag.get("style") or ""):
            yield u, None
    for style in soup.find_all("style"):
        for u in extract_css_urls(style.string or ""):
            yield u, None


def _resolve(
    candidates: Iterable[Candidate],
    base_url: str,
    kinds: Optional[Iterable[MediaCategory]] = None,
) -> Set[str]:
    wanted = set(kinds) if kinds is not None else None
    found: Set[str] = set()
    for raw, hint in candidates:
        if raw and _is_data_uri(raw):
            continue
        full = normalize_url(raw, base_url)
        if not full:
            continue
        if wanted is not None and (hint or detect_category(full)) not in wanted:
            continue
        found.add(full)
    return found


def extract_media_urls(
    html: str,
    base_url: str,
    kinds: Optional[Iterable[MediaCategory]] = None,
) -> Set[str]:
    """Extract media resource URLs from a page and return them as a set.

    Scans img, video/source, embed/object, inline styles, <style> blocks and
    anchors pointing at media files. Stylesheet links are not followed here,
    see `extract_stylesheet_urls`.

    `kinds` restricts the result to the given categories; None keeps all.
    """
    soup = BeautifulSoup(html, "html.parser")

    candidates: List[Candidate] = []
    candidates.extend(_image_candidates(soup))
    candidates.extend(_video_candidates(soup))
    candidates.extend(_embed_candidates(soup))
    candidates.extend(_inline_css_candidates(soup))
    found = _resolve(candidates, base_url, kinds)

    # anchors only count when they link straight to a media file
    anchors: List[Candidate] = []
    for a in soup.find_all("a", href=True):
        full = normalize_url(a.get("href"), base_url)
        if full and is_media_url(full):
            anchors.append((full, None))
    found |= _resolve(anchors, base_url, kinds)

    return found


def extract_stylesheet_urls(html: str, base_url: str) -> Set[str]:
    """Absolute URLs of every <link rel="stylesheet"> on the page."""
    soup = BeautifulSoup(html, "html.parser")
    urls: Set[str] = set()
    for link in soup.find_all("link", href=True):
        rels = {r.lower() for r in (link.get("rel") or [])}
        if "stylesheet" not in rels:
            continue
        full = normalize_url(link.get("href"), base_url)
        if full:
            urls.add(full)
    return urls


def extract_media_from_css(
    css_text: str,
    stylesheet_url: str,
    kinds: Optional[Iterable[MediaCategory]] = None,
) -> Set[str]:
    """Resolve `url(...)` references in a stylesheet against its own URL."""
    return _resolve(((u, None) for u in extract_css_urls(css_text)), stylesheet_url, kinds)

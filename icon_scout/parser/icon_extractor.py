# icon_scout/parser/icon_extractor.py
"""
Finds the icon reference a page declares for itself.

Three tiers, tried in order; the first hit wins and tiers are never mixed:

1. ``<link rel=...>`` with one of :data:`LINK_RELATIONS` (in list order);
2. ``<link rel="icon">`` by declared ``sizes``, biggest first, then any icon;
3. ``<meta property|name=...>`` social preview images.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Union

from icon_scout.logger import logger
from icon_scout.models import CandidateOrigin
from icon_scout.parser.html_parser import TagRecord, scan_tags

__all__ = (
    "IconReference",
    "LINK_RELATIONS",
    "ICON_SIZES",
    "META_PROPERTIES",
    "extract_icon",
)

LINK_RELATIONS: Sequence[str] = (
    "apple-touch-icon-precomposed",
    "apple-touch-icon",
    "fluid-icon",
    "shortcut icon",
    "favicon",
    "mask-icon",
    "image_src",
)
ICON_SIZES: Sequence[str] = ("512x512", "256x256", "192x192", "128x128", "64x64", "32x32")
META_PROPERTIES: Sequence[str] = ("twitter:image", "og:image")


@dataclass(frozen=True, slots=True)
class IconReference:
    """Raw (possibly relative) reference found in the markup."""

    href: str
    origin: CandidateOrigin
    matched: str


def _rel(tag: TagRecord) -> str:
    return " ".join(tag.get("rel").lower().split())


def _first_href(tags: Iterable[TagRecord]) -> Optional[str]:
    for tag in tags:
        href = tag.get("href").strip()
        if href:
            return href
    return None


def _by_relation(links: List[TagRecord]) -> Optional[IconReference]:
    for rel in LINK_RELATIONS:
        href = _first_href(t for t in links if _rel(t) == rel)
        if href:
            return IconReference(href, CandidateOrigin.HTML_LINK, f"rel={rel}")
    return None


def _by_size(links: List[TagRecord]) -> Optional[IconReference]:
    icons = [t for t in links if _rel(t) == "icon"]
    for size in ICON_SIZES:
        href = _first_href(t for t in icons if size in t.get("sizes").lower().split())
        if href:
            return IconReference(href, CandidateOrigin.HTML_LINK, f"rel=icon sizes={size}")
    href = _first_href(icons)
    if href:
        return IconReference(href, CandidateOrigin.HTML_LINK, "rel=icon")
    return None


def _by_meta(metas: List[TagRecord]) -> Optional[IconReference]:
    for prop in META_PROPERTIES:
        for tag in metas:
            key = (tag.get("property") or tag.get("name")).strip().lower()
            content = tag.get("content").strip()
            if key == prop and content:
                return IconReference(content, CandidateOrigin.HTML_META, f"meta={prop}")
    return None


def extract_icon(html: Union[str, bytes], max_lines: int = 1000) -> Optional[IconReference]:
    """Return the best icon reference in *html*, or ``None`` if the page declares none."""
    tags = list(scan_tags(html, ("link", "meta"), max_lines=max_lines))
    links = [t for t in tags if t.name == "link"]
    metas = [t for t in tags if t.name == "meta"]

    for tier in (_by_relation, _by_size):
        found = tier(links)
        if found:
            break
    else:
        found = _by_meta(metas)

    if found:
        logger.debug("Icon reference %s matched by %s", found.href, found.matched)
    else:
        logger.debug("No icon markup in the first %d lines", max_lines)
    return found

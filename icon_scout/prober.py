# File: icon_scout/prober.py
"""icon_scout.prober: запасные источники иконки, когда в HTML ничего не нашлось.

Порядок: зеркало иконок → агрегатор favicon → стандартные пути на самом сайте.
"""

from __future__ import annotations

from typing import AsyncIterator, List, Sequence, Tuple

from icon_scout.config import ResolverConfig
from icon_scout.crawler.fetcher import Fetcher
from icon_scout.errors import FetchExhausted
from icon_scout.logger import logger
from icon_scout.models import CandidateOrigin, FaviconCandidate, PipelineContext, TargetSite
from icon_scout.utils import url_extension

__all__: Sequence[str] = ("FallbackProber", "split_domain", "mirror_name")

# second-level labels used under two-letter country TLDs (bbc.co.uk, abc.net.au)
_COUNTRY_SECOND_LEVEL = frozenset({"ac", "co", "com", "edu", "gov", "net", "org"})

# Google's s2 endpoint always answers with PNG
_AGGREGATOR_EXTENSION = "png"


def split_domain(hostname: str) -> Tuple[List[str], str]:
    """Split *hostname* into (subdomain labels, second-level name).

    ``docs.google.com`` → ``(["docs"], "google")``; a leading ``www`` is dropped.
    """
    labels = [label for label in hostname.lower().rstrip(".").split(".") if label]
    if labels and labels[0] == "www":
        labels = labels[1:]
    if len(labels) < 2:
        return [], labels[0] if labels else ""

    suffix_len = 1
    if len(labels) >= 3 and len(labels[-1]) == 2 and labels[-2] in _COUNTRY_SECOND_LEVEL:
        suffix_len = 2
    registrable = labels[: len(labels) - suffix_len]
    return registrable[:-1], registrable[-1]


def mirror_name(hostname: str, providers: Sequence[str]) -> str:
    """Icon name on the mirror: ``provider-subservice`` for known platforms, else the bare name."""
    subdomains, name = split_domain(hostname)
    if name in providers and subdomains:
        return f"{name}-{subdomains[-1]}"
    return name


class FallbackProber:
    """Yields fallback candidates whose content is actually reachable."""

    def __init__(self, fetcher: Fetcher, config: ResolverConfig) -> None:
        self.fetcher = fetcher
        self.config = config

    def sources(self, site: TargetSite) -> List[FaviconCandidate]:
        """All fallback candidates for *site*, in probing order. No I/O."""
        found: List[FaviconCandidate] = []

        name = mirror_name(site.hostname, self.config.providers)
        if self.config.mirror_url and name:
            url = self.config.mirror_url.format(name=name)
            found.append(FaviconCandidate(url, CandidateOrigin.THIRD_PARTY_MIRROR, url_extension(url)))

        if self.config.aggregator_url:
            url = self.config.aggregator_url.format(host=site.hostname, size=self.config.aggregator_size)
            found.append(FaviconCandidate(url, CandidateOrigin.AGGREGATOR, _AGGREGATOR_EXTENSION))

        for path in self.config.well_known_paths:
            url = f"{site.origin}/{path}"
            found.append(FaviconCandidate(url, CandidateOrigin.WELL_KNOWN_PATH, url_extension(url)))
        return found

    async def candidates(self, ctx: PipelineContext) -> AsyncIterator[Tuple[FaviconCandidate, bytes]]:
        """Probe each source in turn and yield ``(candidate, body)`` for the non-empty ones.

        Sources are probed lazily: nothing after the candidate the caller
        accepts is ever requested.
        """
        for candidate in self.sources(ctx.site):
            logger.info("Trying %s: %s", candidate.origin.value, candidate.source_url)
            try:
                body = await self.fetcher.fetch(candidate.source_url)
            except FetchExhausted as exc:
                logger.debug("Probe failed: %s", exc)
                ctx.record_failure(candidate.origin.value, candidate.source_url, "unreachable")
                continue
            yield candidate, body

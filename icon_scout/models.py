# icon_scout/models.py
"""
Data models for the IconScout favicon pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Tuple

if TYPE_CHECKING:
    from icon_scout.config import ResolverConfig

__all__ = (
    "TargetSite",
    "FetchStrategy",
    "FETCH_STRATEGIES",
    "CandidateOrigin",
    "FaviconCandidate",
    "DownloadedAsset",
    "ResolvedIcon",
    "PipelineContext",
)


@dataclass(frozen=True, slots=True)
class TargetSite:
    """Site the icon is resolved for. Built once by :func:`icon_scout.utils.parse_target`."""

    raw_url: str
    scheme: str
    hostname: str
    netloc: str
    normalized_slug: str

    @property
    def origin(self) -> str:
        """``scheme://netloc`` – the port is kept so local servers stay reachable."""
        return f"{self.scheme}://{self.netloc}"

    @property
    def page_url(self) -> str:
        return f"{self.origin}/"


@dataclass(frozen=True, slots=True)
class FetchStrategy:
    """One header combination tried by the fetcher."""

    name: str
    use_referer: bool
    use_user_agent: bool


# Cheapest first: plain request, then progressively more browser-like ones.
FETCH_STRATEGIES: Tuple[FetchStrategy, ...] = (
    FetchStrategy("none", use_referer=False, use_user_agent=False),
    FetchStrategy("referer-only", use_referer=True, use_user_agent=False),
    FetchStrategy("user-agent-only", use_referer=False, use_user_agent=True),
    FetchStrategy("referer+user-agent", use_referer=True, use_user_agent=True),
)


class CandidateOrigin(str, Enum):
    HTML_LINK = "html-link"
    HTML_META = "html-meta"
    THIRD_PARTY_MIRROR = "third-party-mirror"
    AGGREGATOR = "aggregator"
    WELL_KNOWN_PATH = "well-known-path"
    USER_SUPPLIED = "user-supplied"


@dataclass(frozen=True, slots=True)
class FaviconCandidate:
    """A proposed icon source, not yet downloaded or validated."""

    source_url: str
    origin: CandidateOrigin
    file_extension: str


@dataclass(frozen=True, slots=True)
class DownloadedAsset:
    local_path: Path
    byte_size: int
    detected_pixel_dimension: Optional[Tuple[int, int]] = None


@dataclass(frozen=True, slots=True)
class ResolvedIcon:
    """What the pipeline hands back: the validated file and where it came from."""

    asset: DownloadedAsset
    candidate: FaviconCandidate

    def as_dict(self) -> dict:
        return {
            "source_url": self.candidate.source_url,
            "origin": self.candidate.origin.value,
            "file_extension": self.candidate.file_extension,
            "local_path": str(self.asset.local_path),
            "byte_size": self.asset.byte_size,
            "dimension": list(self.asset.detected_pixel_dimension)
            if self.asset.detected_pixel_dimension
            else None,
        }


@dataclass(slots=True)
class PipelineContext:
    """State passed through the stages of one run.

    ``site``, ``config`` and ``scratch_dir`` are fixed for the run; ``candidate``
    is the only field a stage reassigns. ``attempts`` collects
    ``(stage, url, reason)`` for every source that did not work out.
    """

    site: TargetSite
    config: "ResolverConfig"
    scratch_dir: Path
    candidate: Optional[FaviconCandidate] = None
    attempts: List[Tuple[str, str, str]] = field(default_factory=list)

    def record_failure(self, stage: str, url: str, reason: str) -> None:
        self.attempts.append((stage, url, reason))

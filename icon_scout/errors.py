# File: icon_scout/errors.py
"""Exception hierarchy for the favicon resolution pipeline.

Every error knows the pipeline *stage* it was raised in and the *url* that was
being processed, so the CLI can print a single diagnostic line naming both.

Recoverable (the engine skips to the next candidate source):
:class:`FetchExhausted`, :class:`UnsupportedFormat`, :class:`QualityRejected`.

Terminal for the run:
:class:`InvalidURL`, :class:`NoFaviconFound`, :class:`ConversionFailed`.
"""
from __future__ import annotations

from typing import Optional, Sequence, Tuple

__all__ = (
    "IconScoutError",
    "InvalidURL",
    "FetchExhausted",
    "UnsupportedFormat",
    "QualityRejected",
    "NoFaviconFound",
    "ConversionFailed",
    "RECOVERABLE_ERRORS",
)


class IconScoutError(Exception):
    """Base class for all pipeline failures."""

    stage: str = "pipeline"

    def __init__(self, message: str, *, url: Optional[str] = None, stage: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.url = url
        if stage is not None:
            self.stage = stage

    def __str__(self) -> str:
        where = f" ({self.url})" if self.url else ""
        return f"[{self.stage}] {self.message}{where}"


class InvalidURL(IconScoutError):
    stage = "normalize"


class FetchExhausted(IconScoutError):
    """All fetch strategies failed for *url*."""

    stage = "fetch"

    def __init__(self, url: str, reasons: Sequence[str] = (), *, stage: Optional[str] = None) -> None:
        self.reasons: Tuple[str, ...] = tuple(reasons)
        detail = "; ".join(self.reasons) if self.reasons else "no strategy attempted"
        super().__init__(f"all fetch strategies failed: {detail}", url=url, stage=stage)


class UnsupportedFormat(IconScoutError):
    stage = "quality"


class QualityRejected(IconScoutError):
    stage = "quality"


class NoFaviconFound(IconScoutError):
    """Every extraction and fallback source was exhausted."""

    stage = "resolve"

    def __init__(self, url: str, attempts: Sequence[Tuple[str, str, str]] = ()) -> None:
        self.attempts: Tuple[Tuple[str, str, str], ...] = tuple(attempts)
        super().__init__("no favicon found", url=url)

    def __str__(self) -> str:
        lines = [super().__str__()]
        for stage, url, reason in self.attempts:
            lines.append(f"  - {stage}: {url} -> {reason}")
        return "\n".join(lines)


class ConversionFailed(IconScoutError):
    stage = "convert"


RECOVERABLE_ERRORS = (FetchExhausted, UnsupportedFormat, QualityRejected)

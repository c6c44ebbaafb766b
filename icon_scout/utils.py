# File: icon_scout/utils.py
"""icon_scout.utils: разбор целевого URL, разрешение ссылок на иконки и временный каталог."""

from __future__ import annotations

import re
import tempfile
from contextlib import contextmanager
from pathlib import Path, PurePosixPath
from typing import Iterator, Sequence
from urllib.parse import urlsplit

from icon_scout.errors import InvalidURL
from icon_scout.logger import logger
from icon_scout.models import TargetSite

__all__: Sequence[str] = (
    "parse_target",
    "make_slug",
    "resolve_reference",
    "url_extension",
    "scratch_directory",
)

_TARGET_RE = re.compile(r"^(https?)://([^/?#\s]+)([/?#]\S*)?$", re.IGNORECASE)
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


def make_slug(hostname: str) -> str:
    """Превращает hostname в идентификатор: без ``www.``, нижний регистр, только [a-z0-9-]."""
    host = hostname.strip().lower()
    if host.startswith("www."):
        host = host[4:]
    return _NON_ALNUM_RE.sub("-", host)


def parse_target(raw_url: str) -> TargetSite:
    """Проверяет URL вида ``http(s)://host[/...]`` и строит :class:`TargetSite`.

    Raises:
        InvalidURL: если строка не подходит под шаблон или порт некорректен.
    """
    raw = raw_url.strip()
    if not _TARGET_RE.match(raw):
        raise InvalidURL("expected an http(s)://host[/...] URL", url=raw_url)

    parts = urlsplit(raw)
    hostname = parts.hostname
    try:
        port = parts.port
    except ValueError as exc:
        raise InvalidURL(f"bad port: {exc}", url=raw_url) from exc
    if not hostname:
        raise InvalidURL("missing hostname", url=raw_url)

    host_part = f"[{hostname}]" if ":" in hostname else hostname
    netloc = f"{host_part}:{port}" if port is not None else host_part

    site = TargetSite(
        raw_url=raw_url,
        scheme=parts.scheme.lower(),
        hostname=hostname,
        netloc=netloc,
        normalized_slug=make_slug(hostname),
    )
    logger.debug("Target parsed: %s -> %s (%s)", raw_url, site.origin, site.normalized_slug)
    return site


def resolve_reference(page_url: str, ref: str) -> str:
    """Делает ссылку из HTML абсолютной относительно схемы и хоста страницы.

    Только строковые операции, сетевых обращений нет.
    """
    ref = ref.strip()
    if ref.lower().startswith(("http://", "https://")):
        return ref

    parts = urlsplit(page_url)
    scheme = parts.scheme.lower()
    if ref.startswith("//"):
        return f"{scheme}:{ref}"

    base = f"{scheme}://{parts.netloc}"
    if ref.startswith("/"):
        return base + ref
    return f"{base}/{ref}"


def url_extension(url: str) -> str:
    """Расширение последнего сегмента пути без точки и query, в нижнем регистре."""
    return PurePosixPath(urlsplit(url).path).suffix.lstrip(".").lower()


@contextmanager
def scratch_directory(prefix: str = "icon-scout-") -> Iterator[Path]:
    """Временный каталог для загрузок; удаляется при любом выходе из блока."""
    with tempfile.TemporaryDirectory(prefix=prefix) as tmp:
        logger.debug("Scratch directory: %s", tmp)
        yield Path(tmp)
    logger.debug("Scratch directory removed: %s", tmp)

# File: icon_scout/engine.py
"""icon_scout.engine: оркестрация конвейера поиска иконки.

:class:`IconResolver` это асинхронный контекст одного запуска (HTTP-сессия и
временный каталог), :class:`Engine` это синхронный фасад для CLI и тестов.
"""

from __future__ import annotations

import asyncio
import shutil
from contextlib import AsyncExitStack
from functools import partial
from pathlib import Path
from typing import Optional, Tuple, Union

from icon_scout.chain import first_success
from icon_scout.config import ResolverConfig
from icon_scout.converter import convert_icon
from icon_scout.crawler.fetcher import Fetcher, open_session
from icon_scout.errors import RECOVERABLE_ERRORS, ConversionFailed, FetchExhausted, NoFaviconFound
from icon_scout.logger import logger
from icon_scout.models import (
    DownloadedAsset,
    FaviconCandidate,
    PipelineContext,
    ResolvedIcon,
)
from icon_scout.parser.icon_extractor import extract_icon
from icon_scout.prober import FallbackProber
from icon_scout.quality import QualityGate
from icon_scout.utils import parse_target, resolve_reference, scratch_directory, url_extension

__all__ = ["IconResolver", "Engine"]


class IconResolver:
    """Один запуск конвейера: HTML → ссылка → абсолютный URL → проверенный файл.

    Временный каталог и HTTP-сессия живут ровно столько, сколько блок
    ``async with``; все файлы из :class:`ResolvedIcon` нужно забрать внутри него.
    """

    def __init__(self, config: ResolverConfig) -> None:
        self.config = config
        self._stack: Optional[AsyncExitStack] = None
        self.scratch_dir: Optional[Path] = None
        self.fetcher: Optional[Fetcher] = None
        self.prober: Optional[FallbackProber] = None
        self.gate: Optional[QualityGate] = None

    async def __aenter__(self) -> IconResolver:
        stack = AsyncExitStack()
        try:
            self.scratch_dir = stack.enter_context(scratch_directory())
            session = await stack.enter_async_context(open_session())
        except BaseException:
            await stack.aclose()
            raise
        self._stack = stack
        self.fetcher = Fetcher(session, self.config)
        self.prober = FallbackProber(self.fetcher, self.config)
        self.gate = QualityGate(self.fetcher, self.config, self.scratch_dir)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._stack is not None:
            stack, self._stack = self._stack, None
            await stack.__aexit__(exc_type, exc, tb)

    async def resolve(self, raw_url: str, user_icon: Union[str, Path, None] = None) -> ResolvedIcon:
        """Найти и проверить иконку для *raw_url*.

        Raises:
            InvalidURL: URL не вида ``http(s)://host``; до любых запросов.
            QualityRejected: пользовательский файл пустой или отсутствует.
            NoFaviconFound: все источники исчерпаны.
        """
        if self.gate is None or self.scratch_dir is None:
            raise RuntimeError("IconResolver must be used as an async context manager")

        site = parse_target(raw_url)
        ctx = PipelineContext(site=site, config=self.config, scratch_dir=self.scratch_dir)
        logger.info("Resolving favicon for %s (slug %s)", site.hostname, site.normalized_slug)

        if user_icon is not None:
            asset, ctx.candidate = self.gate.accept_user_icon(user_icon)
            logger.info("Using custom favicon: %s", asset.local_path.name)
            return ResolvedIcon(asset=asset, candidate=ctx.candidate)

        outcome = await first_success(self._attempts(ctx), recoverable=RECOVERABLE_ERRORS)
        if not outcome.ok:
            raise NoFaviconFound(site.raw_url, ctx.attempts)

        candidate = ctx.candidate
        assert candidate is not None
        logger.info("Accepted %s favicon: %s", candidate.origin.value, candidate.source_url)
        return ResolvedIcon(asset=outcome.value, candidate=candidate)

    async def _attempts(self, ctx: PipelineContext):
        """Candidate sources in precedence order, produced lazily."""
        assert self.fetcher is not None and self.prober is not None
        page_url = ctx.site.page_url
        logger.info("Checking for favicon link in HTML: %s", page_url)
        try:
            html: Optional[bytes] = await self.fetcher.fetch(page_url)
        except FetchExhausted as exc:
            logger.warning("Page unavailable, skipping HTML extraction: %s", exc)
            ctx.record_failure("html", page_url, "page unavailable")
            html = None

        if html is not None:
            ref = extract_icon(html, max_lines=self.config.max_html_lines)
            if ref is not None:
                url = resolve_reference(page_url, ref.href)
                logger.info("Found favicon reference in HTML (%s): %s", ref.matched, url)
                candidate = FaviconCandidate(url, ref.origin, url_extension(url))
                yield candidate.origin.value, partial(self._check, ctx, candidate)
            else:
                logger.info("No favicon link found in HTML, trying fallbacks")
                ctx.record_failure("html", page_url, "no icon markup")

        async for candidate, body in self.prober.candidates(ctx):
            yield candidate.origin.value, partial(self._check, ctx, candidate, body)

    async def _check(
        self, ctx: PipelineContext, candidate: FaviconCandidate, payload: Optional[bytes] = None
    ) -> DownloadedAsset:
        assert self.gate is not None
        ctx.candidate = candidate
        try:
            return await self.gate.accept(candidate, payload)
        except RECOVERABLE_ERRORS as exc:
            logger.info("Rejected %s: %s", candidate.source_url, exc.message)
            ctx.record_failure(candidate.origin.value, candidate.source_url, exc.message)
            ctx.candidate = None
            raise


class Engine:
    """Фасад для CLI и тестов: запуск конвейера и сохранение результата."""

    def __init__(self, config: ResolverConfig) -> None:
        self.config = config

    def run(
        self,
        url: str,
        user_icon: Union[str, Path, None] = None,
        output: Union[str, Path, None] = None,
        size: Optional[int] = None,
        convert: bool = True,
    ) -> Tuple[ResolvedIcon, Optional[Path]]:
        """Запускает конвейер и, если задан *output*, сохраняет туда иконку.

        Возвращает найденную иконку и путь сохранённого файла. Временный
        каталог к моменту возврата уже удалён.
        """

        async def _runner() -> Tuple[ResolvedIcon, Optional[Path]]:
            async with IconResolver(self.config) as resolver:
                resolved = await resolver.resolve(url, user_icon)
                saved = self.deliver(resolved, output, size, convert) if output else None
                return resolved, saved

        return asyncio.run(_runner())

    def deliver(
        self,
        resolved: ResolvedIcon,
        output: Union[str, Path],
        size: Optional[int] = None,
        convert: bool = True,
    ) -> Path:
        """Копирует или конвертирует принятый файл в *output*.

        Raises:
            ConversionFailed: конвертация не удалась или *output* не записать.
        """
        dest = Path(output).expanduser()
        try:
            if convert:
                return convert_icon(resolved.asset.local_path, dest, size or self.config.icon_size)
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(resolved.asset.local_path, dest)
        except OSError as exc:
            raise ConversionFailed(f"cannot write icon: {exc}", url=str(dest)) from exc
        logger.info("Icon saved to %s", dest)
        return dest

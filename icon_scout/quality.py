# File: icon_scout/quality.py
"""icon_scout.quality: проверка кандидата перед тем, как принять его как иконку."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

from PIL import Image

from icon_scout.config import ResolverConfig
from icon_scout.crawler.fetcher import Fetcher
from icon_scout.errors import QualityRejected, UnsupportedFormat
from icon_scout.logger import logger
from icon_scout.models import CandidateOrigin, DownloadedAsset, FaviconCandidate

__all__: Sequence[str] = ("QualityGate", "measure_image", "VECTOR_EXTENSIONS")

VECTOR_EXTENSIONS = frozenset({"svg"})


def measure_image(path: Union[str, Path]) -> Optional[Tuple[int, int]]:
    """Размер растрового изображения в пикселях или ``None``, если Pillow его не распознал.

    Для ICO берётся самый крупный из вложенных размеров.
    """
    try:
        with Image.open(path) as img:
            sizes = img.info.get("sizes")
            if sizes:
                return max(sizes, key=lambda s: s[0] * s[1])
            return img.size
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        logger.debug("Cannot read image %s: %s", path, exc)
        return None


class QualityGate:
    """Скачивает кандидата во временный каталог и проверяет формат и размер."""

    def __init__(self, fetcher: Fetcher, config: ResolverConfig, scratch_dir: Path) -> None:
        self.fetcher = fetcher
        self.config = config
        self.scratch_dir = scratch_dir
        self._counter = 0

    def check_extension(self, candidate: FaviconCandidate) -> str:
        ext = candidate.file_extension.lower().lstrip(".")
        if ext not in self.config.allowed_extensions:
            raise UnsupportedFormat(f"unsupported image extension {ext or '<none>'!r}", url=candidate.source_url)
        return ext

    def _next_path(self, ext: str) -> Path:
        self._counter += 1
        return self.scratch_dir / f"favicon-{self._counter:02d}.{ext}"

    async def accept(self, candidate: FaviconCandidate, payload: Optional[bytes] = None) -> DownloadedAsset:
        """Скачать и проверить *candidate*.

        Если тело уже получено при пробе, оно передаётся в *payload* и
        повторного запроса нет.

        Raises:
            UnsupportedFormat: расширение не из белого списка.
            QualityRejected: пустой файл, размер не определить или он меньше минимума.
            FetchExhausted: скачать не удалось.
        """
        ext = self.check_extension(candidate)
        target = self._next_path(ext)
        if payload is None:
            await self.fetcher.fetch(candidate.source_url, outfile=target)
        else:
            target.write_bytes(payload)

        byte_size = target.stat().st_size if target.exists() else 0
        if byte_size == 0:
            raise QualityRejected("downloaded file is empty", url=candidate.source_url)

        if ext in VECTOR_EXTENSIONS:
            logger.debug("Vector icon accepted without size check: %s", candidate.source_url)
            return DownloadedAsset(target, byte_size, None)

        dimension = measure_image(target)
        if dimension is None:
            raise QualityRejected("cannot determine image dimensions", url=candidate.source_url)
        width, height = dimension
        if min(width, height) < self.config.min_icon_size:
            raise QualityRejected(
                f"{width}x{height} is below the {self.config.min_icon_size}px minimum",
                url=candidate.source_url,
            )
        return DownloadedAsset(target, byte_size, (width, height))

    def accept_user_icon(self, path: Union[str, Path]) -> Tuple[DownloadedAsset, FaviconCandidate]:
        """Иконка, указанная пользователем: только проверка, что файл не пустой."""
        src = Path(path).expanduser()
        if not src.is_file() or src.stat().st_size == 0:
            raise QualityRejected("custom icon file not found or empty", url=str(src))

        ext = src.suffix.lstrip(".").lower()
        target = self._next_path(ext or "img")
        shutil.copyfile(src, target)
        candidate = FaviconCandidate(src.resolve().as_uri(), CandidateOrigin.USER_SUPPLIED, ext)
        return DownloadedAsset(target, target.stat().st_size, None), candidate

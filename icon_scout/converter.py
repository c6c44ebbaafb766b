# icon_scout/converter.py
"""
Conversion of an accepted icon into the fixed-size PNG a desktop entry needs.

Raster images go through Pillow; SVG is handed to the ``inkscape`` executable.
"""
from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Union

from PIL import Image, ImageOps

from icon_scout.errors import ConversionFailed
from icon_scout.logger import logger

__all__ = ("convert_icon",)


def _convert_raster(src: Path, dest: Path, size: int) -> None:
    try:
        with Image.open(src) as img:
            img.seek(0)
            frame = img.convert("RGBA")
            ImageOps.contain(frame, (size, size), Image.Resampling.LANCZOS).save(dest, format="PNG")
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise ConversionFailed(f"Pillow could not convert the image: {exc}", url=str(src)) from exc


def _convert_svg(src: Path, dest: Path, size: int) -> None:
    inkscape = shutil.which("inkscape")
    if inkscape is None:
        raise ConversionFailed("inkscape is required to process SVG icons", url=str(src))
    cmd = [inkscape, "-w", str(size), "-h", str(size), str(src), "-o", str(dest)]
    logger.debug("Running %s", " ".join(cmd))
    try:
        subprocess.run(cmd, check=True, capture_output=True, timeout=60)
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired) as exc:
        raise ConversionFailed(f"inkscape failed: {exc}", url=str(src)) from exc


def convert_icon(src: Union[str, Path], dest: Union[str, Path], size: int = 128) -> Path:
    """Write *src* as a PNG no larger than ``size``×``size`` to *dest*."""
    src, dest = Path(src), Path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Converting %s to %dx%d PNG", src.name, size, size)

    if src.suffix.lower() == ".svg":
        _convert_svg(src, dest, size)
    else:
        _convert_raster(src, dest, size)

    if not dest.is_file() or dest.stat().st_size == 0:
        raise ConversionFailed("conversion produced no output", url=str(src))
    return dest

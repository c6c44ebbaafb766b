# File: tests/test_engine.py
# End-to-end runs of the resolution pipeline against local sites
from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from icon_scout.engine import Engine, IconResolver
from icon_scout.errors import ConversionFailed, InvalidURL, NoFaviconFound, QualityRejected
from icon_scout.models import CandidateOrigin, DownloadedAsset, FaviconCandidate, ResolvedIcon


def html_page(head: str = "") -> tuple[bytes, str]:
    return f"<html><head>{head}</head><body>hello</body></html>".encode(), "text/html"


@pytest.mark.asyncio()
async def test_shortcut_icon_from_html(serve, config, png_256):
    base = await serve(
        {
            "/": html_page('<link rel="shortcut icon" href="/static/icon.png">'),
            "/static/icon.png": (png_256, "image/png"),
        }
    )
    async with IconResolver(config) as resolver:
        resolved = await resolver.resolve(base)
        assert resolved.asset.local_path.is_file()
        scratch = resolver.scratch_dir

    assert resolved.candidate.source_url == f"{base}/static/icon.png"
    assert resolved.candidate.origin is CandidateOrigin.HTML_LINK
    assert resolved.asset.detected_pixel_dimension == (256, 256)
    assert not scratch.exists()


@pytest.mark.asyncio()
async def test_no_icon_anywhere(serve, config):
    base = await serve({"/": html_page("<title>plain</title>")})
    async with IconResolver(config) as resolver:
        scratch = resolver.scratch_dir
        with pytest.raises(NoFaviconFound) as exc_info:
            await resolver.resolve(f"{base}/some/page?x=1")

    assert not scratch.exists()
    stages = [stage for stage, _, _ in exc_info.value.attempts]
    assert stages[0] == "html"
    assert stages.count("well-known-path") == len(config.well_known_paths)
    assert "no favicon found" in str(exc_info.value)


@pytest.mark.asyncio()
async def test_user_supplied_small_icon(serve, config, tmp_path, image_bytes):
    icon = tmp_path / "custom.png"
    icon.write_bytes(image_bytes(16))
    base = await serve({})
    async with IconResolver(config) as resolver:
        resolved = await resolver.resolve(base, user_icon=icon)
        assert resolved.asset.local_path.read_bytes() == icon.read_bytes()

    assert resolved.candidate.origin is CandidateOrigin.USER_SUPPLIED
    assert resolved.asset.detected_pixel_dimension is None
    assert serve.hits == []


@pytest.mark.asyncio()
async def test_rejected_html_candidate_falls_back(serve, config, png_64, png_256):
    base = await serve(
        {
            "/": html_page('<link rel="apple-touch-icon" href="img/touch.png">'),
            "/img/touch.png": (png_64, "image/png"),
            "/favicon.jpg": (png_256, "image/jpeg"),
        }
    )
    async with IconResolver(config) as resolver:
        resolved = await resolver.resolve(base)

    assert resolved.candidate.origin is CandidateOrigin.WELL_KNOWN_PATH
    assert resolved.candidate.source_url == f"{base}/favicon.jpg"
    # the probed body is reused by the quality gate
    assert [h.path for h in serve.hits].count("/favicon.jpg") == 1


@pytest.mark.asyncio()
async def test_unsupported_html_extension_falls_back(serve, config, png_256):
    base = await serve(
        {
            "/": html_page('<meta property="og:image" content="/preview.bmp">'),
            "/favicon.ico": (png_256, "image/x-icon"),
        }
    )
    async with IconResolver(config) as resolver:
        resolved = await resolver.resolve(base)
    assert resolved.candidate.source_url == f"{base}/favicon.ico"
    assert not any(h.path == "/preview.bmp" for h in serve.hits)


@pytest.mark.asyncio()
async def test_unavailable_page_goes_straight_to_fallbacks(serve, config, svg_icon):
    base = await serve({"/favicon.svg": (svg_icon, "image/svg+xml")})
    async with IconResolver(config) as resolver:
        resolved = await resolver.resolve(base)
    assert resolved.candidate.origin is CandidateOrigin.WELL_KNOWN_PATH
    assert resolved.asset.local_path.suffix == ".svg"


@pytest.mark.asyncio()
async def test_mirror_takes_precedence_over_well_known(serve, config, png_256):
    # 127.0.0.1 has the mirror name "0"
    mirror = await serve({"/png/0.png": (png_256, "image/png")})
    base = await serve({"/favicon.png": (png_256, "image/png")})
    cfg = config.model_copy(update={"mirror_url": f"{mirror}/png/{{name}}.png"})
    async with IconResolver(cfg) as resolver:
        resolved = await resolver.resolve(base)
    assert resolved.candidate.origin is CandidateOrigin.THIRD_PARTY_MIRROR
    assert not any(h.path == "/favicon.png" for h in serve.hits)


@pytest.mark.asyncio()
async def test_invalid_url_aborts_before_io(serve, config):
    await serve({})
    async with IconResolver(config) as resolver:
        with pytest.raises(InvalidURL):
            await resolver.resolve("example.org/no-scheme")
    assert serve.hits == []


@pytest.mark.asyncio()
async def test_missing_user_icon_is_terminal(config, tmp_path):
    async with IconResolver(config) as resolver:
        with pytest.raises(QualityRejected):
            await resolver.resolve("https://example.org", user_icon=tmp_path / "nope.png")


@pytest.mark.asyncio()
async def test_resolve_outside_context_is_an_error(config):
    with pytest.raises(RuntimeError):
        await IconResolver(config).resolve("https://example.org")


def _resolved(tmp_path: Path, size: int) -> ResolvedIcon:
    src = tmp_path / "favicon-01.png"
    Image.new("RGBA", (size, size), "green").save(src, format="PNG")
    cand = FaviconCandidate("https://a.com/favicon.png", CandidateOrigin.WELL_KNOWN_PATH, "png")
    return ResolvedIcon(DownloadedAsset(src, src.stat().st_size, (size, size)), cand)


def test_deliver_converts_to_requested_size(config, tmp_path):
    out = Engine(config).deliver(_resolved(tmp_path, 300), tmp_path / "out" / "site.png", size=128)
    with Image.open(out) as img:
        assert img.size == (128, 128)
        assert img.format == "PNG"


def test_deliver_copies_without_conversion(config, tmp_path):
    resolved = _resolved(tmp_path, 40)
    out = Engine(config).deliver(resolved, tmp_path / "copy.png", convert=False)
    assert out.read_bytes() == resolved.asset.local_path.read_bytes()


def test_deliver_into_unwritable_location_is_a_pipeline_error(config, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory")
    resolved = _resolved(tmp_path, 40)
    with pytest.raises(ConversionFailed) as exc_info:
        Engine(config).deliver(resolved, blocker / "out.png", convert=False)
    assert exc_info.value.url == str(blocker / "out.png")

    with pytest.raises(ConversionFailed):
        Engine(config).deliver(resolved, blocker / "out.png", size=64)

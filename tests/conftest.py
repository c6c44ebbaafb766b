# File: tests/conftest.py
from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Tuple, Union

import pytest
import pytest_asyncio
from aiohttp import web
from PIL import Image

from icon_scout.config import ResolverConfig

Route = Union[Callable[[web.Request], Awaitable[web.StreamResponse]], Tuple[bytes, str]]


def make_image(size: int, fmt: str = "PNG", height: Optional[int] = None) -> bytes:
    """Return an in-memory image of *size*×*height* (square by default)."""
    img = Image.new("RGBA", (size, height or size), (200, 40, 40, 255))
    if fmt == "JPEG":
        img = img.convert("RGB")
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


SVG_ICON = b'<svg xmlns="http://www.w3.org/2000/svg" width="16" height="16"><rect width="16" height="16"/></svg>'


@dataclass
class Hit:
    path: str
    referer: Optional[str]
    user_agent: Optional[str]


@pytest.fixture()
def config() -> ResolverConfig:
    """
    Config for local test servers: short timeouts, no third-party sources.
    """
    return ResolverConfig(
        timeout=5.0,
        connect_timeout=2.0,
        retry_delay=0,
        mirror_url=None,
        aggregator_url=None,
    )


@pytest.fixture()
def image_bytes():
    return make_image


@pytest.fixture()
def svg_icon() -> bytes:
    return SVG_ICON


@pytest.fixture()
def png_256() -> bytes:
    return make_image(256)


@pytest.fixture()
def png_64() -> bytes:
    return make_image(64)


def _static(body: bytes, content_type: str):
    async def handler(_):
        return web.Response(body=body, content_type=content_type)

    return handler


@pytest_asyncio.fixture
async def serve(unused_tcp_port_factory):
    """
    Start a local aiohttp site from a ``{path: handler | (body, content_type)}`` mapping.

    Returns the base URL; every request is recorded in ``serve.hits``.
    """
    runners: List[web.AppRunner] = []
    hits: List[Hit] = []

    @web.middleware
    async def record(request: web.Request, handler):
        hits.append(Hit(request.path, request.headers.get("Referer"), request.headers.get("User-Agent")))
        return await handler(request)

    async def _start(routes: Dict[str, Route]) -> str:
        app = web.Application(middlewares=[record])
        for path, route in routes.items():
            handler = _static(*route) if isinstance(route, tuple) else route
            app.router.add_get(path, handler)
        runner = web.AppRunner(app)
        await runner.setup()
        port = unused_tcp_port_factory()
        await web.TCPSite(runner, "127.0.0.1", port).start()
        runners.append(runner)
        return f"http://127.0.0.1:{port}"

    _start.hits = hits  # type: ignore[attr-defined]
    yield _start
    for runner in runners:
        await runner.cleanup()

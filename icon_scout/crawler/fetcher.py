# icon_scout/crawler/fetcher.py
"""
Fetcher module: retrieves a resource over HTTP, cycling through header
strategies until a site with bot protection lets the request through.
"""
from __future__ import annotations

import asyncio
import errno
from functools import partial
from pathlib import Path
from typing import Dict, Optional, Sequence, Union

from aiohttp import ClientConnectorError, ClientError, ClientSession, ClientTimeout

from icon_scout.chain import first_success
from icon_scout.config import ResolverConfig
from icon_scout.errors import FetchExhausted
from icon_scout.logger import logger
from icon_scout.models import FETCH_STRATEGIES, FetchStrategy

__all__ = ("Fetcher", "EmptyBody", "open_session")


class EmptyBody(Exception):
    """The server answered successfully but sent nothing."""


def open_session() -> ClientSession:
    """Session shared by one pipeline run: redirects and decompression are on by default."""
    return ClientSession(raise_for_status=False, auto_decompress=True)


def _is_connection_refused(exc: ClientConnectorError) -> bool:
    os_error = exc.os_error
    return isinstance(os_error, ConnectionRefusedError) or getattr(os_error, "errno", None) == errno.ECONNREFUSED


class Fetcher:
    """Tries each :class:`FetchStrategy` in order; the first non-empty response wins."""

    def __init__(
        self,
        session: ClientSession,
        config: ResolverConfig,
        strategies: Sequence[FetchStrategy] = FETCH_STRATEGIES,
    ) -> None:
        self.session = session
        self.config = config
        self.strategies = tuple(strategies)

    async def fetch(
        self,
        url: str,
        outfile: Union[str, Path, None] = None,
        timeout: Optional[float] = None,
    ) -> bytes:
        """
        Fetch *url* and return the body.

        When *outfile* is given the body is also written there. Raises
        :class:`FetchExhausted` if no strategy produced a non-empty body.
        """
        budget = timeout if timeout is not None else self.config.timeout
        outcome = await first_success(
            ((s.name, partial(self._attempt, url, s, budget)) for s in self.strategies),
            recoverable=(ClientError, asyncio.TimeoutError, EmptyBody),
        )
        if not outcome.ok:
            raise FetchExhausted(url, outcome.reasons())

        body: bytes = outcome.value
        logger.debug("Fetched %s via %s (%d bytes)", url, outcome.label, len(body))
        if outfile is not None:
            Path(outfile).write_bytes(body)
        return body

    def headers_for(self, strategy: FetchStrategy) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if strategy.use_referer:
            headers["Referer"] = self.config.referer
        if strategy.use_user_agent:
            headers["User-Agent"] = self.config.user_agent
        return headers

    async def _attempt(self, url: str, strategy: FetchStrategy, budget: float) -> bytes:
        timeout = ClientTimeout(total=budget, sock_connect=self.config.connect_timeout)
        headers = self.headers_for(strategy)
        retries = 0
        while True:
            try:
                async with self.session.get(url, headers=headers, timeout=timeout, allow_redirects=True) as resp:
                    resp.raise_for_status()
                    body = await resp.read()
            except ClientConnectorError as exc:
                if not _is_connection_refused(exc) or retries >= self.config.connect_retries:
                    raise
                retries += 1
                logger.debug(
                    "Connection refused for %s, retry %d/%d", url, retries, self.config.connect_retries
                )
                await asyncio.sleep(self.config.retry_delay)
                continue
            if not body:
                raise EmptyBody(f"empty response from {url}")
            return body

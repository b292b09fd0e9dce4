"""Resource size probes used by the image-size rule."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from urllib.parse import unquote

import aiohttp

from html_rubric import __version__

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0


class HttpHeadProbe:
    """Sizes HTTPS resources with HEAD requests and local files with ``stat``.

    Relative references are resolved against ``base_dir`` (the analyzed file's
    directory). Without a base directory they cannot be sized.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        base_dir: Path | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.base_dir = base_dir
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> HttpHeadProbe:
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def initialize(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                headers={"User-Agent": f"html-rubric/{__version__}"},
            )
            logger.debug("Probe session initialized. Timeout: %ss", self.timeout_seconds)
        return self.session

    async def close(self) -> None:
        if self.session is not None and not self.session.closed:
            await self.session.close()
        self.session = None

    async def content_length(self, url: str) -> int | None:
        if url.startswith("https://"):
            return await self._head_content_length(url)
        return await asyncio.to_thread(self._local_size, url)

    async def _head_content_length(self, url: str) -> int | None:
        session = await self.initialize()
        async with session.head(url, allow_redirects=True) as response:
            if response.status >= 400:
                logger.debug("HEAD %s returned status %d.", url, response.status)
                return None
            return response.content_length

    def _local_size(self, reference: str) -> int | None:
        if self.base_dir is None:
            return None
        path = reference.split("?", 1)[0].split("#", 1)[0]
        resolved = (self.base_dir / unquote(path).lstrip("/")).resolve()
        if not resolved.is_file():
            logger.debug("Local image %s not found.", resolved)
            return None
        return resolved.stat().st_size

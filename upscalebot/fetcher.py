"""
HTTP download of source images and model files.
"""
import asyncio
from pathlib import Path
from typing import Optional
import logging

import aiohttp

from .core.interfaces import ISourceFetcher
from .core.errors import TransferError

logger = logging.getLogger(__name__)


class HttpFetcher(ISourceFetcher):
    """
    Streams a URL to disk with aiohttp.

    The body is written to ``<destination>.part`` and renamed only once the
    whole response has arrived, so a failed transfer leaves nothing behind.
    """

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        chunk_size: int = 65536,
        timeout: float = 300.0
    ):
        self.session = session
        self.chunk_size = chunk_size
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def fetch(self, url: str, destination: Path) -> Path:
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        partial = destination.with_name(destination.name + ".part")

        logger.info(f"Downloading {url} -> {destination.name}")
        try:
            if self.session is not None:
                await self._stream(self.session, url, partial)
            else:
                async with aiohttp.ClientSession(timeout=self.timeout) as session:
                    await self._stream(session, url, partial)
            partial.replace(destination)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            partial.unlink(missing_ok=True)
            logger.error(f"Download failed for {url}: {e}")
            raise TransferError(f"Sorry, the image could not be downloaded. ({e})") from e

        logger.debug(f"Downloaded {destination.stat().st_size} bytes")
        return destination

    async def _stream(self, session: aiohttp.ClientSession, url: str, target: Path) -> None:
        async with session.get(url, timeout=self.timeout) as response:
            response.raise_for_status()
            with open(target, "wb") as f:
                async for chunk in response.content.iter_chunked(self.chunk_size):
                    f.write(chunk)

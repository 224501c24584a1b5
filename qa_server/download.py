"""
Model artifact download and cache inspection
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Optional

import httpx

from .errors import DownloadError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class CacheStatus:
    cached: bool
    size_bytes: Optional[int] = None


def cache_status(cache_path: str) -> CacheStatus:
    """Read-only view of the local artifact, never downloads"""
    if not os.path.isfile(cache_path):
        return CacheStatus(cached=False)
    return CacheStatus(cached=True, size_bytes=os.path.getsize(cache_path))


class ModelAcquirer:
    """
    Ensures a local copy of the ONNX model exists.

    The body is streamed to ``<cache_path>.part`` and renamed into place once
    complete, so ``cache_path`` only ever holds a fully received artifact.
    Content integrity is not verified.
    """

    def __init__(
        self,
        max_redirects: int = 1,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.max_redirects = max_redirects
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            follow_redirects=self.max_redirects > 0,
            max_redirects=self.max_redirects,
            timeout=httpx.Timeout(self.timeout),
            transport=self.transport,
        )

    async def ensure_local(self, remote_url: str, cache_path: str) -> None:
        if os.path.exists(cache_path):
            logger.info(f"Model already cached at {cache_path}")
            return

        directory = os.path.dirname(cache_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        partial_path = cache_path + ".part"
        logger.info(f"Downloading model from {remote_url}")
        try:
            written = await self._stream_to(remote_url, partial_path)
            os.replace(partial_path, cache_path)
        except (httpx.HTTPError, OSError) as e:
            _remove_quietly(partial_path)
            logger.error(f"Model download failed: {e}")
            raise DownloadError(f"Model download from {remote_url} failed: {e}") from e
        except asyncio.CancelledError:
            _remove_quietly(partial_path)
            raise

        logger.info(f"Model downloaded to {cache_path} ({written / (1024 * 1024):.2f} MB)")

    async def _stream_to(self, remote_url: str, path: str) -> int:
        written = 0
        async with self._client() as client:
            async with client.stream("GET", remote_url) as response:
                response.raise_for_status()
                with open(path, "wb") as f:
                    async for chunk in response.aiter_bytes(CHUNK_SIZE):
                        f.write(chunk)
                        written += len(chunk)
        return written


def _remove_quietly(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove partial download {path}: {e}")

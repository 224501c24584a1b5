"""
Process-wide inference session with single-flight initialization
"""

import asyncio
import enum
import logging
from typing import Any, Callable, Optional

from .download import ModelAcquirer

logger = logging.getLogger(__name__)


class SessionState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class SessionManager:
    """
    Lazily downloads the model and builds one inference session.

    Concurrent first callers all await the same in-flight load, so the
    download and the session construction each happen once. A failed load is
    reported to every waiter and the next call starts over.
    """

    def __init__(
        self,
        acquirer: ModelAcquirer,
        model_url: str,
        cache_path: str,
        session_factory: Callable[[str], Any],
    ):
        self.acquirer = acquirer
        self.model_url = model_url
        self.cache_path = cache_path
        self.session_factory = session_factory
        self._session: Optional[Any] = None
        self._loading: Optional[asyncio.Future] = None
        self._failed = False

    @property
    def state(self) -> SessionState:
        if self._session is not None:
            return SessionState.READY
        if self._loading is not None and not self._loading.done():
            return SessionState.LOADING
        if self._failed:
            return SessionState.FAILED
        return SessionState.UNINITIALIZED

    @property
    def session(self) -> Optional[Any]:
        return self._session

    async def get_session(self) -> Any:
        if self._session is not None:
            return self._session

        # No await between the check and the assignment
        if self._loading is None or self._loading.done():
            loading = asyncio.ensure_future(self._load())
            loading.add_done_callback(self._clear_loading)
            self._loading = loading

        # Shielded so one cancelled caller does not abort the shared load
        return await asyncio.shield(self._loading)

    def _clear_loading(self, loading: asyncio.Future) -> None:
        # Runs whether or not any caller is still waiting
        if self._loading is loading:
            self._loading = None
        if not loading.cancelled():
            loading.exception()

    async def _load(self) -> Any:
        self._failed = False
        try:
            await self.acquirer.ensure_local(self.model_url, self.cache_path)
            logger.info("Building inference session...")
            session = await asyncio.to_thread(self.session_factory, self.cache_path)
        except Exception:
            self._failed = True
            logger.exception("Session initialization failed")
            raise

        self._session = session
        logger.info("Inference session ready")
        return session

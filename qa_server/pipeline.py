"""
Question answering pipeline: prompt -> tokens -> forward pass -> answer
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import httpx

from .config import Settings
from .decoding import compose_answer, greedy_decode
from .download import CacheStatus, ModelAcquirer, cache_status
from .inference import create_session, run_inference
from .session import SessionManager, SessionState
from .tensors import build_inputs
from .vocab import VocabularyStore, tokenize

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = "Otázka: {question}\nOdpověď:"


def build_session_manager(
    settings: Settings,
    session_factory: Optional[Callable[[str], Any]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SessionManager:
    """Session manager downloading settings.model_url into settings.model_cache"""
    if session_factory is None:
        def session_factory(path: str) -> Any:
            return create_session(path, settings.enable_cuda)

    return SessionManager(
        acquirer=ModelAcquirer(
            max_redirects=settings.max_redirects,
            timeout=settings.download_timeout,
            transport=transport,
        ),
        model_url=settings.model_url,
        cache_path=settings.model_cache,
        session_factory=session_factory,
    )


@dataclass
class QAResult:
    question: str
    answer: str
    input_tokens: int
    output_tokens: int
    inference_time_ms: int
    total_time_ms: int


class QAPipeline:
    """Wires the vocabulary, session and decoding steps for one model"""

    def __init__(
        self,
        settings: Settings,
        vocabulary_store: Optional[VocabularyStore] = None,
        session_manager: Optional[SessionManager] = None,
    ):
        self.settings = settings
        self.vocabulary_store = vocabulary_store or VocabularyStore(settings.vocab_path)
        self.session_manager = session_manager or build_session_manager(settings)

    async def answer(self, question: str) -> QAResult:
        start_time = time.perf_counter()
        logger.info(f"Question: {question}")

        session = await self.session_manager.get_session()

        vocabulary = self.vocabulary_store.load()
        input_tokens = tokenize(PROMPT_TEMPLATE.format(question=question), vocabulary)
        logger.info(f"Input tokens: {len(input_tokens)}")

        max_length = self.settings.max_length
        input_ids, attention_mask = build_inputs(input_tokens, max_length)

        inference_start = time.perf_counter()
        logits = await asyncio.to_thread(run_inference, session, input_ids, attention_mask)
        inference_time_ms = round((time.perf_counter() - inference_start) * 1000)
        logger.info(f"Inference done in {inference_time_ms}ms")

        output_tokens = greedy_decode(
            logits,
            start_position=len(input_tokens),
            vocabulary_size=len(vocabulary),
            max_length=max_length,
            max_new_tokens=self.settings.max_new_tokens,
        )
        answer = compose_answer(output_tokens, self.vocabulary_store.reverse_of(vocabulary))
        total_time_ms = round((time.perf_counter() - start_time) * 1000)

        logger.info(f"Answer: {answer!r} ({len(output_tokens)} tokens, {total_time_ms}ms)")

        return QAResult(
            question=question,
            answer=answer or self.settings.fallback_answer,
            input_tokens=len(input_tokens),
            output_tokens=len(output_tokens),
            inference_time_ms=inference_time_ms,
            total_time_ms=total_time_ms,
        )

    def cache_status(self) -> CacheStatus:
        return cache_status(self.settings.model_cache)

    @property
    def session_state(self) -> SessionState:
        return self.session_manager.state

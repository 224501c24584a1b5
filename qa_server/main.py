"""
Czech QA Inference Service
FastAPI application answering questions with a local ONNX model
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from .config import Settings
from .errors import QAError, ValidationError
from .models import ErrorResponse, HealthResponse, QAMetadata, QARequest, QAResponse, StatusResponse
from .pipeline import QAPipeline
from .session import SessionState

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

QA_ENDPOINT = "/api/qa"


def _error_response(error: QAError) -> JSONResponse:
    body = ErrorResponse(error=error.message)
    if error.status_code >= 500:
        body.type = error.kind
    return JSONResponse(status_code=error.status_code, content=body.model_dump(exclude_none=True))


async def _parse_request(request: Request) -> QARequest:
    try:
        payload = await request.json()
    except ValueError:
        raise ValidationError("Request body must be a JSON object")

    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")

    try:
        return QARequest.model_validate(payload)
    except PydanticValidationError:
        raise ValidationError('Parameter "question" is required and must be a non-empty string')


def create_app(settings: Optional[Settings] = None, pipeline: Optional[QAPipeline] = None) -> FastAPI:
    """Build the service around a pipeline, one per process"""
    settings = settings or (pipeline.settings if pipeline else Settings.from_env())
    pipeline = pipeline or QAPipeline(settings)
    logging.getLogger().setLevel(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("QA service starting...")
        logger.info(f"  Model URL: {settings.model_url}")
        logger.info(f"  Model cache: {settings.model_cache}")
        logger.info(f"  Vocabulary: {settings.vocab_path}")
        logger.info("Model is downloaded and loaded on the first question")

        yield

        logger.info("Shutting down QA service...")

    app = FastAPI(
        title="Czech QA Inference Service",
        description="Question answering with a quantized ONNX model running on ONNX Runtime",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.pipeline = pipeline
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.post(
        QA_ENDPOINT,
        response_model=QAResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def ask(request: Request):
        """
        Answer a question.

        The first call downloads the model and builds the inference session,
        later calls reuse it.
        """
        try:
            qa_request = await _parse_request(request)
            result = await pipeline.answer(qa_request.question)
        except QAError as e:
            if e.status_code >= 500:
                logger.error(f"QA request failed ({e.kind}): {e.message}")
            return _error_response(e)
        except Exception as e:
            logger.exception("Unexpected error while answering")
            return JSONResponse(
                status_code=500,
                content=ErrorResponse(error=str(e), type=type(e).__name__).model_dump(),
            )

        return QAResponse(
            question=result.question,
            answer=result.answer,
            metadata=QAMetadata(
                model=settings.model_name,
                input_tokens=result.input_tokens,
                output_tokens=result.output_tokens,
                inference_time_ms=result.inference_time_ms,
                total_time_ms=result.total_time_ms,
            ),
        )

    @app.get(QA_ENDPOINT, response_model=StatusResponse)
    async def status():
        """Cache state and usage, never triggers a download"""
        cache = pipeline.cache_status()
        if cache.cached:
            cache_size = f"{cache.size_bytes / (1024 * 1024):.2f} MB"
            note = "Model is cached, requests will be fast"
        else:
            cache_size = "not downloaded"
            note = "The first request downloads the model (~30s)"

        return StatusResponse(
            status="online",
            model=settings.model_name,
            model_size=settings.model_size,
            model_cached=cache.cached,
            cache_size=cache_size,
            session_state=pipeline.session_state.value,
            endpoint=QA_ENDPOINT,
            usage={
                "method": "POST",
                "headers": {"Content-Type": "application/json"},
                "body": {"question": "your question"},
            },
            note=note,
        )

    @app.get("/health", response_model=HealthResponse)
    async def health():
        """Health check endpoint"""
        state = pipeline.session_state
        return HealthResponse(
            status="healthy" if state != SessionState.FAILED else "degraded",
            model_loaded=state == SessionState.READY,
            session_state=state.value,
        )

    return app


app = create_app()


def run() -> None:
    """Serve the module-level app with uvicorn"""
    import uvicorn

    settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())

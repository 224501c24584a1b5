"""
Shared fixtures for the QA service tests.

Provides a small Czech vocabulary on disk, settings pointing into a temporary
cache directory and a mock model host.
"""

import json

import pytest

from qa_server.config import Settings

from .fakes import MODEL_URL, VOCAB, ModelServer


@pytest.fixture
def vocab_path(tmp_path):
    path = tmp_path / "vocab.json"
    path.write_text(json.dumps(VOCAB, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def model_server():
    return ModelServer()


@pytest.fixture
def settings(tmp_path, vocab_path):
    return Settings(
        model_url=MODEL_URL,
        model_cache=str(tmp_path / "cache" / "model.onnx"),
        vocab_path=str(vocab_path),
        enable_cuda=False,
    )

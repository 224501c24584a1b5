"""
Service configuration read from the environment
"""

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_MODEL_URL = (
    "https://github.com/mnaukohutka/ai-backend-vercel/releases/download/v1.0/model.onnx"
)


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() == "true"


def _env_optional_float(name: str) -> Optional[float]:
    value = os.environ.get(name, "").strip()
    return float(value) if value else None


@dataclass(frozen=True)
class Settings:
    model_url: str = DEFAULT_MODEL_URL
    model_cache: str = "/tmp/model.onnx"
    vocab_path: str = os.path.join("public", "model-releases", "vocab.json")
    max_length: int = 512
    max_new_tokens: int = 100
    max_redirects: int = 1
    # None means no timeout at all
    download_timeout: Optional[float] = None
    enable_cuda: bool = True
    model_name: str = "Quantized czech-gpt2-finetuned-qa"
    model_size: str = "124 MB"
    fallback_answer: str = "No answer generated"
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, falling back to defaults"""
        defaults = cls()
        return cls(
            model_url=os.environ.get("MODEL_URL", defaults.model_url),
            model_cache=os.environ.get("MODEL_CACHE", defaults.model_cache),
            vocab_path=os.environ.get("VOCAB_PATH", defaults.vocab_path),
            max_length=int(os.environ.get("MAX_LENGTH", defaults.max_length)),
            max_new_tokens=int(os.environ.get("MAX_NEW_TOKENS", defaults.max_new_tokens)),
            max_redirects=int(os.environ.get("MAX_REDIRECTS", defaults.max_redirects)),
            download_timeout=_env_optional_float("DOWNLOAD_TIMEOUT"),
            enable_cuda=_env_bool("ENABLE_CUDA", "true"),
            model_name=os.environ.get("MODEL_NAME", defaults.model_name),
            model_size=os.environ.get("MODEL_SIZE", defaults.model_size),
            fallback_answer=os.environ.get("FALLBACK_ANSWER", defaults.fallback_answer),
            host=os.environ.get("HOST", defaults.host),
            port=int(os.environ.get("PORT", defaults.port)),
            log_level=os.environ.get("LOG_LEVEL", defaults.log_level).upper(),
        )

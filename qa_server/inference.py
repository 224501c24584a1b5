"""
ONNX Runtime session construction and forward pass
"""

import logging
from typing import Any, List, Optional, Union

import numpy as np
import onnxruntime as ort

from .errors import InferenceError, SessionInitError

logger = logging.getLogger(__name__)


def build_providers(enable_cuda: bool = True) -> List[Union[str, tuple]]:
    """Execution providers in priority order, CPU always last"""
    available_providers = ort.get_available_providers()
    logger.info(f"Available ONNX Runtime providers: {available_providers}")

    providers: List[Union[str, tuple]] = []

    if enable_cuda and 'CUDAExecutionProvider' in available_providers:
        cuda_options = {
            'device_id': 0,
            'arena_extend_strategy': 'kSameAsRequested',
        }
        providers.append(('CUDAExecutionProvider', cuda_options))
        logger.info("CUDA provider configured")

    providers.append('CPUExecutionProvider')
    return providers


def create_session(model_path: str, enable_cuda: bool = True) -> ort.InferenceSession:
    """Load the ONNX graph with full graph optimization"""
    logger.info(f"Creating ONNX Runtime inference session from {model_path}")

    sess_options = ort.SessionOptions()
    sess_options.graph_optimization_level = ort.GraphOptimizationLevel.ORT_ENABLE_ALL

    try:
        session = ort.InferenceSession(
            model_path,
            sess_options=sess_options,
            providers=build_providers(enable_cuda),
        )
    except Exception as e:
        raise SessionInitError(f"Could not load model from {model_path}: {e}") from e

    active_providers = session.get_providers()
    logger.info(f"Session ready, active providers: {active_providers}")
    return session


def run_inference(
    session: Optional[Any],
    input_ids: np.ndarray,
    attention_mask: np.ndarray,
) -> np.ndarray:
    """
    Run a single forward pass.

    Args:
        session: A ready inference session
        input_ids: int64 array of shape [1, seq_length]
        attention_mask: int64 array of shape [1, seq_length]

    Returns:
        Logits array of shape [1, seq_length, vocab]
    """
    if session is None:
        raise InferenceError("Model not loaded, no inference session available")

    inputs = {
        'input_ids': input_ids,
        'attention_mask': attention_mask,
    }

    try:
        outputs = session.run(None, inputs)
    except Exception as e:
        raise InferenceError(str(e)) from e

    # First output is the logits
    return np.asarray(outputs[0])

"""
Fixed-length model input construction
"""

from typing import Sequence, Tuple

import numpy as np

from .vocab import PAD_ID


def build_inputs(tokens: Sequence[int], max_length: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Pad or truncate tokens to exactly max_length.

    Args:
        tokens: Token ids of the prompt, any length
        max_length: Sequence length the model was exported with

    Returns:
        (input_ids, attention_mask), both int64 arrays of shape [1, max_length].
        The mask is 1 for every position covered by the prompt and 0 for padding.
    """
    kept = list(tokens[:max_length])
    length = len(kept)

    input_ids = np.full((1, max_length), PAD_ID, dtype=np.int64)
    attention_mask = np.zeros((1, max_length), dtype=np.int64)
    if length:
        input_ids[0, :length] = kept
        # Position based: in-prompt unknown words (id 0) stay visible to the model
        attention_mask[0, :length] = 1

    return input_ids, attention_mask

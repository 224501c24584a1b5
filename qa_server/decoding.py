"""
Greedy decoding of logits and answer text composition
"""

from typing import List, Mapping, Sequence

import numpy as np

from .vocab import EOS_ID, UNK_ID

# Only the first SCAN_LIMIT ids are ever candidates
SCAN_LIMIT = 10000
STOP_IDS = frozenset({UNK_ID, EOS_ID})
STRUCTURAL_TOKENS = frozenset({"<unk>", "<pad>", "<s>", "</s>"})


def greedy_decode(
    logits: np.ndarray,
    start_position: int,
    vocabulary_size: int,
    max_length: int,
    max_new_tokens: int = 100,
) -> List[int]:
    """
    Pick the highest scoring id at each position after the prompt.

    Every step reads the same forward pass, positions start_position,
    start_position + 1, ... are decoded independently of what was chosen
    before them.

    Args:
        logits: Model output of shape [1, seq_length, vocab] (or [seq_length, vocab])
        start_position: First position to decode, usually the prompt length
        vocabulary_size: Number of vocabulary entries
        max_length: Sequence length of the forward pass
        max_new_tokens: Upper bound on produced tokens

    Returns:
        Decoded ids, without the stop id that ended decoding
    """
    scores = logits[0] if logits.ndim == 3 else logits
    scan = min(vocabulary_size, SCAN_LIMIT, scores.shape[-1])

    output: List[int] = []
    if scan <= 0:
        return output

    for i in range(max_new_tokens):
        position = start_position + i
        if position >= max_length or position >= scores.shape[0]:
            break

        row = scores[position, :scan]
        # NaN never wins, and an all -inf row falls back to id 0
        row = np.where(np.isnan(row), -np.inf, row)
        token_id = int(np.argmax(row))

        if token_id in STOP_IDS:
            break
        output.append(token_id)

    return output


def compose_answer(token_ids: Sequence[int], reverse_vocabulary: Mapping[int, str]) -> str:
    """Join known, non-structural words with single spaces"""
    words = []
    for token_id in token_ids:
        word = reverse_vocabulary.get(token_id)
        if word and word not in STRUCTURAL_TOKENS:
            words.append(word)
    return " ".join(words).strip()

import numpy as np

from qa_server.decoding import SCAN_LIMIT, compose_answer, greedy_decode
from qa_server.vocab import EOS_ID, UNK_ID, Vocabulary, tokenize

from .fakes import VOCAB


def _logits(rows, vocab_size):
    """Build [1, len(rows), vocab_size] logits with the given argmax per row"""
    logits = np.zeros((1, len(rows), vocab_size), dtype=np.float32)
    for position, token_id in enumerate(rows):
        if token_id is not None:
            logits[0, position, token_id] = 1.0
    return logits


def test_eos_at_start_position_returns_empty():
    logits = _logits([7, 8, EOS_ID, 10, 11], vocab_size=13)
    assert greedy_decode(logits, start_position=2, vocabulary_size=13, max_length=5) == []


def test_unknown_id_stops_decoding():
    logits = _logits([None, 10, 11, UNK_ID, 12], vocab_size=13)
    assert greedy_decode(logits, start_position=1, vocabulary_size=13, max_length=5) == [10, 11]


def test_stops_at_max_length():
    logits = _logits([4] * 8, vocab_size=13)
    assert greedy_decode(logits, start_position=6, vocabulary_size=13, max_length=8) == [4, 4]


def test_start_beyond_max_length_returns_empty():
    logits = _logits([4] * 8, vocab_size=13)
    assert greedy_decode(logits, start_position=9, vocabulary_size=13, max_length=8) == []


def test_stops_at_max_new_tokens():
    logits = _logits([4] * 20, vocab_size=13)
    result = greedy_decode(logits, 0, vocabulary_size=13, max_length=20, max_new_tokens=3)
    assert result == [4, 4, 4]


def test_ties_resolve_to_lowest_id():
    logits = np.zeros((1, 2, 13), dtype=np.float32)
    logits[0, 0, [11, 6, 9]] = 3.0
    logits[0, 1, EOS_ID] = 3.0
    assert greedy_decode(logits, 0, vocabulary_size=13, max_length=2) == [6]


def test_scan_ignores_ids_above_limit():
    vocab_size = SCAN_LIMIT + 2000
    logits = np.zeros((1, 2, vocab_size), dtype=np.float32)
    logits[0, 0, SCAN_LIMIT + 500] = 9.0
    logits[0, 0, 5000] = 4.0
    logits[0, 1, EOS_ID] = 1.0

    assert greedy_decode(logits, 0, vocabulary_size=vocab_size, max_length=2) == [5000]


def test_scan_limited_by_vocabulary_size():
    logits = np.zeros((1, 2, 20), dtype=np.float32)
    logits[0, 0, 15] = 9.0
    logits[0, 0, 7] = 2.0
    logits[0, 1, EOS_ID] = 1.0

    assert greedy_decode(logits, 0, vocabulary_size=10, max_length=2) == [7]


def test_each_position_read_from_single_forward_pass():
    # Position k always yields its own argmax, whatever was picked before it
    rows = [None, None, 12, 12, 4, EOS_ID]
    logits = _logits(rows, vocab_size=13)
    assert greedy_decode(logits, 2, vocabulary_size=13, max_length=6) == [12, 12, 4]


def test_nan_logits_never_win():
    logits = np.full((1, 2, 13), -1.0, dtype=np.float32)
    logits[0, 0, 3] = np.nan
    logits[0, 0, 8] = 0.5
    logits[0, 1, EOS_ID] = 1.0
    assert greedy_decode(logits, 0, vocabulary_size=13, max_length=2) == [8]


def test_compose_filters_structural_and_unmapped_ids():
    reverse = Vocabulary(VOCAB).reverse()
    assert compose_answer([10, 1, 3, 999, 11, 12], reverse) == "praha česká republika"


def test_compose_empty_when_nothing_remains():
    reverse = Vocabulary(VOCAB).reverse()
    assert compose_answer([], reverse) == ""
    assert compose_answer([0, 1, 2, 3], reverse) == ""


def test_tokenize_compose_round_trip():
    vocabulary = Vocabulary(VOCAB)
    text = "Jaké je hlavní město? Praha, Česká republika"
    words = "jaké je hlavní město praha česká republika"
    assert compose_answer(tokenize(text, vocabulary), vocabulary.reverse()) == words

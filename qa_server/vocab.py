"""
Word-level vocabulary and tokenizer for the QA model
"""

import json
import logging
import re
from typing import Dict, Iterator, List, Mapping, Optional

from .errors import ResourceError

logger = logging.getLogger(__name__)

# Fixed by the trained model
UNK_ID = 0
PAD_ID = 0
EOS_ID = 2

# Keep word characters, whitespace and Czech diacritics, drop everything else
_STRIP_PATTERN = re.compile(r"[^0-9A-Za-z_\sáčďéěíňóřšťúůýž]")


class Vocabulary(Mapping):
    """Immutable word -> id mapping with a lazily derived reverse view"""

    def __init__(self, word_to_id: Dict[str, int]):
        self._word_to_id = dict(word_to_id)
        self._id_to_word: Optional[Dict[int, str]] = None

    def __getitem__(self, word: str) -> int:
        return self._word_to_id[word]

    def __iter__(self) -> Iterator[str]:
        return iter(self._word_to_id)

    def __len__(self) -> int:
        return len(self._word_to_id)

    def reverse(self) -> Dict[int, str]:
        # Duplicate ids keep the last word seen
        if self._id_to_word is None:
            id_to_word: Dict[int, str] = {}
            for word, token_id in self._word_to_id.items():
                id_to_word[token_id] = word
            self._id_to_word = id_to_word
        return self._id_to_word


class VocabularyStore:
    """
    Loads the vocabulary JSON once per process.

    A failed load is not remembered, so the next call reads the file again.
    """

    def __init__(self, path: str):
        self.path = path
        self._vocabulary: Optional[Vocabulary] = None

    @property
    def is_loaded(self) -> bool:
        return self._vocabulary is not None

    def load(self) -> Vocabulary:
        if self._vocabulary is None:
            self._vocabulary = self._read()
        return self._vocabulary

    def reverse_of(self, vocabulary: Vocabulary) -> Dict[int, str]:
        return vocabulary.reverse()

    def _read(self) -> Vocabulary:
        logger.info(f"Loading vocabulary from {self.path}")
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
        except OSError as e:
            raise ResourceError(f"Vocabulary not readable at {self.path}: {e}") from e
        except ValueError as e:
            raise ResourceError(f"Vocabulary at {self.path} is not valid JSON: {e}") from e

        if not isinstance(raw, dict):
            raise ResourceError(f"Vocabulary at {self.path} must be a JSON object")

        for word, token_id in raw.items():
            if isinstance(token_id, bool) or not isinstance(token_id, int) or token_id < 0:
                raise ResourceError(
                    f"Vocabulary entry {word!r} has invalid id {token_id!r}"
                )

        vocabulary = Vocabulary(raw)
        logger.info(f"Vocabulary loaded: {len(vocabulary)} entries")
        return vocabulary


def normalize(text: str) -> List[str]:
    """Lowercase, strip punctuation and split into words"""
    return _STRIP_PATTERN.sub("", text.lower()).split()


def tokenize(text: str, vocabulary: Mapping[str, int]) -> List[int]:
    """Map text to token ids, unknown words become UNK_ID"""
    return [vocabulary.get(word, UNK_ID) for word in normalize(text)]

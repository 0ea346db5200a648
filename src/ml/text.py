"""
Text normalization for transaction descriptions.

Pure functions shared by the rule-based classifier, the adaptive per-user
classifier and correction feature extraction.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Tuple

from nltk.stem.porter import PorterStemmer

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")
_TOKEN = re.compile(r"\w+")

_stemmer = PorterStemmer()


@dataclass(frozen=True)
class TextFeatures:
    """Normalized text with its tokens and Porter stems."""
    normalized: str
    tokens: Tuple[str, ...]
    stems: Tuple[str, ...]

    @property
    def joined_tokens(self) -> str:
        return " ".join(self.tokens)


def normalize_text(text: Optional[str]) -> str:
    """
    Strip punctuation, collapse whitespace and lower-case.

    Args:
        text: Raw transaction text.

    Returns:
        Normalized text ("" for empty input).
    """
    if not text:
        return ""
    text = _NON_WORD.sub(" ", text)
    text = _WHITESPACE.sub(" ", text)
    return text.strip().lower()


def tokenize(text: Optional[str]) -> List[str]:
    """Split text into lower-case word tokens."""
    return _TOKEN.findall(normalize_text(text))


@lru_cache(maxsize=4096)
def stem(token: str) -> str:
    """Porter stem of a single token."""
    return _stemmer.stem(token)


def analyze_text(text: Optional[str]) -> TextFeatures:
    """Normalize, tokenize and stem in one pass."""
    normalized = normalize_text(text)
    tokens = tuple(_TOKEN.findall(normalized))
    return TextFeatures(
        normalized=normalized,
        tokens=tokens,
        stems=tuple(stem(t) for t in tokens),
    )

import math
import re
from typing import List

from app.config import CHAR_WEIGHT, KEYWORD_WEIGHT, BIGRAM_WEIGHT

_ALPHABET = "abcdefghijklmnopqrstuvwxyz"
_NON_LETTERS = re.compile(r"[^a-z]")


def vectorize_text(text: str) -> List[float]:
    """
    Letter-frequency vector (a-z) normalized to sum to 1.
    Non-letters are ignored; text without letters gives an all-zero vector.
    """
    vector = [0.0] * len(_ALPHABET)
    for char in _NON_LETTERS.sub("", (text or "").lower()):
        vector[ord(char) - ord("a")] += 1

    total = sum(vector)
    if total == 0:
        return vector
    return [v / total for v in vector]


def cosine_similarity(vec_a: List[float], vec_b: List[float]) -> float:
    """Cosine similarity, 0.0 when either vector has no magnitude"""
    norm_a = math.sqrt(sum(a * a for a in vec_a))
    norm_b = math.sqrt(sum(b * b for b in vec_b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    dot = sum(a * b for a, b in zip(vec_a, vec_b))
    return min(dot / (norm_a * norm_b), 1.0)


def char_frequency_similarity(text1: str, text2: str) -> float:
    return cosine_similarity(vectorize_text(text1), vectorize_text(text2))


def keyword_similarity(query: str, candidate: str) -> float:
    """
    Share of whitespace-separated words shared by both texts.

    Every query word found in the candidate counts (duplicates included);
    the count is divided by the longer of the two word lists.
    """
    words1 = (query or "").lower().split()
    words2 = (candidate or "").lower().split()
    longest = max(len(words1), len(words2))
    if not words1 or longest == 0:
        return 0.0

    candidate_words = set(words2)
    common = sum(1 for word in words1 if word in candidate_words)
    return common / longest


def _bigrams(text: str) -> List[str]:
    return [text[i:i + 2] for i in range(len(text) - 1)]


def bigram_similarity(query: str, candidate: str) -> float:
    """Share of 2-character substrings of the query also found in the candidate"""
    bigrams1 = _bigrams((query or "").lower())
    bigrams2 = _bigrams((candidate or "").lower())
    longest = max(len(bigrams1), len(bigrams2))
    if not bigrams1 or longest == 0:
        return 0.0

    candidate_bigrams = set(bigrams2)
    common = sum(1 for bg in bigrams1 if bg in candidate_bigrams)
    return common / longest


def calculate_text_similarity(query: str, candidate: str) -> float:
    """Weighted blend of character, keyword and bigram similarity (0-1)"""
    score = (
        char_frequency_similarity(query, candidate) * CHAR_WEIGHT
        + keyword_similarity(query, candidate) * KEYWORD_WEIGHT
        + bigram_similarity(query, candidate) * BIGRAM_WEIGHT
    )
    return max(0.0, min(score, 1.0))

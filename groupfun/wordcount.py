"""Hot-word counting over a group's chat history."""

from __future__ import annotations

import re
from collections import Counter
from typing import Callable, Iterable

__all__ = [
    "TOP_WORDS",
    "count_words",
    "is_chinese_word",
    "rank_by_word_count",
    "top_words",
]

TOP_WORDS = 20

_CHINESE = re.compile("[\u4e00-\u9fa5]+")


def rank_by_word_count(frequencies: dict[str, int]) -> list[tuple[str, int]]:
    """Return ``(word, count)`` pairs from the most to the least frequent."""
    return sorted(frequencies.items(), key=lambda item: item[1], reverse=True)


def is_chinese_word(text: str) -> bool:
    """Tell whether ``text`` is made only of common CJK ideographs."""
    return _CHINESE.fullmatch(text) is not None


def count_words(
    messages: Iterable[str],
    stopwords: Iterable[str],
    segment: Callable[[str], Iterable[str]],
) -> Counter[str]:
    """Count the Chinese words in ``messages`` that are not stop words.

    ``segment`` splits a message into words.
    """
    stops = set(stopwords)
    counts: Counter[str] = Counter()
    for message in messages:
        text = message.strip()
        if not text:
            continue
        for piece in segment(text):
            word = piece.strip()
            if is_chinese_word(word) and word not in stops:
                counts[word] += 1
    return counts


def top_words(
    messages: Iterable[str],
    stopwords: Iterable[str],
    segment: Callable[[str], Iterable[str]],
    limit: int = TOP_WORDS,
) -> list[tuple[str, int]]:
    """Return the ``limit`` most frequent words of ``messages``."""
    return rank_by_word_count(count_words(messages, stopwords, segment))[:limit]
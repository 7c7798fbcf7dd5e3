"""
Text utilities — word counting and segmentation.

segment_text() keeps chunks under a word budget while cutting on the
largest semantic unit that fits: paragraphs first, sentences for
paragraphs that are too long on their own. A single sentence longer
than the budget is left whole.
"""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORDS = 2000

_PARAGRAPH_SPLIT = re.compile(r"\n\n+|\n")
_SENTENCE_SPLIT = re.compile(r"[.!?]+")


def count_words(text: str) -> int:
    """Number of whitespace-separated tokens."""
    return len(text.split())


def _pack_sentences(paragraph: str, max_words: int) -> list[str]:
    """Greedily pack the sentences of one oversized paragraph."""
    sentences = [s for s in _SENTENCE_SPLIT.split(paragraph) if s.strip()]
    packed: list[str] = []
    buffer: list[str] = []
    buffer_words = 0

    for sentence in sentences:
        words = count_words(sentence)
        if buffer_words + words > max_words and buffer:
            packed.append(". ".join(buffer) + ".")
            buffer = [sentence.strip()]
            buffer_words = words
        else:
            buffer.append(sentence.strip())
            buffer_words += words

    if buffer:
        packed.append(". ".join(buffer) + ".")
    return packed


def segment_text(text: str, max_words: int = DEFAULT_MAX_WORDS) -> list[str]:
    """
    Split text into ordered chunks of at most max_words words.

    Text that already fits is returned untouched as a single chunk.
    """
    if max_words <= 0:
        raise ValueError("max_words must be positive")

    total_words = count_words(text)
    if total_words <= max_words:
        return [text]

    logger.info(
        "Text exceeds %d words (%d total), chunking into segments",
        max_words, total_words,
        extra={"word_count": total_words},
    )

    segments: list[str] = []
    paragraphs = [p for p in _PARAGRAPH_SPLIT.split(text) if p.strip()]

    current: list[str] = []
    current_words = 0

    for paragraph in paragraphs:
        paragraph_words = count_words(paragraph)

        if paragraph_words > max_words:
            if current:
                segments.append("\n\n".join(current))
                current = []
                current_words = 0
            segments.extend(_pack_sentences(paragraph, max_words))
            continue

        if current_words + paragraph_words > max_words and current:
            segments.append("\n\n".join(current))
            current = [paragraph.strip()]
            current_words = paragraph_words
        else:
            current.append(paragraph.strip())
            current_words += paragraph_words

    if current:
        segments.append("\n\n".join(current))

    logger.info(
        "Created %d segments from %d words", len(segments), total_words,
        extra={"chunk_count": len(segments), "word_count": total_words},
    )
    return segments

"""
Text helpers shared by the content, chat and video services.
"""
import math
import re
import uuid
from typing import List

import bleach

# Chunks shorter than this at the end of a text are folded into the previous one
MIN_CHUNK_WORDS = 100


def generate_slug(title: str) -> str:
    """
    Build a URL slug from a title.

    Args:
        title: Post or project title

    Returns:
        str: Lowercase slug of ASCII letters, digits and single hyphens
    """
    slug = title.lower().strip()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return re.sub(r"^-|-$", "", slug)


def calculate_reading_time(content: str, words_per_minute: int = 200) -> int:
    """Estimated reading time in whole minutes, never less than one."""
    word_count = len(content.split())
    return max(1, math.ceil(word_count / words_per_minute))


def generate_id() -> str:
    return str(uuid.uuid4())


def chunk_text(text: str, max_words: int = 200, overlap: int = 50) -> List[str]:
    """
    Split text into overlapping word windows for embedding.

    A trailing window shorter than MIN_CHUNK_WORDS is merged into the
    previous chunk instead of being emitted on its own.

    Args:
        text: Text to split
        max_words: Words per chunk
        overlap: Words shared by consecutive chunks

    Returns:
        List[str]: Chunks in document order

    Raises:
        ValueError: If overlap is not smaller than max_words
    """
    if overlap >= max_words:
        raise ValueError("overlap must be smaller than max_words")

    words = text.split()
    step = max_words - overlap
    chunks: List[str] = []

    for start in range(0, len(words), step):
        window = words[start:start + max_words]
        is_last = start + max_words >= len(words)
        if is_last and len(window) < MIN_CHUNK_WORDS and chunks:
            chunks[-1] = " ".join(words[start - step:])
        else:
            chunks.append(" ".join(window))

    return chunks


def sanitize_text(text: str) -> str:
    """Strip any HTML from user-supplied text."""
    return bleach.clean(text, tags=[], attributes={}, strip=True).strip()

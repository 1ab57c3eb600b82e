"""
Fixed-size character windows for document ingestion.

Windows overlap so a sentence cut at one boundary is still whole in the
neighbouring chunk.
"""

import re
from typing import List, Optional

from chat_agent.config.settings import settings


_WHITESPACE = re.compile(r"\s+")


def normalize_whitespace(text: str) -> str:
    """Collapse every whitespace run to a single space and trim."""
    return _WHITESPACE.sub(" ", text or "").strip()


def chunk_text(text: str, size: Optional[int] = None, overlap: Optional[int] = None) -> List[str]:
    """
    Split text into overlapping character windows.

    Args:
        text: Raw document text (whitespace is collapsed first)
        size: Window length in characters (defaults to settings.rag_chunk_size)
        overlap: Characters shared by consecutive windows (defaults to settings.rag_chunk_overlap)

    Returns:
        Chunks in document order; the last one may be shorter. Empty text gives [].

    Example:
        >>> chunk_text("abcdefghij", size=4, overlap=1)
        ['abcd', 'defg', 'ghij']
    """
    size = settings.rag_chunk_size if size is None else size
    overlap = settings.rag_chunk_overlap if overlap is None else overlap

    if size <= 0:
        raise ValueError("Chunk size must be positive")
    if overlap < 0 or overlap >= size:
        raise ValueError("Chunk overlap must be between 0 and the chunk size")

    clean = normalize_whitespace(text)
    if not clean:
        return []

    chunks = []
    start = 0
    while start < len(clean):
        end = min(start + size, len(clean))
        chunks.append(clean[start:end])
        if end == len(clean):
            break
        start = end - overlap

    return chunks

"""
RAG utilities - document text extraction and chunking
"""

from chat_agent.utils.rag.chunking import chunk_text, normalize_whitespace
from chat_agent.utils.rag.extraction import SUPPORTED_EXTENSIONS, ensure_supported, extract_text

__all__ = [
    "chunk_text",
    "normalize_whitespace",
    "SUPPORTED_EXTENSIONS",
    "ensure_supported",
    "extract_text",
]

"""
LLM layer - Client, embeddings, speech, and response utilities
"""

from chat_agent.llm.client import create_llm, create_openai_client
from chat_agent.llm.embeddings import EmbeddingService
from chat_agent.llm.speech import SpeechService, ALLOWED_AUDIO_MIME_TYPES
from chat_agent.llm.response_utils import extract_text_from_response, extract_tool_calls

__all__ = [
    "create_llm",
    "create_openai_client",
    "EmbeddingService",
    "SpeechService",
    "ALLOWED_AUDIO_MIME_TYPES",
    "extract_text_from_response",
    "extract_tool_calls",
]

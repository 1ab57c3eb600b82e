"""
Domain models - turn, history, tool and retrieval value types
"""

from chat_agent.models.domain import (
    AudioInput,
    ConversationHistory,
    DocumentChunk,
    DocumentMatch,
    DocumentSearchResult,
    HistoryEntry,
    IngestionResult,
    PersistedMessage,
    RagAnswer,
    RagSource,
    SendMessageRequest,
    SentMessage,
    ToolCall,
    ToolResult,
    Turn,
    TurnResult,
    VectorMatch,
)

__all__ = [
    "AudioInput",
    "ConversationHistory",
    "DocumentChunk",
    "DocumentMatch",
    "DocumentSearchResult",
    "HistoryEntry",
    "IngestionResult",
    "PersistedMessage",
    "RagAnswer",
    "RagSource",
    "SendMessageRequest",
    "SentMessage",
    "ToolCall",
    "ToolResult",
    "Turn",
    "TurnResult",
    "VectorMatch",
]

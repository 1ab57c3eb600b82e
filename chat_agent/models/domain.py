"""
Domain models for the chat agent.

Plain dataclasses for values that live inside one turn, pydantic models for
values that cross the service boundary (RAG answers, turn results).
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field


HistoryRole = Literal["user", "assistant"]


@dataclass(frozen=True)
class AudioInput:
    """Audio file attached to a voice turn."""
    data: bytes
    filename: str
    mime_type: str


@dataclass
class Turn:
    """One inbound chat request."""
    user_id: int
    text: Optional[str] = None
    conversation_id: Optional[int] = None
    recipient_id: Optional[int] = None
    audio: Optional[AudioInput] = None

    @property
    def is_voice(self) -> bool:
        return self.audio is not None


@dataclass(frozen=True)
class HistoryEntry:
    """One message of a conversation as seen by the model."""
    role: HistoryRole
    content: str


# Oldest first; rebuilt per turn and never mutated
ConversationHistory = Tuple[HistoryEntry, ...]


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the model."""
    name: str
    arguments: Dict[str, Any]
    call_id: str


@dataclass(frozen=True)
class ToolResult:
    """Textual outcome of one tool call."""
    call_id: str
    name: str
    content: str
    ok: bool = True


@dataclass(frozen=True)
class DocumentChunk:
    """One embedded window of an ingested document."""
    id: str
    owner_user_id: int
    source_file_name: str
    chunk_index: int
    text: str
    embedding: List[float] = field(default_factory=list, compare=False, repr=False)

    def metadata(self) -> Dict[str, Any]:
        return {
            "userId": self.owner_user_id,
            "fileName": self.source_file_name,
            "chunkIndex": self.chunk_index,
            "text": self.text,
        }


@dataclass(frozen=True)
class VectorMatch:
    """Nearest-neighbour hit from the vector index."""
    id: str
    score: float
    metadata: Dict[str, Any]


class RagSource(BaseModel):
    """Attribution for one chunk used to build an answer"""
    source: int = Field(..., description="1-based rank of the chunk")
    file_name: str
    score: float
    text_preview: str


class RagAnswer(BaseModel):
    """Grounded answer produced over a user's documents"""
    success: bool = True
    query: str
    answer: str
    sources: List[RagSource] = Field(default_factory=list)
    total_sources: int = 0
    namespace: Optional[str] = None


class DocumentMatch(BaseModel):
    """Raw retrieval hit, without answer generation"""
    id: str
    score: float
    text: str
    file_name: str
    chunk_index: int
    user_id: int


class DocumentSearchResult(BaseModel):
    """Raw retrieval result for a query"""
    success: bool = True
    query: str
    results: List[DocumentMatch] = Field(default_factory=list)
    total_results: int = 0
    namespace: str


class IngestionResult(BaseModel):
    """Outcome of indexing one uploaded document"""
    success: bool = True
    file_name: str
    chunk_count: int
    namespace: str


@dataclass
class PersistedMessage:
    """A stored conversation message."""
    id: int
    conversation_id: int
    sender_id: int
    content: str
    created_at: datetime
    file_url: Optional[str] = None


@dataclass
class SendMessageRequest:
    """Payload for the message store's send operation."""
    content: str
    conversation_id: Optional[int] = None
    recipient_id: Optional[int] = None
    file_url: Optional[str] = None


@dataclass(frozen=True)
class SentMessage:
    """Authoritative ids returned by the message store."""
    conversation_id: int
    message_id: int


class TurnResult(BaseModel):
    """Response for one processed turn"""
    success: bool = True
    reply_text: str
    message_id: int = Field(..., description="Id of the persisted agent reply")
    user_message_id: int = Field(..., description="Id of the persisted user message")
    conversation_id: int
    transcription: Optional[str] = None
    audio_url: Optional[str] = None

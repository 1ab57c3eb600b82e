"""
In-process fakes for the chat model, embeddings, vector index, speech,
email, calendar and file storage.
"""

import hashlib
import itertools
import math
import re
from typing import Any, Dict, List, Optional, Sequence

from langchain_core.messages import AIMessage

from chat_agent.models.domain import DocumentChunk, RagAnswer, VectorMatch
from chat_agent.services.email_service import DISABLED_MESSAGE_ID, EmailReceipt


AGENT_ID = 1
USER_ID = 42


def tool_call_message(name: str, args: Dict[str, Any], call_id: str = "call_1", content: str = "") -> AIMessage:
    return AIMessage(
        content=content,
        tool_calls=[{"name": name, "args": args, "id": call_id, "type": "tool_call"}],
    )


def multi_tool_call_message(calls: Sequence[tuple]) -> AIMessage:
    """calls: (name, args, call_id) tuples, in request order."""
    return AIMessage(
        content="",
        tool_calls=[
            {"name": name, "args": args, "id": call_id, "type": "tool_call"}
            for name, args, call_id in calls
        ],
    )


class ScriptedChatModel:
    """
    Chat model returning scripted responses in order.

    The last response repeats once the script runs out. Exceptions in the
    script are raised; callables are called with the messages.
    """

    def __init__(self, responses: Sequence[Any]):
        self.responses = list(responses)
        self.calls: List[list] = []
        self.bound_tools = None

    def bind_tools(self, tools):
        self.bound_tools = tools
        return self

    def invoke(self, messages):
        self.calls.append(list(messages))
        index = min(len(self.calls) - 1, len(self.responses) - 1)
        item = self.responses[index]
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(messages)
        return item


class AlwaysToolModel(ScriptedChatModel):
    """Never finalizes: every turn asks for another document search."""

    def __init__(self):
        super().__init__([])
        self._ids = itertools.count(1)

    def invoke(self, messages):
        self.calls.append(list(messages))
        return tool_call_message("queryDocuments", {"query": "anything"}, f"call_{next(self._ids)}")


class HashingEmbeddings:
    """Deterministic bag-of-words embeddings (no API calls)."""

    dimensions = 256

    def __init__(self):
        self.calls = 0

    def _vector(self, text: str) -> List[float]:
        vector = [0.0] * self.dimensions
        for token in re.findall(r"[a-z0-9]+", text.lower()):
            bucket = int(hashlib.md5(token.encode()).hexdigest(), 16) % self.dimensions
            vector[bucket] += 1.0
        norm = math.sqrt(sum(v * v for v in vector)) or 1.0
        return [v / norm for v in vector]

    def embed_text(self, text: str) -> List[float]:
        return self.embed_texts([text])[0]

    def embed_texts(self, texts: List[str], batch_size: int = 100) -> List[List[float]]:
        self.calls += 1
        return [self._vector(text) for text in texts]


class InMemoryVectorIndex:
    """Cosine-similarity index keyed by namespace."""

    def __init__(self):
        self.namespaces: Dict[str, Dict[str, DocumentChunk]] = {}
        self.upserts = 0

    def upsert(self, namespace: str, chunks: Sequence[DocumentChunk]) -> int:
        self.upserts += 1
        store = self.namespaces.setdefault(namespace, {})
        for chunk in chunks:
            store[chunk.id] = chunk
        return len(chunks)

    def query(self, namespace: str, vector: List[float], top_k: int) -> List[VectorMatch]:
        scored = []
        for chunk in self.namespaces.get(namespace, {}).values():
            score = sum(a * b for a, b in zip(vector, chunk.embedding))
            scored.append(VectorMatch(id=chunk.id, score=score, metadata=chunk.metadata()))
        scored.sort(key=lambda m: (-m.score, m.id))
        return scored[:top_k]


class FakeEmailService:
    def __init__(self, configured: bool = True, error: Optional[Exception] = None):
        self.configured = configured
        self.error = error
        self.sent: List[dict] = []

    def send_email(self, to: str, subject: str, text: str) -> EmailReceipt:
        if self.error is not None:
            raise self.error
        if not self.configured:
            return EmailReceipt(message_id=DISABLED_MESSAGE_ID, response="Email service not configured")
        self.sent.append({"to": to, "subject": subject, "text": text})
        return EmailReceipt(message_id=f"<{len(self.sent)}@test>", response="sent")


class FakeCalendarService:
    def __init__(self, events: Optional[List[dict]] = None, error: Optional[Exception] = None):
        self.events = events or []
        self.error = error
        self.created: List[dict] = []

    def add_event(self, summary, description, start_time, end_time, attendees=None):
        if self.error is not None:
            raise self.error
        event = {
            "summary": summary,
            "description": description,
            "start": {"dateTime": start_time},
            "end": {"dateTime": end_time},
            "attendees": attendees or [],
            "htmlLink": f"https://calendar.example.com/event/{len(self.created) + 1}",
        }
        self.created.append(event)
        return event

    def get_events_in_range(self, start_time, end_time):
        if self.error is not None:
            raise self.error
        return list(self.events)


class FakeSpeechService:
    def __init__(
        self,
        transcription: str = "what is on my calendar today",
        transcription_error: Optional[Exception] = None,
        synthesis_error: Optional[Exception] = None,
    ):
        self.transcription = transcription
        self.transcription_error = transcription_error
        self.synthesis_error = synthesis_error
        self.transcribed: List[str] = []
        self.synthesized: List[str] = []

    def transcribe_audio(self, data: bytes, filename: str) -> str:
        self.transcribed.append(filename)
        if self.transcription_error is not None:
            raise self.transcription_error
        return self.transcription

    def synthesize(self, text: str, voice: Optional[str] = None) -> bytes:
        self.synthesized.append(text)
        if self.synthesis_error is not None:
            raise self.synthesis_error
        return b"ID3-fake-mp3"


class InMemoryFileStore:
    def __init__(self):
        self.files: Dict[str, tuple] = {}

    def upload(self, data: bytes, suggested_name: str, mime_type: str) -> Optional[str]:
        if not data:
            return None
        extension = suggested_name[suggested_name.rfind("."):] if "." in suggested_name else ""
        url = f"/uploads/file-{len(self.files) + 1}{extension}"
        self.files[url] = (suggested_name, mime_type, data)
        return url


class StubRAGAgent:
    """Answers every question with a fixed text."""

    def __init__(self, answer: str = "The warranty lasts two years.", error: Optional[Exception] = None):
        self.answer_text = answer
        self.error = error
        self.calls: List[tuple] = []
        self.top_ks: List[int] = []

    def answer(self, owner_user_id, query, top_k=5, namespace=None) -> RagAnswer:
        self.calls.append((owner_user_id, query))
        self.top_ks.append(top_k)
        if self.error is not None:
            raise self.error
        return RagAnswer(query=query, answer=self.answer_text)

"""
FastAPI dependencies - shared service instances and caller identity
"""

from functools import lru_cache

from fastapi import Header

from chat_agent.agents.rag import DocumentIngestor, RAGAgent
from chat_agent.agents.turn import TurnCoordinator, build_turn_coordinator
from chat_agent.infra.vector_store import VectorStore
from chat_agent.llm.embeddings import EmbeddingService


def get_current_user_id(x_user_id: int = Header(..., alias="X-User-Id")) -> int:
    """Caller identity; authentication happens in front of this service."""
    return x_user_id


@lru_cache(maxsize=1)
def _vector_store() -> VectorStore:
    return VectorStore()


@lru_cache(maxsize=1)
def _embeddings() -> EmbeddingService:
    return EmbeddingService()


@lru_cache(maxsize=1)
def get_rag_agent() -> RAGAgent:
    return RAGAgent(vector_index=_vector_store(), embeddings=_embeddings())


@lru_cache(maxsize=1)
def get_ingestor() -> DocumentIngestor:
    return DocumentIngestor(vector_index=_vector_store(), embeddings=_embeddings())


@lru_cache(maxsize=1)
def get_turn_coordinator() -> TurnCoordinator:
    from chat_agent.agents.orchestrator import build_orchestrator
    return build_turn_coordinator(orchestrator=build_orchestrator(rag_agent=get_rag_agent()))

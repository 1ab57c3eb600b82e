"""
RAG Agent - Answer generation over a user's documents

Retrieves the closest chunks from the user's namespace and generates a
grounded answer with source attribution.
"""

from typing import Any, List, Optional

from langchain_core.messages import HumanMessage, SystemMessage
from loguru import logger

from chat_agent.agents.rag.prompts import (
    EMPTY_GENERATION_ANSWER,
    NO_MATCH_ANSWER,
    RAG_SYSTEM_INSTRUCTIONS,
    build_context,
    build_rag_prompt,
)
from chat_agent.config.settings import settings
from chat_agent.infra.vector_store import VectorIndex
from chat_agent.llm.embeddings import EmbeddingService
from chat_agent.llm.response_utils import extract_text_from_response
from chat_agent.models.domain import (
    DocumentMatch,
    DocumentSearchResult,
    RagAnswer,
    RagSource,
    VectorMatch,
)
from chat_agent.utils.errors import UpstreamServiceError, ValidationError


def namespace_for(user_id: int, namespace: Optional[str] = None) -> str:
    """Namespace holding a user's documents ("user-42" unless overridden)."""
    if namespace:
        return namespace
    return settings.rag_namespace_template.format(user_id=user_id)


class RAGAgent:
    """
    Retrieval-Augmented Generation agent

    Answers questions by:
    1. Embedding the query
    2. Retrieving the nearest chunks in the owner's namespace
    3. Generating an answer restricted to that context
    4. Returning source attribution with previews and scores
    """

    def __init__(
        self,
        vector_index: Optional[VectorIndex] = None,
        embeddings: Optional[EmbeddingService] = None,
        llm: Any = None,
        max_context_chars: Optional[int] = None,
        preview_chars: Optional[int] = None,
    ):
        """
        Initialize RAG agent

        Args:
            vector_index: Vector index to search (defaults to the Chroma store)
            embeddings: Embedding service for queries
            llm: Chat model for generation
            max_context_chars: Upper bound on the context block
            preview_chars: Length of source text previews
        """
        if vector_index is None:
            from chat_agent.infra.vector_store import VectorStore
            vector_index = VectorStore()
        if embeddings is None:
            embeddings = EmbeddingService()
        if llm is None:
            from chat_agent.llm.client import create_llm
            llm = create_llm(
                temperature=settings.rag_temperature,
                max_completion_tokens=settings.rag_max_tokens,
            )

        self.vector_index = vector_index
        self.embeddings = embeddings
        self.llm = llm
        self.max_context_chars = max_context_chars or settings.rag_max_context_chars
        self.preview_chars = preview_chars or settings.rag_preview_chars

        logger.info(f"Initialized RAGAgent (max_context_chars={self.max_context_chars})")

    def _retrieve(self, query: str, namespace: str, top_k: int) -> List[VectorMatch]:
        if not query or not query.strip():
            raise ValidationError("Query cannot be empty")

        vector = self.embeddings.embed_text(query)
        try:
            return self.vector_index.query(namespace, vector, top_k)
        except Exception as e:
            logger.error(f"Vector index query failed in '{namespace}': {e}")
            raise UpstreamServiceError("Failed to query documents. Please try again.") from e

    def search(
        self,
        owner_user_id: int,
        query: str,
        top_k: Optional[int] = None,
        namespace: Optional[str] = None,
    ) -> DocumentSearchResult:
        """Raw nearest-neighbour retrieval, no answer generation."""
        namespace = namespace_for(owner_user_id, namespace)
        top_k = top_k or settings.rag_top_k
        logger.info(f"Document search: '{query}' (namespace={namespace}, top_k={top_k})")

        matches = self._retrieve(query, namespace, top_k)
        results = [
            DocumentMatch(
                id=match.id,
                score=match.score,
                text=str(match.metadata.get("text", "")),
                file_name=str(match.metadata.get("fileName", "")),
                chunk_index=int(match.metadata.get("chunkIndex", 0)),
                user_id=int(match.metadata.get("userId", owner_user_id)),
            )
            for match in matches
        ]
        return DocumentSearchResult(
            query=query,
            results=results,
            total_results=len(results),
            namespace=namespace,
        )

    def answer(
        self,
        owner_user_id: int,
        query: str,
        top_k: Optional[int] = None,
        namespace: Optional[str] = None,
    ) -> RagAnswer:
        """
        Answer a question from the owner's documents

        Args:
            owner_user_id: Whose namespace to search
            query: User question
            top_k: Number of chunks to retrieve (defaults to settings.rag_top_k)
            namespace: Override for the default "user-{id}" namespace

        Returns:
            RagAnswer; a query with no matches is a successful answer with no sources

        Raises:
            ValidationError: Empty query
            UpstreamServiceError: Embedding, index or model failure
        """
        namespace = namespace_for(owner_user_id, namespace)
        top_k = top_k or settings.rag_top_k
        logger.info(f"RAG question: '{query}' (namespace={namespace}, top_k={top_k})")

        matches = self._retrieve(query, namespace, top_k)
        if not matches:
            logger.bind(event="rag_no_match", component="rag").info(f"No relevant chunks in '{namespace}'")
            return RagAnswer(
                query=query,
                answer=NO_MATCH_ANSWER,
                sources=[],
                total_sources=0,
                namespace=namespace,
            )

        context_lines = build_context(matches, self.max_context_chars)
        messages = [
            SystemMessage(content=RAG_SYSTEM_INSTRUCTIONS),
            HumanMessage(content=build_rag_prompt(query, context_lines)),
        ]

        logger.debug(f"Calling LLM with {len(context_lines)} chunks as context")
        try:
            response = self.llm.invoke(messages)
        except Exception as e:
            logger.error(f"RAG generation error: {e}")
            raise UpstreamServiceError("Failed to generate response. Please try again.") from e

        answer = extract_text_from_response(response).strip() or EMPTY_GENERATION_ANSWER

        sources = [
            RagSource(
                source=i,
                file_name=str(match.metadata.get("fileName", "")),
                score=match.score,
                text_preview=str(match.metadata.get("text", ""))[:self.preview_chars] + "...",
            )
            for i, match in enumerate(matches[:len(context_lines)], 1)
        ]

        logger.info(f"Generated answer ({len(answer)} chars) with {len(sources)} sources")
        return RagAnswer(
            query=query,
            answer=answer,
            sources=sources,
            total_sources=len(sources),
            namespace=namespace,
        )

"""
Document ingestion - extract, chunk, embed and index one uploaded file.
"""

import hashlib
from typing import Optional

from loguru import logger

from chat_agent.agents.rag.agent import namespace_for
from chat_agent.config.settings import settings
from chat_agent.infra.vector_store import VectorIndex
from chat_agent.llm.embeddings import EmbeddingService
from chat_agent.models.domain import DocumentChunk, IngestionResult
from chat_agent.utils.rag import chunk_text, ensure_supported, extract_text


def chunk_id(owner_user_id: int, file_name: str, chunk_index: int) -> str:
    """Stable id, so re-ingesting the same file overwrites its chunks."""
    digest = hashlib.sha1(file_name.encode("utf-8")).hexdigest()[:12]
    return f"{owner_user_id}-{digest}-{chunk_index}"


class DocumentIngestor:
    """Turns an uploaded document into embedded chunks in the owner's namespace."""

    def __init__(
        self,
        vector_index: Optional[VectorIndex] = None,
        embeddings: Optional[EmbeddingService] = None,
        chunk_size: Optional[int] = None,
        chunk_overlap: Optional[int] = None,
    ):
        if vector_index is None:
            from chat_agent.infra.vector_store import VectorStore
            vector_index = VectorStore()
        self.vector_index = vector_index
        self.embeddings = embeddings or EmbeddingService()
        self.chunk_size = chunk_size or settings.rag_chunk_size
        self.chunk_overlap = settings.rag_chunk_overlap if chunk_overlap is None else chunk_overlap

    def ingest(
        self,
        owner_user_id: int,
        file_bytes: bytes,
        file_name: str,
        namespace: Optional[str] = None,
    ) -> IngestionResult:
        """
        Index one document

        Nothing is written unless every chunk was embedded.

        Raises:
            ValidationError: Unsupported file type
            DocumentParseError: Text extraction failed
            UpstreamServiceError: Embedding call failed
        """
        ensure_supported(file_name)
        namespace = namespace_for(owner_user_id, namespace)

        text = extract_text(file_bytes, file_name)
        chunks = chunk_text(text, self.chunk_size, self.chunk_overlap)
        if not chunks:
            logger.warning(f"No text extracted from {file_name}, nothing indexed")
            return IngestionResult(file_name=file_name, chunk_count=0, namespace=namespace)

        logger.info(f"Ingesting {file_name}: {len(chunks)} chunks into '{namespace}'")
        vectors = self.embeddings.embed_texts(chunks)

        documents = [
            DocumentChunk(
                id=chunk_id(owner_user_id, file_name, i),
                owner_user_id=owner_user_id,
                source_file_name=file_name,
                chunk_index=i,
                text=chunk,
                embedding=vector,
            )
            for i, (chunk, vector) in enumerate(zip(chunks, vectors))
        ]
        self.vector_index.upsert(namespace, documents)

        return IngestionResult(file_name=file_name, chunk_count=len(documents), namespace=namespace)

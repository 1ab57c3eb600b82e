"""
Vector store service using ChromaDB

Handles:
- One collection per namespace (per-user isolation of documents)
- Upsert of pre-embedded chunks
- Nearest-neighbour query with cosine similarity scores
- Persistent storage
"""

import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence

import chromadb
from chromadb.config import Settings as ChromaSettings
from loguru import logger

from chat_agent.config.settings import settings
from chat_agent.models.domain import DocumentChunk, VectorMatch


_INVALID_NAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


class VectorIndex(Protocol):
    """Contract the retrieval engine needs from a vector index."""

    def upsert(self, namespace: str, chunks: Sequence[DocumentChunk]) -> int:
        ...

    def query(self, namespace: str, vector: List[float], top_k: int) -> List[VectorMatch]:
        ...


def collection_name_for(namespace: str) -> str:
    """Map a namespace to a valid Chroma collection name."""
    name = _INVALID_NAME_CHARS.sub("_", namespace.strip())
    name = name.strip("._-") or "default"
    if len(name) < 3:
        name = f"ns_{name}"
    return name[:63]


class VectorStore:
    """
    ChromaDB-based vector store for RAG

    Each namespace ("user-42") is its own collection, so a query can never
    return another owner's chunks.
    """

    def __init__(
        self,
        persist_directory: Optional[Path] = None,
        client: Any = None,
    ):
        """
        Initialize vector store

        Args:
            persist_directory: Directory for persistent storage
            client: Pre-built Chroma client (tests pass their own)
        """
        if client is None:
            if persist_directory is None:
                persist_directory = settings.resolve_path(settings.vector_store_path)
            persist_directory = Path(persist_directory)
            persist_directory.mkdir(parents=True, exist_ok=True)
            client = chromadb.PersistentClient(
                path=str(persist_directory),
                settings=ChromaSettings(anonymized_telemetry=False, allow_reset=True),
            )
            logger.info(f"Initialized VectorStore at {persist_directory}")

        self.client = client
        self.collections: Dict[str, Any] = {}

    def _collection(self, namespace: str):
        """Get or create the collection backing a namespace."""
        name = collection_name_for(namespace)
        if name in self.collections:
            return self.collections[name]

        collection = self.client.get_or_create_collection(
            name=name,
            metadata={"namespace": namespace, "hnsw:space": "cosine"},
        )
        self.collections[name] = collection
        logger.debug(f"Got collection '{name}' ({collection.count()} docs)")
        return collection

    def upsert(self, namespace: str, chunks: Sequence[DocumentChunk], batch_size: int = 100) -> int:
        """
        Upsert embedded chunks into a namespace

        Args:
            namespace: Target namespace
            chunks: Chunks that already carry their embedding
            batch_size: Batch size for writes

        Returns:
            Number of chunks written
        """
        if not chunks:
            logger.warning("No chunks to upsert")
            return 0

        collection = self._collection(namespace)

        written = 0
        for i in range(0, len(chunks), batch_size):
            batch = chunks[i:i + batch_size]
            collection.upsert(
                ids=[chunk.id for chunk in batch],
                embeddings=[list(chunk.embedding) for chunk in batch],
                documents=[chunk.text for chunk in batch],
                metadatas=[chunk.metadata() for chunk in batch],
            )
            written += len(batch)

        logger.info(f"Upserted {written} chunks into namespace '{namespace}'")
        return written

    def query(self, namespace: str, vector: List[float], top_k: int = 5) -> List[VectorMatch]:
        """
        Nearest-neighbour search inside one namespace

        Args:
            namespace: Namespace to search
            vector: Query embedding
            top_k: Number of matches to return

        Returns:
            Matches ordered by descending score (1 - cosine distance)
        """
        collection = self._collection(namespace)
        available = collection.count()
        if available == 0:
            logger.debug(f"Namespace '{namespace}' is empty")
            return []

        results = collection.query(
            query_embeddings=[vector],
            n_results=min(top_k, available),
            include=["metadatas", "distances"],
        )

        matches: List[VectorMatch] = []
        if results and results.get("ids"):
            ids = results["ids"][0]
            metadatas = (results.get("metadatas") or [[{}] * len(ids)])[0]
            distances = (results.get("distances") or [[0.0] * len(ids)])[0]
            for match_id, metadata, distance in zip(ids, metadatas, distances):
                matches.append(VectorMatch(
                    id=match_id,
                    score=1.0 - float(distance),
                    metadata=dict(metadata or {}),
                ))

        logger.debug(f"Query in '{namespace}' returned {len(matches)} matches")
        return matches

    def count(self, namespace: str) -> int:
        return self._collection(namespace).count()

    def delete_namespace(self, namespace: str) -> None:
        """Drop every chunk stored for a namespace"""
        name = collection_name_for(namespace)
        try:
            self.client.delete_collection(name)
        except Exception as e:
            # Chroma raises different types for a missing collection across versions
            logger.debug(f"Collection '{name}' not deleted: {e}")
        self.collections.pop(name, None)
        logger.info(f"Deleted namespace '{namespace}'")

"""
Embedding service with caching

Handles:
- OpenAI text-embedding generation
- Local disk cache to avoid redundant API calls
- Batch processing for efficiency
"""

import json
import hashlib
from pathlib import Path
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, asdict
from datetime import datetime

from loguru import logger

from chat_agent.config.settings import settings
from chat_agent.utils.errors import UpstreamServiceError


@dataclass
class EmbeddingCacheEntry:
    """Cached embedding with metadata"""
    text_hash: str
    text_preview: str  # First 100 chars for debugging
    embedding: List[float]
    model: str
    created_at: str
    dimensions: int


class EmbeddingService:
    """
    Service for generating and caching text embeddings

    Features:
    - Automatic caching to avoid redundant API calls
    - Batch processing support
    - Configurable models
    """

    def __init__(
        self,
        model: Optional[str] = None,
        client: Any = None,
        cache_dir: Optional[Path] = None,
        enable_cache: Optional[bool] = None
    ):
        """
        Initialize embedding service

        Args:
            model: Embedding model name (defaults to settings.embedding_model)
            client: OpenAI client (defaults to one built from settings)
            cache_dir: Directory for caching embeddings
            enable_cache: Whether to use caching
        """
        self.model = model or settings.embedding_model
        self.enable_cache = settings.embedding_cache_enabled if enable_cache is None else enable_cache

        if client is None:
            from chat_agent.llm.client import create_openai_client
            client = create_openai_client()
        self.client = client

        if cache_dir is None:
            cache_dir = settings.resolve_path("data/embeddings_cache")
        self.cache_dir = Path(cache_dir)
        if self.enable_cache:
            self.cache_dir.mkdir(parents=True, exist_ok=True)

        self.cache_file = self.cache_dir / f"openai_{self.model}.json".replace("/", "_")
        self.cache: Dict[str, EmbeddingCacheEntry] = {}
        self._load_cache()

        self.stats = {"api_calls": 0, "cache_hits": 0}

        logger.info(f"Initialized EmbeddingService (model={self.model}, cache={self.enable_cache}, entries={len(self.cache)})")

    def _load_cache(self) -> None:
        """Load embeddings from cache file"""
        if not self.enable_cache or not self.cache_file.exists():
            return

        try:
            with open(self.cache_file, 'r') as f:
                cache_data = json.load(f)
            for text_hash, entry_dict in cache_data.items():
                self.cache[text_hash] = EmbeddingCacheEntry(**entry_dict)
            logger.debug(f"Loaded {len(self.cache)} cached embeddings")
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Failed to load embedding cache: {e}")
            self.cache = {}

    def _save_cache(self) -> None:
        """Save embeddings to cache file"""
        if not self.enable_cache:
            return

        try:
            cache_data = {text_hash: asdict(entry) for text_hash, entry in self.cache.items()}
            with open(self.cache_file, 'w') as f:
                json.dump(cache_data, f)
            logger.debug(f"Saved {len(self.cache)} embeddings to cache")
        except OSError as e:
            logger.error(f"Failed to save embedding cache: {e}")

    def _hash_text(self, text: str) -> str:
        """Create hash of text for cache lookup"""
        return hashlib.sha256(f"{self.model}:{text}".encode()).hexdigest()

    def embed_text(self, text: str) -> List[float]:
        """
        Generate embedding for a single text

        Args:
            text: Text to embed

        Returns:
            Embedding vector
        """
        return self.embed_texts([text])[0]

    def embed_texts(self, texts: List[str], batch_size: int = 100) -> List[List[float]]:
        """
        Generate embeddings for multiple texts with batching

        Args:
            texts: List of texts to embed (order is preserved)
            batch_size: Max texts per API call

        Returns:
            List of embedding vectors, one per input text

        Raises:
            UpstreamServiceError: If the embeddings API call fails
        """
        if not texts:
            return []

        results: List[Optional[List[float]]] = [None] * len(texts)
        to_fetch: List[int] = []

        for i, text in enumerate(texts):
            cached = self.cache.get(self._hash_text(text)) if self.enable_cache else None
            if cached is not None:
                results[i] = cached.embedding
            else:
                to_fetch.append(i)

        logger.debug(f"Embedding {len(texts)} texts: {len(texts) - len(to_fetch)} from cache, {len(to_fetch)} from API")
        self.stats["cache_hits"] += len(texts) - len(to_fetch)

        for batch_start in range(0, len(to_fetch), batch_size):
            batch_indices = to_fetch[batch_start:batch_start + batch_size]
            batch_texts = [texts[i] for i in batch_indices]
            try:
                response = self.client.embeddings.create(model=self.model, input=batch_texts)
            except Exception as e:
                logger.error(f"Failed to generate embeddings: {e}")
                raise UpstreamServiceError("Embedding request failed") from e
            self.stats["api_calls"] += 1

            for j, orig_idx in enumerate(batch_indices):
                embedding = list(response.data[j].embedding)
                results[orig_idx] = embedding
                if self.enable_cache:
                    text_hash = self._hash_text(texts[orig_idx])
                    self.cache[text_hash] = EmbeddingCacheEntry(
                        text_hash=text_hash,
                        text_preview=texts[orig_idx][:100],
                        embedding=embedding,
                        model=self.model,
                        created_at=datetime.now().isoformat(),
                        dimensions=len(embedding)
                    )

        if to_fetch:
            self._save_cache()

        return [emb for emb in results if emb is not None]

    def get_stats(self) -> Dict[str, Any]:
        """Get service statistics"""
        return {
            **self.stats,
            "model": self.model,
            "cache_size": len(self.cache),
            "cache_enabled": self.enable_cache
        }

"""Sentence-embedding similarity provider.

Wraps a sentence-transformers model (all-MiniLM-L6-v2 by default) behind
batch_similarity(anchor, texts). Embeddings are cached per text with an
absolute TTL. Failures raise ProviderError; the caller owns the circuit
breaker and the keyword fallback.
"""

import hashlib
import logging
from abc import ABC, abstractmethod

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity as sklearn_cosine

from config import settings
from services.cache import TTLCache
from services.errors import ProviderError

logger = logging.getLogger(__name__)


class EmbeddingProvider(ABC):
    name: str = ""

    @abstractmethod
    def batch_similarity(self, anchor: str, texts: list[str]) -> list[float]:
        """Cosine similarity of each text against the anchor, in input order."""


def _cache_key(model_name: str, text: str) -> str:
    return model_name + ":" + hashlib.sha256(text.encode("utf-8")).hexdigest()


class SentenceTransformerEmbeddings(EmbeddingProvider):
    name = "sentence_transformers"

    def __init__(self, model_name: str | None = None, cache: TTLCache | None = None) -> None:
        self.model_name = model_name or settings.embedding_model
        self.cache = cache or TTLCache(settings.embedding_cache_ttl_seconds)
        self._model = None
        self._load_failed = False

    def _get_model(self):
        """Load the sentence-transformers model lazily on first call."""
        if self._model is None and not self._load_failed:
            try:
                from sentence_transformers import SentenceTransformer

                self._model = SentenceTransformer(self.model_name)
                logger.info("Embedding model %s loaded successfully", self.model_name)
            except Exception as e:
                self._load_failed = True
                logger.warning("Failed to load embedding model %s: %s", self.model_name, e)
        return self._model

    @property
    def available(self) -> bool:
        return self._get_model() is not None

    def embed(self, texts: list[str]) -> np.ndarray:
        model = self._get_model()
        if model is None:
            raise ProviderError(self.name, f"model {self.model_name} unavailable")

        vectors: list[np.ndarray | None] = [self.cache.get(_cache_key(self.model_name, t)) for t in texts]
        missing = [i for i, v in enumerate(vectors) if v is None]
        if missing:
            try:
                encoded = model.encode([texts[i] for i in missing], convert_to_numpy=True)
            except Exception as e:
                raise ProviderError(self.name, f"encoding failed: {e}") from e
            for i, vector in zip(missing, encoded):
                vectors[i] = vector
                self.cache.set(_cache_key(self.model_name, texts[i]), vector)
        return np.vstack(vectors)

    def batch_similarity(self, anchor: str, texts: list[str]) -> list[float]:
        if not texts:
            return []
        matrix = self.embed([anchor] + texts)
        scores = sklearn_cosine(matrix[0:1], matrix[1:])[0]
        return [float(np.clip(s, 0.0, 1.0)) for s in scores]

"""
Embedding Service for generating exercise-name embeddings via OpenAI.

Calls OpenAI's text-embedding-3-small model to convert exercise names into
1536-dimension embedding vectors for cosine similarity search.
"""

import logging
import math
from collections import OrderedDict
from typing import Any, List, Optional, Sequence

import openai

from application.exceptions import UpstreamServiceError
from backend.ai import AIClientFactory, AIRequestContext

logger = logging.getLogger(__name__)

SERVICE_NAME = "embedding"

DEFAULT_CACHE_SIZE = 1024


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity between two vectors.

    Returns 0.0 when either vector has zero magnitude.

    Raises:
        ValueError: If the vectors have different dimensions
    """
    if len(a) != len(b):
        raise ValueError(f"Vector dimensions differ: {len(a)} != {len(b)}")

    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


class EmbeddingService:
    """Generates text embeddings using OpenAI's embedding API."""

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        user_id: Optional[str] = None,
        client: Optional[Any] = None,
        cache_size: int = DEFAULT_CACHE_SIZE,
    ):
        """
        Initialize the embedding service.

        Args:
            model: Embedding model to use (default: text-embedding-3-small)
            user_id: Optional user ID for tracking/observability
            client: Optional AsyncOpenAI-compatible client (for testing)
            cache_size: Most recent texts whose vectors are kept in memory;
                0 disables the cache
        """
        if client is None:
            context = AIRequestContext(
                user_id=user_id,
                feature_name="exercise_embedding",
                custom_properties={"model": model},
            )
            client = AIClientFactory.create_openai_client(context=context)
        self._client = client
        self._model = model
        self._cache_size = cache_size
        self._cache: "OrderedDict[str, List[float]]" = OrderedDict()

    async def embed(self, text: str) -> List[float]:
        """
        Generate an embedding vector for the given text.

        Args:
            text: Exercise name to embed

        Returns:
            List of floats representing the embedding vector (1536 dimensions)

        Raises:
            ValueError: If text is empty
            UpstreamServiceError: If the OpenAI API call fails
        """
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        text = text.strip()
        cached = self._cache.get(text)
        if cached is not None:
            self._cache.move_to_end(text)
            return list(cached)

        response = await self._create(text)
        vector = list(response.data[0].embedding)
        self._remember(text, vector)
        return vector

    async def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for several texts in a single request.

        Args:
            texts: Texts to embed

        Returns:
            One vector per text, in input order

        Raises:
            ValueError: If any text is empty
            UpstreamServiceError: If the OpenAI API call fails
        """
        if not texts:
            return []
        if any(not text or not text.strip() for text in texts):
            raise ValueError("Cannot embed empty text")

        response = await self._create([text.strip() for text in texts])
        # The API may return items out of order; index restores input order
        ordered = sorted(response.data, key=lambda item: item.index)
        vectors = [list(item.embedding) for item in ordered]
        for text, vector in zip(texts, vectors):
            self._remember(text.strip(), vector)
        return vectors

    def _remember(self, text: str, vector: List[float]) -> None:
        if self._cache_size <= 0:
            return
        self._cache[text] = list(vector)
        self._cache.move_to_end(text)
        while len(self._cache) > self._cache_size:
            self._cache.popitem(last=False)

    @staticmethod
    def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
        return cosine_similarity(a, b)

    async def _create(self, payload: Any) -> Any:
        try:
            return await self._client.embeddings.create(input=payload, model=self._model)
        except openai.OpenAIError as e:
            logger.error(f"Embedding request failed: {type(e).__name__}")
            raise UpstreamServiceError(SERVICE_NAME, f"request failed ({type(e).__name__})") from e

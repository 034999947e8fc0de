"""
Embedding Service Interface (Port).

Defines the abstract interface for generating text embeddings.
Implementations may use OpenAI, local models, or other backends.
"""

from typing import List, Protocol


class EmbeddingService(Protocol):
    """Abstract interface for text embedding generation."""

    async def embed(self, text: str) -> List[float]:
        """
        Generate an embedding vector for the given text.

        Args:
            text: Text to embed (an exercise name)

        Returns:
            List of floats representing the embedding vector

        Raises:
            UpstreamServiceError: If embedding generation fails
        """
        ...

    async def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for several texts in one request.

        Args:
            texts: Texts to embed

        Returns:
            One vector per input text, in input order
        """
        ...

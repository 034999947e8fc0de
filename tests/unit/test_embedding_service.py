"""
Unit tests for the OpenAI-backed EmbeddingService.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from application.exceptions import UpstreamServiceError
from backend.services.embedding_service import EmbeddingService, cosine_similarity


def _embedding_response(*items):
    return SimpleNamespace(
        data=[SimpleNamespace(index=index, embedding=vector) for index, vector in items]
    )


@pytest.fixture
def mock_openai():
    client = MagicMock()
    client.embeddings.create = AsyncMock()
    return client


@pytest.mark.unit
class TestCosineSimilarity:

    def test_identical_vectors(self):
        assert cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(1.0)

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == 0.0

    def test_opposite_vectors(self):
        assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == pytest.approx(-1.0)

    def test_zero_vector(self):
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0

    def test_dimension_mismatch(self):
        with pytest.raises(ValueError, match="dimensions differ"):
            cosine_similarity([1.0], [1.0, 2.0])

    def test_static_method_delegates(self):
        assert EmbeddingService.cosine_similarity([1.0, 1.0], [1.0, 1.0]) == pytest.approx(1.0)


@pytest.mark.unit
class TestEmbeddingService:

    @pytest.mark.asyncio
    async def test_embed(self, mock_openai):
        mock_openai.embeddings.create.return_value = _embedding_response((0, [0.1, 0.2]))
        service = EmbeddingService(model="text-embedding-3-small", client=mock_openai)

        vector = await service.embed("  Bench Press ")

        assert vector == [0.1, 0.2]
        mock_openai.embeddings.create.assert_awaited_once_with(
            input="Bench Press", model="text-embedding-3-small"
        )

    @pytest.mark.asyncio
    async def test_embed_empty_text(self, mock_openai):
        service = EmbeddingService(client=mock_openai)

        with pytest.raises(ValueError, match="empty"):
            await service.embed("   ")
        mock_openai.embeddings.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_embed_batch_restores_input_order(self, mock_openai):
        mock_openai.embeddings.create.return_value = _embedding_response(
            (1, [0.0, 1.0]),
            (0, [1.0, 0.0]),
        )
        service = EmbeddingService(client=mock_openai)

        vectors = await service.embed_batch(["Squat", "Deadlift"])

        assert vectors == [[1.0, 0.0], [0.0, 1.0]]
        assert mock_openai.embeddings.create.call_args.kwargs["input"] == ["Squat", "Deadlift"]

    @pytest.mark.asyncio
    async def test_embed_batch_empty_list(self, mock_openai):
        service = EmbeddingService(client=mock_openai)

        assert await service.embed_batch([]) == []
        mock_openai.embeddings.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_embed_batch_rejects_blank_item(self, mock_openai):
        service = EmbeddingService(client=mock_openai)

        with pytest.raises(ValueError):
            await service.embed_batch(["Squat", ""])

    @pytest.mark.asyncio
    async def test_api_error_is_upstream_error(self, mock_openai):
        request = httpx.Request("POST", "https://api.openai.com/v1/embeddings")
        mock_openai.embeddings.create.side_effect = openai.APIConnectionError(request=request)
        service = EmbeddingService(client=mock_openai)

        with pytest.raises(UpstreamServiceError) as exc_info:
            await service.embed("Bench Press")

        assert exc_info.value.service == "embedding"
        assert exc_info.value.public_message == "Upstream embedding service failed"


@pytest.mark.unit
class TestEmbeddingCache:

    @pytest.mark.asyncio
    async def test_repeat_text_is_served_from_cache(self, mock_openai):
        mock_openai.embeddings.create.return_value = _embedding_response((0, [0.1, 0.2]))
        service = EmbeddingService(client=mock_openai)

        first = await service.embed("Bench Press")
        second = await service.embed(" Bench Press  ")

        assert first == second == [0.1, 0.2]
        mock_openai.embeddings.create.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_batch_fills_cache(self, mock_openai):
        mock_openai.embeddings.create.return_value = _embedding_response(
            (0, [1.0, 0.0]),
            (1, [0.0, 1.0]),
        )
        service = EmbeddingService(client=mock_openai)

        await service.embed_batch(["Squat", "Deadlift"])

        assert await service.embed("Deadlift") == [0.0, 1.0]
        assert mock_openai.embeddings.create.await_count == 1

    @pytest.mark.asyncio
    async def test_oldest_entry_is_evicted(self, mock_openai):
        mock_openai.embeddings.create.side_effect = [
            _embedding_response((0, [1.0])),
            _embedding_response((0, [2.0])),
            _embedding_response((0, [3.0])),
        ]
        service = EmbeddingService(client=mock_openai, cache_size=1)

        await service.embed("Squat")
        await service.embed("Deadlift")

        assert await service.embed("Squat") == [3.0]
        assert mock_openai.embeddings.create.await_count == 3

    @pytest.mark.asyncio
    async def test_zero_size_disables_cache(self, mock_openai):
        mock_openai.embeddings.create.return_value = _embedding_response((0, [0.5]))
        service = EmbeddingService(client=mock_openai, cache_size=0)

        await service.embed("Squat")
        await service.embed("Squat")

        assert mock_openai.embeddings.create.await_count == 2

    @pytest.mark.asyncio
    async def test_cached_vector_is_not_shared(self, mock_openai):
        mock_openai.embeddings.create.return_value = _embedding_response((0, [0.1, 0.2]))
        service = EmbeddingService(client=mock_openai)

        vector = await service.embed("Squat")
        vector.append(9.9)

        assert await service.embed("Squat") == [0.1, 0.2]

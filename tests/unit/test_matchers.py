"""
Unit tests for LexicalMatcher and SemanticMatcher.
"""

import pytest

from application.exceptions import UpstreamServiceError
from backend.core.lexical_matcher import LexicalMatcher
from backend.core.semantic_matcher import SemanticMatcher
from tests.fakes import FakeEmbeddingService, create_exercise_catalog, token_vector


@pytest.mark.unit
class TestLexicalMatcher:
    """Tests for trigram search plus token re-ranking."""

    @pytest.mark.asyncio
    async def test_searches_with_expanded_query(self):
        catalog = create_exercise_catalog()
        matcher = LexicalMatcher(catalog, limit=50)

        await matcher.match("DB Bench Press")

        assert catalog.lexical_calls == [{"query": "dumbbell bench press", "limit": 50}]

    @pytest.mark.asyncio
    async def test_top_ranked_candidate_wins(self):
        catalog = create_exercise_catalog()
        matcher = LexicalMatcher(catalog)

        match = await matcher.match("DB Bench Press")

        assert match is not None
        assert match.entry.name == "Dumbbell Bench Press"
        assert match.score == 3.0

    @pytest.mark.asyncio
    async def test_tie_goes_to_first_search_result(self):
        catalog = create_exercise_catalog(["Barbell Bench Press", "Dumbbell Bench Press"])
        matcher = LexicalMatcher(catalog)

        match = await matcher.match("Bench Press")

        assert match.entry.name == "Barbell Bench Press"
        assert match.candidates == 2

    @pytest.mark.asyncio
    async def test_any_candidate_is_a_match(self):
        """A low-scoring candidate still wins; there is no score floor."""
        catalog = create_exercise_catalog(["Pull Up"])
        barbell_row = catalog.add("Barbell Row")
        catalog.set_lexical_results("chest fly", [barbell_row])

        match = await LexicalMatcher(catalog).match("Chest Fly")

        assert match.entry is barbell_row
        assert match.score == 0.0

    @pytest.mark.asyncio
    async def test_no_candidates(self):
        catalog = create_exercise_catalog()
        assert await LexicalMatcher(catalog).match("Landmine Rotational Press") is None

    @pytest.mark.asyncio
    async def test_blank_name_skips_search(self):
        catalog = create_exercise_catalog()
        assert await LexicalMatcher(catalog).candidates("   ") == []
        assert catalog.lexical_calls == []


@pytest.mark.unit
class TestSemanticMatcher:
    """Tests for embedding nearest-neighbour matching."""

    @pytest.mark.asyncio
    async def test_match_above_threshold(self):
        catalog = create_exercise_catalog(with_embeddings=True)
        embeddings = FakeEmbeddingService()
        matcher = SemanticMatcher(catalog, embeddings, threshold=0.75, limit=5)

        match = await matcher.match("Romanian Deadlift")

        assert match is not None
        assert match.entry.name == "Romanian Deadlift"
        assert match.similarity == pytest.approx(1.0)
        assert embeddings.embed_calls == ["Romanian Deadlift"]
        assert catalog.semantic_calls[0]["threshold"] == 0.75
        assert catalog.semantic_calls[0]["limit"] == 5

    @pytest.mark.asyncio
    async def test_best_hit_wins(self):
        catalog = create_exercise_catalog()
        squat = catalog.get_all()[2]
        deadlift = catalog.get_all()[3]
        catalog.set_semantic_results([(squat, 0.8), (deadlift, 0.91)])

        match = await SemanticMatcher(catalog, FakeEmbeddingService()).match("Hinge")

        assert match.entry is deadlift
        assert match.similarity == 0.91

    @pytest.mark.asyncio
    async def test_below_threshold_is_no_match(self):
        catalog = create_exercise_catalog()
        catalog.set_semantic_results([(catalog.get_all()[0], 0.74)])

        matcher = SemanticMatcher(catalog, FakeEmbeddingService(), threshold=0.75)

        assert await matcher.match("Chest Press") is None

    @pytest.mark.asyncio
    async def test_threshold_is_configurable(self):
        catalog = create_exercise_catalog()
        catalog.set_semantic_results([(catalog.get_all()[0], 0.6)])

        matcher = SemanticMatcher(catalog, FakeEmbeddingService(), threshold=0.5)

        assert (await matcher.match("Chest Press")).similarity == 0.6

    @pytest.mark.asyncio
    async def test_embedding_failure_propagates(self):
        catalog = create_exercise_catalog()
        embeddings = FakeEmbeddingService()
        embeddings.fail_with = UpstreamServiceError("embedding", "boom")

        with pytest.raises(UpstreamServiceError):
            await SemanticMatcher(catalog, embeddings).match("Bench Press")
        assert catalog.semantic_calls == []

    def test_token_vector_is_deterministic(self):
        assert token_vector("Bench Press") == token_vector("bench press")

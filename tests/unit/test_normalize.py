import pytest

from backend.core.normalize import (
    ABBREVIATIONS,
    expand_abbreviations,
    normalize_key,
    normalize_slug,
    tokenize,
)


@pytest.mark.unit
class TestExpandAbbreviations:
    """Tests for expand_abbreviations."""

    def test_expand_equipment_shorthand(self):
        assert expand_abbreviations("db bench press") == "dumbbell bench press"
        assert expand_abbreviations("bb squat") == "barbell squat"
        assert expand_abbreviations("kb swing") == "kettlebell swing"

    def test_case_insensitive(self):
        assert expand_abbreviations("DB Bench Press") == "dumbbell bench press"

    def test_expands_movement_shorthand(self):
        assert expand_abbreviations("RDL") == "romanian deadlift"
        assert expand_abbreviations("OHP") == "overhead press"

    def test_longest_shorthand_wins(self):
        """'sldl' must not be expanded as 'sl' + 'dl'."""
        assert expand_abbreviations("SLDL") == "stiff leg deadlift"
        assert expand_abbreviations("SL RDL") == "single leg romanian deadlift"

    def test_only_whole_words_expanded(self):
        assert expand_abbreviations("dbx press") == "dbx press"
        assert expand_abbreviations("bbq") == "bbq"

    def test_abbreviation_map_loaded(self):
        assert ABBREVIATIONS["db"] == "dumbbell"


@pytest.mark.unit
class TestTokenize:
    """Tests for tokenize."""

    def test_tokenize_expands_and_splits(self):
        assert tokenize("DB Bench-Press") == ["dumbbell", "bench", "press"]

    def test_slashes_become_spaces(self):
        assert tokenize("push/pull") == ["push", "pull"]

    def test_collapses_whitespace(self):
        assert tokenize("  bench   press ") == ["bench", "press"]

    def test_empty(self):
        assert tokenize("") == []


@pytest.mark.unit
class TestNormalizeKey:
    """Tests for the dedup key."""

    def test_punctuation_and_spacing_collapse(self):
        assert normalize_key("Bench-Press ") == "bench_press"
        assert normalize_key("bench  press") == "bench_press"
        assert normalize_key("BENCH PRESS") == "bench_press"

    def test_abbreviations_are_not_expanded(self):
        """Keys are surface-level; 'DB' and 'Dumbbell' stay distinct."""
        assert normalize_key("DB Bench Press") != normalize_key("Dumbbell Bench Press")

    def test_no_alphanumerics(self):
        assert normalize_key("---") == ""


@pytest.mark.unit
class TestNormalizeSlug:
    """Tests for catalog slugs."""

    def test_slug(self):
        assert normalize_slug("Landmine Rotational Press!") == "landmine-rotational-press"
        assert normalize_slug("  T-Bar  Row ") == "t-bar-row"

    def test_slug_empty(self):
        assert normalize_slug("!!!") == ""

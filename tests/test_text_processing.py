"""Tests for text processing utilities."""

from cv_blueprint.utils.text_processing import (
    duration_specificity,
    is_more_specific_duration,
    normalize_key,
    token_overlap,
    tokenize,
)


class TestNormalizeKey:
    def test_trims_and_lowercases(self):
        assert normalize_key("  JavaScript ") == "javascript"

    def test_collapses_whitespace(self):
        assert normalize_key("Tech \t  Corp") == "tech corp"

    def test_none_safe(self):
        assert normalize_key(None) == ""


class TestTokenize:
    def test_drops_stop_words(self):
        assert tokenize("Bachelor of Science in Physics") == {"bachelor", "science", "physics"}

    def test_keeps_symbols_in_tech_names(self):
        tokens = tokenize("C++ and Node.js Developer")
        assert "c++" in tokens
        assert "node.js" in tokens


class TestTokenOverlap:
    def test_promotion_is_full_overlap(self):
        assert token_overlap("Developer", "Senior Developer") == 1.0

    def test_unrelated_titles(self):
        assert token_overlap("Software Engineer", "Sales Manager") == 0.0

    def test_partial_overlap_uses_smaller_set(self):
        # {"senior", "backend", "engineer"} vs {"backend", "developer"}: 1 shared / 2
        assert token_overlap("Senior Backend Engineer", "Backend Developer") == 0.5

    def test_empty_strings(self):
        assert token_overlap("", "") == 1.0
        assert token_overlap("", "Developer") == 0.0


class TestDurationSpecificity:
    def test_closed_range_beats_open_ended(self):
        assert is_more_specific_duration("2020-2022", "2020-present")
        assert not is_more_specific_duration("2020-present", "2020-2022")

    def test_months_beat_bare_years(self):
        assert is_more_specific_duration("Jan 2020 - Mar 2022", "2020-2022")

    def test_tie_keeps_current(self):
        assert not is_more_specific_duration("2020-2023", "2020-2022")

    def test_anything_beats_empty(self):
        assert is_more_specific_duration("2019", "")
        assert not is_more_specific_duration("", "2019")

    def test_empty_rank(self):
        assert duration_specificity("") == (0, 0, 0)

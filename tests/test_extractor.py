from __future__ import annotations

import pytest

from storylink.extractor import extract_story_ids


def test_extracts_case_insensitive_markers_dedup_in_order():
    assert extract_story_ids("ch123 and CH-456 and ch123") == ["123", "456"]


@pytest.mark.parametrize("content", ["", None])
def test_empty_or_missing_content_yields_nothing(content):
    assert extract_story_ids(content) == []


def test_marker_is_not_part_of_result():
    assert extract_story_ids("feature/ch-55-improve-logging") == ["55"]


def test_long_digit_run_is_cut_at_seven_digits():
    # Pinned behavior: no boundary is required after the digits.
    assert extract_story_ids("ch1234567890") == ["1234567"]


def test_leading_zeros_are_kept_distinct():
    assert extract_story_ids("ch007 ch7") == ["007", "7"]


def test_marker_inside_a_word_still_matches():
    assert extract_story_ids("branch9") == ["9"]


def test_text_without_marker_is_ignored():
    assert extract_story_ids("fixes #123 and story 456") == []


def test_double_hyphen_is_not_a_marker():
    assert extract_story_ids("ch--12") == []


def test_bracketed_tags_are_found():
    assert extract_story_ids("Fix bug [ch-20] [Ch-30]") == ["20", "30"]


@pytest.mark.parametrize("content", ["ch-١٢٣", "ch５５", "CH-１"])
def test_non_ascii_digits_are_not_story_ids(content):
    assert extract_story_ids(content) == []

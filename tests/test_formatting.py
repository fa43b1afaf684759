from __future__ import annotations

import pytest

from storylink.formatting import generate_pr_body, generate_pr_title, story_labels
from storylink.models import Story

FIX_BUG = Story(id="20", name="Fix bug", story_type="bug")


def test_placeholder_title_is_replaced_by_story_name():
    assert generate_pr_title(["20"], FIX_BUG, "-") == "Fix bug [ch-20]"


def test_no_missing_ids_keeps_title():
    assert generate_pr_title([], FIX_BUG, "My PR") == "My PR"


def test_tags_are_appended_in_given_order():
    assert generate_pr_title(("30", "20"), FIX_BUG, "My PR") == "My PR [ch-30] [ch-20]"


def test_title_generation_is_idempotent_on_tagged_title():
    tagged = generate_pr_title(["20"], FIX_BUG, "My PR")
    assert generate_pr_title([], FIX_BUG, tagged) == tagged


def test_surrounding_whitespace_is_trimmed():
    assert generate_pr_title([], FIX_BUG, "  spaced  ") == "spaced"


def test_placeholder_with_nameless_story_yields_only_tags():
    degraded = Story.from_error("20", {"message": "not found"}, "404")
    assert generate_pr_title(["20"], degraded, "-") == "[ch-20]"


def test_body_mentions_are_bracketed_once():
    assert generate_pr_body("see ch-20 and [ch-30] done") == "see [ch-20] and [ch-30] done"


def test_body_annotation_is_idempotent():
    once = generate_pr_body("CH12, ch-3 and [ch-4]")
    assert once == "[CH12], [ch-3] and [ch-4]"
    assert generate_pr_body(once) == once


def test_empty_body():
    assert generate_pr_body(None) == ""
    assert generate_pr_body("") == ""


def test_labels_come_from_story_type():
    assert story_labels(FIX_BUG) == ["bug"]
    assert story_labels(Story(id="1", name="x", story_type=None)) == []
    assert story_labels(None) == []


@pytest.mark.parametrize("mention", ["ch-١٢٣", "ch５５", "CH-１"])
def test_non_ascii_digit_mentions_are_left_unbracketed(mention):
    assert generate_pr_body(f"see {mention}") == f"see {mention}"

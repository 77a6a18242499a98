import pytest

from tagform.utils.slug_utils import FALLBACK_SLUG, ensure_unique_slug, slugify


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Q1 Survey!!", "q1-survey"),
        ("  Customer   Feedback  ", "customer-feedback"),
        ("snake_case_name", "snake-case-name"),
        ("--Already-Slugged--", "already-slugged"),
        ("Café & Crème", "caf-crme"),
        ("!!!", ""),
    ],
)
def test_slugify(text, expected):
    assert slugify(text) == expected


def test_slugify_is_idempotent():
    once = slugify("Quarterly  Survey / 2024")
    assert slugify(once) == once


def test_unique_slug_returns_base_when_free():
    assert ensure_unique_slug(lambda slug: False, "feedback") == "feedback"


def test_unique_slug_appends_first_free_counter():
    taken = {"feedback", "feedback-1", "feedback-2"}
    assert ensure_unique_slug(taken.__contains__, "feedback") == "feedback-3"


def test_unique_slug_falls_back_for_empty_base():
    assert ensure_unique_slug(lambda slug: False, "") == FALLBACK_SLUG

"""Tests for field coercion and JSON extraction helpers."""

from __future__ import annotations

import pytest

from mylook.models import Category, Season
from mylook.sanitize import (
    dedupe_by_id,
    normalize_json_text,
    sanitize_category,
    sanitize_name,
    sanitize_season,
    sanitize_tags,
)
from conftest import make_item


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ('{"a": 1}', '{"a": 1}'),
        ('  {"a": 1}\n', '{"a": 1}'),
        ('Here you go:\n```json\n{"a": 1}\n```', '{"a": 1}'),
        ('```\n{"b": 2}\n```', '{"b": 2}'),
        ('Sure! {"c": 3} Hope it helps.', '{"c": 3}'),
        ("no json here", "no json here"),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_json_text(text: str | None, expected: str) -> None:
    assert normalize_json_text(text) == expected


def test_sanitize_tags_trims_and_caps_at_eight() -> None:
    tags = sanitize_tags([" casual ", "", None, "blue", *[f"t{i}" for i in range(10)]])

    assert tags[:2] == ["casual", "blue"]
    assert len(tags) == 8


def test_sanitize_tags_accepts_comma_separated_text() -> None:
    assert sanitize_tags("warm, wool ,, winter") == ["warm", "wool", "winter"]
    assert sanitize_tags(42) == []


def test_unknown_category_and_season_fall_back_to_defaults() -> None:
    assert sanitize_category("Shoes") is Category.SHOES
    assert sanitize_category("hats") is Category.TOPS
    assert sanitize_category(None) is Category.TOPS
    assert sanitize_season(" WINTER ") is Season.WINTER
    assert sanitize_season("monsoon") is Season.ALL


def test_sanitize_name_defaults_blank_values() -> None:
    assert sanitize_name("  Linen shirt ") == "Linen shirt"
    assert sanitize_name("   ") == "Untitled item"
    assert sanitize_name(None, "Look") == "Look"


def test_dedupe_by_id_keeps_first_occurrence_and_skips_none() -> None:
    first = make_item("t1", Category.TOPS)
    duplicate = make_item("t1", Category.BOTTOMS)
    other = make_item("s1", Category.SHOES)

    assert dedupe_by_id([None, first, duplicate, other, None]) == [first, other]

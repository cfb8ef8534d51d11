"""Tests for pulling JSON objects out of model responses."""

import pytest

from lexfeed.enrichment import extract_json_object, find_balanced_object
from lexfeed.exceptions import ResponseParseError


def test_plain_object():
    assert extract_json_object('{"language": "en"}') == {"language": "en"}


def test_markdown_fence_and_prose():
    text = 'Sure, here it is:\n```json\n{"legal_areas": ["Tax Law"], "jurisdiction": "EU"}\n```\nAnything else?'
    assert extract_json_object(text) == {"legal_areas": ["Tax Law"], "jurisdiction": "EU"}


def test_braces_inside_strings():
    text = '{"summary": "The clause {x} was void", "note": "a \\" } quote"} trailing'
    assert extract_json_object(text)["summary"] == "The clause {x} was void"


def test_nested_objects():
    assert extract_json_object('x {"a": {"b": {"c": 1}}} y') == {"a": {"b": {"c": 1}}}


def test_first_balanced_span_wins():
    assert extract_json_object('{"a": 1} and then {"b": 2}') == {"a": 1}


def test_span_positions():
    assert find_balanced_object('ab{"k": "}"}cd') == (2, 12)
    assert find_balanced_object("no braces") is None
    assert find_balanced_object('{"open": true') is None


@pytest.mark.parametrize(
    "text",
    [
        None,
        "",
        "I could not classify this article.",
        "[1, 2, 3]",
        "{not json at all}",
        '{"unterminated": "value}',
    ],
)
def test_unusable_responses(text):
    with pytest.raises(ResponseParseError):
        extract_json_object(text)

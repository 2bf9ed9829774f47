"""
Tests for completion-text extraction and sentiment normalization
"""

import pytest

from feedback_digest.digest.parsing import (
    extract_json_object,
    normalize_sentiment,
    round_half_up,
    strip_markdown_json,
)
from feedback_digest.errors import InferenceParseFailure


def test_extract_object_surrounded_by_chatter():
    text = 'Sure! {"sentiment": {"frustrated": 1}} Hope this helps.'
    assert extract_json_object(text) == {"sentiment": {"frustrated": 1}}


def test_extract_object_from_markdown_fence():
    text = '```json\n{"feature_signals": ["search"]}\n```'
    assert extract_json_object(text) == {"feature_signals": ["search"]}


def test_extract_ignores_braces_inside_strings():
    text = 'Result: {"quote": "use {id} placeholders"} and then {not json}'
    assert extract_json_object(text) == {"quote": "use {id} placeholders"}


def test_extract_without_object_raises():
    with pytest.raises(InferenceParseFailure):
        extract_json_object("I could not analyze this feedback.")


def test_extract_malformed_object_raises():
    with pytest.raises(InferenceParseFailure):
        extract_json_object('{"top_themes": [ {"theme": "Perf", }')


def test_extract_empty_text_raises():
    with pytest.raises(InferenceParseFailure):
        extract_json_object("")


def test_extract_rejects_non_object_json():
    with pytest.raises(InferenceParseFailure):
        extract_json_object("[1, 2, 3]")


def test_strip_markdown_json_plain_text_untouched():
    assert strip_markdown_json('  {"a": 1}  ') == '{"a": 1}'


def test_normalize_sentiment_to_percentages():
    result = normalize_sentiment({"frustrated": 1, "neutral": 1, "positive": 2, "trend": "up"})
    assert result == {"frustrated": 25, "neutral": 25, "positive": 50, "trend": "up"}


def test_normalize_sentiment_accepts_rounding_drift():
    result = normalize_sentiment({"frustrated": 1, "neutral": 1, "positive": 1})
    assert (result["frustrated"], result["neutral"], result["positive"]) == (33, 33, 33)
    assert abs(100 - (result["frustrated"] + result["neutral"] + result["positive"])) <= 2


def test_normalize_sentiment_zero_total_uses_default():
    result = normalize_sentiment({"frustrated": 0, "neutral": 0, "positive": 0, "trend": "up"})
    assert result == {"frustrated": 0, "neutral": 100, "positive": 0, "trend": "stable"}


def test_normalize_sentiment_defaults_missing_trend():
    result = normalize_sentiment({"frustrated": 20, "neutral": 30, "positive": 50})
    assert result["trend"] == "stable"


def test_normalize_sentiment_leaves_non_numeric_values():
    sentiment = {"frustrated": "high", "neutral": 1, "positive": 2}
    assert normalize_sentiment(sentiment) is sentiment


def test_round_half_up():
    assert round_half_up(12.5) == 13
    assert round_half_up(37.5) == 38
    assert round_half_up(33.3) == 33

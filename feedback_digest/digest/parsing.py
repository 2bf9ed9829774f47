import json
import math
import re
from numbers import Real
from typing import Any, Dict, Optional

from feedback_digest.digest.schema import DEFAULT_SENTIMENT
from feedback_digest.errors import InferenceParseFailure

SENTIMENT_KEYS = ("frustrated", "neutral", "positive")

_GREEDY_OBJECT = re.compile(r"\{[\s\S]*\}")


def strip_markdown_json(content: str) -> str:
    """Strip a surrounding ```json fence from a model response."""
    content = content.strip()
    if content.startswith('```'):
        content = content.split('\n', 1)[1] if '\n' in content else content[3:]
    if content.endswith('```'):
        content = content.rsplit('```', 1)[0]
    return content.strip()


def _balanced_object(text: str) -> Optional[str]:
    """Return the first brace-balanced {...} span, skipping braces inside strings."""
    start = text.find("{")
    if start == -1:
        return None
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


def _load_object(candidate: str) -> Optional[Dict[str, Any]]:
    try:
        obj = json.loads(candidate)
    except ValueError:
        return None
    return obj if isinstance(obj, dict) else None


def extract_json_object(text: str) -> Dict[str, Any]:
    """Pull the JSON object out of free-form completion text.

    Tries the first balanced span, then the greedy first-"{"-to-last-"}"
    span. Raises InferenceParseFailure when neither yields a JSON object.
    """
    if not text:
        raise InferenceParseFailure("Empty completion")
    raw = strip_markdown_json(text)

    candidate = _balanced_object(raw)
    if candidate:
        parsed = _load_object(candidate)
        if parsed is not None:
            return parsed

    match = _GREEDY_OBJECT.search(raw)
    if not match:
        raise InferenceParseFailure("No JSON object found in completion")
    parsed = _load_object(match.group(0))
    if parsed is None:
        raise InferenceParseFailure("Completion JSON is malformed")
    return parsed


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def normalize_sentiment(sentiment: Any) -> Any:
    """Rescale the sentiment counts to percentages of their total.

    A zero total is replaced by the neutral default. Values that are not
    numbers (numeric strings and booleans included) are returned untouched
    and rejected by the strict Sentiment schema.
    """
    if not isinstance(sentiment, dict):
        return sentiment
    values = [sentiment.get(key) for key in SENTIMENT_KEYS]
    if not all(isinstance(v, Real) and not isinstance(v, bool) for v in values):
        return sentiment

    total = sum(values)
    if total <= 0:
        return dict(DEFAULT_SENTIMENT)

    normalized = dict(sentiment)
    for key, value in zip(SENTIMENT_KEYS, values):
        normalized[key] = round_half_up(value / total * 100)
    normalized.setdefault("trend", "stable")
    return normalized

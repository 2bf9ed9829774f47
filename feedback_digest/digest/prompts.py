from dataclasses import dataclass
from typing import Any, Dict, List

SCHEMA_BLOCK = """{
  "top_themes": [
    {"theme": "theme name", "mentions": number, "quotes": ["quote1", "quote2"], "impact": "High/Medium/Low", "confidence": "High/Medium/Low"}
  ],
  "friction_points": [
    {"point": "description", "count": number}
  ],
  "sentiment": {
    "frustrated": number,
    "neutral": number,
    "positive": number,
    "trend": "up/down/stable"
  },
  "feature_signals": ["implicit feature request 1", "implicit feature request 2"],
  "pm_actions": {
    "docs_ux": ["action 1"],
    "validation": ["action 1"],
    "tracking": ["action 1"]
  }
}"""

FULL_TEMPLATE = """You are a PM analyzing product feedback for {product}. Analyze this feedback and return valid JSON only.

FEEDBACK:
{feedback}

Return this exact JSON structure:
{schema}

JSON response:"""

BRIEF_TEMPLATE = """You are a PM analyzing product feedback for {product}. Analyze this feedback and return valid JSON only.
Keep it short: at most 3 top themes with 1 quote each, at most 3 friction points, and 1 action per pm_actions list.

FEEDBACK:
{feedback}

Return this exact JSON structure:
{schema}

JSON response:"""


@dataclass(frozen=True)
class PromptTemplate:
    name: str
    text: str
    max_tokens: int

    def render(self, items: List[Dict[str, Any]], product: str) -> str:
        return self.text.format(
            product=product,
            feedback=format_feedback(items),
            schema=SCHEMA_BLOCK,
        )


TEMPLATES = {
    'full': PromptTemplate('full', FULL_TEMPLATE, 1500),
    'brief': PromptTemplate('brief', BRIEF_TEMPLATE, 800),
}


def get_template(name: str) -> PromptTemplate:
    try:
        return TEMPLATES[name]
    except KeyError:
        raise ValueError(f"Unknown prompt variant '{name}', expected one of {sorted(TEMPLATES)}")


def format_feedback(items: List[Dict[str, Any]]) -> str:
    """Number each item and tag it with its source: "1. [github] text"."""
    return '\n'.join(
        f"{i}. [{item.get('source') or 'unknown'}] {item.get('content', '')}"
        for i, item in enumerate(items, start=1)
    )

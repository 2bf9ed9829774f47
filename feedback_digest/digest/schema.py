"""
Digest payload schema.

The model output is untrusted: every payload is validated here before it is
stored. Enum values are matched case-insensitively ("high" -> "High").
"""

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field, field_validator

Level = Literal["High", "Medium", "Low"]
Trend = Literal["up", "down", "stable"]

DEFAULT_SENTIMENT = {"frustrated": 0, "neutral": 100, "positive": 0, "trend": "stable"}
UNPARSED_THEME = "Unable to parse"


class Theme(BaseModel):
    theme: str
    mentions: int = Field(ge=0)
    quotes: List[str] = Field(default_factory=list)
    impact: Level
    confidence: Level

    @field_validator("impact", "confidence", mode="before")
    @classmethod
    def _capitalize_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().capitalize()
        return value


class FrictionPoint(BaseModel):
    point: str
    count: int = Field(ge=0)


class Sentiment(BaseModel):
    frustrated: int = Field(ge=0, le=100, strict=True)
    neutral: int = Field(ge=0, le=100, strict=True)
    positive: int = Field(ge=0, le=100, strict=True)
    trend: Trend = "stable"

    @field_validator("trend", mode="before")
    @classmethod
    def _lower_trend(cls, value: Any) -> Any:
        if value is None:
            return "stable"
        if isinstance(value, str):
            return value.strip().lower()
        return value


class PmActions(BaseModel):
    docs_ux: List[str] = Field(default_factory=list)
    validation: List[str] = Field(default_factory=list)
    tracking: List[str] = Field(default_factory=list)


class DigestMetadata(BaseModel):
    date: str
    sources: List[str] = Field(default_factory=list)
    feedback_count: int = Field(ge=0)


class DigestPayload(BaseModel):
    top_themes: List[Theme]
    friction_points: List[FrictionPoint]
    sentiment: Sentiment
    feature_signals: List[str]
    pm_actions: PmActions
    metadata: Optional[DigestMetadata] = None
    raw_response: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


def fallback_payload(raw_response: Optional[str] = None) -> Dict[str, Any]:
    """Payload used when the model output cannot be parsed or validated."""
    payload = {
        "top_themes": [{
            "theme": UNPARSED_THEME,
            "mentions": 0,
            "quotes": [],
            "impact": "Low",
            "confidence": "Low",
        }],
        "friction_points": [],
        "sentiment": dict(DEFAULT_SENTIMENT),
        "feature_signals": [],
        "pm_actions": {
            "docs_ux": ["Review AI response manually"],
            "validation": [],
            "tracking": [],
        },
    }
    if raw_response is not None:
        payload["raw_response"] = raw_response
    return payload

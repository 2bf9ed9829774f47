import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Protocol

from pydantic import ValidationError

from feedback_digest.digest.parsing import extract_json_object, normalize_sentiment
from feedback_digest.digest.prompts import PromptTemplate, get_template
from feedback_digest.digest.schema import DigestPayload, fallback_payload
from feedback_digest.errors import InferenceParseFailure, NoFeedback

logger = logging.getLogger(__name__)

MAX_FEEDBACK_ITEMS = 50
DEFAULT_PRODUCT = "Cloudflare D1 database"


class InferenceService(Protocol):
    def complete(self, prompt: str, max_tokens: int) -> str: ...


def format_display_date(moment: datetime) -> str:
    """Short month and day without padding, e.g. "Jan 5"."""
    return f"{moment:%b} {moment.day}"


def distinct_sources(items: List[Dict[str, Any]]) -> List[str]:
    """Non-empty sources in first-seen order, without duplicates."""
    return list(dict.fromkeys(item.get('source') for item in items if item.get('source')))


class DigestBuilder:
    def __init__(self, inference: InferenceService,
                 template: Optional[PromptTemplate] = None,
                 product: str = DEFAULT_PRODUCT,
                 clock: Callable[[], datetime] = datetime.now):
        """Initialize the builder with its inference collaborator."""
        self.inference = inference
        self.template = template or get_template('full')
        self.product = product
        self.clock = clock

    def build_prompt(self, items: List[Dict[str, Any]]) -> str:
        return self.template.render(items, self.product)

    def build(self, items: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Turn a window of feedback items (most recent first) into a validated digest payload.

        Raises NoFeedback for an empty window and lets InferenceUnavailable
        propagate. Unparsable model output yields the fallback payload.
        """
        if not items:
            raise NoFeedback()

        window = items[:MAX_FEEDBACK_ITEMS]
        prompt = self.build_prompt(window)
        text = self.inference.complete(prompt, self.template.max_tokens)

        try:
            payload = self.parse_response(text)
        except InferenceParseFailure as e:
            logger.warning(f"Falling back to default digest: {e}")
            payload = fallback_payload(raw_response=text)

        payload['metadata'] = {
            'date': format_display_date(self.clock()),
            'sources': distinct_sources(window),
            'feedback_count': len(window)
        }
        return DigestPayload.model_validate(payload).to_dict()

    def parse_response(self, text: str) -> Dict[str, Any]:
        """Extract, normalize and validate the payload in a completion text."""
        parsed = extract_json_object(text)
        if 'sentiment' in parsed:
            parsed['sentiment'] = normalize_sentiment(parsed['sentiment'])
        # metadata always comes from the builder, never the model
        parsed.pop('metadata', None)
        parsed.pop('raw_response', None)

        try:
            return DigestPayload.model_validate(parsed).to_dict()
        except ValidationError as e:
            raise InferenceParseFailure(
                f"Completion does not match the digest schema ({e.error_count()} errors)"
            ) from e

import logging
from typing import Optional
import requests

from feedback_digest.errors import InferenceUnavailable

logger = logging.getLogger(__name__)

WORKERS_AI_BASE_URL = "https://api.cloudflare.com/client/v4/accounts/{account_id}/ai/run/{model}"

class WorkersAIClient:
    """Text completion through the Cloudflare Workers AI REST API."""

    def __init__(self, account_id: str, api_token: str,
                 model: str = "@cf/meta/llama-3-8b-instruct",
                 timeout: float = 60.0,
                 session: Optional[requests.Session] = None):
        self.url = WORKERS_AI_BASE_URL.format(account_id=account_id, model=model)
        self.model = model
        self.configured = bool(account_id and api_token)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {api_token}",
            "Content-Type": "application/json"
        })

    def complete(self, prompt: str, max_tokens: int) -> str:
        """Run a single-turn chat completion and return the response text.

        Any transport, HTTP or response-shape problem raises
        InferenceUnavailable so the caller's retry policy can handle it.
        """
        if not self.configured:
            raise InferenceUnavailable("Workers AI credentials are not configured (CF_ACCOUNT_ID, CF_API_TOKEN)")

        payload = {
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens
        }

        try:
            response = self.session.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise InferenceUnavailable(f"Workers AI request failed: {e}") from e

        if not response.ok:
            raise InferenceUnavailable(
                f"Workers AI returned {response.status_code}: {response.text[:200]}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise InferenceUnavailable("Workers AI response is not JSON") from e

        result = data.get("result") if isinstance(data, dict) else None
        text = result.get("response") if isinstance(result, dict) else None
        if not isinstance(text, str):
            raise InferenceUnavailable(f"Workers AI response has no text: {str(data)[:200]}")

        logger.info(f"Workers AI ({self.model}) returned {len(text)} characters")
        return text

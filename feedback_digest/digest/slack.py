import json
import logging
from typing import Any, Dict, Optional
import requests

from feedback_digest.errors import DeliveryFailure

logger = logging.getLogger(__name__)

def _section(text: str) -> Dict[str, Any]:
    return {'type': 'section', 'text': {'type': 'mrkdwn', 'text': text}}

def format_slack_message(digest: Dict[str, Any]) -> Dict[str, Any]:
    """Build the Slack Block Kit message for a digest payload."""
    metadata = digest.get('metadata', {})
    title = f"🗄️ D1 Feedback Digest — {metadata.get('date', '')}"

    themes = '\n'.join(
        f"{i}. *{t['theme']}* ({t['mentions']} mentions) — Impact: {t['impact']}"
        for i, t in enumerate(digest['top_themes'], start=1)
    )
    sentiment = digest['sentiment']
    signals = '\n'.join(f"• {signal}" for signal in digest['feature_signals'])
    actions = '\n'.join(f"• {action}" for action in digest['pm_actions']['docs_ux'])

    return {
        'text': title,
        'blocks': [
            {'type': 'header', 'text': {'type': 'plain_text', 'text': title}},
            _section(
                f"*Sources:* {', '.join(metadata.get('sources', []))}\n"
                f"*Volume:* {metadata.get('feedback_count', 0)} feedback items analyzed"
            ),
            {'type': 'divider'},
            _section(f"*🔥 Top Themes*\n{themes}"),
            _section(
                f"*😬 Sentiment*\n"
                f"😠 Frustrated: {sentiment['frustrated']}%\n"
                f"😐 Neutral: {sentiment['neutral']}%\n"
                f"😊 Positive: {sentiment['positive']}%"
            ),
            _section(f"*💡 Feature Signals*\n{signals}"),
            _section(f"*✅ PM Actions*\n{actions}"),
        ]
    }

class SlackNotifier:
    def __init__(self, webhook_url: Optional[str] = None, timeout: float = 10.0):
        """Initialize the notifier; without a webhook URL messages are only logged."""
        self.webhook_url = webhook_url
        self.timeout = timeout

        if not self.webhook_url:
            logger.warning("Slack webhook not configured - digests will be logged only")

    def deliver(self, message: Dict[str, Any]) -> bool:
        """Post a message to Slack. Failures are logged and reported as False, never raised."""
        try:
            self._post(message)
            return True
        except DeliveryFailure as e:
            logger.error(f"Failed to deliver Slack digest: {e}")
            return False

    def _post(self, message: Dict[str, Any]):
        if not self.webhook_url:
            logger.info(f"[SLACK] Would send: {json.dumps(message, indent=2, ensure_ascii=False)}")
            return

        try:
            response = requests.post(
                self.webhook_url,
                json=message,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise DeliveryFailure(str(e)) from e

        if response.status_code != 200:
            raise DeliveryFailure(f"{response.status_code} - {response.text}")

        logger.info("Delivered digest to Slack")

from .builder import DigestBuilder
from .inference import WorkersAIClient
from .slack import SlackNotifier, format_slack_message

__all__ = ['DigestBuilder', 'WorkersAIClient', 'SlackNotifier', 'format_slack_message']

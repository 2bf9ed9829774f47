"""
Shared fixtures for Feedback Digest tests
"""

import json
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from feedback_digest.api.app import create_app
from feedback_digest.digest.builder import DigestBuilder
from feedback_digest.models.database import Base, create_session_factory, init_db
from feedback_digest.services import DigestServices
from feedback_digest.store import FeedbackStore
from feedback_digest.workers.checkpoints import MemoryCheckpointStore
from feedback_digest.workers.run_worker import DigestRunWorker
from feedback_digest.workers.scheduler import DigestScheduler
from feedback_digest.workers.workflow import DigestWorkflow, RetryPolicy


VALID_DIGEST = {
    "top_themes": [
        {"theme": "Performance", "mentions": 2, "quotes": ["Batch inserts time out"],
         "impact": "High", "confidence": "Medium"}
    ],
    "friction_points": [{"point": "SQLITE_BUSY under load", "count": 1}],
    "sentiment": {"frustrated": 1, "neutral": 1, "positive": 2, "trend": "down"},
    "feature_signals": ["Full-text search"],
    "pm_actions": {
        "docs_ux": ["Document concurrency limits"],
        "validation": ["Interview heavy writers"],
        "tracking": ["Track timeout rate"]
    }
}


def completion_text(payload=None) -> str:
    """A model response with chatter around the JSON object."""
    return f"Here is the analysis:\n{json.dumps(payload or VALID_DIGEST)}\nLet me know if you need more."


class FakeInference:
    """Inference double returning queued responses; exceptions in the queue are raised."""

    def __init__(self, *responses):
        self.responses = list(responses) or [completion_text()]
        self.calls = []

    def complete(self, prompt, max_tokens):
        self.calls.append({'prompt': prompt, 'max_tokens': max_tokens})
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


class RecordingNotifier:
    def __init__(self, result=True):
        self.result = result
        self.messages = []

    def deliver(self, message):
        self.messages.append(message)
        return self.result


@pytest.fixture
def session_factory():
    """In-memory SQLite session factory with all tables created."""
    factory = create_session_factory("sqlite://")
    init_db(factory)
    yield factory
    Base.metadata.drop_all(factory.kw["bind"])


@pytest.fixture
def store(session_factory):
    return FeedbackStore(session_factory)


@pytest.fixture
def inference():
    return FakeInference()


@pytest.fixture
def builder(inference):
    return DigestBuilder(inference, clock=lambda: datetime(2024, 1, 21, 9, 30))


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def checkpoints():
    return MemoryCheckpointStore()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def workflow(store, builder, notifier, checkpoints, sleeps):
    return DigestWorkflow(
        store=store,
        builder=builder,
        notifier=notifier,
        checkpoints=checkpoints,
        retry_policy=RetryPolicy(max_attempts=3, backoff_seconds=1.0, max_backoff_seconds=10.0),
        sleep=sleeps.append
    )


@pytest.fixture
def redis_client():
    return MagicMock()


@pytest.fixture
def services(store, workflow, redis_client):
    run_worker = DigestRunWorker(workflow, redis_client)
    return DigestServices(
        store=store,
        workflow=workflow,
        run_worker=run_worker,
        scheduler=DigestScheduler(run_worker, sleep=lambda seconds: None)
    )


@pytest.fixture
def app(services):
    """Create a test Flask application."""
    return create_app('testing', services=services)


@pytest.fixture
def client(app):
    """Create a test client for the Flask application."""
    return app.test_client()

"""
Basic tests for Feedback Digest application
"""

import pytest
from feedback_digest.api.app import create_app


def test_health_endpoint(client):
    """Test the health check endpoint."""
    response = client.get('/health')
    assert response.status_code == 200
    assert response.json['status'] == 'healthy'
    assert response.json['service'] == 'Feedback Digest API'


def test_404_error(client):
    """Test 404 error handling."""
    response = client.get('/nonexistent')
    assert response.status_code == 404
    assert 'error' in response.json


def test_app_creation():
    """Test that the Flask app can be created from configuration alone."""
    app = create_app('testing')
    assert app is not None
    assert app.config['TESTING'] is True
    assert 'digest' in app.extensions


def test_testing_config_validation_reports_missing_credentials(monkeypatch):
    """Test that validation lists missing Workers AI credentials."""
    from feedback_digest.config import TestingConfig

    monkeypatch.setattr(TestingConfig, 'CF_ACCOUNT_ID', None)
    monkeypatch.setattr(TestingConfig, 'CF_API_TOKEN', None)
    errors = TestingConfig.validate()
    assert "CF_ACCOUNT_ID is required" in errors
    assert "CF_API_TOKEN is required" in errors


def test_database_models_importable():
    """Test that all database models can be imported."""
    try:
        from feedback_digest.models.feedback import Feedback
        from feedback_digest.models.digest import DailyDigest
        assert Feedback.__tablename__ == 'feedback'
        assert DailyDigest.__tablename__ == 'daily_digests'
    except ImportError as e:
        pytest.fail(f"Failed to import database models: {e}")


def test_workers_importable():
    """Test that all worker components can be imported."""
    try:
        from feedback_digest.workers.workflow import DigestWorkflow
        from feedback_digest.workers.run_worker import DigestRunWorker
        from feedback_digest.workers.scheduler import DigestScheduler
        from feedback_digest.workers.checkpoints import RedisCheckpointStore, MemoryCheckpointStore
        assert True
    except ImportError as e:
        pytest.fail(f"Failed to import worker components: {e}")

"""
Configuration settings for Feedback Digest
"""

import os
from typing import Optional

class Config:
    """Base configuration class."""

    # Flask settings
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    FLASK_HOST = os.getenv('FLASK_HOST', '0.0.0.0')
    FLASK_PORT = int(os.getenv('FLASK_PORT', 5000))
    FLASK_DEBUG = os.getenv('FLASK_DEBUG', 'False').lower() == 'true'
    TESTING = False

    # Database settings
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///feedback_digest.db')

    # Redis settings
    REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379')

    # Workers AI settings
    CF_ACCOUNT_ID = os.getenv('CF_ACCOUNT_ID')
    CF_API_TOKEN = os.getenv('CF_API_TOKEN')
    AI_MODEL = os.getenv('AI_MODEL', '@cf/meta/llama-3-8b-instruct')
    AI_TIMEOUT_SEC = float(os.getenv('AI_TIMEOUT_SEC', '60'))

    # Slack settings
    SLACK_WEBHOOK_URL = os.getenv('SLACK_WEBHOOK_URL')

    # Digest settings
    DIGEST_PRODUCT_NAME = os.getenv('DIGEST_PRODUCT_NAME', 'Cloudflare D1 database')
    DIGEST_PROMPT_VARIANT = os.getenv('DIGEST_PROMPT_VARIANT', 'full')
    DIGEST_FEEDBACK_LIMIT = int(os.getenv('DIGEST_FEEDBACK_LIMIT', '50'))

    # Durable runner settings
    DIGEST_STEP_MAX_ATTEMPTS = int(os.getenv('DIGEST_STEP_MAX_ATTEMPTS', '3'))
    DIGEST_STEP_BACKOFF_SEC = float(os.getenv('DIGEST_STEP_BACKOFF_SEC', '2.0'))
    DIGEST_STEP_MAX_BACKOFF_SEC = float(os.getenv('DIGEST_STEP_MAX_BACKOFF_SEC', '60'))
    DIGEST_SCHEDULE_INTERVAL_SEC = int(os.getenv('DIGEST_SCHEDULE_INTERVAL_SEC', str(24 * 3600)))
    CHECKPOINT_TTL_SEC = int(os.getenv('CHECKPOINT_TTL_SEC', str(7 * 24 * 3600)))

    @classmethod
    def validate(cls) -> list[str]:
        """Validate required configuration."""
        errors = []

        if not cls.DATABASE_URL:
            errors.append("DATABASE_URL is required")

        if not cls.REDIS_URL:
            errors.append("REDIS_URL is required")

        if not cls.CF_ACCOUNT_ID:
            errors.append("CF_ACCOUNT_ID is required")

        if not cls.CF_API_TOKEN:
            errors.append("CF_API_TOKEN is required")

        if cls.DIGEST_STEP_MAX_ATTEMPTS < 1:
            errors.append("DIGEST_STEP_MAX_ATTEMPTS must be at least 1")

        return errors

class DevelopmentConfig(Config):
    """Development configuration."""
    FLASK_DEBUG = True

class ProductionConfig(Config):
    """Production configuration."""
    FLASK_DEBUG = False

class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    DATABASE_URL = os.getenv('TEST_DATABASE_URL', 'sqlite://')
    DIGEST_STEP_BACKOFF_SEC = 0.0
    DIGEST_STEP_MAX_BACKOFF_SEC = 0.0

# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}

def get_config(config_name: Optional[str] = None) -> Config:
    """Get configuration instance."""
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'default')

    return config.get(config_name, config['default'])

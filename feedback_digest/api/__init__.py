from .app import create_app
from .routes import digest_bp

__all__ = ['create_app', 'digest_bp']

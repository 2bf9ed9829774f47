from flask import Flask
from flask_cors import CORS
import logging
from feedback_digest.api.routes import digest_bp
from feedback_digest.config import get_config
from feedback_digest.services import DigestServices, build_services

def create_app(config_name='development', services: DigestServices = None):
    """Application factory for Flask app."""
    app = Flask(__name__)
    cfg = get_config(config_name)
    app.config.from_object(cfg)

    # Configure logging
    logging.basicConfig(level=logging.INFO)

    # Enable CORS
    CORS(app)

    app.extensions['digest'] = services or build_services(cfg)

    # Register blueprints
    app.register_blueprint(digest_bp)

    # Health check endpoint
    @app.route('/health')
    def health():
        return {'status': 'healthy', 'service': 'Feedback Digest API'}

    # Error handlers
    @app.errorhandler(404)
    def not_found(error):
        return {'error': 'Not found'}, 404

    @app.errorhandler(500)
    def internal_error(error):
        return {'error': 'Internal server error'}, 500

    return app

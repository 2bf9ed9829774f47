#!/usr/bin/env python3
"""
Feedback Digest - Main application entry point
Runs the Flask API, the digest scheduler and the digest run worker
"""

import logging
import threading
from dotenv import load_dotenv

# Load environment variables before configuration is imported
load_dotenv()

from feedback_digest.api.app import create_app
from feedback_digest.config import get_config
from feedback_digest.services import build_services

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

def run_flask_api(services, cfg):
    """Run the Flask API server."""
    try:
        app = create_app(config_name=None, services=services)
        logger.info(f"Starting Flask API server on {cfg.FLASK_HOST}:{cfg.FLASK_PORT}")
        app.run(host=cfg.FLASK_HOST, port=cfg.FLASK_PORT, debug=cfg.FLASK_DEBUG, use_reloader=False)
    except Exception as e:
        logger.error(f"Failed to start Flask API: {e}")

def main():
    """Main application entry point."""
    logger.info("Starting Feedback Digest application...")

    cfg = get_config()
    errors = cfg.validate()
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        logger.error("Please set the required environment variables and try again.")
        return

    services = build_services(cfg)

    # Start Flask API and scheduler in separate threads
    flask_thread = threading.Thread(target=run_flask_api, args=(services, cfg), daemon=True)
    flask_thread.start()

    scheduler_thread = threading.Thread(target=services.scheduler.run, daemon=True)
    scheduler_thread.start()

    # Run the digest worker in main thread
    try:
        services.run_worker.run()
    except KeyboardInterrupt:
        logger.info("Shutting down Feedback Digest...")
    except Exception as e:
        logger.error(f"Unexpected error: {e}")

if __name__ == "__main__":
    main()

"""
KeyHub Central backend
"""
import logging

from flask import Flask


def create_app(testing: bool = False) -> Flask:
    """Application factory. With testing=True, Firebase is not initialized and rate limits are off."""
    from keyhub.extensions import init_app_extensions
    from keyhub.logging_config import configure_logging
    from keyhub.routes import (
        admin_bp,
        contractors_bp,
        financials_bp,
        google_calendar_bp,
        health_bp,
        kd_bp,
        users_bp,
        webhooks_bp,
    )
    from keyhub.utils.exceptions import register_error_handlers

    configure_logging(logging.DEBUG if testing else logging.INFO)

    app = Flask(__name__)
    app.config['TESTING'] = testing
    app.config['RATELIMIT_ENABLED'] = not testing

    init_app_extensions(app, init_db=not testing)
    register_error_handlers(app)

    app.register_blueprint(health_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(kd_bp)
    app.register_blueprint(financials_bp)
    app.register_blueprint(contractors_bp)
    app.register_blueprint(google_calendar_bp)
    app.register_blueprint(webhooks_bp)
    app.register_blueprint(users_bp)

    app.limiter.exempt(health_bp)
    app.limiter.exempt(webhooks_bp)

    logging.getLogger(__name__).info("KeyHub app created", extra={'testing': testing})
    return app

"""
Clearflow Application Factory
Certificate clearance workflow service
"""

import os
from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import RequestEntityTooLarge
from clearflow.config import config
from clearflow.models import db
from clearflow.schemas import ma
from clearflow.utils import setup_logging, log_info, log_warning, create_response


def create_app(config_name: str = None) -> Flask:
    """
    Application factory

    Args:
        config_name: Configuration name (development, production, testing)

    Returns:
        Flask application instance
    """
    app = Flask(__name__)

    # Load configuration
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    config_cls = config.get(config_name, config['default'])
    app.config.from_object(config_cls)
    config_cls.init_app(app)

    # Initialize extensions
    db.init_app(app)
    ma.init_app(app)
    CORS(app, resources={r"/api/*": {"origins": app.config['CORS_ORIGINS']}})

    # Setup logging
    with app.app_context():
        setup_logging()
        log_info(f"Application initialized ({config_name}, chain {app.config['CLEARANCE_CHAIN']})")

    # Register blueprints
    from clearflow.routes import auth_bp, application_bp, payment_bp, document_bp, notification_bp
    for blueprint in (auth_bp, application_bp, payment_bp, document_bp, notification_bp):
        app.register_blueprint(blueprint, url_prefix='/api')

    @app.errorhandler(RequestEntityTooLarge)
    def file_too_large(e):
        return jsonify(create_response(False, "File exceeds the maximum upload size", error='file_upload_error')), 413

    from clearflow.commands import register_commands
    register_commands(app)

    # Create database tables
    with app.app_context():
        try:
            db.create_all()
            log_info("Database tables created successfully")
        except Exception as e:
            log_warning(f"Database initialization warning: {e}")

    return app

"""
Routes package initialization
"""

from clearflow.routes.auth_routes import auth_bp
from clearflow.routes.application_routes import application_bp
from clearflow.routes.payment_routes import payment_bp
from clearflow.routes.document_routes import document_bp
from clearflow.routes.notification_routes import notification_bp

__all__ = ['auth_bp', 'application_bp', 'payment_bp', 'document_bp', 'notification_bp']

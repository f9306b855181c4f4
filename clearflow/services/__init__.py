"""
Services package initialization
"""

from flask import current_app
from clearflow.models import db, resolve_chain
from clearflow.services.application_store import ApplicationStore, OFFICE_FILTERS
from clearflow.services.auth_service import AuthService, Principal, ROLE_STUDENT, ROLE_STAFF, ROLE_ADMIN
from clearflow.services.blob_service import LocalBlobStore, S3BlobStore, get_blob_store, prepare_upload
from clearflow.services.email_service import EmailService
from clearflow.services.notification_service import NotificationService
from clearflow.services.payment_service import SSLCommerzGateway
from clearflow.services.workflow_service import (
    WorkflowEngine, derive_overall_status, current_pending_office, blocking_offices
)


def get_workflow_engine() -> WorkflowEngine:
    """Engine bound to the current request's database session"""
    store = ApplicationStore(db.session)
    notifier = NotificationService(db.session, mail_enabled=current_app.config.get('MAIL_ENABLED', False))
    return WorkflowEngine(store, notifier, resolve_chain(current_app.config['CLEARANCE_CHAIN']))


__all__ = [
    'ApplicationStore', 'OFFICE_FILTERS',
    'AuthService', 'Principal', 'ROLE_STUDENT', 'ROLE_STAFF', 'ROLE_ADMIN',
    'LocalBlobStore', 'S3BlobStore', 'get_blob_store', 'prepare_upload',
    'EmailService', 'NotificationService', 'SSLCommerzGateway',
    'WorkflowEngine', 'derive_overall_status', 'current_pending_office', 'blocking_offices',
    'get_workflow_engine'
]

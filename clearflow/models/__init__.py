"""
Database models initialization
"""

from clearflow.models.database import db, init_db
from clearflow.models.user import Student, Staff
from clearflow.models.clearance import (
    Office, ClearanceDecision, ClearanceRecord, Notification,
    STANDARD_CHAIN, EXTENDED_CHAIN, CLEARANCE_CHAINS, resolve_chain
)
from clearflow.models.application import Application, OverallStatus, PaymentStatus

# Export all models
__all__ = [
    'db', 'init_db', 'Student', 'Staff',
    'Office', 'ClearanceDecision', 'ClearanceRecord', 'Notification',
    'STANDARD_CHAIN', 'EXTENDED_CHAIN', 'CLEARANCE_CHAINS', 'resolve_chain',
    'Application', 'OverallStatus', 'PaymentStatus'
]

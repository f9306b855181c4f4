"""
Utilities package initialization
"""

from clearflow.utils.exceptions import (
    ClearflowException, ValidationError, AuthenticationError, AuthorizationError,
    NotFoundError, OutOfSequenceError, AlreadyDecidedError, InvalidStateError,
    ConflictError, DatabaseError, EmailError, FileUploadError, PaymentError
)
from clearflow.utils.validators import (
    validate_email, validate_password, validate_required, validate_phone_number,
    validate_passing_year, validate_file_extension, parse_enum
)
from clearflow.utils.helpers import (
    setup_logging, log_error, log_warning, log_info, utcnow,
    ensure_directory_exists, create_response, error_response
)

__all__ = [
    'ClearflowException', 'ValidationError', 'AuthenticationError', 'AuthorizationError',
    'NotFoundError', 'OutOfSequenceError', 'AlreadyDecidedError', 'InvalidStateError',
    'ConflictError', 'DatabaseError', 'EmailError', 'FileUploadError', 'PaymentError',
    'validate_email', 'validate_password', 'validate_required', 'validate_phone_number',
    'validate_passing_year', 'validate_file_extension', 'parse_enum',
    'setup_logging', 'log_error', 'log_warning', 'log_info', 'utcnow',
    'ensure_directory_exists', 'create_response', 'error_response'
]

"""
Custom exceptions for the clearflow application
"""

from typing import Any, Optional


class ClearflowException(Exception):
    """Base exception for clearflow application"""
    status_code = 500
    error_code = 'internal_error'
    retryable = False

    def __init__(self, message: str = '', details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(ClearflowException):
    """Malformed input; the caller must correct it"""
    status_code = 422
    error_code = 'validation_error'


class AuthenticationError(ClearflowException):
    """Missing, invalid or expired credentials"""
    status_code = 401
    error_code = 'authentication_error'


class AuthorizationError(ClearflowException):
    """Authenticated, but acting outside the caller's role or office"""
    status_code = 403
    error_code = 'authorization_error'


class NotFoundError(ClearflowException):
    """Requested record does not exist"""
    status_code = 404
    error_code = 'not_found'


class OutOfSequenceError(ClearflowException):
    """An office tried to decide before every preceding office approved"""
    status_code = 409
    error_code = 'out_of_sequence'


class AlreadyDecidedError(ClearflowException):
    """The office already recorded a decision in this submission cycle"""
    status_code = 409
    error_code = 'already_decided'


class InvalidStateError(ClearflowException):
    """Operation not allowed in the application's current status"""
    status_code = 409
    error_code = 'invalid_state'


class ConflictError(ClearflowException):
    """Concurrent write race or duplicate active application"""
    status_code = 409
    error_code = 'conflict'
    retryable = True


class DatabaseError(ClearflowException):
    """Database error"""
    status_code = 500
    error_code = 'database_error'


class EmailError(ClearflowException):
    """Email service error"""
    status_code = 500
    error_code = 'email_error'


class FileUploadError(ClearflowException):
    """File upload error"""
    status_code = 400
    error_code = 'file_upload_error'


class PaymentError(ClearflowException):
    """Payment gateway error"""
    status_code = 502
    error_code = 'payment_error'

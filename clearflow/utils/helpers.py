"""
Helper utilities
"""

import os
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Tuple
from flask import current_app, jsonify
from clearflow.utils.exceptions import ClearflowException


def setup_logging() -> None:
    """Setup application logging"""
    level_name = current_app.config.get('LOG_LEVEL')
    if level_name:
        level = getattr(logging, level_name.upper(), logging.INFO)
    elif current_app.debug:
        # Development logging
        level = logging.DEBUG
    else:
        # Production logging
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s %(name)s %(message)s'
    )
    current_app.logger.setLevel(level)


def log_error(message: str, exception: Optional[Exception] = None) -> None:
    """
    Log error message

    Args:
        message: Error message
        exception: Exception object
    """
    if exception:
        current_app.logger.error(f"{message}: {str(exception)}")
    else:
        current_app.logger.error(message)


def log_warning(message: str) -> None:
    """Log warning message"""
    current_app.logger.warning(message)


def log_info(message: str) -> None:
    """
    Log info message

    Args:
        message: Info message
    """
    current_app.logger.info(message)


def utcnow() -> datetime:
    """Timezone-aware current UTC time"""
    return datetime.now(timezone.utc)


def ensure_directory_exists(directory_path: str) -> None:
    """
    Ensure directory exists, create if it doesn't

    Args:
        directory_path: Path to directory
    """
    if not os.path.exists(directory_path):
        os.makedirs(directory_path, exist_ok=True)


def create_response(success: bool, message: str, data: Optional[Any] = None,
                    error: Optional[str] = None) -> Dict[str, Any]:
    """
    Create standardized API response

    Args:
        success: Whether operation was successful
        message: Response message
        data: Optional data to include
        error: Optional machine-readable error code

    Returns:
        Standardized response dictionary
    """
    response = {
        'ok': success,
        'message': message
    }

    if data is not None:
        response['data'] = data

    if error is not None:
        response['error'] = error

    return response


def error_response(exc: ClearflowException) -> Tuple[Any, int]:
    """Render a clearflow exception as a JSON envelope with its HTTP status"""
    body = create_response(False, exc.message or exc.__class__.__name__, exc.details, exc.error_code)
    if exc.retryable:
        body['retryable'] = True
    return jsonify(body), exc.status_code

"""
Authentication routes
"""

from flask import Blueprint, request, jsonify
from clearflow.schemas import load_or_raise, login_schema
from clearflow.services import AuthService
from clearflow.utils import ClearflowException, log_error, log_info, create_response, error_response

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/auth/login', methods=['POST'])
def login():
    """Exchange email and password for a bearer token"""
    try:
        data = load_or_raise(login_schema, request.get_json(silent=True))
        token, principal = AuthService.authenticate_user(data['email'], data['password'])
        log_info(f"Login: {principal.role} {principal.subject_id}")
        return jsonify(create_response(True, "Login successful", {
            'token': token,
            'token_type': 'Bearer',
            'principal': principal.to_dict()
        }))

    except ClearflowException as e:
        return error_response(e)
    except Exception as e:
        log_error("Login error", e)
        return jsonify(create_response(False, "Login failed. Please try again.")), 500


@auth_bp.route('/auth/me', methods=['GET'])
def me():
    """Echo the verified principal behind the bearer token"""
    try:
        principal = AuthService.require_auth()
        return jsonify(create_response(True, "User found", principal.to_dict()))

    except ClearflowException as e:
        return error_response(e)
    except Exception as e:
        log_error("Get current user error", e)
        return jsonify(create_response(False, "Failed to get user info")), 500

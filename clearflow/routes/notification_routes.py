"""
Student notification routes
"""

from flask import Blueprint, jsonify
from clearflow.models import Notification
from clearflow.services import AuthService, ROLE_STUDENT
from clearflow.utils import ClearflowException, log_error, create_response, error_response

notification_bp = Blueprint('notifications', __name__)


@notification_bp.route('/notifications', methods=['GET'])
def get_notifications():
    """Get student notifications"""
    try:
        principal = AuthService.require_auth(ROLE_STUDENT)
        notifications = (
            Notification.query
            .filter_by(student_id=principal.subject_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .all()
        )
        notifications_data = [notif.to_dict() for notif in notifications]
        return jsonify(create_response(True, "Notifications retrieved", notifications_data))

    except ClearflowException as e:
        return error_response(e)
    except Exception as e:
        log_error("Get student notifications error", e)
        return jsonify(create_response(False, "Failed to get notifications")), 500

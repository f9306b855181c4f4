"""
Application routes: the role-scoped workflow surface
"""

from flask import Blueprint, current_app, request, jsonify
from clearflow.models import Office, OverallStatus, PaymentStatus
from clearflow.schemas import (
    application_schema, applications_schema, decision_schema, form_payload, load_or_raise
)
from clearflow.services import (
    AuthService, SSLCommerzGateway, get_workflow_engine, ROLE_ADMIN, ROLE_STAFF, ROLE_STUDENT
)
from clearflow.utils import (
    AuthorizationError, ClearflowException, InvalidStateError, ValidationError,
    log_error, log_info, parse_enum, create_response, error_response
)

application_bp = Blueprint('applications', __name__)


def _load_owned(engine, application_id, principal):
    """Load an application a student may only touch if it is theirs"""
    application = engine.get_status(application_id)
    if principal.is_student and application.student_id != principal.subject_id:
        raise AuthorizationError("You can only access your own applications")
    return application


def _int_arg(name, default, minimum=0, maximum=None):
    raw = request.args.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")
    if value < minimum or (maximum is not None and value > maximum):
        raise ValidationError(f"{name} is out of range")
    return value


@application_bp.route('/applications', methods=['POST'])
def create_application():
    """Submit a certificate application"""
    try:
        principal = AuthService.require_auth(ROLE_STUDENT)
        payload = form_payload(request.get_json(silent=True))

        application = get_workflow_engine().create_application(principal.subject_id, payload)
        return jsonify(create_response(True, "Application submitted", application_schema.dump(application))), 201

    except ClearflowException as e:
        return error_response(e)
    except Exception as e:
        log_error("Create application error", e)
        return jsonify(create_response(False, "Failed to submit application")), 500


@application_bp.route('/applications', methods=['GET'])
def list_applications():
    """Students see their own applications, offices see their dashboard queue"""
    try:
        principal = AuthService.require_auth()
        engine = get_workflow_engine()

        if principal.is_student:
            applications = engine.store.list_by_student(principal.subject_id)
        else:
            limit = _int_arg('limit', 50, minimum=1, maximum=200)
            offset = _int_arg('offset', 0)
            status_filter = request.args.get('status', 'all').strip().lower()
            office = principal.office
            if principal.is_admin:
                office_arg = request.args.get('office')
                office = parse_enum(Office, office_arg, 'office') if office_arg else None
            applications = engine.store.query_by_office(office, status_filter, limit, offset)

        return jsonify(create_response(True, "Applications retrieved", applications_schema.dump(applications)))

    except ClearflowException as e:
        return error_response(e)
    except Exception as e:
        log_error("List applications error", e)
        return jsonify(create_response(False, "Failed to get applications")), 500


@application_bp.route('/applications/<application_id>', methods=['GET'])
def get_application(application_id):
    """Read-only status projection"""
    try:
        principal = AuthService.require_auth()
        application = _load_owned(get_workflow_engine(), application_id, principal)
        return jsonify(create_response(True, "Application retrieved", application_schema.dump(application)))

    except ClearflowException as e:
        return error_response(e)
    except Exception as e:
        log_error("Get application error", e)
        return jsonify(create_response(False, "Failed to get application")), 500


@application_bp.route('/applications/<application_id>/clearance/<office>', methods=['PUT'])
def record_decision(application_id, office):
    """Record the caller's office decision"""
    try:
        principal = AuthService.require_auth(ROLE_STAFF, ROLE_ADMIN)
        target = parse_enum(Office, office, 'office')
        if principal.office != target:
            raise AuthorizationError("You can only record decisions for your own office")

        data = load_or_raise(decision_schema, request.get_json(silent=True))
        application = get_workflow_engine().record_decision(
            application_id,
            target,
            data['decision'],
            message=data['message'],
            decided_by=principal.name,
            expected_version=data['expected_version']
        )
        return jsonify(create_response(True, "Decision recorded", application_schema.dump(application)))

    except ClearflowException as e:
        return error_response(e)
    except Exception as e:
        log_error("Record decision error", e)
        return jsonify(create_response(False, "Failed to record decision")), 500


@application_bp.route('/applications/<application_id>/resubmit', methods=['POST'])
def resubmit_application(application_id):
    """Resubmit a rejected application with a revised form"""
    try:
        principal = AuthService.require_auth(ROLE_STUDENT)
        engine = get_workflow_engine()
        application = _load_owned(engine, application_id, principal)
        if application.overall_status != OverallStatus.REJECTED:
            raise InvalidStateError(
                f"Only rejected applications can be resubmitted (current status: {application.overall_status.value})"
            )

        data = request.get_json(silent=True)
        expected_version = data.pop('expected_version', None) if isinstance(data, dict) else None
        if expected_version is not None and not isinstance(expected_version, int):
            raise ValidationError("expected_version must be an integer")
        payload = form_payload(data)

        application = engine.resubmit(application_id, payload, expected_version=expected_version)
        return jsonify(create_response(True, "Application resubmitted", application_schema.dump(application)))

    except ClearflowException as e:
        return error_response(e)
    except Exception as e:
        log_error("Resubmit application error", e)
        return jsonify(create_response(False, "Failed to resubmit application")), 500


@application_bp.route('/applications/<application_id>', methods=['DELETE'])
def purge_application(application_id):
    """Administrative removal"""
    try:
        principal = AuthService.require_auth(ROLE_ADMIN)
        get_workflow_engine().purge(application_id)
        log_info(f"Application {application_id} purged by admin {principal.subject_id}")
        return '', 204

    except ClearflowException as e:
        return error_response(e)
    except Exception as e:
        log_error("Purge application error", e)
        return jsonify(create_response(False, "Failed to delete application")), 500


@application_bp.route('/applications/<application_id>/payment', methods=['POST'])
def initiate_payment(application_id):
    """Open a gateway checkout for the certificate fee"""
    try:
        principal = AuthService.require_auth(ROLE_STUDENT)
        application = _load_owned(get_workflow_engine(), application_id, principal)
        if application.payment_status == PaymentStatus.PAID:
            raise InvalidStateError("The certificate fee has already been paid")
        if application.overall_status == OverallStatus.REJECTED:
            raise InvalidStateError("Resubmit the rejected application before paying the fee")

        amount = current_app.config['CERTIFICATE_FEE']
        redirect_url = SSLCommerzGateway.from_config().initiate(application, amount)
        return jsonify(create_response(True, "Payment session created", {
            'redirect_url': redirect_url,
            'amount': amount,
            'currency': current_app.config.get('CURRENCY', 'BDT')
        }))

    except ClearflowException as e:
        return error_response(e)
    except Exception as e:
        log_error("Initiate payment error", e)
        return jsonify(create_response(False, "Failed to start payment")), 500

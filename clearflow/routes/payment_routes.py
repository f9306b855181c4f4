"""
Payment gateway callback routes (internal) and the student browser return
"""

import hmac
from urllib.parse import urlencode
from flask import Blueprint, current_app, redirect, request, jsonify
from clearflow.services import SSLCommerzGateway, get_workflow_engine
from clearflow.services.payment_service import SUCCESS_STATUSES
from clearflow.utils import (
    AuthorizationError, ClearflowException, log_error, log_info, log_warning, create_response, error_response
)

payment_bp = Blueprint('payment', __name__)

RETURN_OUTCOMES = {'VALID': 'success', 'VALIDATED': 'success', 'FAILED': 'failed', 'CANCELLED': 'cancelled'}


def _check_callback_token():
    expected = current_app.config.get('PAYMENT_CALLBACK_TOKEN')
    supplied = request.args.get('token', '')
    if not expected or not hmac.compare_digest(supplied, expected):
        raise AuthorizationError("Invalid callback token")


def _gateway_form():
    return request.form if request.form else (request.get_json(silent=True) or {})


@payment_bp.route('/payment/callback', methods=['POST'])
def payment_callback():
    """Gateway IPN: the server-to-server payment notification"""
    try:
        _check_callback_token()
        gateway = SSLCommerzGateway.from_config()
        application_id, status, tran_id, val_id = gateway.parse_callback(_gateway_form())
        log_info(f"Payment callback for application {application_id}: {status} (tran {tran_id})")

        engine = get_workflow_engine()
        application = engine.get_status(application_id)
        current_tran_id = gateway.transaction_id(application)
        if tran_id != current_tran_id:
            # Belongs to an earlier submission cycle or another checkout
            log_warning(f"Ignoring payment callback {tran_id} for application {application_id}, "
                        f"current transaction is {current_tran_id}")
            return '', 204

        fee = current_app.config['CERTIFICATE_FEE']
        if status in SUCCESS_STATUSES and gateway.validate(val_id, fee, tran_id=tran_id,
                                                           application_id=application_id):
            engine.mark_paid(application_id, tran_id)
        else:
            engine.mark_payment_failed(application_id, tran_id)
        return '', 204

    except ClearflowException as e:
        return error_response(e)
    except Exception as e:
        log_error("Payment callback error", e)
        return jsonify(create_response(False, "Failed to process payment callback")), 500


@payment_bp.route('/payment/return', methods=['GET', 'POST'])
def payment_return():
    """Send the student's browser from the gateway back to the result page"""
    form = request.form if request.form else request.args
    outcome = RETURN_OUTCOMES.get((form.get('status') or '').strip().upper(), 'failed')
    params = {'status': outcome}
    if form.get('value_a'):
        params['application'] = form.get('value_a')
    return redirect(f"{current_app.config['PAYMENT_RESULT_URL']}?{urlencode(params)}", code=303)

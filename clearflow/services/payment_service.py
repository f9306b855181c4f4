"""
SSLCommerz payment gateway client
"""

from typing import Optional, Tuple
import requests
from flask import current_app
from clearflow.models import Application
from clearflow.utils.exceptions import PaymentError
from clearflow.utils.validators import validate_required
from clearflow.utils.helpers import log_error, log_info, log_warning

SESSION_PATH = '/gwprocess/v4/api.php'
VALIDATION_PATH = '/validator/api/validationserverAPI.php'
SUCCESS_STATUSES = ('VALID', 'VALIDATED')


class SSLCommerzGateway:
    """Hosted-checkout gateway: opens payment sessions and validates callbacks"""

    def __init__(self, store_id: str, store_password: str, base_url: str,
                 callback_url: str, return_url: Optional[str] = None,
                 currency: str = 'BDT', timeout: int = 30):
        if not store_id or not store_password:
            raise PaymentError("Payment gateway is not configured")
        self.store_id = store_id
        self.store_password = store_password
        self.base_url = base_url.rstrip('/')
        self.callback_url = callback_url
        self.return_url = return_url or callback_url
        self.currency = currency
        self.timeout = timeout

    @classmethod
    def from_config(cls):
        cfg = current_app.config
        callback_url = f"{cfg['PUBLIC_BASE_URL'].rstrip('/')}/api/payment/callback"
        if cfg.get('PAYMENT_CALLBACK_TOKEN'):
            callback_url = f"{callback_url}?token={cfg['PAYMENT_CALLBACK_TOKEN']}"
        return cls(
            cfg.get('SSLCOMMERZ_STORE_ID'),
            cfg.get('SSLCOMMERZ_STORE_PASSWORD'),
            cfg.get('SSLCOMMERZ_BASE_URL'),
            callback_url,
            return_url=f"{cfg['PUBLIC_BASE_URL'].rstrip('/')}/api/payment/return",
            currency=cfg.get('CURRENCY', 'BDT'),
            timeout=cfg.get('SSLCOMMERZ_TIMEOUT', 30)
        )

    def initiate(self, application: Application, amount: float) -> str:
        """
        Open a checkout session for the application fee

        Returns:
            Gateway page URL the student is redirected to
        """
        payload = application.payload or {}
        tran_id = self.transaction_id(application)
        data = {
            'store_id': self.store_id,
            'store_passwd': self.store_password,
            'total_amount': f"{amount:.2f}",
            'currency': self.currency,
            'tran_id': tran_id,
            'success_url': self.return_url,
            'fail_url': self.return_url,
            'cancel_url': self.return_url,
            'ipn_url': self.callback_url,
            'product_name': payload.get('application_type') or 'Certificate',
            'product_category': 'Certificate',
            'product_profile': 'non-physical-goods',
            'shipping_method': 'NO',
            'cus_name': payload.get('student_name') or application.student_id,
            'cus_email': payload.get('email') or '',
            'cus_phone': payload.get('mobile') or '',
            'cus_add1': payload.get('campus') or 'N/A',
            'cus_city': payload.get('campus') or 'N/A',
            'cus_country': 'Bangladesh',
            'value_a': application.id,
        }

        body = self._post(SESSION_PATH, data)
        if body.get('status') != 'SUCCESS' or not body.get('GatewayPageURL'):
            reason = body.get('failedreason') or 'no gateway URL returned'
            log_warning(f"Payment session rejected for application {application.id}: {reason}")
            raise PaymentError(f"Payment gateway rejected the session: {reason}")

        log_info(f"Payment session {tran_id} opened for application {application.id}")
        return body['GatewayPageURL']

    @staticmethod
    def transaction_id(application: Application) -> str:
        """Gateway transaction id for the application's current submission cycle"""
        return f"{application.id}-{application.submission_cycle}"

    def validate(self, val_id: str, expected_amount: float, tran_id: Optional[str] = None,
                 application_id: Optional[str] = None) -> bool:
        """
        Confirm a callback's val_id with the gateway and check the paid amount

        When tran_id or application_id are given, the validated transaction must
        carry the same values, so a val_id from another payment is refused.
        """
        if not val_id:
            return False
        params = {
            'val_id': val_id,
            'store_id': self.store_id,
            'store_passwd': self.store_password,
            'format': 'json',
        }
        body = self._get(VALIDATION_PATH, params)
        if body.get('status') not in SUCCESS_STATUSES:
            log_warning(f"Payment validation {val_id} returned status {body.get('status')}")
            return False
        if tran_id is not None and body.get('tran_id') != tran_id:
            log_warning(f"Payment validation {val_id} belongs to transaction {body.get('tran_id')}, not {tran_id}")
            return False
        if application_id is not None and str(body.get('value_a') or '') != application_id:
            log_warning(f"Payment validation {val_id} belongs to application {body.get('value_a')}, "
                        f"not {application_id}")
            return False
        try:
            amount = float(body.get('amount'))
        except (TypeError, ValueError):
            return False
        if abs(amount - expected_amount) > 0.01:
            log_warning(f"Amount mismatch for {val_id}: found {amount}, expected {expected_amount}")
            return False
        return True

    @staticmethod
    def parse_callback(form) -> Tuple[str, str, Optional[str], Optional[str]]:
        """
        Extract (application_id, status, tran_id, val_id) from a gateway callback
        """
        validate_required(form.get('value_a'), "Callback application reference")
        application_id = str(form.get('value_a')).strip()
        status = (form.get('status') or '').strip().upper()
        return application_id, status, form.get('tran_id'), form.get('val_id')

    def _post(self, path: str, data: dict) -> dict:
        try:
            resp = requests.post(f"{self.base_url}{path}", data=data, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            log_error("Payment gateway timeout", e)
            raise PaymentError("Payment gateway timed out. Please try again.")
        except requests.exceptions.RequestException as e:
            log_error("Payment gateway request failed", e)
            raise PaymentError("Payment gateway is unreachable. Please try again.")
        return self._json(resp)

    def _get(self, path: str, params: dict) -> dict:
        try:
            resp = requests.get(f"{self.base_url}{path}", params=params, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            log_error("Payment validation timeout", e)
            raise PaymentError("Payment gateway timed out. Please try again.")
        except requests.exceptions.RequestException as e:
            log_error("Payment validation request failed", e)
            raise PaymentError("Payment gateway is unreachable. Please try again.")
        return self._json(resp)

    @staticmethod
    def _json(resp) -> dict:
        if resp.status_code != 200:
            log_warning(f"Payment gateway error {resp.status_code}: {resp.text[:200]}")
            raise PaymentError(f"Payment gateway returned HTTP {resp.status_code}")
        try:
            return resp.json()
        except ValueError:
            raise PaymentError("Payment gateway returned an invalid response")

"""
Request and response schemas
"""

from datetime import date
from flask_marshmallow import Marshmallow
from marshmallow import EXCLUDE, fields, post_load, validate, validates
from marshmallow import ValidationError as SchemaValidationError
from clearflow.models import ClearanceDecision, Office, OverallStatus, PaymentStatus
from clearflow.utils.exceptions import ValidationError
from clearflow.utils.validators import parse_enum, validate_passing_year, validate_phone_number

ma = Marshmallow()

APPLICATION_TYPES = ('provisional_certificate', 'final_certificate', 'transcript')


def load_or_raise(schema, data):
    """Load request data, turning schema errors into a 422 ValidationError"""
    if data is None:
        raise ValidationError("No data provided")
    try:
        return schema.load(data)
    except SchemaValidationError as e:
        raise ValidationError("Invalid request data", details=e.messages)


class ClearanceRecordSchema(ma.Schema):
    office = fields.Enum(Office, by_value=True)
    label = fields.Function(lambda record: record.office.label)
    position = fields.Integer()
    decision = fields.Enum(ClearanceDecision, by_value=True)
    message = fields.String(allow_none=True)
    decided_by = fields.String(allow_none=True)
    decided_at = fields.DateTime(allow_none=True)


class ApplicationSchema(ma.Schema):
    """Application as returned to every role"""
    id = fields.String()
    student_id = fields.String()
    payload = fields.Dict()
    overall_status = fields.Enum(OverallStatus, by_value=True)
    payment_status = fields.Enum(PaymentStatus, by_value=True)
    payment_reference = fields.String(allow_none=True)
    submission_cycle = fields.Integer()
    version = fields.Integer()
    chain = fields.Method('get_chain')
    clearance = fields.Method('get_clearance')
    current_pending_office = fields.Method('get_current_pending_office')
    created_at = fields.DateTime()
    updated_at = fields.DateTime()

    def get_chain(self, application):
        return [office.value for office in application.chain]

    def get_clearance(self, application):
        record_schema = ClearanceRecordSchema()
        return {
            record.office.value: record_schema.dump(record)
            for record in sorted(application.clearance_records, key=lambda r: r.position)
        }

    def get_current_pending_office(self, application):
        from clearflow.services.workflow_service import current_pending_office
        office = current_pending_office(application)
        return office.value if office else None


class CertificateFormSchema(ma.Schema):
    """Certificate form collected from the student portal"""

    class Meta:
        unknown = EXCLUDE

    student_name = fields.String(required=True, validate=validate.Length(min=1, max=200))
    program = fields.String(required=True, validate=validate.Length(min=1, max=100))
    batch = fields.String(required=True, validate=validate.Length(min=1, max=50))
    credit_completed = fields.Float(required=True, validate=validate.Range(min=0))
    credit_waived = fields.Float(load_default=0.0, validate=validate.Range(min=0))
    campus = fields.String(required=True, validate=validate.Length(min=1, max=100))
    mobile = fields.String(required=True)
    email = fields.Email(required=True)
    date_of_birth = fields.Date(required=True)
    last_semester = fields.String(required=True, validate=validate.Length(min=1, max=50))
    passing_year = fields.Integer(required=True)
    application_type = fields.String(required=True, validate=validate.OneOf(APPLICATION_TYPES))
    remarks = fields.String(allow_none=True, load_default=None)
    ssc_certificate = fields.Url(required=True, relative=True)
    hsc_certificate = fields.Url(required=True, relative=True)

    @validates('mobile')
    def _validate_mobile(self, value, **kwargs):
        if not validate_phone_number(value):
            raise SchemaValidationError("Invalid phone number")

    @validates('passing_year')
    def _validate_passing_year(self, value, **kwargs):
        if not validate_passing_year(value):
            raise SchemaValidationError(f"Passing year must be between 2000 and {date.today().year + 10}")

    @validates('date_of_birth')
    def _validate_date_of_birth(self, value, **kwargs):
        if value >= date.today():
            raise SchemaValidationError("Date of birth must be in the past")


class DecisionSchema(ma.Schema):
    """Body of an office decision"""

    class Meta:
        unknown = EXCLUDE

    decision = fields.String(required=True)
    message = fields.String(allow_none=True, load_default=None)
    expected_version = fields.Integer(allow_none=True, load_default=None)

    @post_load
    def _parse_decision(self, data, **kwargs):
        data['decision'] = parse_enum(ClearanceDecision, data['decision'], 'decision')
        return data


class LoginSchema(ma.Schema):
    email = fields.String(required=True)
    password = fields.String(required=True, load_only=True)


application_schema = ApplicationSchema()
applications_schema = ApplicationSchema(many=True)
certificate_form_schema = CertificateFormSchema()
decision_schema = DecisionSchema()
login_schema = LoginSchema()


def form_payload(data):
    """Validate a certificate form and return it in JSON-safe form for storage"""
    return certificate_form_schema.dump(load_or_raise(certificate_form_schema, data))

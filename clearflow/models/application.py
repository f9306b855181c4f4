"""
Certificate application model (aggregate root of the clearance workflow)
"""

import enum
import uuid
from typing import Dict, Optional, Tuple
from sqlalchemy.orm import validates
from clearflow.models.database import db
from clearflow.models.clearance import Office, ClearanceRecord
from clearflow.utils.exceptions import ValidationError
from clearflow.utils.helpers import utcnow


class OverallStatus(str, enum.Enum):
    """Aggregate status derived from the clearance records"""
    PENDING = 'pending'
    IN_PROGRESS = 'in_progress'
    APPROVED = 'approved'
    REJECTED = 'rejected'


class PaymentStatus(str, enum.Enum):
    """Certificate fee status, written only by the payment callback"""
    UNPAID = 'unpaid'
    PAID = 'paid'


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Application(db.Model):
    """Certificate application submitted by a student"""
    __tablename__ = 'applications'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    student_id = db.Column(db.String(50), nullable=False, index=True)
    # Mirrors student_id while the application is not rejected; unique so a
    # student never holds two active applications.
    active_student_id = db.Column(db.String(50), nullable=True, unique=True)
    payload = db.Column(db.JSON, nullable=False, default=dict)
    payment_status = db.Column(
        db.Enum(PaymentStatus, name='payment_status', values_callable=_enum_values),
        nullable=False,
        default=PaymentStatus.UNPAID
    )
    payment_reference = db.Column(db.String(64), nullable=True)
    overall_status = db.Column(
        db.Enum(OverallStatus, name='overall_status', values_callable=_enum_values),
        nullable=False,
        default=OverallStatus.PENDING,
        index=True
    )
    submission_cycle = db.Column(db.Integer, nullable=False, default=1)
    version = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow)

    clearance_records = db.relationship(
        'ClearanceRecord',
        back_populates='application',
        order_by='ClearanceRecord.position',
        cascade='all, delete-orphan',
        lazy='selectin'
    )

    __mapper_args__ = {
        'version_id_col': version
    }

    @validates('id', 'student_id')
    def _validate_immutable(self, key, value):
        current = getattr(self, key)
        if current is not None and current != value:
            raise ValidationError(f"{key} cannot be changed once assigned")
        return value

    @classmethod
    def open(cls, student_id: str, payload: dict, chain: Tuple[Office, ...]) -> 'Application':
        """Build a fresh application with one Pending record per office in the chain"""
        if not chain:
            raise ValidationError("An application needs at least one clearance office")
        if len(set(chain)) != len(chain):
            raise ValidationError("Clearance chain lists an office twice")
        now = utcnow()
        application = cls(
            id=str(uuid.uuid4()),
            student_id=student_id,
            active_student_id=student_id,
            payload=dict(payload or {}),
            payment_status=PaymentStatus.UNPAID,
            overall_status=OverallStatus.PENDING,
            submission_cycle=1,
            created_at=now,
            updated_at=now,
        )
        application.clearance_records = [
            ClearanceRecord(office=office, position=position)
            for position, office in enumerate(chain)
        ]
        return application

    @property
    def chain(self) -> Tuple[Office, ...]:
        """Offices of this application in review order"""
        return tuple(record.office for record in sorted(self.clearance_records, key=lambda r: r.position))

    @property
    def clearance(self) -> Dict[Office, ClearanceRecord]:
        return {record.office: record for record in self.clearance_records}

    def record_for(self, office: Office) -> Optional[ClearanceRecord]:
        for record in self.clearance_records:
            if record.office == office:
                return record
        return None

    def touch(self) -> None:
        self.updated_at = utcnow()

"""
Clearance models: offices, per-office decisions and student notifications
"""

import enum
from datetime import datetime
from typing import Optional, Tuple
from clearflow.models.database import db
from clearflow.utils.exceptions import ValidationError
from clearflow.utils.helpers import utcnow


class Office(str, enum.Enum):
    """Institutional office that signs off on an application"""
    FACULTY = 'faculty'
    LIBRARY = 'library'
    ACCOUNTS = 'accounts'
    EXAM_CONTROLLER = 'exam_controller'
    REGISTRAR = 'registrar'
    ADMINISTRATOR = 'administrator'
    HOD = 'hod'
    CONTROLLER = 'controller'

    @property
    def label(self) -> str:
        return OFFICE_LABELS[self]


OFFICE_LABELS = {
    Office.FACULTY: 'Faculty',
    Office.LIBRARY: 'Library',
    Office.ACCOUNTS: 'Accounts',
    Office.EXAM_CONTROLLER: 'Exam Controller',
    Office.REGISTRAR: 'Registrar',
    Office.ADMINISTRATOR: 'Administrator',
    Office.HOD: 'Head of Department',
    Office.CONTROLLER: 'Controller',
}

# Review order is fixed per chain; applications freeze it at creation time.
STANDARD_CHAIN: Tuple[Office, ...] = (
    Office.FACULTY,
    Office.LIBRARY,
    Office.ACCOUNTS,
    Office.EXAM_CONTROLLER,
    Office.REGISTRAR,
)

EXTENDED_CHAIN: Tuple[Office, ...] = (
    Office.FACULTY,
    Office.ACCOUNTS,
    Office.LIBRARY,
    Office.EXAM_CONTROLLER,
    Office.ADMINISTRATOR,
    Office.HOD,
    Office.CONTROLLER,
)

CLEARANCE_CHAINS = {
    'standard': STANDARD_CHAIN,
    'extended': EXTENDED_CHAIN,
}


def resolve_chain(name: str) -> Tuple[Office, ...]:
    """Look up a configured office chain by name"""
    try:
        return CLEARANCE_CHAINS[name]
    except KeyError:
        raise ValueError(f"Unknown clearance chain '{name}', expected one of {sorted(CLEARANCE_CHAINS)}")


class ClearanceDecision(str, enum.Enum):
    """One office's decision within a submission cycle"""
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'


class ClearanceRecord(db.Model):
    """One office's decision on one application"""
    __tablename__ = 'clearance_records'

    id = db.Column(db.Integer, primary_key=True)
    application_id = db.Column(
        db.String(36),
        db.ForeignKey('applications.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )
    office = db.Column(
        db.Enum(Office, name='clearance_office', values_callable=lambda e: [m.value for m in e]),
        nullable=False
    )
    position = db.Column(db.Integer, nullable=False)
    decision = db.Column(
        db.Enum(ClearanceDecision, name='clearance_decision', values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ClearanceDecision.PENDING
    )
    message = db.Column(db.Text, nullable=True)
    decided_by = db.Column(db.String(255), nullable=True)
    decided_at = db.Column(db.DateTime(timezone=True), nullable=True)

    application = db.relationship('Application', back_populates='clearance_records')

    __table_args__ = (
        db.UniqueConstraint('application_id', 'office', name='uq_clearance_application_office'),
    )

    def __init__(self, **kwargs):
        kwargs.setdefault('decision', ClearanceDecision.PENDING)
        super().__init__(**kwargs)
        self._check_invariants(self.decision, self.message, self.decided_at)

    @staticmethod
    def _check_invariants(decision: ClearanceDecision, message: Optional[str],
                          decided_at: Optional[datetime]) -> None:
        if decision == ClearanceDecision.REJECTED and not (message or '').strip():
            raise ValidationError("A rejection message is required")
        if decision == ClearanceDecision.PENDING and decided_at is not None:
            raise ValidationError("A pending clearance cannot carry a decision time")
        if decision != ClearanceDecision.PENDING and decided_at is None:
            raise ValidationError("A decided clearance must carry a decision time")

    @property
    def is_pending(self) -> bool:
        return self.decision == ClearanceDecision.PENDING

    def apply_decision(self, decision: ClearanceDecision, message: Optional[str],
                       decided_by: Optional[str], decided_at: datetime) -> None:
        """Move the record out of Pending; validates before touching any field"""
        if decision == ClearanceDecision.PENDING:
            raise ValidationError("Decision must be approved or rejected")
        message = (message or '').strip() or None
        self._check_invariants(decision, message, decided_at)
        self.decision = decision
        self.message = message
        self.decided_by = decided_by
        self.decided_at = decided_at

    def reset(self) -> None:
        """Return the record to Pending for a new submission cycle"""
        self.decision = ClearanceDecision.PENDING
        self.message = None
        self.decided_by = None
        self.decided_at = None


class Notification(db.Model):
    """Notification shown to a student about their application"""
    __tablename__ = 'notifications'

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.String(50), nullable=False, index=True)
    application_id = db.Column(db.String(36), nullable=True, index=True)
    staff_name = db.Column(db.String(200), nullable=False)
    action = db.Column(db.String(100), nullable=False)
    phase = db.Column(db.String(100), nullable=False)
    message = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)

    def to_dict(self):
        """Convert to dictionary"""
        return {
            'id': self.id,
            'student_id': self.student_id,
            'application_id': self.application_id,
            'staff_name': self.staff_name,
            'action': self.action,
            'phase': self.phase,
            'message': self.message,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }

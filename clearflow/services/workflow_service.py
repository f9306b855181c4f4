"""
Clearance workflow engine

The engine is the only writer of an application's overall status and of the
decision times on its clearance records. Every mutating operation validates
against the loaded state first, applies the change, re-derives the overall
status and persists through the store with an optimistic version check.
"""

from typing import Iterable, Optional, Tuple
from clearflow.models import (
    Application, ClearanceDecision, ClearanceRecord, Office, OverallStatus, PaymentStatus,
    STANDARD_CHAIN
)
from clearflow.services.application_store import ApplicationStore
from clearflow.utils.exceptions import (
    AlreadyDecidedError, ConflictError, InvalidStateError, OutOfSequenceError, ValidationError
)
from clearflow.utils.helpers import log_info, log_warning, utcnow


def derive_overall_status(records: Iterable[ClearanceRecord]) -> OverallStatus:
    """
    Aggregate status from the per-office decisions

    Any rejection wins, then all-approved, then untouched, otherwise in progress.
    """
    decisions = [record.decision for record in records]
    if any(decision == ClearanceDecision.REJECTED for decision in decisions):
        return OverallStatus.REJECTED
    if decisions and all(decision == ClearanceDecision.APPROVED for decision in decisions):
        return OverallStatus.APPROVED
    if all(decision == ClearanceDecision.PENDING for decision in decisions):
        return OverallStatus.PENDING
    return OverallStatus.IN_PROGRESS


def current_pending_office(application: Application) -> Optional[Office]:
    """First office in review order still pending; None once approved or rejected"""
    if derive_overall_status(application.clearance_records) in (OverallStatus.APPROVED, OverallStatus.REJECTED):
        return None
    for record in sorted(application.clearance_records, key=lambda r: r.position):
        if record.is_pending:
            return record.office
    return None


def blocking_offices(application: Application, office: Office) -> Tuple[Office, ...]:
    """Offices ahead of `office` in review order that have not approved yet"""
    target = application.record_for(office)
    return tuple(
        record.office
        for record in sorted(application.clearance_records, key=lambda r: r.position)
        if record.position < target.position and record.decision != ClearanceDecision.APPROVED
    )


class WorkflowEngine:
    """Sole authority for clearance state transitions"""

    def __init__(self, store: ApplicationStore, notifier=None,
                 chain: Tuple[Office, ...] = STANDARD_CHAIN):
        self.store = store
        self.notifier = notifier
        self.chain = tuple(chain)

    def create_application(self, student_id: str, payload: dict) -> Application:
        """
        Open a new application with every configured office pending

        Raises:
            ValidationError: If student_id is blank
            ConflictError: If the student already has an application that is not rejected
        """
        if not student_id or not str(student_id).strip():
            raise ValidationError("Student id is required")

        existing = self.store.find_active_by_student(student_id)
        if existing is not None:
            log_warning(f"Student {student_id} already has active application {existing.id}")
            raise ConflictError(
                f"Student already has an active application ({existing.overall_status.value})",
                details={'application_id': existing.id}
            )

        application = Application.open(student_id, payload, self.chain)
        application.overall_status = derive_overall_status(application.clearance_records)
        self.store.add(application)

        log_info(f"Application {application.id} created for student {student_id}")
        self._notify('application_submitted', application)
        return application

    def record_decision(self, application_id: str, office: Office, decision: ClearanceDecision,
                        message: Optional[str] = None, decided_by: Optional[str] = None,
                        expected_version: Optional[int] = None) -> Application:
        """
        Record one office's approval or rejection

        Raises:
            ValidationError: Pending decision, unknown office, or rejection without a message
            AlreadyDecidedError: The office already decided in this cycle
            OutOfSequenceError: A preceding office has not approved yet
            ConflictError: Concurrent modification
        """
        if decision not in (ClearanceDecision.APPROVED, ClearanceDecision.REJECTED):
            raise ValidationError("Decision must be approved or rejected")
        if decision == ClearanceDecision.REJECTED and not (message or '').strip():
            raise ValidationError("A rejection message is required")

        application = self.store.load(application_id)
        version = application.version if expected_version is None else expected_version

        record = application.record_for(office)
        if record is None:
            raise ValidationError(f"Office '{office.value}' is not part of this application's clearance chain")

        if not record.is_pending:
            log_warning(f"Duplicate decision by {office.value} on application {application.id}")
            raise AlreadyDecidedError(
                f"{office.label} already recorded '{record.decision.value}' for this submission"
            )

        blockers = blocking_offices(application, office)
        if blockers:
            log_warning(f"Out-of-sequence decision by {office.value} on application {application.id}")
            raise OutOfSequenceError(
                f"{office.label} must wait for: {', '.join(o.label for o in blockers)}",
                details={'waiting_for': [o.value for o in blockers]}
            )

        now = utcnow()
        record.apply_decision(decision, message, decided_by, now)
        self._refresh(application, now)
        self.store.save(application, version)

        log_info(f"Application {application.id}: {office.value} {decision.value}, "
                 f"overall {application.overall_status.value}")
        self._notify('decision_recorded', application, record)
        return application

    def resubmit(self, application_id: str, revised_payload: dict,
                 expected_version: Optional[int] = None) -> Application:
        """
        Start a new submission cycle for a rejected application

        Raises:
            InvalidStateError: If the application is not rejected
            ConflictError: If the student opened another active application meanwhile
        """
        application = self.store.load(application_id)
        version = application.version if expected_version is None else expected_version

        if application.overall_status != OverallStatus.REJECTED:
            raise InvalidStateError(
                f"Only rejected applications can be resubmitted (current status: {application.overall_status.value})"
            )

        other = self.store.find_active_by_student(application.student_id)
        if other is not None and other.id != application.id:
            raise ConflictError(
                "Student already has another active application",
                details={'application_id': other.id}
            )

        now = utcnow()
        application.payload = dict(revised_payload or {})
        for record in application.clearance_records:
            record.reset()
        application.payment_status = PaymentStatus.UNPAID
        application.payment_reference = None
        application.submission_cycle = (application.submission_cycle or 1) + 1
        self._refresh(application, now)
        self.store.save(application, version)

        log_info(f"Application {application.id} resubmitted (cycle {application.submission_cycle})")
        self._notify('application_resubmitted', application)
        return application

    def mark_paid(self, application_id: str, reference: Optional[str] = None) -> Application:
        """Payment callback path: the fee was received. Overall status is left alone."""
        application = self.store.load(application_id)
        version = application.version
        if application.payment_status == PaymentStatus.PAID and application.payment_reference == reference:
            return application

        application.payment_status = PaymentStatus.PAID
        if reference:
            application.payment_reference = reference
        application.touch()
        self.store.save(application, version)

        log_info(f"Application {application.id} marked paid (ref {reference})")
        self._notify('payment_updated', application, True)
        return application

    def mark_payment_failed(self, application_id: str, reference: Optional[str] = None) -> Application:
        """Payment callback path: the attempt failed or was cancelled"""
        application = self.store.load(application_id)
        version = application.version
        if application.payment_status == PaymentStatus.PAID:
            # A late failure for an older attempt never revokes a confirmed payment
            log_warning(f"Ignoring payment failure for already paid application {application.id}")
            return application

        if reference:
            application.payment_reference = reference
        application.touch()
        self.store.save(application, version)

        log_info(f"Application {application.id} payment failed (ref {reference})")
        self._notify('payment_updated', application, False)
        return application

    def get_status(self, application_id: str) -> Application:
        return self.store.load(application_id)

    def purge(self, application_id: str) -> None:
        """Administrative removal of an application and its clearance records"""
        application = self.store.load(application_id)
        self.store.delete(application)
        log_info(f"Application {application_id} purged")

    def _refresh(self, application: Application, now) -> None:
        application.overall_status = derive_overall_status(application.clearance_records)
        application.active_student_id = (
            None if application.overall_status == OverallStatus.REJECTED else application.student_id
        )
        application.updated_at = now

    def _notify(self, event: str, *args) -> None:
        if self.notifier is None:
            return
        getattr(self.notifier, event)(*args)

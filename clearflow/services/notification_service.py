"""
Notification sink: records student notifications and emails them when mail is enabled
"""

from typing import Optional
from sqlalchemy.orm import Session
from clearflow.models import Application, ClearanceDecision, ClearanceRecord, Notification, Student
from clearflow.services.email_service import EmailService
from clearflow.utils.helpers import log_error, log_info

SYSTEM_SENDER = 'Clearance System'


class NotificationService:
    """
    Fire-and-forget sink for workflow events.

    Runs after the engine has committed, so a failure here is logged and
    never undoes or blocks a clearance decision.
    """

    def __init__(self, session: Session, mail_enabled: bool = False):
        self.session = session
        self.mail_enabled = mail_enabled

    def application_submitted(self, application: Application) -> None:
        self._emit(application, SYSTEM_SENDER, 'submitted', 'Submitted',
                   "Your certificate application was received and is waiting for clearance.")

    def decision_recorded(self, application: Application, record: ClearanceRecord) -> None:
        actor = record.decided_by or record.office.label
        if record.decision == ClearanceDecision.REJECTED:
            message = f"{record.office.label} rejected your clearance due to: {record.message}"
            action = 'rejected'
        else:
            message = f"{record.office.label} approved your clearance."
            if record.message:
                message = f"{message} Note: {record.message}"
            action = 'approved'
        self._emit(application, actor, action, record.office.label, message)

    def application_resubmitted(self, application: Application) -> None:
        self._emit(application, SYSTEM_SENDER, 'resubmitted', 'Submitted',
                   f"Your application was resubmitted (cycle {application.submission_cycle}). "
                   "All offices will review it again and the fee must be paid again.")

    def payment_updated(self, application: Application, success: bool) -> None:
        if success:
            self._emit(application, SYSTEM_SENDER, 'payment_received', 'Payment',
                       "Your certificate fee payment was confirmed.", status='paid')
        else:
            self._emit(application, SYSTEM_SENDER, 'payment_failed', 'Payment',
                       "Your certificate fee payment did not go through. Please try again.", status='unpaid')

    def _emit(self, application: Application, staff_name: str, action: str, phase: str,
              message: str, status: Optional[str] = None) -> None:
        try:
            self.session.add(Notification(
                student_id=application.student_id,
                application_id=application.id,
                staff_name=staff_name,
                action=action,
                phase=phase,
                message=message,
            ))
            self.session.commit()
            log_info(f"Notification created for student {application.student_id}: {action}")
        except Exception as e:
            self.session.rollback()
            log_error(f"Error creating notification for application {application.id}", e)
            return

        if self.mail_enabled:
            self._send_email(application, action, message, status or application.overall_status.value)

    def _send_email(self, application: Application, action: str, message: str, status: str) -> None:
        try:
            student = self.session.query(Student).filter_by(student_id=application.student_id).first()
            if student is None:
                return
            headline = action.replace('_', ' ').capitalize()
            EmailService.send_status_email(student.email, student.full_name, headline, message,
                                           application.id, status)
        except Exception as e:
            log_error(f"Error emailing student {application.student_id}", e)

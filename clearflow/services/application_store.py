"""
Application store: the persistence boundary the workflow engine reads and writes through
"""

from typing import List, Optional
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from clearflow.models import (
    Application, ClearanceRecord, ClearanceDecision, Office, OverallStatus
)
from clearflow.utils.exceptions import ConflictError, DatabaseError, NotFoundError, ValidationError
from clearflow.utils.helpers import log_error, log_warning

OFFICE_FILTERS = ('actionable', 'pending', 'approved', 'rejected', 'all')


class ApplicationStore:
    """SQLAlchemy-backed store with optimistic version checks"""

    def __init__(self, session: Session):
        self.session = session

    def load(self, application_id: str) -> Application:
        """
        Load an application by id

        Raises:
            NotFoundError: If no application has this id
        """
        application = self.session.get(Application, application_id)
        if application is None:
            raise NotFoundError(f"Application {application_id} not found")
        return application

    def add(self, application: Application) -> Application:
        """Insert a new application together with its clearance records"""
        self.session.add(application)
        self._commit(f"create application for student {application.student_id}")
        return application

    def save(self, application: Application, expected_version: int) -> Application:
        """
        Persist pending changes if the stored version still equals expected_version

        Raises:
            ConflictError: If another writer got there first
        """
        if application.version != expected_version:
            self.session.rollback()
            log_warning(f"Stale write on application {application.id}: "
                        f"expected version {expected_version}, stored {application.version}")
            raise ConflictError("Application was modified by another request; reload and retry")
        self._commit(f"save application {application.id}")
        return application

    def delete(self, application: Application) -> None:
        self.session.delete(application)
        self._commit(f"purge application {application.id}")

    def find_active_by_student(self, student_id: str) -> Optional[Application]:
        """The student's application that is not rejected, if any"""
        return (
            self.session.query(Application)
            .filter(Application.student_id == student_id)
            .filter(Application.overall_status != OverallStatus.REJECTED)
            .order_by(Application.created_at.desc())
            .first()
        )

    def list_by_student(self, student_id: str) -> List[Application]:
        return (
            self.session.query(Application)
            .filter(Application.student_id == student_id)
            .order_by(Application.created_at.desc())
            .all()
        )

    def query_by_office(self, office: Optional[Office], status_filter: str = 'all',
                        limit: int = 50, offset: int = 0) -> List[Application]:
        """
        Read-only list view for an office dashboard

        Args:
            office: Office whose clearance column is filtered; None lists every application
            status_filter: actionable (this office's turn), pending, approved, rejected or all
            limit: Page size
            offset: Page start
        """
        if status_filter not in OFFICE_FILTERS:
            raise ValidationError(f"status must be one of: {', '.join(OFFICE_FILTERS)}")

        query = self.session.query(Application)
        if office is not None:
            query = query.join(ClearanceRecord).filter(ClearanceRecord.office == office)
            if status_filter in ('actionable', 'pending'):
                query = query.filter(ClearanceRecord.decision == ClearanceDecision.PENDING)
            elif status_filter == 'approved':
                query = query.filter(ClearanceRecord.decision == ClearanceDecision.APPROVED)
            elif status_filter == 'rejected':
                query = query.filter(ClearanceRecord.decision == ClearanceDecision.REJECTED)
        elif status_filter in ('pending', 'approved', 'rejected'):
            status = {
                'pending': OverallStatus.PENDING,
                'approved': OverallStatus.APPROVED,
                'rejected': OverallStatus.REJECTED,
            }[status_filter]
            query = query.filter(Application.overall_status == status)

        query = query.order_by(Application.created_at.asc(), Application.id.asc())

        if office is not None and status_filter == 'actionable':
            # Whose turn it is depends on the other records, so filter after loading
            from clearflow.services.workflow_service import current_pending_office
            candidates = [app for app in query.all() if current_pending_office(app) == office]
            return candidates[offset:offset + limit]

        return query.offset(offset).limit(limit).all()

    def _commit(self, action: str) -> None:
        try:
            self.session.commit()
        except StaleDataError as e:
            self.session.rollback()
            log_warning(f"Concurrent update rejected during {action}: {e}")
            raise ConflictError("Application was modified by another request; reload and retry")
        except IntegrityError as e:
            self.session.rollback()
            log_warning(f"Integrity conflict during {action}: {e.orig}")
            raise ConflictError("Student already has an active application")
        except SQLAlchemyError as e:
            self.session.rollback()
            log_error(f"Database failure during {action}", e)
            raise DatabaseError("Database operation failed")

"""
Shared fixtures: app on in-memory SQLite, seeded accounts and bearer tokens
"""

import pytest

from clearflow import create_app
from clearflow.models import db, Office, Staff, Student, STANDARD_CHAIN
from clearflow.services import (
    ApplicationStore, AuthService, NotificationService, Principal, WorkflowEngine,
    ROLE_ADMIN, ROLE_STAFF, ROLE_STUDENT
)

STUDENT_ID = 'S1'
OTHER_STUDENT_ID = 'S2'


@pytest.fixture
def app(tmp_path):
    """Fresh application and database for each test."""
    app = create_app('testing')
    app.config['UPLOAD_FOLDER'] = str(tmp_path / 'documents')
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return ApplicationStore(db.session)


@pytest.fixture
def engine(store):
    """Engine wired like a request would wire it, on the standard chain."""
    return WorkflowEngine(store, NotificationService(db.session), STANDARD_CHAIN)


@pytest.fixture
def accounts(app):
    """One student per id, one staff member per office and an admin."""
    students = {}
    for student_id, first in ((STUDENT_ID, 'Ayesha'), (OTHER_STUDENT_ID, 'Tanvir')):
        student = Student(student_id=student_id, first_name=first, last_name='Rahman',
                          email=f"{first.lower()}@example.edu")
        student.set_password('secret123')
        db.session.add(student)
        students[student_id] = student

    staff = {}
    for office in Office:
        member = Staff(first_name=office.label, last_name='Officer',
                       email=f"{office.value}@example.edu", office=office)
        member.set_password('secret123')
        db.session.add(member)
        staff[office] = member

    admin = Staff(first_name='Root', last_name='Admin', email='admin@example.edu', is_admin=True)
    admin.set_password('secret123')
    db.session.add(admin)
    db.session.commit()
    return {'students': students, 'staff': staff, 'admin': admin}


def bearer(principal):
    return {'Authorization': f"Bearer {AuthService.issue_token(principal)}"}


@pytest.fixture
def student_headers(accounts):
    return bearer(Principal(ROLE_STUDENT, STUDENT_ID, None, 'Ayesha Rahman'))


@pytest.fixture
def other_student_headers(accounts):
    return bearer(Principal(ROLE_STUDENT, OTHER_STUDENT_ID, None, 'Tanvir Rahman'))


@pytest.fixture
def office_headers(accounts):
    """Callable returning headers for the staff member of an office."""
    def make(office):
        member = accounts['staff'][office]
        return bearer(Principal(ROLE_STAFF, str(member.id), office, member.full_name))
    return make


@pytest.fixture
def admin_headers(accounts):
    admin = accounts['admin']
    return bearer(Principal(ROLE_ADMIN, str(admin.id), None, admin.full_name))


@pytest.fixture
def form():
    """A valid certificate form."""
    return {
        'student_name': 'Ayesha Rahman',
        'program': 'BSc in CSE',
        'batch': '52',
        'credit_completed': 148,
        'credit_waived': 0,
        'campus': 'Main Campus',
        'mobile': '+8801712345678',
        'email': 'ayesha@example.edu',
        'date_of_birth': '2000-05-14',
        'last_semester': 'Spring 2024',
        'passing_year': 2024,
        'application_type': 'final_certificate',
        'remarks': None,
        'ssc_certificate': '/api/documents/ssc.pdf',
        'hsc_certificate': 'https://clearflow-docs.s3.amazonaws.com/documents/hsc.pdf',
    }

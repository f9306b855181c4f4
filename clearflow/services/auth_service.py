"""
Authentication service: credential checks and bearer tokens
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Tuple
import jwt
from flask import current_app, request
from clearflow.models import Office, Staff, Student
from clearflow.utils.exceptions import AuthenticationError, AuthorizationError, ValidationError
from clearflow.utils.helpers import utcnow
from clearflow.utils.validators import validate_email, validate_password

ROLE_STUDENT = 'student'
ROLE_STAFF = 'staff'
ROLE_ADMIN = 'admin'
ROLES = (ROLE_STUDENT, ROLE_STAFF, ROLE_ADMIN)


@dataclass(frozen=True)
class Principal:
    """Verified identity attached to a request"""
    role: str
    subject_id: str
    office: Optional[Office] = None
    name: Optional[str] = None

    @property
    def is_student(self) -> bool:
        return self.role == ROLE_STUDENT

    @property
    def is_staff(self) -> bool:
        return self.role == ROLE_STAFF

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def to_dict(self):
        return {
            'role': self.role,
            'subject_id': self.subject_id,
            'office': self.office.value if self.office else None,
            'name': self.name
        }


class AuthService:
    """Authentication service class"""

    @staticmethod
    def authenticate_user(email: str, password: str) -> Tuple[str, Principal]:
        """
        Authenticate a student or staff member

        Args:
            email: User email
            password: User password

        Returns:
            Tuple of (token, principal)
        """
        if not validate_email(email):
            raise ValidationError("Invalid email format")

        if not validate_password(password):
            raise ValidationError("Password must be at least 6 characters")

        email = email.lower().strip()

        student = Student.query.filter_by(email=email).first()
        if student and student.check_password(password):
            principal = Principal(ROLE_STUDENT, student.student_id, None, student.full_name)
            return AuthService.issue_token(principal), principal

        staff = Staff.query.filter_by(email=email).first()
        if staff and staff.check_password(password):
            if not staff.is_admin and staff.office is None:
                raise AuthenticationError("Staff account has no clearance office assigned")
            principal = Principal(staff.role, str(staff.id), staff.office, staff.full_name)
            return AuthService.issue_token(principal), principal

        raise AuthenticationError("Invalid email or password")

    @staticmethod
    def issue_token(principal: Principal) -> str:
        """Sign a short-lived HS256 token for the principal"""
        expires = utcnow() + timedelta(minutes=current_app.config['JWT_EXPIRES_MIN'])
        claims = {
            'sub': principal.subject_id,
            'role': principal.role,
            'office': principal.office.value if principal.office else None,
            'name': principal.name,
            'exp': expires,
        }
        return jwt.encode(claims, current_app.config['JWT_SECRET'], algorithm='HS256')

    @staticmethod
    def verify_token(token: str) -> Principal:
        """Decode a bearer token into a principal"""
        if not token:
            raise AuthenticationError("Authentication required")
        try:
            claims = jwt.decode(token, current_app.config['JWT_SECRET'], algorithms=['HS256'])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Session expired, please log in again")
        except jwt.InvalidTokenError:
            raise AuthenticationError("Invalid authentication token")

        role = claims.get('role')
        subject_id = claims.get('sub')
        if role not in ROLES or not subject_id:
            raise AuthenticationError("Invalid authentication token")

        office = None
        if claims.get('office'):
            try:
                office = Office(claims['office'])
            except ValueError:
                raise AuthenticationError("Invalid authentication token")
        if role == ROLE_STAFF and office is None:
            raise AuthenticationError("Invalid authentication token")

        return Principal(role, str(subject_id), office, claims.get('name'))

    @staticmethod
    def require_auth(*roles: str) -> Principal:
        """Require a bearer token on the current request, optionally limited to roles"""
        header = request.headers.get('Authorization', '')
        token = None
        if header.lower().startswith('bearer '):
            token = header.split(' ', 1)[1].strip()
        principal = AuthService.verify_token(token)
        if roles and principal.role not in roles:
            raise AuthorizationError(f"{' or '.join(r.title() for r in roles)} access required")
        return principal

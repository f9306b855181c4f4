"""
Operator commands: `flask --app run init-db` and `flask --app run create-account`
"""

import click
from sqlalchemy.exc import IntegrityError
from clearflow.models import db, init_db, Office, Staff, Student
from clearflow.utils import parse_enum, validate_email, validate_password, ValidationError


def register_commands(app):
    """Attach the clearflow CLI commands to the app"""

    @app.cli.command('init-db')
    def init_db_command():
        """Create all database tables"""
        init_db(app)
        click.echo("Database tables created")

    @app.cli.command('create-account')
    @click.option('--role', type=click.Choice(['student', 'staff', 'admin']), required=True)
    @click.option('--email', required=True)
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
    @click.option('--first-name', required=True)
    @click.option('--last-name', required=True)
    @click.option('--student-id', help='External student id (students only)')
    @click.option('--office', help='Clearance office (staff, optional for admins)')
    def create_account_command(role, email, password, first_name, last_name, student_id, office):
        """Provision a student, staff or admin account"""
        email = email.lower().strip()
        if not validate_email(email):
            raise click.BadParameter("Invalid email format", param_hint='--email')
        if not validate_password(password):
            raise click.BadParameter("Password must be at least 6 characters", param_hint='--password')

        if role == 'student':
            if not student_id:
                raise click.BadParameter("Students need a student id", param_hint='--student-id')
            account = Student(student_id=student_id.strip(), first_name=first_name,
                              last_name=last_name, email=email)
        else:
            staff_office = None
            if office:
                try:
                    staff_office = parse_enum(Office, office, 'office')
                except ValidationError as e:
                    raise click.BadParameter(e.message, param_hint='--office')
            if role == 'staff' and staff_office is None:
                raise click.BadParameter("Staff accounts need an office", param_hint='--office')
            account = Staff(first_name=first_name, last_name=last_name, email=email,
                            office=staff_office, is_admin=(role == 'admin'))

        account.set_password(password)
        db.session.add(account)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise click.ClickException("An account with that email or student id already exists")
        click.echo(f"Created {role} account {email}")

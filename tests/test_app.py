"""
Application factory, configuration and CLI command tests.
"""

import io

import pytest

from clearflow import create_app
from clearflow.config import ProductionConfig
from clearflow.models import Office, Staff, Student
from clearflow.schemas import certificate_form_schema, form_payload
from clearflow.utils import ValidationError


class TestFactory:

    def test_testing_config(self, app):
        assert app.config['TESTING']
        assert app.config['CLEARANCE_CHAIN'] == 'standard'
        assert 'applications' in app.blueprints

    def test_production_requires_secrets(self, monkeypatch):
        monkeypatch.setattr(ProductionConfig, 'SECRET_KEY', None)
        with pytest.raises(ValueError):
            create_app('production')

    def test_oversized_upload(self, client, app, student_headers):
        app.config['MAX_CONTENT_LENGTH'] = 10
        response = client.post('/api/documents', headers=student_headers,
                               data={'file': (io.BytesIO(b'%PDF' + b'0' * 100), 'a.pdf')},
                               content_type='multipart/form-data')
        assert response.status_code == 413


class TestCommands:

    def test_create_student(self, app):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            'create-account', '--role', 'student', '--email', 'new@example.edu', '--password', 'secret123',
            '--first-name', 'Nadia', '--last-name', 'Islam', '--student-id', 'S9'
        ])
        assert result.exit_code == 0, result.output
        assert Student.query.filter_by(student_id='S9').one().check_password('secret123')

    def test_create_staff(self, app):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            'create-account', '--role', 'staff', '--email', 'hod@example.edu', '--password', 'secret123',
            '--first-name', 'Head', '--last-name', 'Dept', '--office', 'HOD'
        ])
        assert result.exit_code == 0, result.output
        assert Staff.query.filter_by(email='hod@example.edu').one().office == Office.HOD

    def test_staff_needs_office(self, app):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            'create-account', '--role', 'staff', '--email', 'x@example.edu', '--password', 'secret123',
            '--first-name', 'X', '--last-name', 'Y'
        ])
        assert result.exit_code != 0

    def test_duplicate_email(self, app, accounts):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            'create-account', '--role', 'admin', '--email', 'admin@example.edu', '--password', 'secret123',
            '--first-name', 'Again', '--last-name', 'Admin'
        ])
        assert result.exit_code != 0
        assert 'already exists' in result.output

    def test_init_db(self, app):
        result = app.test_cli_runner().invoke(args=['init-db'])
        assert result.exit_code == 0
        assert 'created' in result.output


class TestCertificateForm:

    def test_valid_form_is_json_safe(self, app, form):
        payload = form_payload(form)
        assert payload['date_of_birth'] == '2000-05-14'
        assert payload['passing_year'] == 2024
        assert payload['credit_completed'] == 148.0

    def test_unknown_fields_are_dropped(self, app, form):
        form['favourite_colour'] = 'blue'
        assert 'favourite_colour' not in form_payload(form)

    def test_future_birth_date(self, app, form):
        form['date_of_birth'] = '2999-01-01'
        with pytest.raises(ValidationError) as exc:
            form_payload(form)
        assert 'date_of_birth' in exc.value.details

    def test_application_type_choices(self, app, form):
        form['application_type'] = 'diploma'
        errors = certificate_form_schema.validate(form)
        assert 'application_type' in errors

    def test_missing_body(self, app):
        with pytest.raises(ValidationError):
            form_payload(None)

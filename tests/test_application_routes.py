"""
HTTP surface tests: role scoping and error status mapping.
"""

import pytest

from clearflow.models import Office, STANDARD_CHAIN


def submit(client, headers, form):
    response = client.post('/api/applications', json=form, headers=headers)
    assert response.status_code == 201, response.get_json()
    return response.get_json()['data']


def decide(client, headers, application_id, office, decision, message=None, **extra):
    body = {'decision': decision, 'message': message}
    body.update(extra)
    return client.put(f"/api/applications/{application_id}/clearance/{office.value}", json=body, headers=headers)


class TestCreate:

    def test_student_submits_application(self, client, student_headers, form):
        data = submit(client, student_headers, form)
        assert data['student_id'] == 'S1'
        assert data['overall_status'] == 'pending'
        assert data['payment_status'] == 'unpaid'
        assert data['current_pending_office'] == 'faculty'
        assert data['chain'] == [office.value for office in STANDARD_CHAIN]
        assert set(data['clearance']) == {office.value for office in STANDARD_CHAIN}
        assert data['clearance']['faculty']['decision'] == 'pending'
        assert data['payload']['date_of_birth'] == '2000-05-14'
        assert data['version'] == 1

    def test_second_submission_conflicts(self, client, student_headers, form):
        first = submit(client, student_headers, form)
        response = client.post('/api/applications', json=form, headers=student_headers)
        assert response.status_code == 409
        body = response.get_json()
        assert body['ok'] is False
        assert body['error'] == 'conflict'
        assert body['retryable'] is True
        assert body['data'] == {'application_id': first['id']}

    def test_invalid_form_lists_fields(self, client, student_headers, form):
        form['passing_year'] = 1990
        form['mobile'] = 'call me'
        del form['program']
        response = client.post('/api/applications', json=form, headers=student_headers)
        assert response.status_code == 422
        errors = response.get_json()['data']
        assert set(errors) == {'passing_year', 'mobile', 'program'}

    def test_staff_cannot_submit(self, client, office_headers, form):
        response = client.post('/api/applications', json=form, headers=office_headers(Office.FACULTY))
        assert response.status_code == 403

    def test_missing_token(self, client, form):
        response = client.post('/api/applications', json=form)
        assert response.status_code == 401
        assert response.get_json()['error'] == 'authentication_error'

    def test_garbage_token(self, client, form):
        response = client.post('/api/applications', json=form, headers={'Authorization': 'Bearer nope'})
        assert response.status_code == 401


class TestDecisions:

    def test_office_approves_in_turn(self, client, student_headers, office_headers, form):
        application = submit(client, student_headers, form)
        response = decide(client, office_headers(Office.FACULTY), application['id'], Office.FACULTY, 'approved')
        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['overall_status'] == 'in_progress'
        assert data['current_pending_office'] == 'library'
        assert data['clearance']['faculty']['decided_by'] == 'Faculty Officer'

    def test_decision_is_case_insensitive(self, client, student_headers, office_headers, form):
        application = submit(client, student_headers, form)
        response = decide(client, office_headers(Office.FACULTY), application['id'], Office.FACULTY, 'APPROVED')
        assert response.status_code == 200

    def test_out_of_sequence(self, client, student_headers, office_headers, form):
        application = submit(client, student_headers, form)
        response = decide(client, office_headers(Office.LIBRARY), application['id'], Office.LIBRARY, 'approved')
        assert response.status_code == 409
        body = response.get_json()
        assert body['error'] == 'out_of_sequence'
        assert body['data'] == {'waiting_for': ['faculty']}

    def test_already_decided(self, client, student_headers, office_headers, form):
        application = submit(client, student_headers, form)
        headers = office_headers(Office.FACULTY)
        decide(client, headers, application['id'], Office.FACULTY, 'approved')
        response = decide(client, headers, application['id'], Office.FACULTY, 'approved')
        assert response.status_code == 409
        assert response.get_json()['error'] == 'already_decided'

    def test_rejection_without_message(self, client, student_headers, office_headers, form):
        application = submit(client, student_headers, form)
        response = decide(client, office_headers(Office.FACULTY), application['id'], Office.FACULTY, 'rejected', '')
        assert response.status_code == 422

    def test_unknown_decision_value(self, client, student_headers, office_headers, form):
        application = submit(client, student_headers, form)
        response = decide(client, office_headers(Office.FACULTY), application['id'], Office.FACULTY, 'maybe')
        assert response.status_code == 422

    def test_pending_is_not_a_decision(self, client, student_headers, office_headers, form):
        application = submit(client, student_headers, form)
        response = decide(client, office_headers(Office.FACULTY), application['id'], Office.FACULTY, 'pending')
        assert response.status_code == 422

    def test_unknown_office(self, client, student_headers, office_headers, form):
        application = submit(client, student_headers, form)
        response = client.put(f"/api/applications/{application['id']}/clearance/cafeteria",
                              json={'decision': 'approved'}, headers=office_headers(Office.FACULTY))
        assert response.status_code == 422

    def test_cross_office_decision_is_forbidden(self, client, student_headers, office_headers, form):
        application = submit(client, student_headers, form)
        response = decide(client, office_headers(Office.LIBRARY), application['id'], Office.FACULTY, 'approved')
        assert response.status_code == 403
        assert response.get_json()['error'] == 'authorization_error'

    def test_student_cannot_decide(self, client, student_headers, form):
        application = submit(client, student_headers, form)
        response = decide(client, student_headers, application['id'], Office.FACULTY, 'approved')
        assert response.status_code == 403

    def test_stale_expected_version(self, client, student_headers, office_headers, form):
        application = submit(client, student_headers, form)
        decide(client, office_headers(Office.FACULTY), application['id'], Office.FACULTY, 'approved')
        response = decide(client, office_headers(Office.LIBRARY), application['id'], Office.LIBRARY,
                          'approved', expected_version=application['version'])
        assert response.status_code == 409
        assert response.get_json()['error'] == 'conflict'

    def test_unknown_application(self, client, office_headers, accounts):
        response = decide(client, office_headers(Office.FACULTY), 'missing', Office.FACULTY, 'approved')
        assert response.status_code == 404

    def test_full_approval(self, client, student_headers, office_headers, form):
        application = submit(client, student_headers, form)
        for office in STANDARD_CHAIN:
            response = decide(client, office_headers(office), application['id'], office, 'approved')
            assert response.status_code == 200
        data = response.get_json()['data']
        assert data['overall_status'] == 'approved'
        assert data['current_pending_office'] is None


class TestReadAndResubmit:

    def test_owner_reads_status(self, client, student_headers, form):
        application = submit(client, student_headers, form)
        response = client.get(f"/api/applications/{application['id']}", headers=student_headers)
        assert response.status_code == 200
        assert response.get_json()['data']['id'] == application['id']

    def test_other_student_is_forbidden(self, client, student_headers, other_student_headers, form):
        application = submit(client, student_headers, form)
        response = client.get(f"/api/applications/{application['id']}", headers=other_student_headers)
        assert response.status_code == 403

    def test_staff_reads_any_application(self, client, student_headers, office_headers, form):
        application = submit(client, student_headers, form)
        response = client.get(f"/api/applications/{application['id']}", headers=office_headers(Office.REGISTRAR))
        assert response.status_code == 200

    def test_missing_application(self, client, student_headers):
        response = client.get('/api/applications/missing', headers=student_headers)
        assert response.status_code == 404
        assert response.get_json()['error'] == 'not_found'

    def test_resubmit_after_rejection(self, client, student_headers, office_headers, form):
        application = submit(client, student_headers, form)
        decide(client, office_headers(Office.FACULTY), application['id'], Office.FACULTY, 'rejected',
               'missing transcript')
        form['remarks'] = 'transcript attached'
        response = client.post(f"/api/applications/{application['id']}/resubmit", json=form,
                               headers=student_headers)
        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['overall_status'] == 'pending'
        assert data['submission_cycle'] == 2
        assert data['payload']['remarks'] == 'transcript attached'
        assert all(record['decision'] == 'pending' for record in data['clearance'].values())

    def test_resubmit_while_pending(self, client, student_headers, form):
        application = submit(client, student_headers, form)
        response = client.post(f"/api/applications/{application['id']}/resubmit", json=form,
                               headers=student_headers)
        assert response.status_code == 409
        assert response.get_json()['error'] == 'invalid_state'

    def test_resubmit_while_pending_with_invalid_form(self, client, student_headers, form):
        application = submit(client, student_headers, form)
        response = client.post(f"/api/applications/{application['id']}/resubmit", json={'mobile': 'x'},
                               headers=student_headers)
        assert response.status_code == 409
        assert response.get_json()['error'] == 'invalid_state'

    def test_resubmit_someone_elses_application(self, client, student_headers, other_student_headers,
                                                office_headers, form):
        application = submit(client, student_headers, form)
        decide(client, office_headers(Office.FACULTY), application['id'], Office.FACULTY, 'rejected', 'no')
        response = client.post(f"/api/applications/{application['id']}/resubmit", json=form,
                               headers=other_student_headers)
        assert response.status_code == 403


class TestListing:

    def test_student_lists_own(self, client, student_headers, other_student_headers, form):
        submit(client, student_headers, form)
        submit(client, other_student_headers, form)
        response = client.get('/api/applications', headers=student_headers)
        data = response.get_json()['data']
        assert [application['student_id'] for application in data] == ['S1']

    def test_office_queue(self, client, student_headers, other_student_headers, office_headers, form):
        first = submit(client, student_headers, form)
        second = submit(client, other_student_headers, form)
        decide(client, office_headers(Office.FACULTY), first['id'], Office.FACULTY, 'approved')

        response = client.get('/api/applications?status=actionable', headers=office_headers(Office.LIBRARY))
        assert [application['id'] for application in response.get_json()['data']] == [first['id']]

        response = client.get('/api/applications?status=actionable', headers=office_headers(Office.FACULTY))
        assert [application['id'] for application in response.get_json()['data']] == [second['id']]

    def test_bad_filter(self, client, office_headers, accounts):
        response = client.get('/api/applications?status=soon', headers=office_headers(Office.FACULTY))
        assert response.status_code == 422

    def test_admin_lists_by_office(self, client, student_headers, admin_headers, form):
        application = submit(client, student_headers, form)
        response = client.get('/api/applications?office=faculty&status=pending', headers=admin_headers)
        assert [a['id'] for a in response.get_json()['data']] == [application['id']]
        response = client.get('/api/applications', headers=admin_headers)
        assert len(response.get_json()['data']) == 1


class TestPurge:

    def test_admin_purges(self, client, student_headers, admin_headers, form):
        application = submit(client, student_headers, form)
        response = client.delete(f"/api/applications/{application['id']}", headers=admin_headers)
        assert response.status_code == 204
        response = client.get(f"/api/applications/{application['id']}", headers=admin_headers)
        assert response.status_code == 404

    @pytest.mark.parametrize('who', ['student', 'staff'])
    def test_non_admin_cannot_purge(self, client, student_headers, office_headers, form, who):
        application = submit(client, student_headers, form)
        headers = student_headers if who == 'student' else office_headers(Office.REGISTRAR)
        response = client.delete(f"/api/applications/{application['id']}", headers=headers)
        assert response.status_code == 403

"""
Data model tests: clearance record invariants and application construction.
"""

import pytest

from clearflow.models import (
    Application, ClearanceDecision, ClearanceRecord, Office, OverallStatus, PaymentStatus,
    STANDARD_CHAIN, EXTENDED_CHAIN, resolve_chain
)
from clearflow.utils import ValidationError, utcnow


class TestClearanceRecord:
    """Invariants enforced at construction and mutation time."""

    def test_defaults_to_pending(self, app):
        record = ClearanceRecord(office=Office.FACULTY, position=0)
        assert record.decision == ClearanceDecision.PENDING
        assert record.decided_at is None
        assert record.is_pending

    def test_rejected_without_message_is_invalid(self, app):
        with pytest.raises(ValidationError):
            ClearanceRecord(office=Office.FACULTY, position=0,
                            decision=ClearanceDecision.REJECTED, message='  ', decided_at=utcnow())

    def test_pending_with_decision_time_is_invalid(self, app):
        with pytest.raises(ValidationError):
            ClearanceRecord(office=Office.FACULTY, position=0, decided_at=utcnow())

    def test_decided_without_time_is_invalid(self, app):
        with pytest.raises(ValidationError):
            ClearanceRecord(office=Office.FACULTY, position=0, decision=ClearanceDecision.APPROVED)

    def test_apply_decision_sets_fields(self, app):
        record = ClearanceRecord(office=Office.LIBRARY, position=1)
        now = utcnow()
        record.apply_decision(ClearanceDecision.REJECTED, '  unpaid fine  ', 'Library Officer', now)
        assert record.decision == ClearanceDecision.REJECTED
        assert record.message == 'unpaid fine'
        assert record.decided_by == 'Library Officer'
        assert record.decided_at == now

    def test_apply_decision_validates_before_mutating(self, app):
        record = ClearanceRecord(office=Office.LIBRARY, position=1)
        with pytest.raises(ValidationError):
            record.apply_decision(ClearanceDecision.REJECTED, '', None, utcnow())
        assert record.is_pending
        assert record.decided_at is None

    def test_apply_pending_is_rejected(self, app):
        record = ClearanceRecord(office=Office.LIBRARY, position=1)
        with pytest.raises(ValidationError):
            record.apply_decision(ClearanceDecision.PENDING, None, None, utcnow())

    def test_reset_clears_decision(self, app):
        record = ClearanceRecord(office=Office.ACCOUNTS, position=2)
        record.apply_decision(ClearanceDecision.APPROVED, 'ok', 'Accounts Officer', utcnow())
        record.reset()
        assert record.is_pending
        assert record.message is None
        assert record.decided_by is None
        assert record.decided_at is None


class TestApplicationOpen:
    """Fresh applications carry one pending record per office."""

    def test_open_builds_records_in_chain_order(self, app):
        application = Application.open('S1', {'program': 'CSE'}, STANDARD_CHAIN)
        assert application.chain == STANDARD_CHAIN
        assert [r.position for r in application.clearance_records] == list(range(len(STANDARD_CHAIN)))
        assert all(r.is_pending for r in application.clearance_records)
        assert application.overall_status == OverallStatus.PENDING
        assert application.payment_status == PaymentStatus.UNPAID
        assert application.active_student_id == 'S1'
        assert application.submission_cycle == 1

    def test_open_copies_payload(self, app):
        payload = {'program': 'CSE'}
        application = Application.open('S1', payload, STANDARD_CHAIN)
        payload['program'] = 'EEE'
        assert application.payload == {'program': 'CSE'}

    def test_open_rejects_empty_chain(self, app):
        with pytest.raises(ValidationError):
            Application.open('S1', {}, ())

    def test_open_rejects_duplicate_office(self, app):
        with pytest.raises(ValidationError):
            Application.open('S1', {}, (Office.FACULTY, Office.FACULTY))

    def test_record_for_unknown_office(self, app):
        application = Application.open('S1', {}, STANDARD_CHAIN)
        assert application.record_for(Office.HOD) is None
        assert application.record_for(Office.LIBRARY).position == 1

    def test_student_id_is_immutable(self, app):
        application = Application.open('S1', {}, STANDARD_CHAIN)
        with pytest.raises(ValidationError):
            application.student_id = 'S2'

    def test_id_is_immutable(self, app):
        application = Application.open('S1', {}, STANDARD_CHAIN)
        with pytest.raises(ValidationError):
            application.id = 'another-id'


class TestChains:

    def test_resolve_known_chains(self):
        assert resolve_chain('standard') == STANDARD_CHAIN
        assert resolve_chain('extended') == EXTENDED_CHAIN

    def test_resolve_unknown_chain(self):
        with pytest.raises(ValueError):
            resolve_chain('alphabetical')

    def test_office_labels(self):
        assert Office.EXAM_CONTROLLER.label == 'Exam Controller'
        assert Office.HOD.label == 'Head of Department'

"""
Tests for the Ledger Service.

Covers:
- Awarding and deducting points (explicit and category-derived)
- House total updates on the write path
- Batch awards
- Validation and role checks
- History reads
"""
import pytest
from unittest.mock import patch
from sqlalchemy.exc import OperationalError

from housepoints.extensions import db
from housepoints.models import User, House, PointTransaction
from housepoints.services import LedgerService, BalanceService, ReconciliationService
from housepoints.services.ledger_service import validate_signed_points, validate_multiplier
from housepoints.utils.exceptions import (
    ValidationError,
    NotFoundError,
    StudentNotFoundError,
    InvalidRoleError,
)


class TestRecordPoints:
    """Tests for LedgerService.record_points."""

    def test_award_updates_balance_and_house(self, app, sample_student, sample_teacher, sample_category, sample_house):
        """Awarding +5 gives the student 5 and the house 5."""
        with app.app_context():
            service = LedgerService()
            txn = service.record_points(sample_student.id, sample_teacher.id, sample_category.id, 5)

            assert txn.id is not None
            assert txn.points == 5
            assert BalanceService().get_balance(sample_student.id).balance == 5
            assert db.session.get(House, sample_house.id).points == 5

    def test_deduction_after_award(self, app, sample_student, sample_teacher, sample_category, negative_category, sample_house):
        """+5 then -2 leaves a balance of 3 and a house total of 3."""
        with app.app_context():
            service = LedgerService()
            service.record_points(sample_student.id, sample_teacher.id, sample_category.id, 5)
            service.record_points(sample_student.id, sample_teacher.id, negative_category.id, -2, 'Late twice')

            assert BalanceService().get_balance(sample_student.id).balance == 3
            assert db.session.get(House, sample_house.id).points == 3

    def test_deduction_can_go_negative(self, app, sample_student, sample_teacher, negative_category):
        """A deduction with no prior awards is recorded and the balance goes negative."""
        with app.app_context():
            LedgerService().record_points(sample_student.id, sample_teacher.id, negative_category.id, -4)

            balance = BalanceService().get_balance(sample_student.id)
            assert balance.earned == -4
            assert balance.balance == -4

    def test_zero_points_rejected(self, app, sample_student, sample_teacher, sample_category):
        """Zero points is not a valid award."""
        with app.app_context():
            with pytest.raises(ValidationError):
                LedgerService().record_points(sample_student.id, sample_teacher.id, sample_category.id, 0)
            assert PointTransaction.query.count() == 0

    def test_student_without_house_still_recorded(self, app, sample_teacher, sample_category):
        """A student with no house or class still gets a ledger entry."""
        with app.app_context():
            student = User(
                username='floater', first_name='Flo', last_name='Ater',
                email='floater@school.test', role='student', password_hash='x'
            )
            db.session.add(student)
            db.session.commit()

            LedgerService().record_points(student.id, sample_teacher.id, sample_category.id, 2)
            assert BalanceService().get_balance(student.id).balance == 2

    def test_unknown_student(self, app, sample_teacher, sample_category):
        """Awarding to a missing student raises StudentNotFoundError."""
        with app.app_context():
            with pytest.raises(StudentNotFoundError):
                LedgerService().record_points(99999, sample_teacher.id, sample_category.id, 5)

    def test_non_student_target(self, app, sample_teacher, sample_admin, sample_category):
        """Points can only be awarded to students."""
        with app.app_context():
            with pytest.raises(InvalidRoleError):
                LedgerService().record_points(sample_admin.id, sample_teacher.id, sample_category.id, 5)

    def test_unknown_category(self, app, sample_student, sample_teacher):
        """A missing category raises NotFoundError."""
        with app.app_context():
            with pytest.raises(NotFoundError):
                LedgerService().record_points(sample_student.id, sample_teacher.id, 99999, 5)

    def test_house_update_failure_keeps_ledger_row(self, app, sample_student, sample_teacher, sample_category, sample_house):
        """A failed house UPDATE is logged; the ledger row stands and reconciliation repairs the total."""
        with app.app_context():
            locked = OperationalError('UPDATE houses', {}, Exception('database is locked'))
            with patch.object(db.session, 'execute', side_effect=locked) as execute:
                txn = LedgerService().record_points(sample_student.id, sample_teacher.id, sample_category.id, 5)

            execute.assert_called_once()
            assert txn.id is not None
            assert PointTransaction.query.count() == 1
            assert db.session.get(House, sample_house.id).points == 0

            result = ReconciliationService().reconcile_house(sample_house.id)
            assert result.corrected is True
            assert db.session.get(House, sample_house.id).points == 5

    def test_direct_house_wins_over_class(self, app, sample_student, sample_teacher, sample_category, sample_house, other_house):
        """A directly assigned house receives the points, not the class's house."""
        with app.app_context():
            student = db.session.get(User, sample_student.id)
            student.house_id = other_house.id
            db.session.commit()

            LedgerService().record_points(student.id, sample_teacher.id, sample_category.id, 5)

            assert db.session.get(House, other_house.id).points == 5
            assert db.session.get(House, sample_house.id).points == 0


class TestAwardCategory:
    """Tests for category-derived awards."""

    def test_positive_category(self, app, sample_student, sample_teacher, sample_category):
        """Academic Excellence (+5) awards 5."""
        with app.app_context():
            txn = LedgerService().award_category(sample_student.id, sample_teacher.id, sample_category.id)
            assert txn.points == 5

    def test_negative_category_with_multiplier(self, app, sample_student, sample_teacher, negative_category):
        """Tardiness (-1) x2 deducts 2."""
        with app.app_context():
            txn = LedgerService().award_category(
                sample_student.id, sample_teacher.id, negative_category.id, multiplier=2
            )
            assert txn.points == -2

    def test_multiplier_out_of_range(self, app, sample_student, sample_teacher, sample_category):
        """Multipliers above the configured maximum are rejected."""
        with app.app_context():
            with pytest.raises(ValidationError):
                LedgerService().award_category(
                    sample_student.id, sample_teacher.id, sample_category.id, multiplier=11
                )


class TestAwardBatch:
    """Tests for LedgerService.award_batch."""

    def test_batch_awards_every_student(self, app, sample_student, second_student, sample_teacher, sample_category, sample_house):
        """Each student gets the category value and the house gets the sum."""
        with app.app_context():
            txns = LedgerService().award_batch(
                [sample_student.id, second_student.id], sample_teacher.id, sample_category.id
            )

            assert len(txns) == 2
            assert all(t.note == 'Academic Excellence - Batch award' for t in txns)
            assert db.session.get(House, sample_house.id).points == 10

    def test_batch_with_unknown_student_writes_nothing(self, app, sample_student, sample_teacher, sample_category):
        """A bad id anywhere in the batch fails the whole batch up front."""
        with app.app_context():
            with pytest.raises(StudentNotFoundError):
                LedgerService().award_batch([sample_student.id, 99999], sample_teacher.id, sample_category.id)
            assert PointTransaction.query.count() == 0

    def test_empty_batch(self, app, sample_teacher, sample_category):
        """An empty batch is a validation error."""
        with app.app_context():
            with pytest.raises(ValidationError):
                LedgerService().award_batch([], sample_teacher.id, sample_category.id)


class TestHistory:
    """Tests for history reads."""

    def test_student_history_newest_first(self, app, sample_student, sample_teacher, sample_category, negative_category):
        """History lists the student's entries newest first."""
        with app.app_context():
            service = LedgerService()
            first = service.record_points(sample_student.id, sample_teacher.id, sample_category.id, 5)
            second = service.record_points(sample_student.id, sample_teacher.id, negative_category.id, -1)

            history = service.get_student_history(sample_student.id)
            assert [t.id for t in history] == [second.id, first.id]

    def test_author_history(self, app, sample_student, sample_teacher, sample_admin, sample_category):
        """Author history only includes that author's entries."""
        with app.app_context():
            service = LedgerService()
            service.record_points(sample_student.id, sample_teacher.id, sample_category.id, 5)
            service.record_points(sample_student.id, sample_admin.id, sample_category.id, 3)

            history = service.get_author_history(sample_teacher.id)
            assert len(history) == 1
            assert history[0].points == 5

    def test_recent_respects_limit(self, app, sample_student, sample_teacher, sample_category):
        """get_recent returns at most `limit` entries."""
        with app.app_context():
            service = LedgerService()
            for _ in range(4):
                service.record_points(sample_student.id, sample_teacher.id, sample_category.id, 1)

            assert len(service.get_recent(limit=3)) == 3


class TestValidators:
    """Tests for the point and multiplier validators."""

    @pytest.mark.parametrize('value', [0, True, 1.5, '5', None])
    def test_invalid_points(self, value):
        """Zero, bools, floats, strings and None are not valid points."""
        with pytest.raises(ValidationError):
            validate_signed_points(value)

    def test_valid_points(self):
        assert validate_signed_points(-3) == -3

    @pytest.mark.parametrize('value', [0, -1, 11, False])
    def test_invalid_multiplier(self, value):
        """Multipliers must be within 1..10 outside an app context."""
        with pytest.raises(ValidationError):
            validate_multiplier(value)

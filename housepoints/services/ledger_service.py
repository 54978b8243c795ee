"""
Points ledger write path and history reads.

ARCHITECTURE:
- PointTransaction rows are the source of truth for every student's points
- House.points is a denormalized running total for fast leaderboards
- A write first commits the ledger row, then applies an atomic
  ``points = points + delta`` to the student's house in its own transaction
- If the house update fails the ledger row stays; reconciliation repairs
  the cached total later (see reconciliation_service)

The house is resolved when the points are recorded. If the student moves
later, reconciliation (run by every standings read) recomputes totals from
current membership and carries their earlier points to the new house.
"""
import logging
from typing import List

from flask import current_app, has_app_context
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import User, UserRole, House, BehaviorCategory, PointTransaction
from ..utils.exceptions import (
    NotFoundError,
    StudentNotFoundError,
    InvalidRoleError,
    ValidationError,
)
from .transactions import transaction_scope
from .notification_service import publish_event, EventTypes

logger = logging.getLogger(__name__)

DEFAULT_MAX_MULTIPLIER = 10


def validate_signed_points(value) -> int:
    """Points must be a nonzero integer (bools are rejected)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError('Points must be an integer', field='points')
    if value == 0:
        raise ValidationError('Points must be nonzero', field='points')
    return value


def validate_multiplier(value) -> int:
    """Multiplier must be an integer between 1 and the configured maximum."""
    max_multiplier = DEFAULT_MAX_MULTIPLIER
    if has_app_context():
        max_multiplier = current_app.config.get('MAX_POINTS_MULTIPLIER', DEFAULT_MAX_MULTIPLIER)

    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError('Multiplier must be an integer', field='multiplier')
    if value < 1 or value > max_multiplier:
        raise ValidationError(
            f'Multiplier must be between 1 and {max_multiplier}', field='multiplier'
        )
    return value


class LedgerService:
    """
    Records awards and deductions.

    Usage:
        service = LedgerService()

        # Award the category's canonical value, doubled
        txn = service.award_category(student_id, teacher_id, category_id, multiplier=2)

        # Record an explicit signed amount
        txn = service.record_points(student_id, teacher_id, category_id, -2, 'Late again')
    """

    def __init__(self, session=None):
        self.session = session or db.session

    # ==================== Write path ====================

    def record_points(
        self,
        student_id: int,
        author_id: int,
        category_id: int,
        signed_points: int,
        note: str = None
    ) -> PointTransaction:
        """
        Append a ledger entry and add it to the student's house total.

        Args:
            student_id: Student receiving the points
            author_id: Staff member awarding/deducting
            category_id: Behavior category
            signed_points: Nonzero integer, negative for deductions
            note: Optional free-text note

        Returns:
            The committed PointTransaction

        Raises:
            ValidationError: points not a nonzero integer
            NotFoundError: student, author or category missing
            InvalidRoleError: target user is not a student
        """
        validate_signed_points(signed_points)

        student = self._get_student(student_id)
        category = self.session.get(BehaviorCategory, category_id)
        if not category:
            raise NotFoundError('Behavior category', category_id)
        if not self.session.get(User, author_id):
            raise NotFoundError('Author', author_id)

        house_id = student.effective_house_id

        with transaction_scope(self.session):
            transaction = PointTransaction(
                student_id=student.id,
                author_id=author_id,
                category_id=category.id,
                points=signed_points,
                note=note,
            )
            self.session.add(transaction)

        logger.info(
            f"Points recorded: student {student_id} {signed_points:+d} pts "
            f"({category.name}) by user {author_id}"
        )

        if house_id:
            self._apply_to_house(house_id, signed_points)

        publish_event(EventTypes.POINTS_UPDATED, {
            'student_id': student_id,
            'points': signed_points,
            'house_id': house_id,
        })

        return transaction

    def award_category(
        self,
        student_id: int,
        author_id: int,
        category_id: int,
        multiplier: int = 1,
        note: str = None
    ) -> PointTransaction:
        """
        Award a category's canonical value times a multiplier.

        Positive categories add points, negative ones deduct them.
        """
        validate_multiplier(multiplier)
        category = self.session.get(BehaviorCategory, category_id)
        if not category:
            raise NotFoundError('Behavior category', category_id)

        return self.record_points(
            student_id=student_id,
            author_id=author_id,
            category_id=category_id,
            signed_points=category.signed_value * multiplier,
            note=note,
        )

    def award_batch(
        self,
        student_ids: List[int],
        author_id: int,
        category_id: int,
        multiplier: int = 1,
        note: str = None
    ) -> List[PointTransaction]:
        """
        Award the same category to several students.

        Every student is validated before anything is written, so a bad id
        in the list does not leave a half-applied batch.
        """
        if not student_ids:
            raise ValidationError('At least one student is required', field='student_ids')

        validate_multiplier(multiplier)
        category = self.session.get(BehaviorCategory, category_id)
        if not category:
            raise NotFoundError('Behavior category', category_id)

        unique_ids = list(dict.fromkeys(student_ids))
        for student_id in unique_ids:
            self._get_student(student_id)

        if note is None:
            note = f'{category.name} - Batch award'

        transactions = [
            self.record_points(student_id, author_id, category_id, category.signed_value * multiplier, note)
            for student_id in unique_ids
        ]

        logger.info(f"Batch award: {len(transactions)} students, category {category.name}, x{multiplier}")
        return transactions

    # ==================== Reads ====================

    def get_student_history(self, student_id: int) -> List[PointTransaction]:
        """All ledger entries for a student, newest first."""
        self._get_student(student_id)
        return (
            PointTransaction.query
            .filter_by(student_id=student_id)
            .order_by(PointTransaction.created_at.desc(), PointTransaction.id.desc())
            .all()
        )

    def get_author_history(self, author_id: int) -> List[PointTransaction]:
        """All ledger entries written by one staff member, newest first."""
        return (
            PointTransaction.query
            .filter_by(author_id=author_id)
            .order_by(PointTransaction.created_at.desc(), PointTransaction.id.desc())
            .all()
        )

    def get_recent(self, limit: int = 10) -> List[PointTransaction]:
        """Most recent ledger entries across the school."""
        return (
            PointTransaction.query
            .order_by(PointTransaction.created_at.desc(), PointTransaction.id.desc())
            .limit(limit)
            .all()
        )

    # ==================== Helpers ====================

    def _get_student(self, student_id: int) -> User:
        student = self.session.get(User, student_id)
        if not student:
            raise StudentNotFoundError(student_id)
        if student.role != UserRole.STUDENT.value:
            raise InvalidRoleError(student_id, UserRole.STUDENT.value, student.role)
        return student

    def _apply_to_house(self, house_id: int, delta: int) -> bool:
        """
        Atomically add delta to a house's cached total.

        Returns:
            False if the update failed; the ledger row is kept and the
            house is left for reconciliation.
        """
        try:
            with transaction_scope(self.session):
                self.session.execute(
                    update(House)
                    .where(House.id == house_id)
                    .values(points=House.points + delta)
                )
        except SQLAlchemyError:
            logger.exception(
                f"House {house_id} total not updated by {delta:+d}; "
                f"left for reconciliation"
            )
            return False

        publish_event(EventTypes.HOUSE_UPDATED, {'house_id': house_id})
        return True

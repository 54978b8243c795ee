"""
Administrative bulk ledger mutations: whole-ledger reset and per-student purge.

Both run in a single transaction and leave the house caches consistent
with what remains in the ledger.
"""
import logging
from typing import Any, Dict

from sqlalchemy import case, delete, update

from ..extensions import db
from ..models import User, UserRole, House, PointTransaction
from ..utils.exceptions import StudentNotFoundError, InvalidRoleError
from .transactions import transaction_scope
from .notification_service import publish_event, EventTypes

logger = logging.getLogger(__name__)


class BulkLedgerService:
    """Reset and purge operations (admin only; enforced at the request boundary)."""

    def __init__(self, session=None):
        self.session = session or db.session

    def reset_all_points(self) -> Dict[str, int]:
        """
        Delete every ledger entry and zero every house total.

        Returns:
            Counts of deleted transactions and reset houses
        """
        with transaction_scope(self.session):
            deleted = self.session.execute(
                delete(PointTransaction).execution_options(synchronize_session=False)
            ).rowcount
            houses = self.session.execute(
                update(House).values(points=0).execution_options(synchronize_session=False)
            ).rowcount

        logger.warning(f"Points ledger reset: {deleted} transactions deleted, {houses} houses zeroed")
        publish_event(EventTypes.POINTS_UPDATED, {'reset': True})
        publish_event(EventTypes.HOUSE_UPDATED, {'reset': True})

        return {'transactions_deleted': deleted, 'houses_reset': houses}

    def purge_student_points(self, student_id: int) -> Dict[str, Any]:
        """
        Remove all of a student's ledger entries and take their contribution
        off their house total, never going below zero.

        Raises:
            StudentNotFoundError, InvalidRoleError
        """
        with transaction_scope(self.session):
            student = self.session.get(User, student_id)
            if not student:
                raise StudentNotFoundError(student_id)
            if student.role != UserRole.STUDENT.value:
                raise InvalidRoleError(student_id, UserRole.STUDENT.value, student.role)

            # Contribution is exactly what this DELETE removed
            removed = self.session.execute(
                delete(PointTransaction)
                .where(PointTransaction.student_id == student_id)
                .returning(PointTransaction.points)
                .execution_options(synchronize_session=False)
            ).scalars().all()
            deleted = len(removed)
            contribution = sum(removed)

            house_id = student.effective_house_id
            if house_id and contribution:
                remaining = House.points - contribution
                self.session.execute(
                    update(House)
                    .where(House.id == house_id)
                    .values(points=case((remaining < 0, 0), else_=remaining))
                    .execution_options(synchronize_session=False)
                )

        logger.info(
            f"Purged points for student {student_id}: {deleted} transactions, "
            f"{contribution} pts removed from house {house_id}"
        )
        publish_event(EventTypes.POINTS_UPDATED, {'student_id': student_id})
        if house_id:
            publish_event(EventTypes.HOUSE_UPDATED, {'house_id': house_id})

        return {
            'student_id': student_id,
            'house_id': house_id,
            'transactions_deleted': deleted,
            'points_removed': contribution,
        }

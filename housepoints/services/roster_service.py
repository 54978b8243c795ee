"""
Roster changes that touch house membership.

Changing a student's house or class never rewrites ledger history. Bulk
reassignments and student deletions are followed by reconciliation of every
house they touched, so the cached totals match the ledger under the new
membership.
"""
import logging
from typing import Any, Dict, Iterable, List, Set

from sqlalchemy import delete

from ..extensions import db
from ..models import User, UserRole, House, SchoolClass, PointTransaction, RewardRedemption
from ..utils.exceptions import (
    NotFoundError,
    StudentNotFoundError,
    InvalidRoleError,
    ValidationError,
)
from .transactions import transaction_scope
from .reconciliation_service import ReconciliationService, ReconcileResult
from .notification_service import publish_event, EventTypes

logger = logging.getLogger(__name__)

ROSTER_FIELDS = ('grade_level', 'section', 'house_id', 'class_id')


class RosterService:
    """Student roster assignment and removal."""

    def __init__(self, session=None):
        self.session = session or db.session
        self.reconciliation = ReconciliationService(self.session)

    def list_students(self, house_id: int = None, class_id: int = None, parent_id: int = None) -> List[User]:
        query = User.query.filter_by(role=UserRole.STUDENT.value)
        if house_id is not None:
            query = query.filter_by(house_id=house_id)
        if class_id is not None:
            query = query.filter_by(class_id=class_id)
        if parent_id is not None:
            query = query.filter_by(parent_id=parent_id)
        return query.order_by(User.last_name, User.first_name).all()

    def update_roster(self, student_id: int, changes: Dict[str, Any]) -> User:
        """
        Update a single student's grade, section, house or class.

        House totals are not adjusted here. Earlier points move to the new
        house at the next reconciliation, which every standings read runs.
        """
        unknown = set(changes) - set(ROSTER_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown roster fields: {sorted(unknown)}")

        with transaction_scope(self.session):
            student = self._get_student(student_id)
            if changes.get('house_id') is not None:
                self._get_house(changes['house_id'])
            if changes.get('class_id') is not None:
                self._get_class(changes['class_id'])
            for field, value in changes.items():
                setattr(student, field, value)

        logger.info(f"Roster updated for student {student_id}: {changes}")
        publish_event(EventTypes.CLASS_UPDATED, {'student_id': student_id})
        return student

    def assign_students_to_house(self, house_id: int, student_ids: Iterable[int]) -> List[ReconcileResult]:
        """Move students directly into a house, then reconcile affected houses."""
        student_ids = self._require_ids(student_ids)
        affected: Set[int] = {house_id}

        with transaction_scope(self.session):
            self._get_house(house_id)
            for student_id in student_ids:
                student = self._get_student(student_id)
                if student.effective_house_id:
                    affected.add(student.effective_house_id)
                student.house_id = house_id

        logger.info(f"Assigned {len(student_ids)} students to house {house_id}")
        return self._reconcile(affected)

    def assign_students_to_class(self, class_id: int, student_ids: Iterable[int]) -> List[ReconcileResult]:
        """Move students into a class, then reconcile affected houses."""
        student_ids = self._require_ids(student_ids)

        with transaction_scope(self.session):
            school_class = self._get_class(class_id)
            affected: Set[int] = {school_class.house_id} if school_class.house_id else set()
            for student_id in student_ids:
                student = self._get_student(student_id)
                if student.effective_house_id:
                    affected.add(student.effective_house_id)
                student.class_id = class_id

        logger.info(f"Assigned {len(student_ids)} students to class {class_id}")
        publish_event(EventTypes.CLASS_UPDATED, {'class_id': class_id})
        return self._reconcile(affected)

    def delete_students(self, student_ids: Iterable[int]) -> Dict[str, Any]:
        """
        Delete students with their ledger entries and redemptions, then
        reconcile the houses they belonged to.
        """
        student_ids = self._require_ids(student_ids)
        affected: Set[int] = set()

        with transaction_scope(self.session):
            students = [self._get_student(student_id) for student_id in student_ids]
            for student in students:
                if student.effective_house_id:
                    affected.add(student.effective_house_id)

            self.session.execute(
                delete(PointTransaction)
                .where(PointTransaction.student_id.in_(student_ids))
                .execution_options(synchronize_session=False)
            )
            self.session.execute(
                delete(RewardRedemption)
                .where(RewardRedemption.student_id.in_(student_ids))
                .execution_options(synchronize_session=False)
            )
            for student in students:
                self.session.delete(student)

        logger.info(f"Deleted {len(student_ids)} students")
        results = self._reconcile(affected)
        publish_event(EventTypes.POINTS_UPDATED, {'deleted_student_ids': student_ids})
        return {'deleted': len(student_ids), 'reconciled': [r.to_dict() for r in results]}

    # ==================== Helpers ====================

    def _reconcile(self, house_ids: Set[int]) -> List[ReconcileResult]:
        return [self.reconciliation.reconcile_house(house_id) for house_id in sorted(house_ids)]

    @staticmethod
    def _require_ids(student_ids: Iterable[int]) -> List[int]:
        ids = list(dict.fromkeys(student_ids or []))
        if not ids:
            raise ValidationError('At least one student is required', field='student_ids')
        return ids

    def _get_student(self, student_id: int) -> User:
        student = self.session.get(User, student_id)
        if not student:
            raise StudentNotFoundError(student_id)
        if student.role != UserRole.STUDENT.value:
            raise InvalidRoleError(student_id, UserRole.STUDENT.value, student.role)
        return student

    def _get_house(self, house_id: int) -> House:
        house = self.session.get(House, house_id)
        if not house:
            raise NotFoundError('House', house_id)
        return house

    def _get_class(self, class_id: int) -> SchoolClass:
        school_class = self.session.get(SchoolClass, class_id)
        if not school_class:
            raise NotFoundError('Class', class_id)
        return school_class

"""
Reward redemption.

A redemption is all-or-nothing: the balance check, the redemption insert
and the stock decrement happen in one transaction.

- The attempt opens with a no-op UPDATE of the student row. That takes a
  row lock on PostgreSQL and the database write lock on SQLite, so two
  redemptions for the same student read their balances one after the other.
- Stock is taken with a conditional update
  (``quantity = quantity - 1 WHERE quantity > 0``); zero affected rows
  means someone else took the last unit, and the whole attempt is rolled
  back and retried once.
"""
import logging
from typing import List

from sqlalchemy import update

from ..extensions import db
from ..models import User, UserRole, STAFF_ROLES, Reward, RewardRedemption, RedemptionStatus
from ..utils.exceptions import (
    NotFoundError,
    StudentNotFoundError,
    RewardNotFoundError,
    InvalidRoleError,
    InsufficientBalanceError,
    OutOfStockError,
    ConflictRetryableError,
    InvalidStatusTransitionError,
    ValidationError,
)
from .balance_service import calculate_balance
from .transactions import transaction_scope
from .notification_service import publish_event, EventTypes

logger = logging.getLogger(__name__)

# Attempts at the check-then-act sequence before a lost race is reported
MAX_REDEEM_ATTEMPTS = 2


class RedemptionService:
    """
    Redeems rewards against student balances.

    Usage:
        service = RedemptionService()

        # Student redeeming for themself (status pending)
        redemption = service.redeem(student_id, reward_id)

        # Staff redeeming on a student's behalf (status approved)
        redemption = service.redeem(student_id, reward_id, author_id=teacher_id)
    """

    def __init__(self, session=None):
        self.session = session or db.session

    def redeem(self, student_id: int, reward_id: int, author_id: int = None) -> RewardRedemption:
        """
        Exchange points for one unit of a reward.

        Checks, in order: reward exists, student exists and is a student,
        balance covers the cost, reward is in stock.

        Args:
            student_id: Student spending the points
            reward_id: Reward being redeemed
            author_id: Staff member for delegated redemptions; None for self-service

        Returns:
            The committed RewardRedemption

        Raises:
            RewardNotFoundError, StudentNotFoundError, InvalidRoleError,
            InsufficientBalanceError, OutOfStockError
        """
        if author_id is not None:
            self._check_author(author_id)

        for attempt in range(1, MAX_REDEEM_ATTEMPTS + 1):
            try:
                redemption = self._attempt_redeem(student_id, reward_id, author_id)
                break
            except ConflictRetryableError:
                logger.info(
                    f"Redemption race on reward {reward_id} for student {student_id} "
                    f"(attempt {attempt}/{MAX_REDEEM_ATTEMPTS})"
                )
        else:
            reward = self.session.get(Reward, reward_id)
            raise OutOfStockError(reward_id, reward.name if reward else None)

        logger.info(
            f"Reward redeemed: student {student_id} spent {redemption.points_spent} pts "
            f"on reward {reward_id} ({redemption.status})"
        )
        publish_event(EventTypes.POINTS_UPDATED, {'student_id': student_id})
        publish_event(EventTypes.REWARD_UPDATED, {'reward_id': reward_id})
        return redemption

    def _attempt_redeem(self, student_id: int, reward_id: int, author_id: int = None) -> RewardRedemption:
        with transaction_scope(self.session):
            # Must be the first statement of the transaction
            self._lock_student(student_id)

            reward = self.session.get(Reward, reward_id, populate_existing=True)
            if not reward:
                raise RewardNotFoundError(reward_id)

            student = self.session.get(User, student_id, populate_existing=True)
            if not student:
                raise StudentNotFoundError(student_id)
            if student.role != UserRole.STUDENT.value:
                raise InvalidRoleError(student_id, UserRole.STUDENT.value, student.role)

            balance = calculate_balance(self.session, student_id)
            if balance.balance < reward.point_cost:
                raise InsufficientBalanceError(balance.balance, reward.point_cost)

            if reward.quantity <= 0:
                raise OutOfStockError(reward.id, reward.name)

            redemption = RewardRedemption(
                student_id=student_id,
                reward_id=reward.id,
                points_spent=reward.point_cost,
                status=(
                    RedemptionStatus.APPROVED.value if author_id is not None
                    else RedemptionStatus.PENDING.value
                ),
                redeemed_by=author_id,
            )
            self.session.add(redemption)
            self.session.flush()

            if not self._decrement_stock(reward.id):
                raise ConflictRetryableError()

        return redemption

    def _lock_student(self, student_id: int) -> None:
        """Write-lock the student row until the transaction ends."""
        self.session.execute(
            update(User)
            .where(User.id == student_id)
            .values(role=User.role)
            .execution_options(synchronize_session=False)
        )

    def _decrement_stock(self, reward_id: int) -> bool:
        """Take one unit if any is left. False when no row was updated."""
        result = self.session.execute(
            update(Reward)
            .where(Reward.id == reward_id, Reward.quantity > 0)
            .values(quantity=Reward.quantity - 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def _check_author(self, author_id: int) -> User:
        author = self.session.get(User, author_id)
        if not author:
            raise NotFoundError('Author', author_id)
        if author.role not in STAFF_ROLES:
            raise InvalidRoleError(author_id, 'staff', author.role)
        return author

    # ==================== Fulfillment ====================

    def update_status(self, redemption_id: int, status: str) -> RewardRedemption:
        """
        Move a redemption forward: pending -> approved -> delivered.

        Raises:
            ValidationError: unknown status
            NotFoundError: no such redemption
            InvalidStatusTransitionError: backwards or repeated move
        """
        valid = [s.value for s in RedemptionStatus]
        if status not in valid:
            raise ValidationError(f'status must be one of: {valid}', field='status')

        with transaction_scope(self.session):
            redemption = self.session.get(RewardRedemption, redemption_id)
            if not redemption:
                raise NotFoundError('Redemption', redemption_id)
            if not redemption.can_transition_to(status):
                raise InvalidStatusTransitionError('redemption', redemption.status, status)
            redemption.status = status

        logger.info(f"Redemption {redemption_id} marked {status}")
        publish_event(EventTypes.REWARD_UPDATED, {'redemption_id': redemption_id, 'status': status})
        return redemption

    def list_for_student(self, student_id: int) -> List[RewardRedemption]:
        """A student's redemptions, newest first."""
        if not self.session.get(User, student_id):
            raise StudentNotFoundError(student_id)
        return (
            RewardRedemption.query
            .filter_by(student_id=student_id)
            .order_by(RewardRedemption.created_at.desc(), RewardRedemption.id.desc())
            .all()
        )

"""
Student point balances.

A balance is never stored. Every call sums the ledger (earned) and the
redemptions (spent) fresh, because the balance authorizes spending.
"""
from dataclasses import dataclass, asdict

from sqlalchemy import func, select

from ..extensions import db
from ..models import User, UserRole, PointTransaction, RewardRedemption
from ..utils.exceptions import StudentNotFoundError, InvalidRoleError


@dataclass(frozen=True)
class Balance:
    student_id: int
    earned: int
    spent: int

    @property
    def balance(self) -> int:
        return self.earned - self.spent

    def to_dict(self) -> dict:
        data = asdict(self)
        data['balance'] = self.balance
        return data


def calculate_balance(session, student_id: int) -> Balance:
    """Sum both ledgers for a student. earned can be negative."""
    earned = session.execute(
        select(func.coalesce(func.sum(PointTransaction.points), 0))
        .where(PointTransaction.student_id == student_id)
    ).scalar_one()

    spent = session.execute(
        select(func.coalesce(func.sum(RewardRedemption.points_spent), 0))
        .where(RewardRedemption.student_id == student_id)
    ).scalar_one()

    return Balance(student_id=student_id, earned=int(earned), spent=int(spent))


class BalanceService:
    """Read-side balance lookups."""

    def __init__(self, session=None):
        self.session = session or db.session

    def get_balance(self, student_id: int) -> Balance:
        """
        Current balance for a student.

        A student with no history gets zeros.

        Raises:
            StudentNotFoundError: no such user
            InvalidRoleError: user is not a student
        """
        student = self.session.get(User, student_id)
        if not student:
            raise StudentNotFoundError(student_id)
        if student.role != UserRole.STUDENT.value:
            raise InvalidRoleError(student_id, UserRole.STUDENT.value, student.role)
        return calculate_balance(self.session, student_id)

"""
House total reconciliation.

House.points is a cache of the ledger. It can drift when the house update
after a ledger write fails, or after bulk roster changes. Reconciliation
recomputes the true total from the ledger, using each student's current
house, and overwrites the cache when they differ.

The arithmetic lives in pure functions over a ledger snapshot so it can be
tested without a database; ReconciliationService loads the snapshot and
applies the result.
"""
import logging
from dataclasses import dataclass, asdict
from typing import Dict, Iterable, List, Optional

from sqlalchemy import and_, or_, select

from ..extensions import db
from ..models import House, SchoolClass, User, PointTransaction
from ..utils.exceptions import NotFoundError
from .transactions import transaction_scope
from .notification_service import publish_event, EventTypes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerRow:
    """One ledger entry with the student's current house edges."""
    points: int
    direct_house_id: Optional[int] = None
    class_house_id: Optional[int] = None

    @property
    def house_id(self) -> Optional[int]:
        return resolve_house_id(self.direct_house_id, self.class_house_id)


@dataclass(frozen=True)
class ReconcileResult:
    house_id: int
    previous_cached: int
    recomputed: int
    corrected: bool

    def to_dict(self) -> dict:
        return asdict(self)


def resolve_house_id(direct_house_id: Optional[int], class_house_id: Optional[int]) -> Optional[int]:
    """Direct assignment wins; otherwise the class's house."""
    if direct_house_id is not None:
        return direct_house_id
    return class_house_id


def compute_house_total(snapshot: Iterable[LedgerRow], house_id: int) -> int:
    """Sum of points in the snapshot that resolve to house_id."""
    return sum(row.points for row in snapshot if row.house_id == house_id)


def compute_house_totals(snapshot: Iterable[LedgerRow]) -> Dict[int, int]:
    """Totals for every house that appears in the snapshot."""
    totals: Dict[int, int] = {}
    for row in snapshot:
        house_id = row.house_id
        if house_id is None:
            continue
        totals[house_id] = totals.get(house_id, 0) + row.points
    return totals


class ReconciliationService:
    """
    Repairs cached house totals.

    Usage:
        service = ReconciliationService()
        result = service.reconcile_house(house_id)
        standings = service.get_standings()
    """

    def __init__(self, session=None):
        self.session = session or db.session

    def load_snapshot(self, house_id: int = None) -> List[LedgerRow]:
        """
        Ledger rows joined with each student's current house edges.

        With house_id, only rows that could resolve to that house are loaded.
        """
        stmt = (
            select(PointTransaction.points, User.house_id, SchoolClass.house_id)
            .join(User, PointTransaction.student_id == User.id)
            .outerjoin(SchoolClass, User.class_id == SchoolClass.id)
        )
        if house_id is not None:
            stmt = stmt.where(or_(
                User.house_id == house_id,
                and_(User.house_id.is_(None), SchoolClass.house_id == house_id),
            ))

        return [
            LedgerRow(points=points, direct_house_id=direct, class_house_id=via_class)
            for points, direct, via_class in self.session.execute(stmt)
        ]

    def reconcile_house(self, house_id: int) -> ReconcileResult:
        """
        Recompute one house total and fix the cache if it drifted.

        Raises:
            NotFoundError: no such house
        """
        with transaction_scope(self.session):
            house = self.session.execute(
                select(House).where(House.id == house_id).with_for_update()
            ).scalar_one_or_none()
            if not house:
                raise NotFoundError('House', house_id)

            recomputed = compute_house_total(self.load_snapshot(house_id), house_id)
            result = self._apply(house, recomputed)

        if result.corrected:
            publish_event(EventTypes.HOUSE_UPDATED, {'house_id': house_id})
        return result

    def reconcile_all(self) -> List[ReconcileResult]:
        """Recompute every house in one transaction."""
        with transaction_scope(self.session):
            houses = self.session.execute(
                select(House).order_by(House.id).with_for_update()
            ).scalars().all()
            totals = compute_house_totals(self.load_snapshot())
            results = [self._apply(house, totals.get(house.id, 0)) for house in houses]

        corrected = [r.house_id for r in results if r.corrected]
        if corrected:
            publish_event(EventTypes.HOUSE_UPDATED, {'house_ids': corrected})
        return results

    def get_standings(self) -> List[House]:
        """Houses ordered by points, after repairing any drift."""
        self.reconcile_all()
        return House.query.order_by(House.points.desc(), House.name.asc()).all()

    def _apply(self, house: House, recomputed: int) -> ReconcileResult:
        previous = house.points or 0
        corrected = previous != recomputed
        if corrected:
            logger.warning(
                f"House {house.id} ({house.name}) total drifted: "
                f"cached {previous}, ledger {recomputed}; corrected"
            )
            house.points = recomputed
        return ReconcileResult(
            house_id=house.id,
            previous_cached=previous,
            recomputed=recomputed,
            corrected=corrected,
        )

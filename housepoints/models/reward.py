"""
Rewards catalog and redemptions.
"""
from datetime import datetime
from enum import Enum
from ..extensions import db


class RedemptionStatus(str, Enum):
    """Fulfillment state of a redemption (not a financial state)."""
    PENDING = 'pending'       # Requested by the student, waiting on staff
    APPROVED = 'approved'     # Approved (staff-initiated redemptions start here)
    DELIVERED = 'delivered'   # Handed over to the student


# Allowed forward moves; a redemption never goes back
STATUS_TRANSITIONS = {
    RedemptionStatus.PENDING.value: {RedemptionStatus.APPROVED.value, RedemptionStatus.DELIVERED.value},
    RedemptionStatus.APPROVED.value: {RedemptionStatus.DELIVERED.value},
    RedemptionStatus.DELIVERED.value: set(),
}


class Reward(db.Model):
    """A reward students can buy with points. quantity never goes below zero."""
    __tablename__ = 'rewards'
    __table_args__ = (
        db.CheckConstraint('quantity >= 0', name='ck_rewards_quantity_non_negative'),
        db.CheckConstraint('point_cost > 0', name='ck_rewards_point_cost_positive'),
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.String(500))
    point_cost = db.Column(db.Integer, nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    image_url = db.Column(db.String(500))

    def __repr__(self):
        return f'<Reward {self.name}: {self.point_cost} pts, {self.quantity} left>'

    @property
    def in_stock(self) -> bool:
        return self.quantity > 0

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'point_cost': self.point_cost,
            'quantity': self.quantity,
            'image_url': self.image_url,
            'in_stock': self.in_stock,
        }


class RewardRedemption(db.Model):
    """
    A spend against a student's balance.

    points_spent is a snapshot of the reward's cost at redemption time.
    Only status may change after creation.
    """
    __tablename__ = 'reward_redemptions'

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    reward_id = db.Column(db.Integer, db.ForeignKey('rewards.id'), nullable=False)
    points_spent = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(20), nullable=False, default=RedemptionStatus.PENDING.value)
    redeemed_by = db.Column(db.Integer, db.ForeignKey('users.id'))  # Staff member; null for self-service

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    student = db.relationship('User', foreign_keys=[student_id])
    reward = db.relationship('Reward', backref='redemptions')

    def __repr__(self):
        return f'<RewardRedemption {self.id}: reward {self.reward_id} for student {self.student_id}>'

    def can_transition_to(self, status: str) -> bool:
        return status in STATUS_TRANSITIONS.get(self.status, set())

    def to_dict(self):
        return {
            'id': self.id,
            'student_id': self.student_id,
            'reward_id': self.reward_id,
            'points_spent': self.points_spent,
            'status': self.status,
            'redeemed_by': self.redeemed_by,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }

    def to_dict_detailed(self):
        data = self.to_dict()
        data['reward'] = self.reward.to_dict() if self.reward else None
        return data

"""
Database models for House Points.
Behavior points ledger, houses, rewards and redemptions.
"""
from .house import House, SchoolClass
from .user import User, UserRole, STAFF_ROLES
from .behavior import BehaviorCategory, PointTransaction
from .reward import Reward, RewardRedemption, RedemptionStatus, STATUS_TRANSITIONS
from .seed import (
    seed_school_defaults,
    DEFAULT_HOUSES,
    DEFAULT_CATEGORIES,
    DEFAULT_REWARDS,
)

__all__ = [
    'House',
    'SchoolClass',
    'User',
    'UserRole',
    'STAFF_ROLES',
    'BehaviorCategory',
    'PointTransaction',
    'Reward',
    'RewardRedemption',
    'RedemptionStatus',
    'STATUS_TRANSITIONS',
    'seed_school_defaults',
    'DEFAULT_HOUSES',
    'DEFAULT_CATEGORIES',
    'DEFAULT_REWARDS',
]

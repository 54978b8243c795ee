"""
Default school data: houses, behavior categories and rewards.
"""
import logging
from ..extensions import db
from .house import House
from .behavior import BehaviorCategory
from .reward import Reward

logger = logging.getLogger(__name__)


DEFAULT_HOUSES = [
    {'name': 'Phoenix', 'color': '#3b82f6', 'description': 'House of courage and rebirth'},
    {'name': 'Griffin', 'color': '#10b981', 'description': 'House of nobility and strength'},
    {'name': 'Dragon', 'color': '#f59e0b', 'description': 'House of wisdom and power'},
    {'name': 'Pegasus', 'color': '#ef4444', 'description': 'House of freedom and inspiration'},
]

DEFAULT_CATEGORIES = [
    {'name': 'Academic Excellence', 'description': 'Outstanding academic performance', 'is_positive': True, 'point_value': 5},
    {'name': 'Helping Others', 'description': 'Assisting peers or staff', 'is_positive': True, 'point_value': 3},
    {'name': 'Teamwork', 'description': 'Great collaboration with others', 'is_positive': True, 'point_value': 4},
    {'name': 'Leadership', 'description': 'Demonstrating leadership skills', 'is_positive': True, 'point_value': 5},
    {'name': 'Classroom Disruption', 'description': 'Disrupting the learning environment', 'is_positive': False, 'point_value': 2},
    {'name': 'Late Assignment', 'description': 'Submitting work after deadline', 'is_positive': False, 'point_value': 1},
    {'name': 'Tardiness', 'description': 'Arriving late to class', 'is_positive': False, 'point_value': 1},
]

DEFAULT_REWARDS = [
    {'name': 'Homework Pass', 'description': 'Skip one homework assignment', 'point_cost': 20, 'quantity': 10},
    {'name': 'Lunch with Teacher', 'description': 'Have lunch with your favorite teacher', 'point_cost': 30, 'quantity': 5},
    {'name': 'School Store Voucher', 'description': '$5 voucher for the school store', 'point_cost': 25, 'quantity': 15},
    {'name': 'Front of Lunch Line Pass', 'description': 'Skip the lunch line for a week', 'point_cost': 15, 'quantity': 20},
]


def seed_school_defaults() -> dict:
    """
    Create the default houses, categories and rewards for any table that is empty.

    Returns:
        Count of rows created per table
    """
    created = {'houses': 0, 'behavior_categories': 0, 'rewards': 0}

    if House.query.count() == 0:
        for data in DEFAULT_HOUSES:
            db.session.add(House(points=0, **data))
            created['houses'] += 1

    if BehaviorCategory.query.count() == 0:
        for data in DEFAULT_CATEGORIES:
            db.session.add(BehaviorCategory(**data))
            created['behavior_categories'] += 1

    if Reward.query.count() == 0:
        for data in DEFAULT_REWARDS:
            db.session.add(Reward(**data))
            created['rewards'] += 1

    db.session.commit()
    logger.info(f"Seeded school defaults: {created}")
    return created

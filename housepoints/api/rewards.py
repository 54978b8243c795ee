"""
Rewards API endpoints.

Handles:
- Rewards catalog listing and management (admin)
- Self-service redemption (students)
- Delegated redemption on a student's behalf (staff)
- Redemption history and fulfillment status
"""
from flask import Blueprint, jsonify, g, current_app

from ..extensions import db
from ..models import Reward
from ..middleware import require_actor, authorize, Operation
from ..services import RedemptionService, BalanceService, transaction_scope, publish_event, EventTypes
from ..utils.exceptions import RewardNotFoundError, ValidationError
from .params import get_json_body, require_int, require_str

rewards_bp = Blueprint('rewards', __name__)

REWARD_FIELDS = ('name', 'description', 'point_cost', 'quantity', 'image_url')


def _validate_reward_fields(data: dict, partial: bool = False) -> dict:
    values = {}

    if 'name' in data or not partial:
        values['name'] = require_str(data, 'name')
    if 'description' in data:
        values['description'] = data.get('description')
    if 'image_url' in data:
        values['image_url'] = data.get('image_url')

    if 'point_cost' in data or not partial:
        point_cost = require_int(data, 'point_cost')
        if point_cost <= 0:
            raise ValidationError('point_cost must be positive', field='point_cost')
        values['point_cost'] = point_cost

    if 'quantity' in data or not partial:
        quantity = require_int(data, 'quantity')
        if quantity < 0:
            raise ValidationError('quantity cannot be negative', field='quantity')
        values['quantity'] = quantity

    return values


# ==============================================================================
# REWARDS CATALOG
# ==============================================================================

@rewards_bp.route('', methods=['GET'])
@require_actor()
def list_rewards():
    """List all rewards, cheapest first."""
    rewards = Reward.query.order_by(Reward.point_cost.asc(), Reward.id.asc()).all()
    return jsonify({
        'rewards': [r.to_dict() for r in rewards],
        'count': len(rewards)
    })


@rewards_bp.route('', methods=['POST'])
@require_actor(Operation.MANAGE_CATALOG)
def create_reward():
    """
    Create a new reward.

    JSON body:
        name: Reward name (required)
        point_cost: Points required to redeem (required, > 0)
        quantity: Units in stock (required, >= 0)
        description: Reward description
        image_url: Reward image URL
    """
    values = _validate_reward_fields(get_json_body())

    with transaction_scope(db.session):
        reward = Reward(**values)
        db.session.add(reward)

    current_app.logger.info(f"Reward created: {reward.name} ({reward.point_cost} pts x{reward.quantity})")
    publish_event(EventTypes.REWARD_UPDATED, {'reward_id': reward.id})
    return jsonify(reward.to_dict()), 201


@rewards_bp.route('/<int:reward_id>', methods=['GET'])
@require_actor()
def get_reward(reward_id):
    """Get a single reward."""
    reward = db.session.get(Reward, reward_id)
    if not reward:
        raise RewardNotFoundError(reward_id)
    return jsonify(reward.to_dict())


@rewards_bp.route('/<int:reward_id>', methods=['PUT'])
@require_actor(Operation.MANAGE_CATALOG)
def update_reward(reward_id):
    """
    Update a reward (restock, reprice, rename).

    Changing point_cost does not affect earlier redemptions, which keep
    the cost they were redeemed at.
    """
    values = _validate_reward_fields(get_json_body(), partial=True)

    with transaction_scope(db.session):
        reward = db.session.get(Reward, reward_id)
        if not reward:
            raise RewardNotFoundError(reward_id)
        for field, value in values.items():
            setattr(reward, field, value)

    publish_event(EventTypes.REWARD_UPDATED, {'reward_id': reward_id})
    return jsonify(reward.to_dict())


# ==============================================================================
# REDEMPTION
# ==============================================================================

@rewards_bp.route('/redeem', methods=['POST'])
@require_actor(Operation.REDEEM_SELF)
def redeem_reward():
    """
    Redeem a reward for the signed-in student.

    JSON body:
        reward_id: Reward ID (required)

    Returns:
        The redemption (status pending) and the new balance
    """
    data = get_json_body()
    student_id = g.actor.user_id
    redemption = RedemptionService().redeem(student_id, require_int(data, 'reward_id'))
    balance = BalanceService().get_balance(student_id)

    return jsonify({
        'redemption': redemption.to_dict(),
        'balance': balance.to_dict(),
    }), 201


@rewards_bp.route('/redeem-for-student', methods=['POST'])
@require_actor(Operation.REDEEM_DELEGATED)
def redeem_reward_for_student():
    """
    Redeem a reward on a student's behalf.

    JSON body:
        reward_id: Reward ID (required)
        student_id: Student ID (required)

    Returns:
        The redemption (status approved) and the new balance
    """
    data = get_json_body()
    student_id = require_int(data, 'student_id')
    redemption = RedemptionService().redeem(
        student_id,
        require_int(data, 'reward_id'),
        author_id=g.actor.user_id,
    )
    balance = BalanceService().get_balance(student_id)

    return jsonify({
        'redemption': redemption.to_dict(),
        'balance': balance.to_dict(),
    }), 201


@rewards_bp.route('/redemptions/student/<int:student_id>', methods=['GET'])
@require_actor()
def list_student_redemptions(student_id):
    """A student's redemptions with reward details."""
    authorize(g.actor, Operation.VIEW_REDEMPTIONS, student_id=student_id)
    redemptions = RedemptionService().list_for_student(student_id)
    return jsonify({
        'redemptions': [r.to_dict_detailed() for r in redemptions],
        'count': len(redemptions)
    })


@rewards_bp.route('/redemptions/<int:redemption_id>', methods=['PATCH'])
@require_actor(Operation.UPDATE_REDEMPTION)
def update_redemption_status(redemption_id):
    """
    Move a redemption to approved or delivered.

    JSON body:
        status: 'approved' or 'delivered'
    """
    data = get_json_body()
    redemption = RedemptionService().update_status(redemption_id, require_str(data, 'status'))
    return jsonify(redemption.to_dict())

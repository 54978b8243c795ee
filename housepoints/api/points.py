"""
Points API endpoints.

Handles:
- Awarding and deducting points (staff)
- Batch awards (staff)
- Points history per student / per teacher, recent activity
- Student balances (staff, the student, or the student's guardian)
"""
from flask import Blueprint, request, jsonify, g, current_app

from ..middleware import require_actor, authorize, Operation
from ..services import LedgerService, BalanceService
from ..utils.exceptions import ValidationError
from .params import get_json_body, require_int, optional_int, require_int_list

points_bp = Blueprint('points', __name__)


# ==============================================================================
# AWARD / DEDUCT (Staff)
# ==============================================================================

@points_bp.route('/points', methods=['POST'])
@require_actor(Operation.AWARD_POINTS)
def award_points():
    """
    Award or deduct points for one student.

    JSON body:
        student_id: Student ID (required)
        category_id: Behavior category ID (required)
        points: Signed point amount (optional; overrides the category value)
        multiplier: 1-10, applied to the category value (default 1)
        note: Optional note

    Returns:
        The created ledger entry
    """
    data = get_json_body()
    student_id = require_int(data, 'student_id')
    category_id = require_int(data, 'category_id')
    note = data.get('note')
    service = LedgerService()

    if 'points' in data and data['points'] is not None:
        points = data['points']
        if isinstance(points, str):
            points = optional_int(data, 'points')
        transaction = service.record_points(
            student_id=student_id,
            author_id=g.actor.user_id,
            category_id=category_id,
            signed_points=points,
            note=note,
        )
    else:
        transaction = service.award_category(
            student_id=student_id,
            author_id=g.actor.user_id,
            category_id=category_id,
            multiplier=optional_int(data, 'multiplier', 1),
            note=note,
        )

    return jsonify(transaction.to_dict()), 201


@points_bp.route('/points/batch', methods=['POST'])
@require_actor(Operation.AWARD_POINTS)
def award_points_batch():
    """
    Award a category to several students at once.

    JSON body:
        student_ids: List of student IDs (required)
        category_id: Behavior category ID (required)
        multiplier: 1-10 (default 1)
        note: Optional note (default "<category> - Batch award")
    """
    data = get_json_body()
    transactions = LedgerService().award_batch(
        student_ids=require_int_list(data, 'student_ids'),
        author_id=g.actor.user_id,
        category_id=require_int(data, 'category_id'),
        multiplier=optional_int(data, 'multiplier', 1),
        note=data.get('note'),
    )

    return jsonify({
        'transactions': [t.to_dict() for t in transactions],
        'count': len(transactions),
    }), 201


# ==============================================================================
# HISTORY
# ==============================================================================

@points_bp.route('/points/student/<int:student_id>', methods=['GET'])
@require_actor()
def get_student_points(student_id):
    """Ledger entries for one student, newest first."""
    authorize(g.actor, Operation.VIEW_STUDENT_HISTORY, student_id=student_id)
    transactions = LedgerService().get_student_history(student_id)
    return jsonify({
        'transactions': [t.to_dict() for t in transactions],
        'count': len(transactions),
    })


@points_bp.route('/points/teacher/<int:teacher_id>', methods=['GET'])
@require_actor()
def get_teacher_points(teacher_id):
    """Ledger entries written by one teacher (admins, or the teacher themself)."""
    authorize(g.actor, Operation.VIEW_AUTHOR_HISTORY, author_id=teacher_id)
    transactions = LedgerService().get_author_history(teacher_id)
    return jsonify({
        'transactions': [t.to_dict() for t in transactions],
        'count': len(transactions),
    })


@points_bp.route('/points/recent', methods=['GET'])
@require_actor(Operation.VIEW_RECENT_ACTIVITY)
def get_recent_points():
    """
    Most recent ledger entries with student, teacher and category details.

    Query params:
        limit: Number of entries (default 10, max 100)
    """
    default_limit = current_app.config.get('RECENT_POINTS_LIMIT', 10)
    max_limit = current_app.config.get('RECENT_POINTS_MAX', 100)
    limit = request.args.get('limit', default_limit, type=int)
    if limit < 1:
        raise ValidationError('limit must be positive', field='limit')
    limit = min(limit, max_limit)

    transactions = LedgerService().get_recent(limit)
    return jsonify({'transactions': [t.to_dict_detailed() for t in transactions]})


# ==============================================================================
# BALANCE
# ==============================================================================

@points_bp.route('/students/<int:student_id>/points-balance', methods=['GET'])
@require_actor()
def get_points_balance(student_id):
    """
    Get a student's spendable balance.

    Returns:
        {student_id, earned, spent, balance}
    """
    authorize(g.actor, Operation.VIEW_BALANCE, student_id=student_id)
    balance = BalanceService().get_balance(student_id)
    return jsonify(balance.to_dict())

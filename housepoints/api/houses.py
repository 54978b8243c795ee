"""
Houses and classes API endpoints.

Standings reads reconcile the cached house totals against the ledger
before returning them, so a leaderboard never shows drifted numbers.
"""
from flask import Blueprint, jsonify, current_app

from ..extensions import db
from ..models import House, SchoolClass
from ..middleware import require_actor, Operation
from ..services import ReconciliationService, RosterService, transaction_scope, publish_event, EventTypes
from ..utils.exceptions import NotFoundError, DuplicateError
from .params import get_json_body, require_str, require_int_list, optional_int

houses_bp = Blueprint('houses', __name__)


# ==============================================================================
# STANDINGS
# ==============================================================================

@houses_bp.route('/houses', methods=['GET'])
@require_actor(Operation.VIEW_STANDINGS)
def get_standings():
    """All houses ordered by points (reconciled)."""
    houses = ReconciliationService().get_standings()
    return jsonify({
        'houses': [
            {**house.to_dict(), 'rank': rank}
            for rank, house in enumerate(houses, start=1)
        ]
    })


@houses_bp.route('/houses/<int:house_id>', methods=['GET'])
@require_actor(Operation.VIEW_STANDINGS)
def get_house(house_id):
    """One house with its reconciled total."""
    result = ReconciliationService().reconcile_house(house_id)
    house = db.session.get(House, house_id)
    return jsonify({**house.to_dict(), 'reconciliation': result.to_dict()})


@houses_bp.route('/houses/<int:house_id>/reconcile', methods=['POST'])
@require_actor(Operation.RECONCILE)
def reconcile_house(house_id):
    """
    Recompute a house total from the ledger.

    Returns:
        {house_id, previous_cached, recomputed, corrected}
    """
    result = ReconciliationService().reconcile_house(house_id)
    return jsonify(result.to_dict())


@houses_bp.route('/houses/reconcile', methods=['POST'])
@require_actor(Operation.RECONCILE)
def reconcile_all_houses():
    """Recompute every house total from the ledger."""
    results = ReconciliationService().reconcile_all()
    return jsonify({
        'results': [r.to_dict() for r in results],
        'corrected': sum(1 for r in results if r.corrected),
    })


# ==============================================================================
# HOUSE / CLASS MANAGEMENT
# ==============================================================================

@houses_bp.route('/houses', methods=['POST'])
@require_actor(Operation.MANAGE_CATALOG)
def create_house():
    """
    Create a house. New houses start with zero points.

    JSON body:
        name: House name (required, unique)
        color: Display color (required)
        description, logo_url: Optional
    """
    data = get_json_body()
    name = require_str(data, 'name')
    color = require_str(data, 'color')

    if House.query.filter_by(name=name).first():
        raise DuplicateError('House', f"name '{name}'")

    with transaction_scope(db.session):
        house = House(
            name=name,
            color=color,
            description=data.get('description'),
            logo_url=data.get('logo_url'),
            points=0,
        )
        db.session.add(house)

    current_app.logger.info(f"House created: {house.name}")
    publish_event(EventTypes.HOUSE_UPDATED, {'house_id': house.id})
    return jsonify(house.to_dict()), 201


@houses_bp.route('/houses/<int:house_id>/assign-students', methods=['POST'])
@require_actor(Operation.MANAGE_ROSTER)
def assign_students_to_house(house_id):
    """
    Assign students directly to a house, then reconcile affected houses.

    JSON body:
        student_ids: List of student IDs (required)
    """
    data = get_json_body()
    results = RosterService().assign_students_to_house(house_id, require_int_list(data, 'student_ids'))
    return jsonify({'reconciled': [r.to_dict() for r in results]})


@houses_bp.route('/classes', methods=['GET'])
@require_actor()
def list_classes():
    classes = SchoolClass.query.order_by(SchoolClass.name).all()
    return jsonify({'classes': [c.to_dict() for c in classes]})


@houses_bp.route('/classes', methods=['POST'])
@require_actor(Operation.MANAGE_CATALOG)
def create_class():
    """
    Create a class.

    JSON body:
        name: Class name (required, unique)
        house_id: House the class belongs to
        description: Optional
    """
    data = get_json_body()
    name = require_str(data, 'name')
    house_id = optional_int(data, 'house_id')

    if SchoolClass.query.filter_by(name=name).first():
        raise DuplicateError('Class', f"name '{name}'")
    if house_id is not None and not db.session.get(House, house_id):
        raise NotFoundError('House', house_id)

    with transaction_scope(db.session):
        school_class = SchoolClass(name=name, description=data.get('description'), house_id=house_id)
        db.session.add(school_class)

    publish_event(EventTypes.CLASS_UPDATED, {'class_id': school_class.id})
    return jsonify(school_class.to_dict()), 201


@houses_bp.route('/classes/<int:class_id>/add-students', methods=['POST'])
@require_actor(Operation.MANAGE_ROSTER)
def add_students_to_class(class_id):
    """
    Move students into a class, then reconcile affected houses.

    JSON body:
        student_ids: List of student IDs (required)
    """
    data = get_json_body()
    results = RosterService().assign_students_to_class(class_id, require_int_list(data, 'student_ids'))
    return jsonify({'reconciled': [r.to_dict() for r in results]})

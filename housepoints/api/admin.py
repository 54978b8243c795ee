"""
Admin bulk ledger endpoints.
"""
from flask import Blueprint, jsonify, g, current_app

from ..middleware import require_actor, Operation
from ..services import BulkLedgerService
from ..utils.exceptions import ValidationError
from .params import get_json_body

admin_bp = Blueprint('admin', __name__)


@admin_bp.route('/points/reset', methods=['POST'])
@require_actor(Operation.BULK_LEDGER)
def reset_all_points():
    """
    Delete every ledger entry and zero every house.

    JSON body:
        confirm: must be true
    """
    data = get_json_body()
    if data.get('confirm') is not True:
        raise ValidationError('Set confirm to true to reset all points', field='confirm')

    result = BulkLedgerService().reset_all_points()
    current_app.logger.warning(f"Points reset by admin {g.actor.user_id}: {result}")
    return jsonify(result)


@admin_bp.route('/students/<int:student_id>/points', methods=['DELETE'])
@require_actor(Operation.BULK_LEDGER)
def purge_student_points(student_id):
    """Delete one student's ledger entries and take them off their house."""
    result = BulkLedgerService().purge_student_points(student_id)
    current_app.logger.info(f"Points purged for student {student_id} by admin {g.actor.user_id}")
    return jsonify(result)

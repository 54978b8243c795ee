"""
Behavior category API endpoints.

The category list is cached (it changes rarely and every award form loads
it); creating a category drops the cached copy.
"""
from flask import Blueprint, jsonify, current_app

from ..extensions import db, cache
from ..models import BehaviorCategory
from ..middleware import require_actor, Operation
from ..services import transaction_scope
from ..utils.cache import CATEGORIES_CACHE_KEY, invalidate_categories
from ..utils.exceptions import DuplicateError, ValidationError
from .params import get_json_body, require_int, require_str

categories_bp = Blueprint('categories', __name__)


@categories_bp.route('', methods=['GET'])
@require_actor()
@cache.cached(timeout=300, key_prefix=CATEGORIES_CACHE_KEY)
def list_categories():
    """Positive categories first, then deductions, each by name."""
    categories = BehaviorCategory.query.order_by(
        BehaviorCategory.is_positive.desc(),
        BehaviorCategory.name.asc(),
    ).all()
    return jsonify({'categories': [c.to_dict() for c in categories]})


@categories_bp.route('', methods=['POST'])
@require_actor(Operation.MANAGE_CATALOG)
def create_category():
    """
    Create a behavior category.

    JSON body:
        name: Category name (required, unique)
        point_value: Magnitude of the award (required, > 0)
        is_positive: true for awards, false for deductions (required)
        description: Optional
    """
    data = get_json_body()
    name = require_str(data, 'name')
    point_value = require_int(data, 'point_value')
    is_positive = data.get('is_positive')

    if point_value <= 0:
        raise ValidationError('point_value must be positive', field='point_value')
    if not isinstance(is_positive, bool):
        raise ValidationError('is_positive must be true or false', field='is_positive')
    if BehaviorCategory.query.filter_by(name=name).first():
        raise DuplicateError('Behavior category', f"name '{name}'")

    with transaction_scope(db.session):
        category = BehaviorCategory(
            name=name,
            description=data.get('description'),
            is_positive=is_positive,
            point_value=point_value,
        )
        db.session.add(category)

    invalidate_categories()
    current_app.logger.info(f"Behavior category created: {category!r}")
    return jsonify(category.to_dict()), 201

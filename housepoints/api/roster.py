"""
User and roster API endpoints.

Handles:
- Creating users (admin)
- Student listings with house / class / parent filters (staff)
- Roster updates and bulk student deletion
"""
from flask import Blueprint, request, jsonify, g, current_app

from ..extensions import db
from ..models import User, UserRole, House, SchoolClass
from ..middleware import require_actor, authorize, Operation
from ..services import RosterService, transaction_scope
from ..utils.exceptions import DuplicateError, ValidationError, NotFoundError
from .params import get_json_body, require_str, require_int_list, optional_int, to_int

users_bp = Blueprint('users', __name__)

VALID_ROLES = [role.value for role in UserRole]


def _query_int(name: str):
    value = request.args.get(name)
    if value in (None, ''):
        return None
    return to_int(value, name)


@users_bp.route('', methods=['POST'])
@require_actor(Operation.MANAGE_ROSTER)
def create_user():
    """
    Create a user account. Only admins may create staff accounts.

    JSON body:
        username, password, first_name, last_name, email, role: required
        grade_level, section, class_id, house_id, parent_id: optional
    """
    data = get_json_body()
    username = require_str(data, 'username')
    password = require_str(data, 'password')
    role = require_str(data, 'role').lower()

    if role not in VALID_ROLES:
        raise ValidationError(f"role must be one of {VALID_ROLES}", field='role')
    if role in (UserRole.ADMIN.value, UserRole.TEACHER.value):
        authorize(g.actor, Operation.MANAGE_CATALOG)
    if len(password) < 6:
        raise ValidationError('Password must be at least 6 characters', field='password')
    if User.query.filter(db.func.lower(User.username) == username.lower()).first():
        raise DuplicateError('User', f"username '{username}'")

    parent_id = optional_int(data, 'parent_id')
    if parent_id is not None:
        parent = db.session.get(User, parent_id)
        if not parent or parent.role != UserRole.PARENT.value:
            raise NotFoundError('Parent', parent_id)

    class_id = optional_int(data, 'class_id')
    if class_id is not None and not db.session.get(SchoolClass, class_id):
        raise NotFoundError('Class', class_id)
    house_id = optional_int(data, 'house_id')
    if house_id is not None and not db.session.get(House, house_id):
        raise NotFoundError('House', house_id)

    with transaction_scope(db.session):
        user = User(
            username=username,
            first_name=require_str(data, 'first_name'),
            last_name=require_str(data, 'last_name'),
            email=require_str(data, 'email'),
            role=role,
            grade_level=data.get('grade_level'),
            section=data.get('section'),
            class_id=class_id,
            house_id=house_id,
            parent_id=parent_id,
        )
        user.set_password(password)
        db.session.add(user)

    current_app.logger.info(f"User created: {user.username} ({user.role}) by {g.actor.user_id}")
    return jsonify(user.to_dict()), 201


@users_bp.route('/students', methods=['GET'])
@require_actor(Operation.VIEW_ROSTER)
def list_students():
    """
    List students.

    Query params:
        house_id, class_id: Optional filters
    """
    students = RosterService().list_students(
        house_id=_query_int('house_id'),
        class_id=_query_int('class_id'),
    )
    return jsonify({
        'students': [s.to_dict() for s in students],
        'count': len(students)
    })


@users_bp.route('/students/parent/<int:parent_id>', methods=['GET'])
@require_actor()
def list_children(parent_id):
    """A guardian's children. Guardians may only list their own."""
    if g.actor.user_id != parent_id:
        authorize(g.actor, Operation.VIEW_ROSTER)
    students = RosterService().list_students(parent_id=parent_id)
    return jsonify({
        'students': [s.to_dict() for s in students],
        'count': len(students)
    })


@users_bp.route('/students/<int:student_id>/roster', methods=['PATCH'])
@require_actor(Operation.MANAGE_ROSTER)
def update_roster(student_id):
    """
    Update grade_level, section, house_id or class_id for one student.

    Earlier points move to the new house at the next reconciliation, which
    every standings read runs.
    """
    data = get_json_body()
    changes = {}
    for field in ('house_id', 'class_id'):
        if field in data:
            changes[field] = optional_int(data, field)
    for field in ('grade_level', 'section'):
        if field in data:
            changes[field] = data.get(field)
    if not changes:
        raise ValidationError('No roster fields to update')

    student = RosterService().update_roster(student_id, changes)
    return jsonify(student.to_dict())


@users_bp.route('/bulk-delete', methods=['POST'])
@require_actor(Operation.DELETE_STUDENTS)
def bulk_delete_students():
    """
    Delete students along with their ledger entries and redemptions.

    JSON body:
        student_ids: List of student IDs (required)
    """
    data = get_json_body()
    result = RosterService().delete_students(require_int_list(data, 'student_ids'))
    return jsonify(result)

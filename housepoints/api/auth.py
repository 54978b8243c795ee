"""
Authentication API endpoints.

Session-based login: a successful login stores the user id in the signed
Flask session cookie; require_actor reads it back on later requests.
"""
from flask import Blueprint, jsonify, g, session, current_app
from sqlalchemy import func

from ..extensions import db
from ..models import User
from ..middleware import require_actor
from ..services import transaction_scope
from ..utils.errors import unauthorized, ErrorCode
from ..utils.exceptions import ValidationError
from .params import get_json_body, require_str

auth_bp = Blueprint('auth', __name__)

MIN_PASSWORD_LENGTH = 6


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Log in with username and password.

    Request body:
        username: string (case-insensitive)
        password: string

    Returns:
        The logged-in user
    """
    data = get_json_body()
    username = require_str(data, 'username')
    password = require_str(data, 'password')

    user = User.query.filter(func.lower(User.username) == username.lower()).first()
    if not user or not user.check_password(password):
        current_app.logger.info(f"Login failed for username '{username}'")
        return unauthorized('Invalid username or password', ErrorCode.INVALID_CREDENTIALS)

    session.clear()
    session['user_id'] = user.id
    session.permanent = True

    current_app.logger.info(f"User {user.id} ({user.role}) logged in")
    return jsonify({'user': user.to_dict()})


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """End the current session."""
    session.clear()
    return jsonify({'success': True})


@auth_bp.route('/me', methods=['GET'])
@require_actor()
def me():
    """Get the signed-in user."""
    return jsonify({'user': g.user.to_dict()})


@auth_bp.route('/change-password', methods=['POST'])
@require_actor()
def change_password():
    """
    Change the signed-in user's password.

    Request body:
        current_password: string
        new_password: string (min 6 characters)
    """
    data = get_json_body()
    current_password = require_str(data, 'current_password')
    new_password = require_str(data, 'new_password')

    if not g.user.check_password(current_password):
        return unauthorized('Current password is incorrect', ErrorCode.INVALID_CREDENTIALS)
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f'Password must be at least {MIN_PASSWORD_LENGTH} characters', field='new_password'
        )

    with transaction_scope(db.session):
        g.user.set_password(new_password)

    return jsonify({'success': True})

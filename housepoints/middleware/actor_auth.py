"""
Caller identity and per-operation authorization.

Every request is turned into exactly one actor variant (admin, teacher,
student, guardian). Each operation's allowed actors are decided in one place,
``is_allowed``, which handles every variant explicitly.

Identity comes from the Flask session (``user_id`` set at login). When
AUTH_DEV_HEADERS is on (development and tests) an ``X-User-ID`` header is
accepted instead.
"""
from dataclasses import dataclass, field
from enum import Enum
from functools import wraps
from typing import FrozenSet, Optional, Union

from flask import current_app, g, request, session

from ..extensions import db
from ..models import User, UserRole
from ..utils.exceptions import (
    AuthenticationRequiredError,
    InvalidRoleError,
    UnauthorizedError,
)


@dataclass(frozen=True)
class AdminActor:
    user_id: int


@dataclass(frozen=True)
class TeacherActor:
    user_id: int


@dataclass(frozen=True)
class StudentActor:
    user_id: int


@dataclass(frozen=True)
class GuardianActor:
    user_id: int
    child_ids: FrozenSet[int] = field(default_factory=frozenset)


Actor = Union[AdminActor, TeacherActor, StudentActor, GuardianActor]


class Operation(str, Enum):
    AWARD_POINTS = 'award_points'
    VIEW_BALANCE = 'view_balance'
    VIEW_STUDENT_HISTORY = 'view_student_history'
    VIEW_REDEMPTIONS = 'view_redemptions'
    VIEW_AUTHOR_HISTORY = 'view_author_history'
    VIEW_RECENT_ACTIVITY = 'view_recent_activity'
    REDEEM_SELF = 'redeem_self'
    REDEEM_DELEGATED = 'redeem_delegated'
    UPDATE_REDEMPTION = 'update_redemption'
    VIEW_STANDINGS = 'view_standings'
    RECONCILE = 'reconcile'
    BULK_LEDGER = 'bulk_ledger'
    MANAGE_CATALOG = 'manage_catalog'
    VIEW_ROSTER = 'view_roster'
    MANAGE_ROSTER = 'manage_roster'
    DELETE_STUDENTS = 'delete_students'


ADMIN_ONLY = frozenset({
    Operation.BULK_LEDGER,
    Operation.MANAGE_CATALOG,
    Operation.DELETE_STUDENTS,
})

STAFF_OPERATIONS = frozenset({
    Operation.AWARD_POINTS,
    Operation.VIEW_BALANCE,
    Operation.VIEW_STUDENT_HISTORY,
    Operation.VIEW_REDEMPTIONS,
    Operation.VIEW_RECENT_ACTIVITY,
    Operation.REDEEM_DELEGATED,
    Operation.UPDATE_REDEMPTION,
    Operation.VIEW_STANDINGS,
    Operation.RECONCILE,
    Operation.VIEW_ROSTER,
    Operation.MANAGE_ROSTER,
})

# Available to everyone who is signed in
ANY_ACTOR = frozenset({
    Operation.VIEW_STANDINGS,
    Operation.RECONCILE,
})

# Student/guardian access limited to the student(s) they are
STUDENT_SCOPED = frozenset({
    Operation.VIEW_BALANCE,
    Operation.VIEW_STUDENT_HISTORY,
    Operation.VIEW_REDEMPTIONS,
})


def actor_from_user(user: User) -> Actor:
    """Build the actor variant for a user."""
    if user.role == UserRole.ADMIN.value:
        return AdminActor(user.id)
    if user.role == UserRole.TEACHER.value:
        return TeacherActor(user.id)
    if user.role == UserRole.STUDENT.value:
        return StudentActor(user.id)
    if user.role == UserRole.PARENT.value:
        child_ids = db.session.execute(
            db.select(User.id).where(User.parent_id == user.id)
        ).scalars().all()
        return GuardianActor(user.id, frozenset(child_ids))
    raise InvalidRoleError(user.id, 'admin|teacher|student|parent', user.role)


def is_allowed(actor: Actor, operation: Operation, student_id: int = None, author_id: int = None) -> bool:
    """Whether the actor may perform the operation (for the given student / author)."""
    if operation in ANY_ACTOR:
        return True

    if isinstance(actor, AdminActor):
        # Only students have a balance to spend
        return operation != Operation.REDEEM_SELF

    if isinstance(actor, TeacherActor):
        if operation == Operation.VIEW_AUTHOR_HISTORY:
            return author_id == actor.user_id
        return operation in STAFF_OPERATIONS

    if isinstance(actor, StudentActor):
        if operation == Operation.REDEEM_SELF:
            return True
        if operation in STUDENT_SCOPED:
            return student_id == actor.user_id
        return False

    if isinstance(actor, GuardianActor):
        if operation in STUDENT_SCOPED:
            return student_id in actor.child_ids
        return False

    raise TypeError(f'Unhandled actor type: {type(actor).__name__}')


def authorize(actor: Optional[Actor], operation: Operation, student_id: int = None, author_id: int = None) -> Actor:
    """
    Raise unless the actor may perform the operation.

    Raises:
        AuthenticationRequiredError: no actor
        UnauthorizedError: actor not allowed
    """
    if actor is None:
        raise AuthenticationRequiredError()
    if not is_allowed(actor, operation, student_id=student_id, author_id=author_id):
        raise UnauthorizedError()
    return actor


def load_current_user() -> Optional[User]:
    """User for the current request, from the session or the dev header."""
    user_id = session.get('user_id')

    if user_id is None and current_app.config.get('AUTH_DEV_HEADERS'):
        header = request.headers.get('X-User-ID')
        if header:
            try:
                user_id = int(header)
            except ValueError:
                return None

    if user_id is None:
        return None
    return db.session.get(User, user_id)


def require_actor(operation: Operation = None):
    """
    Decorator that resolves the caller into g.actor / g.user.

    With an operation, also checks the permission table for operations that
    do not depend on a particular student. Views for student-scoped
    operations call authorize() themselves once they know the student.

    Usage:
        @points_bp.route('', methods=['POST'])
        @require_actor(Operation.AWARD_POINTS)
        def award_points():
            author_id = g.actor.user_id
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = load_current_user()
            if not user:
                raise AuthenticationRequiredError()

            g.user = user
            g.actor = actor_from_user(user)

            if operation is not None:
                authorize(g.actor, operation)

            return f(*args, **kwargs)

        return decorated_function

    return decorator

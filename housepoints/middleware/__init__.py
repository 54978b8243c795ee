"""
Middleware package for House Points.
"""
from .actor_auth import (
    AdminActor,
    TeacherActor,
    StudentActor,
    GuardianActor,
    Actor,
    Operation,
    actor_from_user,
    is_allowed,
    authorize,
    load_current_user,
    require_actor,
)

"""
Utility modules for House Points.
"""
from .logging_config import setup_logging
from .errors import (
    ErrorCode,
    error_response,
    domain_error_response,
    unauthorized,
    internal_error
)
from .exceptions import (
    HousePointsError,
    NotFoundError,
    StudentNotFoundError,
    RewardNotFoundError,
    InvalidRoleError,
    ValidationError,
    InsufficientBalanceError,
    OutOfStockError,
    UnauthorizedError,
    AuthenticationRequiredError,
    ConflictRetryableError,
    InvalidStatusTransitionError,
    DuplicateError
)

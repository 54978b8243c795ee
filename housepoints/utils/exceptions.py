"""
Custom exceptions for House Points business logic.

Services raise these; the app-level error handler turns them into
structured JSON responses with the matching HTTP status code.
"""


class HousePointsError(Exception):
    """Base exception for all House Points business logic errors."""

    status_code = 400

    def __init__(self, message: str, code: str = "HOUSEPOINTS_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

    def to_dict(self) -> dict:
        return {'message': self.message, 'code': self.code}


class NotFoundError(HousePointsError):
    """Resource not found."""

    status_code = 404

    def __init__(self, resource: str, identifier=None):
        self.resource = resource
        message = f"{resource} not found"
        if identifier is not None:
            message = f"{resource} with ID {identifier} not found"
        super().__init__(message, f"{resource.upper().replace(' ', '_')}_NOT_FOUND")


class StudentNotFoundError(NotFoundError):
    """Student not found."""

    def __init__(self, identifier=None):
        super().__init__("Student", identifier)


class RewardNotFoundError(NotFoundError):
    """Reward not found."""

    def __init__(self, identifier=None):
        super().__init__("Reward", identifier)


class InvalidRoleError(HousePointsError):
    """Actor or target user has the wrong role for the operation."""

    status_code = 422

    def __init__(self, user_id, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        message = f"User {user_id} has role '{actual}', expected '{expected}'"
        super().__init__(message, "INVALID_ROLE")


class ValidationError(HousePointsError):
    """Invalid input data."""

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"INVALID_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.field:
            data['field'] = self.field
        return data


class InsufficientBalanceError(HousePointsError):
    """Not enough points for the redemption."""

    status_code = 422

    def __init__(self, balance: int, required: int):
        self.balance = balance
        self.required = required
        self.shortfall = required - balance
        message = (
            f"Not enough points to redeem this reward. "
            f"Balance: {balance}, Required: {required}, Short by: {self.shortfall}"
        )
        super().__init__(message, "INSUFFICIENT_BALANCE")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            'balance': self.balance,
            'required': self.required,
            'shortfall': self.shortfall,
        })
        return data


class OutOfStockError(HousePointsError):
    """Reward has no remaining quantity."""

    status_code = 409

    def __init__(self, reward_id, reward_name: str = None):
        self.reward_id = reward_id
        label = f'"{reward_name}"' if reward_name else f"Reward {reward_id}"
        super().__init__(f"{label} is out of stock", "OUT_OF_STOCK")


class UnauthorizedError(HousePointsError):
    """Caller lacks the privilege required for the operation."""

    status_code = 403

    def __init__(self, message: str = "Not authorized for this operation"):
        super().__init__(message, "PERMISSION_DENIED")


class AuthenticationRequiredError(HousePointsError):
    """No authenticated caller on the request."""

    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, "AUTH_REQUIRED")


class ConflictRetryableError(HousePointsError):
    """A concurrent update won the race for the same row."""

    status_code = 409

    def __init__(self, message: str = "Concurrent update detected, please retry"):
        super().__init__(message, "CONFLICT_RETRYABLE")


class InvalidStatusTransitionError(HousePointsError):
    """Invalid status transition for a resource."""

    status_code = 409

    def __init__(self, resource: str, from_status: str, to_status: str):
        self.from_status = from_status
        self.to_status = to_status
        message = f"Cannot change {resource} status from '{from_status}' to '{to_status}'"
        super().__init__(message, "INVALID_STATUS_TRANSITION")


class DuplicateError(HousePointsError):
    """Resource already exists."""

    status_code = 409

    def __init__(self, resource: str, identifier=None):
        message = f"{resource} already exists"
        if identifier:
            message = f"{resource} with {identifier} already exists"
        super().__init__(message, "DUPLICATE_ENTRY")

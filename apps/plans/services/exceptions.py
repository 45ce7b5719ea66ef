"""
Domain-specific exceptions for plans app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class PlansServiceError(Exception):
    """Base exception for all plans service errors."""
    pass


class PlanNotFoundError(PlansServiceError):
    """Raised when a plan does not exist."""
    pass


class AlreadyMemberError(PlansServiceError):
    """Raised when adding a user who is already an active member."""
    pass


class NotMemberError(PlansServiceError):
    """Raised when a user tries to perform an action requiring active membership."""
    pass


class OwnerCannotLeaveError(PlansServiceError):
    """Raised when a plan owner tries to leave their plan."""
    pass


class CannotRemoveOwnerError(PlansServiceError):
    """Raised when attempting to remove the plan owner."""
    pass


class InsufficientPermissionsError(PlansServiceError):
    """Raised when a user lacks required permissions for an action."""
    pass


class UserNotFoundError(PlansServiceError):
    """Raised when the user to add does not exist."""
    pass

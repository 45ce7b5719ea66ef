"""
Plans app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations use transactions.
"""

from .exceptions import (
    PlansServiceError,
    PlanNotFoundError,
    AlreadyMemberError,
    NotMemberError,
    OwnerCannotLeaveError,
    CannotRemoveOwnerError,
    InsufficientPermissionsError,
    UserNotFoundError,
)

from .membership import (
    is_active_member,
    get_active_memberships,
    get_active_member_ids,
)

from .plan_management import (
    create_plan,
    add_member,
    leave_plan,
    remove_member,
    create_activity,
    get_plan_activities,
    get_user_plans,
)


__all__ = [
    # Exceptions
    'PlansServiceError',
    'PlanNotFoundError',
    'AlreadyMemberError',
    'NotMemberError',
    'OwnerCannotLeaveError',
    'CannotRemoveOwnerError',
    'InsufficientPermissionsError',
    'UserNotFoundError',

    # Membership lookup
    'is_active_member',
    'get_active_memberships',
    'get_active_member_ids',

    # Plan management
    'create_plan',
    'add_member',
    'leave_plan',
    'remove_member',
    'create_activity',
    'get_plan_activities',
    'get_user_plans',
]

"""
Plan management service.

Handles plan creation, membership lifecycle and activities with
transaction safety. Memberships are never deleted: leaving or being
removed flips the status so past expenses keep their share holders.
"""

import logging
from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.plans.models import Plan, PlanMembership, PlanRole, MembershipStatus, Activity

from .exceptions import (
    PlanNotFoundError,
    AlreadyMemberError,
    NotMemberError,
    OwnerCannotLeaveError,
    CannotRemoveOwnerError,
    InsufficientPermissionsError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


def _get_plan(plan_id: UUID, *, lock: bool = False) -> Plan:
    queryset = Plan.objects.select_for_update() if lock else Plan.objects
    try:
        return queryset.get(id=plan_id)
    except Plan.DoesNotExist:
        raise PlanNotFoundError(f"Plan with ID {plan_id} not found")


@transaction.atomic
def create_plan(*, name: str, owner: User, description: str = '') -> Plan:
    """
    Create a new plan and add the creator as active owner.

    Args:
        name: Plan name
        owner: User who will own the plan
        description: Optional plan description

    Returns:
        Created Plan instance
    """
    plan = Plan.objects.create(name=name, owner=owner, description=description)
    PlanMembership.objects.create(
        user=owner,
        plan=plan,
        role=PlanRole.OWNER,
        status=MembershipStatus.ACTIVE
    )
    logger.info("Plan %s created by %s", plan.id, owner.id)
    return plan


@transaction.atomic
def add_member(*, plan_id: UUID, user_id: UUID, added_by: User) -> PlanMembership:
    """
    Add a user to a plan (admin only).

    A user who previously left or was removed is reactivated as MEMBER.

    Raises:
        PlanNotFoundError: If plan doesn't exist
        InsufficientPermissionsError: If added_by is not admin
        UserNotFoundError: If the user doesn't exist
        AlreadyMemberError: If the user is already active
    """
    plan = _get_plan(plan_id, lock=True)

    if not plan.is_admin(added_by):
        raise InsufficientPermissionsError("Only plan admins can add members")

    if not User.objects.filter(id=user_id).exists():
        raise UserNotFoundError(f"User with ID {user_id} not found")

    membership = (
        PlanMembership.objects
        .select_for_update()
        .filter(plan=plan, user_id=user_id)
        .first()
    )

    if membership is None:
        try:
            with transaction.atomic():
                return PlanMembership.objects.create(
                    plan=plan,
                    user_id=user_id,
                    role=PlanRole.MEMBER,
                    status=MembershipStatus.ACTIVE
                )
        except IntegrityError:
            raise AlreadyMemberError("User is already a member of this plan")

    if membership.status == MembershipStatus.ACTIVE:
        raise AlreadyMemberError("User is already a member of this plan")

    membership.status = MembershipStatus.ACTIVE
    membership.role = PlanRole.MEMBER
    membership.save(update_fields=['status', 'role'])
    return membership


@transaction.atomic
def leave_plan(*, plan_id: UUID, user: User) -> None:
    """
    Leave a plan. The owner cannot leave their own plan.

    Raises:
        PlanNotFoundError: If plan doesn't exist
        OwnerCannotLeaveError: If user is the owner
        NotMemberError: If user is not an active member
    """
    plan = _get_plan(plan_id)

    if plan.owner_id == user.id:
        raise OwnerCannotLeaveError("Plan owner cannot leave the plan")

    updated = PlanMembership.objects.filter(
        plan=plan,
        user=user,
        status=MembershipStatus.ACTIVE
    ).update(status=MembershipStatus.LEFT)

    if not updated:
        raise NotMemberError(f"User is not a member of {plan.name}")


@transaction.atomic
def remove_member(*, plan_id: UUID, user_id: UUID, removed_by: User) -> None:
    """
    Remove a member from a plan (admin only). Cannot remove the owner.

    Raises:
        PlanNotFoundError: If plan doesn't exist
        InsufficientPermissionsError: If removed_by is not admin
        CannotRemoveOwnerError: If trying to remove the owner
        NotMemberError: If target user is not an active member
    """
    plan = _get_plan(plan_id)

    if not plan.is_admin(removed_by):
        raise InsufficientPermissionsError("Only plan admins can remove members")

    if str(plan.owner_id) == str(user_id):
        raise CannotRemoveOwnerError("Cannot remove the plan owner")

    updated = PlanMembership.objects.filter(
        plan=plan,
        user_id=user_id,
        status=MembershipStatus.ACTIVE
    ).update(status=MembershipStatus.REMOVED)

    if not updated:
        raise NotMemberError("User is not a member of this plan")


def create_activity(
    *,
    plan_id: UUID,
    user: User,
    name: str,
    description: str = ''
) -> Activity:
    """
    Create an activity in a plan (active members only).

    Raises:
        PlanNotFoundError: If plan doesn't exist
        NotMemberError: If user is not an active member
    """
    plan = _get_plan(plan_id)

    if not plan.has_active_member(user):
        raise NotMemberError("You are not a member of this plan")

    return Activity.objects.create(
        plan=plan,
        name=name,
        description=description,
        created_by=user
    )


def get_plan_activities(*, plan_id: UUID, user: User) -> QuerySet[Activity]:
    plan = _get_plan(plan_id)

    if not plan.has_active_member(user):
        raise NotMemberError("You are not a member of this plan")

    return plan.activities.all()


def get_user_plans(*, user: User, owner_only: bool = False) -> QuerySet[Plan]:
    """Plans where the user is an active member (optionally only owned ones)."""
    queryset = Plan.objects.filter(
        memberships__user=user,
        memberships__status=MembershipStatus.ACTIVE
    )
    if owner_only:
        queryset = queryset.filter(owner=user)
    return queryset.select_related('owner').distinct()

"""
Membership lookup service.

Read-only queries over active plan membership. The expense ledger only
ever consults membership through these functions.
"""

from typing import List
from uuid import UUID

from django.db.models import QuerySet

from apps.plans.models import Plan, PlanMembership, MembershipStatus

from .exceptions import PlanNotFoundError


def is_active_member(*, plan_id: UUID, user_id: UUID) -> bool:
    """Return True if the user is an ACTIVE member of the plan."""
    return PlanMembership.objects.filter(
        plan_id=plan_id,
        user_id=user_id,
        status=MembershipStatus.ACTIVE
    ).exists()


def get_active_memberships(*, plan_id: UUID) -> QuerySet[PlanMembership]:
    """
    Get active memberships of a plan in join order.

    Raises:
        PlanNotFoundError: If plan doesn't exist
    """
    if not Plan.objects.filter(id=plan_id).exists():
        raise PlanNotFoundError(f"Plan with ID {plan_id} not found")

    return (
        PlanMembership.objects
        .filter(plan_id=plan_id, status=MembershipStatus.ACTIVE)
        .select_related('user')
        .order_by('joined_at', 'id')
    )


def get_active_member_ids(*, plan_id: UUID) -> List[UUID]:
    """Active member user IDs in join order (the order remainder cents follow)."""
    return [m.user_id for m in get_active_memberships(plan_id=plan_id)]

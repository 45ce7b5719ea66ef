"""
Plan membership checks used by every ledger operation.

Wraps the plans app's membership lookup and translates its answers into
ledger exceptions.
"""

from typing import List
from uuid import UUID

from apps.accounts.models import User
from apps.plans.models import Plan
from apps.plans.services import is_active_member, get_active_member_ids

from .exceptions import PlanNotFoundError, NotPlanMemberError


def get_plan(*, plan_id: UUID) -> Plan:
    try:
        return Plan.objects.get(id=plan_id)
    except Plan.DoesNotExist:
        raise PlanNotFoundError(f"Plan with ID {plan_id} not found")


def require_active_member(*, plan_id: UUID, user: User) -> Plan:
    """
    Return the plan if the user is one of its active members.

    Raises:
        PlanNotFoundError: If the plan doesn't exist
        NotPlanMemberError: If the user is not an active member
    """
    plan = get_plan(plan_id=plan_id)
    if not is_active_member(plan_id=plan.id, user_id=user.id):
        raise NotPlanMemberError("You are not a member of this plan")
    return plan


def active_member_ids(*, plan_id: UUID) -> List[UUID]:
    """Active member IDs in join order."""
    return get_active_member_ids(plan_id=plan_id)

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.plans.models import Plan, PlanMembership, PlanRole, MembershipStatus, Activity


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def plan_owner(db):
    """Create and return a test user (plan owner)."""
    return User.objects.create_user(
        email='owner@example.com',
        password='TestPass123!',
        display_name='Plan Owner',
    )


@pytest.fixture
def admin_user(db):
    """Create and return a plan admin."""
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        display_name='Plan Admin',
    )


@pytest.fixture
def member_user(db):
    """Create and return a plan member."""
    return User.objects.create_user(
        email='member@example.com',
        password='TestPass123!',
        display_name='Plan Member',
    )


@pytest.fixture
def plan_other_user(db):
    """Create and return a user not in any plan."""
    return User.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
        display_name='Other User',
    )


@pytest.fixture
def plan(db, plan_owner, admin_user, member_user):
    """Create a plan with owner, admin and member."""
    plan = Plan.objects.create(
        name='Weekend Hike',
        description='Two days in the mountains',
        owner=plan_owner,
    )
    PlanMembership.objects.create(plan=plan, user=plan_owner, role=PlanRole.OWNER)
    PlanMembership.objects.create(plan=plan, user=admin_user, role=PlanRole.ADMIN)
    PlanMembership.objects.create(plan=plan, user=member_user, role=PlanRole.MEMBER)
    return plan


@pytest.fixture
def departed_member(db, plan, plan_other_user):
    """Membership of a user who has left the plan."""
    return PlanMembership.objects.create(
        plan=plan,
        user=plan_other_user,
        role=PlanRole.MEMBER,
        status=MembershipStatus.LEFT,
    )


@pytest.fixture
def activity(db, plan, plan_owner):
    return Activity.objects.create(plan=plan, name='Summit', created_by=plan_owner)


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def authenticated_client(plan_owner):
    """Return API client authenticated as plan owner."""
    return _client_for(plan_owner)


@pytest.fixture
def admin_client(admin_user):
    """Return API client authenticated as plan admin."""
    return _client_for(admin_user)


@pytest.fixture
def member_client(member_user):
    """Return API client authenticated as plan member."""
    return _client_for(member_user)


@pytest.fixture
def other_client(plan_other_user):
    """Return API client authenticated as non-member."""
    return _client_for(plan_other_user)

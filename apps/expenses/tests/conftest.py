import pytest
from datetime import timedelta
from decimal import Decimal
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.plans.models import Plan, PlanMembership, PlanRole, MembershipStatus, Activity
from apps.expenses.services import create_expense


def authenticate(client, user):
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def alice(db):
    """Plan owner; pays for most things."""
    return User.objects.create_user(
        email='alice@example.com',
        password='TestPass123!',
        display_name='Alice',
    )


@pytest.fixture
def bob(db):
    return User.objects.create_user(
        email='bob@example.com',
        password='TestPass123!',
        display_name='Bob',
    )


@pytest.fixture
def carol(db):
    return User.objects.create_user(
        email='carol@example.com',
        password='TestPass123!',
        display_name='Carol',
    )


@pytest.fixture
def outsider(db):
    """Create and return a user not in the plan."""
    return User.objects.create_user(
        email='outsider@example.com',
        password='TestPass123!',
        display_name='Outsider',
    )


@pytest.fixture
def plan(db, alice, bob, carol):
    """
    Plan with alice (owner), bob and carol as active members.

    Join order is pinned to alice, bob, carol.
    """
    plan = Plan.objects.create(name='Lisbon Trip', owner=alice)
    base = timezone.now() - timedelta(days=1)
    for offset, user in enumerate([alice, bob, carol]):
        membership = PlanMembership.objects.create(
            plan=plan,
            user=user,
            role=PlanRole.OWNER if user == alice else PlanRole.MEMBER,
            status=MembershipStatus.ACTIVE,
        )
        PlanMembership.objects.filter(id=membership.id).update(
            joined_at=base + timedelta(minutes=offset)
        )
    return plan


@pytest.fixture
def activity(db, plan, alice):
    return Activity.objects.create(plan=plan, name='Dinner cruise', created_by=alice)


@pytest.fixture
def other_plan(db, outsider):
    plan = Plan.objects.create(name='Other Plan', owner=outsider)
    PlanMembership.objects.create(plan=plan, user=outsider, role=PlanRole.OWNER)
    return plan


@pytest.fixture
def equal_expense(db, plan, alice):
    """30.00 paid by alice, split equally among three members."""
    return create_expense(
        plan_id=plan.id,
        payer=alice,
        title='Groceries',
        amount=Decimal('30.00'),
    )


@pytest.fixture
def skewed_expense(db, plan, alice, bob, carol):
    """100.00 paid by alice: alice 40, bob 40, carol 20."""
    return create_expense(
        plan_id=plan.id,
        payer=alice,
        title='Apartment',
        amount=Decimal('100.00'),
        split_type='CUSTOM',
        shares=[
            {'user_id': alice.id, 'amount': Decimal('40.00')},
            {'user_id': bob.id, 'amount': Decimal('40.00')},
            {'user_id': carol.id, 'amount': Decimal('20.00')},
        ],
    )


@pytest.fixture
def alice_client(alice):
    """Return API client authenticated as the plan owner."""
    return authenticate(APIClient(), alice)


@pytest.fixture
def bob_client(bob):
    return authenticate(APIClient(), bob)


@pytest.fixture
def outsider_client(outsider):
    """Return API client authenticated as a non-member."""
    return authenticate(APIClient(), outsider)


@pytest.fixture
def carol_client(carol):
    return authenticate(APIClient(), carol)

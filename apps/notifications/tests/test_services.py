import logging
import pytest
from decimal import Decimal
from unittest.mock import patch

from apps.accounts.models import User
from apps.expenses.services import create_expense, settle_share, update_expense
from apps.expenses.services.exceptions import InvalidSplitError
from apps.notifications.models import Notification, NotificationType
from apps.notifications.services import PendingNotification, dispatch_on_commit
from apps.plans.models import Plan, PlanMembership, PlanRole


@pytest.fixture
def payer(db):
    return User.objects.create_user(email='payer@example.com', password='TestPass123!', display_name='Pat')


@pytest.fixture
def friend(db):
    return User.objects.create_user(email='friend@example.com', password='TestPass123!')


@pytest.fixture
def plan(db, payer, friend):
    plan = Plan.objects.create(name='Ski Week', owner=payer)
    PlanMembership.objects.create(plan=plan, user=payer, role=PlanRole.OWNER)
    PlanMembership.objects.create(plan=plan, user=friend, role=PlanRole.MEMBER)
    return plan


@pytest.mark.django_db
class TestDispatchOnCommit:
    """Notifications are written only after the surrounding transaction commits."""

    def test_new_expense_notifies_other_members(self, plan, payer, friend, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            expense = create_expense(plan_id=plan.id, payer=payer, title='Lift passes', amount=Decimal('80.00'))

        notifications = list(Notification.objects.all())
        assert len(notifications) == 1
        assert notifications[0].user == friend
        assert notifications[0].type == NotificationType.NEW_EXPENSE
        assert notifications[0].body == 'Pat added "Lift passes" - You owe USD 40.00'
        assert notifications[0].data == {'planId': str(plan.id), 'expenseId': str(expense.id)}

    def test_settlement_notifies_debtor(self, plan, payer, friend, django_capture_on_commit_callbacks):
        expense = create_expense(plan_id=plan.id, payer=payer, title='Fondue', amount=Decimal('20.00'))

        with django_capture_on_commit_callbacks(execute=True):
            settle_share(expense_id=expense.id, share_user_id=friend.id, requester=payer)

        settled = Notification.objects.get(type=NotificationType.EXPENSE_SETTLED)
        assert settled.user == friend
        assert 'Fondue' in settled.body

    def test_nothing_dispatched_on_rollback(self, plan, payer, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks() as callbacks:
            with pytest.raises(InvalidSplitError):
                create_expense(
                    plan_id=plan.id,
                    payer=payer,
                    title='Broken',
                    amount=Decimal('10.00'),
                    split_type='CUSTOM',
                )

        assert callbacks == []

    def test_edit_does_not_notify(self, plan, payer, django_capture_on_commit_callbacks):
        expense = create_expense(plan_id=plan.id, payer=payer, title='Rental', amount=Decimal('50.00'))

        with django_capture_on_commit_callbacks() as callbacks:
            update_expense(expense_id=expense.id, requester=payer, amount=Decimal('60.00'))

        assert callbacks == []

    def test_disabled_by_setting(self, plan, payer, settings, django_capture_on_commit_callbacks):
        settings.LEDGER_NOTIFICATIONS_ENABLED = False

        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            create_expense(plan_id=plan.id, payer=payer, title='Quiet', amount=Decimal('10.00'))

        assert callbacks == []
        assert not Notification.objects.exists()

    def test_empty_batch_is_skipped(self, db, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks() as callbacks:
            dispatch_on_commit([])

        assert callbacks == []

    def test_delivery_failure_is_logged_not_raised(self, friend, caplog, django_capture_on_commit_callbacks):
        pending = [PendingNotification(friend.id, NotificationType.NEW_EXPENSE, 'Hi', 'Body')]

        with patch('apps.notifications.services.create_notifications', side_effect=RuntimeError('down')):
            with caplog.at_level(logging.ERROR, logger='apps.notifications.services'):
                with django_capture_on_commit_callbacks(execute=True):
                    dispatch_on_commit(pending)

        assert 'Failed to dispatch 1 notification(s)' in caplog.text
        assert not Notification.objects.exists()

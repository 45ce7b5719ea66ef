"""
Settlement recording.

Confirms a single share as paid. Only the payer, the person owed the
money, may confirm. Each share is settled on its own; nothing cascades.
"""

import logging
from uuid import UUID

from django.db import transaction

from apps.accounts.models import User
from apps.expenses.models import Expense, ExpenseShare
from apps.notifications.models import NotificationType
from apps.notifications.services import PendingNotification, dispatch_on_commit

from .exceptions import ExpenseNotFoundError, InsufficientPermissionsError
from .share_ledger import mark_paid

logger = logging.getLogger(__name__)


def settle_share(*, expense_id: UUID, share_user_id: UUID, requester: User) -> ExpenseShare:
    """
    Mark one member's share of an expense as paid.

    Args:
        expense_id: Expense the share belongs to
        share_user_id: Member whose share is being settled
        requester: User confirming the payment (must be the payer)

    Returns:
        The updated ExpenseShare

    Raises:
        ExpenseNotFoundError: If the expense doesn't exist
        InsufficientPermissionsError: If requester is not the payer
        ShareNotFoundError: If the member has no share in the expense
        ShareAlreadyPaidError: If the share was already paid
    """
    with transaction.atomic():
        try:
            expense = Expense.objects.get(id=expense_id)
        except Expense.DoesNotExist:
            raise ExpenseNotFoundError("Expense not found")

        if expense.payer_id != requester.id:
            raise InsufficientPermissionsError("Only the person who paid can settle shares")

        share = mark_paid(expense_id=expense.id, user_id=share_user_id)

        dispatch_on_commit([
            PendingNotification(
                user_id=share.user_id,
                type=NotificationType.EXPENSE_SETTLED,
                title='Expense settled',
                body=f'Your share for "{expense.title}" has been marked as paid',
                data={'planId': str(expense.plan_id), 'expenseId': str(expense.id)},
            )
        ])

    logger.info("Share of %s on expense %s settled by %s", share_user_id, expense_id, requester.id)
    return share

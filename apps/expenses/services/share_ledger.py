"""
Share ledger.

Stores the share set of an expense as one unit. Readers never observe an
expense with zero, partial or doubled shares: inserts and replacements run
inside a single transaction, and settling is a conditional update keyed on
(expense, user).
"""

import logging
from decimal import Decimal
from typing import List, Sequence
from uuid import UUID

from django.db import transaction, IntegrityError
from django.utils import timezone

from apps.expenses.models import Expense, ExpenseShare

from .exceptions import (
    InvalidAmountError,
    InvalidSplitError,
    DuplicateShareError,
    ShareNotFoundError,
    ShareAlreadyPaidError,
)
from .split_calculation import ShareAllocation, SUM_TOLERANCE

logger = logging.getLogger(__name__)


def _check_allocations(expense: Expense, allocations: Sequence[ShareAllocation]) -> None:
    """Reject share sets that break the sum, uniqueness or sign rules."""
    if expense.amount <= 0:
        raise InvalidAmountError("Expense amount must be positive")

    if not allocations:
        raise InvalidSplitError("An expense needs at least one share")

    user_ids = [a.user_id for a in allocations]
    if len(set(user_ids)) != len(user_ids):
        raise DuplicateShareError("A member can hold only one share per expense")

    if any(a.amount < 0 for a in allocations):
        raise InvalidSplitError("Share amounts cannot be negative")

    total = sum((a.amount for a in allocations), Decimal('0.00'))
    if abs(total - expense.amount) >= SUM_TOLERANCE:
        raise InvalidSplitError(
            f"Share amounts ({total}) must equal total expense amount ({expense.amount})"
        )


def _insert(expense: Expense, allocations: Sequence[ShareAllocation]) -> List[ExpenseShare]:
    now = timezone.now()
    rows = [
        ExpenseShare(
            expense=expense,
            user_id=a.user_id,
            amount=a.amount,
            is_paid=a.is_paid,
            paid_at=now if a.is_paid else None,
        )
        for a in allocations
    ]
    try:
        # Savepoint so the caller's transaction stays usable after a clash
        with transaction.atomic():
            return ExpenseShare.objects.bulk_create(rows)
    except IntegrityError:
        raise DuplicateShareError("A share for this expense and member already exists")


@transaction.atomic
def create_shares(*, expense: Expense, allocations: Sequence[ShareAllocation]) -> List[ExpenseShare]:
    """
    Insert the full share set of a new expense.

    Args:
        expense: Saved expense the shares belong to
        allocations: Output of the split calculator

    Returns:
        Created ExpenseShare rows

    Raises:
        InvalidSplitError: If the allocations don't add up or are negative
        DuplicateShareError: If a (expense, user) row already exists
    """
    _check_allocations(expense, allocations)
    return _insert(expense, allocations)


@transaction.atomic
def replace_shares(*, expense: Expense, allocations: Sequence[ShareAllocation]) -> List[ExpenseShare]:
    """
    Swap the whole share set of an expense for a new one.

    Delete and insert run in one transaction; if anything fails the
    previous share set is restored by the rollback.

    Raises:
        InvalidSplitError: If the new allocations don't add up or are negative
        DuplicateShareError: If allocations name a member twice
    """
    _check_allocations(expense, allocations)

    deleted, _ = ExpenseShare.objects.filter(expense=expense).delete()
    shares = _insert(expense, allocations)

    logger.info(
        "Replaced %d share(s) with %d on expense %s",
        deleted, len(shares), expense.id
    )
    return shares


def mark_paid(*, expense_id: UUID, user_id: UUID) -> ExpenseShare:
    """
    Mark exactly one share as paid.

    The update only matches an unpaid row, so when two requests race for
    the same share one of them updates it and the other gets
    ShareAlreadyPaidError.

    Raises:
        ShareNotFoundError: If the expense has no share for this user
        ShareAlreadyPaidError: If the share was already paid
    """
    with transaction.atomic():
        updated = ExpenseShare.objects.filter(
            expense_id=expense_id,
            user_id=user_id,
            is_paid=False,
        ).update(is_paid=True, paid_at=timezone.now())

        if not updated:
            if ExpenseShare.objects.filter(expense_id=expense_id, user_id=user_id).exists():
                raise ShareAlreadyPaidError("Share is already marked as paid")
            raise ShareNotFoundError("Share not found for this expense and user")

        return ExpenseShare.objects.select_related('user').get(
            expense_id=expense_id,
            user_id=user_id,
        )


def delete_shares(*, expense: Expense) -> int:
    """Delete every share of an expense; returns the number removed."""
    deleted, _ = ExpenseShare.objects.filter(expense=expense).delete()
    return deleted

"""
Expense lifecycle service.

Creates, edits, deletes and reads expenses. An expense and its shares are
always written together: creation inserts both in one transaction, and an
edit that changes the amount, split type or shares replaces the whole
share set in the same transaction as the expense row.
"""

import logging
from typing import Iterable, List, Mapping, Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.expenses.models import Expense, ExpenseShare, SplitType
from apps.notifications.models import NotificationType
from apps.notifications.services import PendingNotification, dispatch_on_commit
from apps.plans.models import Activity

from .exceptions import (
    ActivityNotFoundError,
    ExpenseNotFoundError,
    InsufficientPermissionsError,
    InvalidSplitError,
    LedgerValidationError,
    NotPlanMemberError,
)
from .plan_access import active_member_ids, require_active_member
from .share_ledger import create_shares, delete_shares, replace_shares
from .split_calculation import calculate_shares, normalize_shares, validate_amount

logger = logging.getLogger(__name__)


def _normalize_currency(currency: Optional[str]) -> str:
    currency = (currency or settings.LEDGER_DEFAULT_CURRENCY).upper()
    if len(currency) != 3 or not currency.isalpha():
        raise LedgerValidationError("Currency must be a 3-letter code")
    return currency


def _load_expense(expense_id: UUID) -> Expense:
    try:
        return (
            Expense.objects
            .select_related('payer', 'activity', 'plan')
            .prefetch_related('shares__user')
            .get(id=expense_id)
        )
    except Expense.DoesNotExist:
        raise ExpenseNotFoundError("Expense not found")


def _new_expense_notifications(
    expense: Expense,
    shares: Iterable[ExpenseShare],
) -> List[PendingNotification]:
    payer_name = expense.payer.get_display_name()
    return [
        PendingNotification(
            user_id=share.user_id,
            type=NotificationType.NEW_EXPENSE,
            title='New expense added',
            body=(
                f'{payer_name} added "{expense.title}" - '
                f'You owe {expense.currency} {share.amount:.2f}'
            ),
            data={'planId': str(expense.plan_id), 'expenseId': str(expense.id)},
        )
        for share in shares
        if share.user_id != expense.payer_id
    ]


def create_expense(
    *,
    plan_id: UUID,
    payer: User,
    title: str,
    amount,
    split_type: str = SplitType.EQUAL,
    currency: Optional[str] = None,
    description: str = '',
    activity_id: Optional[UUID] = None,
    receipt: str = '',
    shares: Optional[Iterable[Mapping]] = None,
) -> Expense:
    """
    Create an expense paid by ``payer`` and split it among active members.

    Args:
        plan_id: Plan the expense belongs to
        payer: Member who fronted the money
        title: Short label
        amount: Positive total with at most two decimals
        split_type: EQUAL, CUSTOM or BY_ITEM
        currency: 3-letter code; defaults to LEDGER_DEFAULT_CURRENCY
        description: Optional longer text
        activity_id: Optional activity of the same plan
        receipt: Optional receipt URL
        shares: Explicit ``[{'user_id', 'amount'}]`` for CUSTOM/BY_ITEM

    Returns:
        The created Expense with payer and shares loaded

    Raises:
        PlanNotFoundError: If the plan doesn't exist
        NotPlanMemberError: If payer is not an active member
        ActivityNotFoundError: If the activity isn't part of the plan
        LedgerValidationError: If amount, currency or shares are invalid

    Example:
        >>> expense = create_expense(
        ...     plan_id=plan.id,
        ...     payer=request.user,
        ...     title='Dinner',
        ...     amount=Decimal('30.00'),
        ... )
        >>> [s.amount for s in expense.shares.all()]
        [Decimal('10.00'), Decimal('10.00'), Decimal('10.00')]
    """
    with transaction.atomic():
        plan = require_active_member(plan_id=plan_id, user=payer)

        activity = None
        if activity_id:
            activity = Activity.objects.filter(id=activity_id, plan=plan).first()
            if activity is None:
                raise ActivityNotFoundError("Activity not found in this plan")

        amount = validate_amount(amount)
        allocations = calculate_shares(
            amount=amount,
            split_type=split_type,
            member_ids=active_member_ids(plan_id=plan.id),
            payer_id=payer.id,
            shares=shares,
        )

        expense = Expense.objects.create(
            plan=plan,
            payer=payer,
            activity=activity,
            title=title,
            description=description or '',
            amount=amount,
            currency=_normalize_currency(currency),
            split_type=split_type,
            receipt=receipt or '',
        )
        share_rows = create_shares(expense=expense, allocations=allocations)

        dispatch_on_commit(_new_expense_notifications(expense, share_rows))

    logger.info(
        "Expense %s (%s %s, %s) created in plan %s with %d share(s)",
        expense.id, expense.amount, expense.currency, split_type, plan.id, len(share_rows)
    )
    return _load_expense(expense.id)


def update_expense(
    *,
    expense_id: UUID,
    requester: User,
    title: Optional[str] = None,
    description: Optional[str] = None,
    amount=None,
    currency: Optional[str] = None,
    split_type: Optional[str] = None,
    receipt: Optional[str] = None,
    shares: Optional[Iterable[Mapping]] = None,
) -> Expense:
    """
    Edit an expense (payer only).

    Arguments left as None are unchanged. When the amount, split type or
    shares differ from what is stored, the allocation is recomputed
    against the current active members and every share is replaced,
    which resets paid state for everybody but the payer. Re-sending the
    stored values leaves the shares and their paid state alone. If
    validation fails nothing is written and the previous shares remain.

    Raises:
        ExpenseNotFoundError: If the expense doesn't exist
        InsufficientPermissionsError: If requester is not the payer
        LedgerValidationError: If the new amount, currency or split is invalid
    """
    with transaction.atomic():
        try:
            expense = Expense.objects.select_for_update().get(id=expense_id)
        except Expense.DoesNotExist:
            raise ExpenseNotFoundError("Expense not found")

        if expense.payer_id != requester.id:
            raise InsufficientPermissionsError("Only the person who paid can edit the expense")

        new_amount = validate_amount(amount) if amount is not None else expense.amount
        new_split_type = split_type if split_type is not None else expense.split_type

        if new_split_type == SplitType.EQUAL and shares:
            raise InvalidSplitError("EQUAL split does not take explicit shares")

        reallocate = new_amount != expense.amount or new_split_type != expense.split_type
        if shares is not None and not reallocate:
            stored = dict(
                ExpenseShare.objects.filter(expense=expense).values_list('user_id', 'amount')
            )
            reallocate = normalize_shares(shares) != stored

        if title is not None:
            expense.title = title
        if description is not None:
            expense.description = description
        if receipt is not None:
            expense.receipt = receipt
        if currency is not None:
            expense.currency = _normalize_currency(currency)
        expense.amount = new_amount
        expense.split_type = new_split_type

        allocations = None
        if reallocate:
            allocations = calculate_shares(
                amount=expense.amount,
                split_type=expense.split_type,
                member_ids=active_member_ids(plan_id=expense.plan_id),
                payer_id=expense.payer_id,
                shares=shares,
            )

        expense.save()

        if allocations is not None:
            replace_shares(expense=expense, allocations=allocations)

    logger.info("Expense %s updated by %s (shares replaced: %s)", expense_id, requester.id, reallocate)
    return _load_expense(expense_id)


def delete_expense(*, expense_id: UUID, requester: User) -> None:
    """
    Delete an expense and its shares (payer or plan owner).

    Shares are removed explicitly before the expense, in one transaction.

    Raises:
        ExpenseNotFoundError: If the expense doesn't exist
        InsufficientPermissionsError: If requester is neither payer nor owner
    """
    with transaction.atomic():
        try:
            expense = (
                Expense.objects
                .select_for_update()
                .select_related('plan')
                .get(id=expense_id)
            )
        except Expense.DoesNotExist:
            raise ExpenseNotFoundError("Expense not found")

        if expense.payer_id != requester.id and expense.plan.owner_id != requester.id:
            raise InsufficientPermissionsError("You do not have permission to delete this expense")

        removed = delete_shares(expense=expense)
        expense.delete()

    logger.info("Expense %s and %d share(s) deleted by %s", expense_id, removed, requester.id)


def get_expense(*, expense_id: UUID, user: User) -> Expense:
    """
    Fetch one expense with payer, activity and shares.

    Raises:
        ExpenseNotFoundError: If the expense doesn't exist
        NotPlanMemberError: If user is not an active member of its plan
    """
    expense = _load_expense(expense_id)
    try:
        require_active_member(plan_id=expense.plan_id, user=user)
    except NotPlanMemberError:
        raise NotPlanMemberError("You do not have access to this expense")
    return expense


def list_plan_expenses(*, plan_id: UUID, user: User) -> QuerySet[Expense]:
    """Expenses of a plan, newest first (active members only)."""
    require_active_member(plan_id=plan_id, user=user)
    return (
        Expense.objects
        .filter(plan_id=plan_id)
        .select_related('payer', 'activity')
        .prefetch_related('shares__user')
        .order_by('-created_at')
    )

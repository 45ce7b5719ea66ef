"""
Balance aggregation.

Recomputes every member's position from the stored shares on each call;
no derived state is cached.

For each active member ``u``:

- ``paid(u)``: total of expenses ``u`` paid for
- ``owed(u)``: total of ``u``'s shares, own shares included
- ``balance(u) = paid(u) - owed(u)``, with each settled share counted as
  money the debtor handed the payer; positive means the group owes ``u``
- ``outstanding(u)``: ``u``'s unpaid shares on expenses others paid
- ``owed_to_you(u)``: others' unpaid shares on expenses ``u`` paid
"""

from decimal import Decimal
from typing import Dict, Iterable, List, Sequence
from uuid import UUID

from django.conf import settings

from apps.accounts.models import User
from apps.expenses.models import ExpenseShare
from apps.plans.services import get_active_memberships

from .plan_access import require_active_member

ZERO = Decimal('0.00')


def aggregate_balances(*, shares: Iterable[ExpenseShare], member_ids: Sequence[UUID]) -> List[Dict]:
    """
    Compute per-member totals over a set of shares.

    Each expense's amount is counted once toward its payer, however many
    of its shares appear.

    Args:
        shares: Shares with their expense loaded (``select_related('expense')``)
        member_ids: Members to report on, in output order

    Returns:
        One dict per member with ``user_id``, ``paid``, ``owed``,
        ``balance``, ``outstanding`` and ``owed_to_you``
    """
    totals = {
        user_id: {
            'paid': ZERO, 'owed': ZERO, 'outstanding': ZERO, 'owed_to_you': ZERO,
            'settled_out': ZERO, 'settled_in': ZERO,
        }
        for user_id in member_ids
    }
    seen_expenses = set()

    for share in shares:
        expense = share.expense
        payer_id = expense.payer_id
        if expense.id not in seen_expenses:
            seen_expenses.add(expense.id)
            if payer_id in totals:
                totals[payer_id]['paid'] += expense.amount

        if share.user_id in totals:
            totals[share.user_id]['owed'] += share.amount

        if share.user_id == payer_id:
            continue
        if share.is_paid:
            if share.user_id in totals:
                totals[share.user_id]['settled_out'] += share.amount
            if payer_id in totals:
                totals[payer_id]['settled_in'] += share.amount
            continue
        if share.user_id in totals:
            totals[share.user_id]['outstanding'] += share.amount
        if payer_id in totals:
            totals[payer_id]['owed_to_you'] += share.amount

    balances = []
    for user_id in member_ids:
        t = totals[user_id]
        balances.append({
            'user_id': user_id,
            'paid': t['paid'],
            'owed': t['owed'],
            'balance': t['paid'] - t['owed'] + t['settled_out'] - t['settled_in'],
            'outstanding': t['outstanding'],
            'owed_to_you': t['owed_to_you'],
        })
    return balances


def get_plan_expense_summary(*, plan_id: UUID, user: User) -> Dict:
    """
    Summarize spending and balances of a plan.

    Shares and their expenses are read in a single joined query, so the
    figures come from one statement-level view of the ledger even under
    READ COMMITTED. Every expense carries at least one share, so the
    expenses are recovered from the shares.

    Returns:
        dict: ``total_spent``, ``expense_count``, ``currency`` and
        ``balances`` (one entry per active member, each carrying ``user``)

    Raises:
        PlanNotFoundError: If the plan doesn't exist
        NotPlanMemberError: If user is not an active member
    """
    require_active_member(plan_id=plan_id, user=user)

    memberships = list(get_active_memberships(plan_id=plan_id))
    shares = list(
        ExpenseShare.objects
        .filter(expense__plan_id=plan_id)
        .select_related('expense')
        .order_by('expense__created_at', 'expense_id')
    )
    expenses = list({share.expense_id: share.expense for share in shares}.values())

    users = {m.user_id: m.user for m in memberships}
    balances = aggregate_balances(shares=shares, member_ids=list(users))
    for entry in balances:
        entry['user'] = users[entry['user_id']]

    return {
        'total_spent': sum((e.amount for e in expenses), ZERO),
        'expense_count': len(expenses),
        'balances': balances,
        'currency': expenses[0].currency if expenses else settings.LEDGER_DEFAULT_CURRENCY,
    }


def get_user_debts(*, plan_id: UUID, user: User) -> List[Dict]:
    """
    List what a member still owes to each payer in a plan.

    Returns:
        list[dict]: One entry per creditor with ``creditor`` (User),
        ``total_owed`` and ``expenses`` (id, title, amount, currency)

    Raises:
        PlanNotFoundError: If the plan doesn't exist
        NotPlanMemberError: If user is not an active member
    """
    require_active_member(plan_id=plan_id, user=user)

    unpaid_shares = (
        ExpenseShare.objects
        .filter(
            user=user,
            is_paid=False,
            amount__gt=0,
            expense__plan_id=plan_id,
        )
        .exclude(expense__payer=user)
        .select_related('expense', 'expense__payer')
        .order_by('expense__created_at')
    )

    debts_by_payer = {}
    for share in unpaid_shares:
        expense = share.expense
        entry = debts_by_payer.setdefault(expense.payer_id, {
            'creditor': expense.payer,
            'total_owed': ZERO,
            'expenses': [],
        })
        entry['total_owed'] += share.amount
        entry['expenses'].append({
            'id': expense.id,
            'title': expense.title,
            'amount': share.amount,
            'currency': expense.currency,
        })

    return list(debts_by_payer.values())

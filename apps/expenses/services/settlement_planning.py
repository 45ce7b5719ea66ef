"""
Settlement planning (debt simplification).

Greedy two-pointer pass over members sorted by net balance: the biggest
debtor pays the biggest creditor as much as either side allows, and the
side that reaches zero moves inward. Every step zeroes at least one member,
so ``n`` members need at most ``n - 1`` transfers.

The plan is advisory. It never touches shares; each real-world payment is
still recorded share by share through ``settle_share``.
"""

from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, NamedTuple
from uuid import UUID

from apps.accounts.models import User

from .balance_aggregation import get_plan_expense_summary
from .split_calculation import CENT


class Transfer(NamedTuple):
    """``from_user_id`` pays ``to_user_id`` the given amount."""
    from_user_id: UUID
    to_user_id: UUID
    amount: Decimal


def plan_settlements(balances: Iterable[Mapping]) -> List[Transfer]:
    """
    Compute a short list of transfers that zeroes every balance.

    Args:
        balances: Mappings with ``user_id`` and ``balance`` (paid - owed)

    Returns:
        Transfers in emission order; empty when the group is settled
    """
    # Ties on balance are ordered by user id so the plan is deterministic
    ledger = sorted(
        ([entry['user_id'], Decimal(entry['balance'])] for entry in balances),
        key=lambda item: (item[1], str(item[0])),
    )

    transfers = []
    i, j = 0, len(ledger) - 1

    while i < j:
        debtor, creditor = ledger[i], ledger[j]
        if debtor[1] >= 0 or creditor[1] <= 0:
            break

        amount = min(-debtor[1], creditor[1])
        if amount >= CENT:
            transfers.append(Transfer(debtor[0], creditor[0], amount))

        debtor[1] += amount
        creditor[1] -= amount

        if abs(debtor[1]) < CENT:
            i += 1
        if abs(creditor[1]) < CENT:
            j -= 1

    return transfers


def get_settlement_plan(*, plan_id: UUID, user: User) -> Dict:
    """
    Plan settlements for a plan from its current balances.

    Returns:
        dict: ``currency`` and ``transfers``, each a dict with
        ``from_user``, ``to_user`` (User) and ``amount``

    Raises:
        PlanNotFoundError: If the plan doesn't exist
        NotPlanMemberError: If user is not an active member
    """
    summary = get_plan_expense_summary(plan_id=plan_id, user=user)
    users = {entry['user_id']: entry['user'] for entry in summary['balances']}

    return {
        'currency': summary['currency'],
        'transfers': [
            {
                'from_user': users[t.from_user_id],
                'to_user': users[t.to_user_id],
                'amount': t.amount,
            }
            for t in plan_settlements(summary['balances'])
        ],
    }

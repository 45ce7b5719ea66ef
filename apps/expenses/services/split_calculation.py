"""
Split calculation.

Turns an expense amount and a split policy into one allocation per active
plan member. Pure functions: nothing here touches the database.

Money is handled as Decimal with two places. EQUAL splits work in integer
cents so that the allocations always add up to the total exactly:

    1. Convert to cents: ``total_cents = amount * 100``
    2. Base share: ``base = total_cents // N``
    3. Remainder: ``remainder = total_cents % N``
    4. The first ``remainder`` members, in join order, get ``base + 1``
    5. Everybody else gets ``base``

Example:
    100.00 split among 3 members::

        >>> [a.amount for a in calculate_shares(
        ...     amount=Decimal('100.00'),
        ...     split_type=SplitType.EQUAL,
        ...     member_ids=[alice, bob, carol],
        ...     payer_id=alice,
        ... )]
        [Decimal('33.34'), Decimal('33.33'), Decimal('33.33')]
"""

from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, List, Mapping, NamedTuple, Optional, Sequence, Tuple
from uuid import UUID

from apps.expenses.models import SplitType

from .exceptions import InvalidAmountError, InvalidSplitError

CENT = Decimal('0.01')

# Explicit shares may differ from the total by less than this. Stored
# amounts are whole cents, so in practice only an exact match passes.
SUM_TOLERANCE = CENT

EXPLICIT_SPLIT_TYPES = (SplitType.CUSTOM, SplitType.BY_ITEM)


class ShareAllocation(NamedTuple):
    """One member's computed portion of an expense."""
    user_id: UUID
    amount: Decimal
    is_paid: bool = False


def _as_decimal(value) -> Decimal:
    if isinstance(value, float):
        value = str(value)
    try:
        result = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    if not result.is_finite():
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    return result


def _as_uuid(value) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise InvalidSplitError(f"Invalid user ID in shares: {value!r}")


def validate_amount(amount) -> Decimal:
    """
    Normalize an expense amount, rejecting non-positive or sub-cent values.

    Raises:
        InvalidAmountError: If the amount is not a positive whole-cent value
    """
    amount = _as_decimal(amount)
    if amount <= 0:
        raise InvalidAmountError("Amount must be positive")
    if amount != amount.quantize(CENT):
        raise InvalidAmountError("Amount cannot have more than two decimal places")
    return amount.quantize(CENT)


def split_equally(amount: Decimal, member_ids: Sequence[UUID]) -> List[Tuple[UUID, Decimal]]:
    """
    Split amount across members with cent precision.

    Members earlier in the sequence absorb the remainder cents.
    """
    if not member_ids:
        raise InvalidSplitError("At least one member is required to split an expense")

    total_cents = int(amount * 100)
    base_cents, remainder_cents = divmod(total_cents, len(member_ids))

    shares = []
    for index, user_id in enumerate(member_ids):
        cents = base_cents + 1 if index < remainder_cents else base_cents
        shares.append((user_id, Decimal(cents) / Decimal(100)))

    return shares


def normalize_shares(shares: Iterable[Mapping]) -> Dict[UUID, Decimal]:
    """
    Parse explicit shares into a ``{user_id: amount}`` map.

    Raises:
        InvalidSplitError: If an entry is incomplete, names a user twice,
            or has a negative or sub-cent amount
    """
    by_user = {}

    for item in shares:
        user_id = item.get('user_id')
        share_amount = item.get('amount')
        if user_id is None or share_amount is None:
            raise InvalidSplitError("Each share needs a user_id and an amount")

        user_id = _as_uuid(user_id)
        if user_id in by_user:
            raise InvalidSplitError(f"User {user_id} appears more than once in shares")

        try:
            share_amount = _as_decimal(share_amount)
        except InvalidAmountError as e:
            raise InvalidSplitError(str(e))
        if share_amount < 0:
            raise InvalidSplitError("Share amounts cannot be negative")
        if share_amount != share_amount.quantize(CENT):
            raise InvalidSplitError("Share amounts cannot have more than two decimal places")

        by_user[user_id] = share_amount.quantize(CENT)

    return by_user


def split_explicitly(
    amount: Decimal,
    member_ids: Sequence[UUID],
    shares: Optional[Iterable[Mapping]],
    split_type: str = SplitType.CUSTOM,
) -> List[Tuple[UUID, Decimal]]:
    """
    Validate caller-supplied shares against the active member list.

    Every active member must appear exactly once, nobody else may appear,
    amounts must be non-negative whole cents and must add up to the total.

    Returns:
        (user_id, amount) pairs in member order
    """
    if not shares:
        raise InvalidSplitError(f"{split_type} split requires explicit shares")

    by_user = normalize_shares(shares)

    members = set(member_ids)
    for user_id in by_user:
        if user_id not in members:
            raise InvalidSplitError(f"User {user_id} is not an active member of this plan")

    missing = [m for m in member_ids if m not in by_user]
    if missing:
        raise InvalidSplitError(
            f"Shares must cover every active member; missing {len(missing)} member(s)"
        )

    total = sum(by_user.values(), Decimal('0.00'))
    if abs(total - amount) >= SUM_TOLERANCE:
        raise InvalidSplitError("Share amounts must equal total expense amount")

    return [(m, by_user[m]) for m in member_ids]


def calculate_shares(
    *,
    amount,
    split_type: str,
    member_ids: Sequence,
    payer_id,
    shares: Optional[Iterable[Mapping]] = None,
) -> List[ShareAllocation]:
    """
    Allocate an expense across the plan's active members.

    Args:
        amount: Total expense amount (positive, at most two decimals)
        split_type: One of SplitType
        member_ids: Active member user IDs in join order
        payer_id: User who fronted the money; their allocation is paid
        shares: For CUSTOM/BY_ITEM, ``[{'user_id': ..., 'amount': ...}]``

    Returns:
        One ShareAllocation per active member

    Raises:
        InvalidAmountError: If amount is not positive whole cents
        InvalidSplitError: If the members or explicit shares are unusable
    """
    amount = validate_amount(amount)
    member_ids = [_as_uuid(m) for m in member_ids]
    payer_id = _as_uuid(payer_id)

    if not member_ids:
        raise InvalidSplitError("Plan has no active members to split among")

    if split_type == SplitType.EQUAL:
        if shares:
            raise InvalidSplitError("EQUAL split does not take explicit shares")
        pairs = split_equally(amount, member_ids)
    elif split_type in EXPLICIT_SPLIT_TYPES:
        pairs = split_explicitly(amount, member_ids, shares, split_type=split_type)
    else:
        raise InvalidSplitError(f"Unknown split type: {split_type}")

    return [
        ShareAllocation(user_id=user_id, amount=share_amount, is_paid=(user_id == payer_id))
        for user_id, share_amount in pairs
    ]

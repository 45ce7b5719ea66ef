"""
Expense ledger services layer.

Split calculation, share storage, balance aggregation, settlement planning
and settlement recording. All state-changing operations run inside
database transactions.
"""

from .exceptions import (
    ExpenseServiceError,
    LedgerValidationError,
    InvalidAmountError,
    InvalidSplitError,
    LedgerNotFoundError,
    PlanNotFoundError,
    ExpenseNotFoundError,
    ShareNotFoundError,
    ActivityNotFoundError,
    LedgerPermissionError,
    NotPlanMemberError,
    InsufficientPermissionsError,
    LedgerConflictError,
    ShareAlreadyPaidError,
    DuplicateShareError,
)

from .split_calculation import (
    ShareAllocation,
    calculate_shares,
    normalize_shares,
    split_equally,
    split_explicitly,
    validate_amount,
)

from .share_ledger import (
    create_shares,
    replace_shares,
    mark_paid,
    delete_shares,
)

from .balance_aggregation import (
    aggregate_balances,
    get_plan_expense_summary,
    get_user_debts,
)

from .settlement_planning import (
    Transfer,
    plan_settlements,
    get_settlement_plan,
)

from .settlement_recording import (
    settle_share,
)

from .expense_management import (
    create_expense,
    update_expense,
    delete_expense,
    get_expense,
    list_plan_expenses,
)


__all__ = [
    # Exceptions
    'ExpenseServiceError',
    'LedgerValidationError',
    'InvalidAmountError',
    'InvalidSplitError',
    'LedgerNotFoundError',
    'PlanNotFoundError',
    'ExpenseNotFoundError',
    'ShareNotFoundError',
    'ActivityNotFoundError',
    'LedgerPermissionError',
    'NotPlanMemberError',
    'InsufficientPermissionsError',
    'LedgerConflictError',
    'ShareAlreadyPaidError',
    'DuplicateShareError',

    # Split calculation
    'ShareAllocation',
    'calculate_shares',
    'normalize_shares',
    'split_equally',
    'split_explicitly',
    'validate_amount',

    # Share ledger
    'create_shares',
    'replace_shares',
    'mark_paid',
    'delete_shares',

    # Balance aggregation
    'aggregate_balances',
    'get_plan_expense_summary',
    'get_user_debts',

    # Settlement planning
    'Transfer',
    'plan_settlements',
    'get_settlement_plan',

    # Settlement recording
    'settle_share',

    # Expense lifecycle
    'create_expense',
    'update_expense',
    'delete_expense',
    'get_expense',
    'list_plan_expenses',
]

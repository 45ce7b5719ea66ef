"""
Domain exceptions for the expense ledger.

Services raise these; views translate each family to one HTTP status.
None of them is retried: they describe logic errors, not transient ones.

Exception Hierarchy:
    ExpenseServiceError (base)
    ├── LedgerValidationError        -> 400
    │   ├── InvalidAmountError
    │   └── InvalidSplitError
    ├── LedgerNotFoundError          -> 404
    │   ├── PlanNotFoundError
    │   ├── ExpenseNotFoundError
    │   ├── ShareNotFoundError
    │   └── ActivityNotFoundError
    ├── LedgerPermissionError        -> 403
    │   ├── NotPlanMemberError
    │   └── InsufficientPermissionsError
    └── LedgerConflictError          -> 409
        ├── ShareAlreadyPaidError
        └── DuplicateShareError
"""


class ExpenseServiceError(Exception):
    """Base exception for all expense ledger errors."""
    pass


# Validation

class LedgerValidationError(ExpenseServiceError):
    """Input violates an amount or split rule."""
    pass


class InvalidAmountError(LedgerValidationError):
    """
    Raised for a non-positive amount or one with sub-cent precision.

    Example:
        raise InvalidAmountError("Amount must be positive")
    """
    pass


class InvalidSplitError(LedgerValidationError):
    """
    Raised when shares cannot be allocated as requested.

    Covers share sums that miss the total, missing split data and
    omitted, duplicated or foreign members.

    Example:
        raise InvalidSplitError("Share amounts must equal total expense amount")
    """
    pass


# Not found

class LedgerNotFoundError(ExpenseServiceError):
    """A referenced record does not exist."""
    pass


class PlanNotFoundError(LedgerNotFoundError):
    pass


class ExpenseNotFoundError(LedgerNotFoundError):
    pass


class ShareNotFoundError(LedgerNotFoundError):
    pass


class ActivityNotFoundError(LedgerNotFoundError):
    """Raised when an activity reference does not belong to the plan."""
    pass


# Forbidden

class LedgerPermissionError(ExpenseServiceError):
    """The requester may not perform the operation."""
    pass


class NotPlanMemberError(LedgerPermissionError):
    """Raised when the requester is not an active member of the plan."""
    pass


class InsufficientPermissionsError(LedgerPermissionError):
    """Raised for non-payer edits/settles and deletes without owner override."""
    pass


# Conflict

class LedgerConflictError(ExpenseServiceError):
    """The write lost against the current stored state."""
    pass


class ShareAlreadyPaidError(LedgerConflictError):
    """
    Raised when settling a share that is already paid.

    Lets callers tell "already settled" apart from "settled now".
    """
    pass


class DuplicateShareError(LedgerConflictError):
    """Raised when a second share row for the same (expense, user) is inserted."""
    pass

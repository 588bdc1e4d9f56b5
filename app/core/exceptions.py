"""Error taxonomy for the payment ledger and commission reporting."""


class CommissionError(Exception):
    """Base class for domain errors; message is safe to show to callers."""
    code = "CommissionError"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InputValidationError(CommissionError):
    """Bad caller input. Raised before anything is persisted."""
    code = "ValidationError"

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class PaymentValidationError(InputValidationError):
    """Payment input is missing a field or has an unknown method."""


class ReportValidationError(InputValidationError):
    """Report input such as an inverted date range or unknown status."""


class InvalidAmountError(PaymentValidationError):
    """Monetary value is negative, zero where not allowed, or not finite."""
    code = "InvalidAmount"

    def __init__(self, message: str, field: str = "gross_amount_cents"):
        super().__init__(message, field=field)


class InvalidPeriodError(CommissionError):
    code = "InvalidPeriod"


class NotFoundError(CommissionError):
    code = "NotFound"


class OwnerLookupError(NotFoundError):
    """Owner account could not be resolved to a display name and type."""

    def __init__(self, owner_account_id: str, message: str | None = None):
        self.owner_account_id = owner_account_id
        super().__init__(message or f"Owner account '{owner_account_id}' not found")


class InvalidTransitionError(CommissionError):
    code = "InvalidTransition"


class PersistenceError(CommissionError):
    """Write or read against the backing store failed."""
    code = "PersistenceError"

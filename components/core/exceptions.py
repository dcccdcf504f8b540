"""Typed failures raised by the ledger services.

Every error carries the HTTP status the REST layer answers with and the
message that is safe to show to the caller.
"""

from decimal import Decimal


class LedgerError(Exception):
    """Base class for all ledger failures."""
    status_code = 500
    public_message = "Server error"

    def __init__(self, message: str = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message

    @property
    def detail(self) -> str:
        """Message returned to the client."""
        return self.message


class ValidationError(LedgerError):
    """Malformed or out-of-range input."""
    status_code = 400
    public_message = "Invalid request"


class InvalidAmount(ValidationError):
    """Investment amount below the configured floor."""


class NotFoundError(LedgerError):
    """Referenced loan, investor or investment is absent."""
    status_code = 404
    public_message = "Not found"

    def __init__(self, resource: str = "Resource", message: str = None):
        super().__init__(message or f"{resource} not found")
        self.resource = resource

    @property
    def detail(self) -> str:
        return f"{self.resource} not found"


class StateConflictError(LedgerError):
    """Entity is not in a state that allows the operation."""
    status_code = 409
    public_message = "Conflict"


class LoanNotFundable(StateConflictError):
    """Loan is not approved for investment."""


class InsufficientCapacity(StateConflictError):
    """Requested amount exceeds what is left to fund on the loan."""

    def __init__(self, remaining: Decimal):
        self.remaining = remaining
        super().__init__(f"Only {remaining:.2f} remaining for investment")


class PermissionDeniedError(LedgerError):
    """Authenticated user may not act on this entity."""
    status_code = 403
    public_message = "Access denied"


class PersistenceError(LedgerError):
    """Storage layer failure; retryable by the caller."""
    status_code = 500
    public_message = "Server error"

    @property
    def detail(self) -> str:
        return self.public_message

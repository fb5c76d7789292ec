"""
Exception hierarchy for sweet_ledger.

Every failure raised by the core is a `LedgerError`. Each class carries a
stable ``code`` for programmatic handling and the HTTP ``status`` a transport
layer is expected to answer with, so callers can translate errors without
matching on message text.

Catch `LedgerError` to handle everything the core raises, `ValidationFailed`
for any rejected input, or a specific subclass for fine-grained control.
"""

from __future__ import annotations


class LedgerError(Exception):
    """
    Base exception for all sweet_ledger errors.

    Example
    -------
    >>> try:
    ...     ledger.decrement(item_id, 2)
    ... except LedgerError as e:
    ...     respond(e.status, {"error": str(e), "code": e.code})
    """

    code: str = "ledger_error"
    status: int = 500

    def __init__(self, message: str | None = None) -> None:
        if message is None:
            message = "An unspecified sweet_ledger error occurred."
        super().__init__(message)


class NotFound(LedgerError):
    """
    Raised when an item id does not resolve to a stored record.

    Deleted items raise this too: deletion invalidates the id immediately.
    """

    code: str = "not_found"
    status: int = 404

    def __init__(self, item_id: str, message: str | None = None) -> None:
        self.item_id = item_id
        super().__init__(message or f"Item not found: {item_id}")


class ValidationFailed(LedgerError):
    """Input violates a stated invariant. Nothing was written."""

    code: str = "validation_failed"
    status: int = 400


class InvalidAmount(ValidationFailed):
    """Purchase or restock amount is not a positive integer."""

    code: str = "invalid_amount"


class InvalidPrice(ValidationFailed):
    """Price is missing, not a number, or not strictly positive."""

    code: str = "invalid_price"


class InvalidQuantity(ValidationFailed):
    """Quantity is not a non-negative integer."""

    code: str = "invalid_quantity"


class InvalidField(ValidationFailed):
    """A text field is empty, or an update names a field that cannot be set."""

    code: str = "invalid_field"


class InsufficientStock(LedgerError):
    """
    Raised when a purchase asks for more than the current stock.

    The stored quantity is left exactly as it was.
    """

    code: str = "insufficient_stock"
    status: int = 400

    def __init__(self, item_id: str, requested: int, available: int) -> None:
        self.item_id = item_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for item {item_id}: "
            f"requested={requested}, available={available}"
        )


class Conflict(LedgerError):
    """A unique field already holds the given value."""

    code: str = "conflict"
    status: int = 409


class Transient(LedgerError):
    """
    Raised when the underlying storage or lock service fails temporarily.

    No partial write happened; the operation is safe to retry.
    """

    code: str = "transient"
    status: int = 500


class LockAcquireTimeout(Transient):
    """
    Raised when a per-item lock cannot be acquired within the timeout.

    This typically indicates that another worker is adjusting the same item.

    Common causes
    -------------
    - A burst of concurrent purchases against one item
    - The timeout value is too low
    - A long-running transaction is holding the lock
    """

    code: str = "lock_acquire_timeout"


class NotAuthenticated(LedgerError):
    """No resolved role was supplied for the caller."""

    code: str = "not_authenticated"
    status: int = 401


class PermissionDenied(LedgerError):
    """The caller's role does not grant the requested operation."""

    code: str = "permission_denied"
    status: int = 403

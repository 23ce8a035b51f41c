"""Domain error taxonomy.

Rule violations extend Protean's exceptions so the stock FastAPI exception
handlers map them to HTTP responses: ``ValidationError`` subclasses become
400 with a field-keyed message dict, ``InvalidStateError`` subclasses become
409 conflicts, ``ObjectNotFoundError`` becomes 404.
"""

from protean.exceptions import InvalidStateError, ValidationError


class InvalidTransition(ValidationError):
    """The requested status is not an allowed successor of the current one."""

    def __init__(self, current_status: str, target_status: str) -> None:
        self.current_status = current_status
        self.target_status = target_status
        super().__init__({"status": [f"Cannot change status from {current_status} to {target_status}"]})


class InvalidOrderState(ValidationError):
    """The order's current state does not permit the operation."""

    def __init__(self, message: str) -> None:
        super().__init__({"status": [message]})


class ReturnWindowExpired(ValidationError):
    def __init__(self, window_days: int) -> None:
        self.window_days = window_days
        super().__init__({"status": [f"Return window has expired ({window_days} days from delivery)"]})


class AmountExceedsOrderTotal(ValidationError):
    def __init__(self, amount: float, total: float) -> None:
        self.amount = amount
        self.total = total
        super().__init__({"refund_amount": [f"Refund amount {amount:.2f} cannot exceed order total {total:.2f}"]})


class InsufficientStock(InvalidStateError):
    """Not enough unreserved stock to satisfy the request."""

    def __init__(self, book_id: str, requested: int, available: int) -> None:
        self.book_id = book_id
        self.requested = requested
        self.available = available
        super().__init__(f"Insufficient stock for book {book_id}: {available} available, {requested} requested")


class DuplicateOrderNumber(InvalidStateError):
    def __init__(self, order_number: str) -> None:
        self.order_number = order_number
        super().__init__(f"Order number {order_number} is already taken, please retry checkout")

"""
Exception hierarchy for order_stock.

This module defines all public exceptions raised by the order services.

Callers are encouraged to catch `OrderStockError` when they want to handle
every rejected or failed order operation, or more specific subclasses such as
`InsufficientStock` when they need fine-grained control.
"""

from __future__ import annotations


class OrderStockError(Exception):
    """
    Base exception for all order_stock errors.

    Example
    -------
    >>> try:
    ...     create_order(payload, owner_id=user.pk)
    ... except OrderStockError as e:
    ...     show_message(str(e))
    """

    #: Stable error code for programmatic handling (e.g. JSON responses).
    code: str = "order_stock_error"

    def __init__(self, message: str | None = None) -> None:
        if message is None:
            message = "An unspecified order_stock error occurred."
        super().__init__(message)


class CounterpartyError(OrderStockError):
    """
    Raised when an order does not have exactly one counterparty.

    An order belongs either to a client (a sale) or to a supplier
    (a purchase), never to both and never to neither.
    """

    code: str = "invalid_counterparty"

    #: Form field the error is reported against.
    field: str = "order_type"


class InsufficientStock(OrderStockError):
    """
    Raised when an operation would drive a product's stock below zero.

    Only raised while ``ORDER_STOCK_ALLOW_NEGATIVE_STOCK`` is disabled.
    """

    code: str = "insufficient_stock"

    def __init__(self, product_id: int, available: int, requested: int, label: str = "") -> None:
        self.product_id = product_id
        self.available = available
        self.requested = requested
        name = label or f"#{product_id}"
        super().__init__(
            f"Insufficient stock for product {name}: "
            f"{available} available, {requested} requested."
        )


class NotFound(OrderStockError):
    """
    Raised when an order, product or counterparty does not exist
    for the given owner.
    """

    code: str = "not_found"


class OperationFailed(OrderStockError):
    """
    Raised when an order operation fails for an unexpected reason
    (constraint violation, connectivity failure, ...).

    The transaction has been rolled back; nothing was committed. The
    original exception is available as ``cause`` and as ``__cause__``.
    """

    code: str = "operation_failed"

    def __init__(self, action: str, cause: BaseException) -> None:
        self.action = action
        self.cause = cause
        super().__init__(f"Could not {action} the order: {cause}")


class PayloadError(OrderStockError):
    """
    Raised when an inbound order payload does not validate.

    ``errors`` maps field paths (``lines.0.quantity``) to lists of messages.
    """

    code: str = "invalid_payload"

    def __init__(self, errors: dict[str, list[str]]) -> None:
        self.errors = errors
        super().__init__("The order payload is invalid.")

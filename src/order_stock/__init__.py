from .aggregation import compute_cost, compute_item_count, stock_delta
from .exceptions import (
    CounterpartyError,
    InsufficientStock,
    NotFound,
    OperationFailed,
    OrderStockError,
    PayloadError,
)
from .validation import OrderType, validate_counterparty

__all__ = [
    "compute_cost",
    "compute_item_count",
    "stock_delta",
    "validate_counterparty",
    "OrderType",
    "OrderStockError",
    "CounterpartyError",
    "InsufficientStock",
    "NotFound",
    "OperationFailed",
    "PayloadError",
]

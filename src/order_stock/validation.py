from __future__ import annotations

from enum import Enum

from .exceptions import CounterpartyError


class OrderType(str, Enum):
    """Which side of the business an order belongs to."""

    CLIENT = "client"
    SUPPLIER = "supplier"

    @property
    def multiplier(self) -> int:
        # Sales take units out of stock, purchases bring them in.
        return -1 if self is OrderType.CLIENT else 1


def validate_counterparty(client_id: int | None, supplier_id: int | None) -> OrderType:
    """
    Check that exactly one counterparty is set on a new order.

    Called synchronously before anything is written, so a rejected order
    never leaves an ``Order`` or ``OrderLine`` row behind.

    Raises
    ------
    CounterpartyError
        If both or neither of ``client_id`` / ``supplier_id`` are set.
    """
    if client_id is not None and supplier_id is not None:
        raise CounterpartyError("An order cannot have both a client and a supplier.")
    if client_id is None and supplier_id is None:
        raise CounterpartyError("An order must have either a client or a supplier.")
    return OrderType.CLIENT if client_id is not None else OrderType.SUPPLIER

"""
Order services: create, update and delete orders while keeping product
stock consistent with the order lines.

Every client order takes its units out of stock and every supplier order
brings them in. After any sequence of these operations a product's stock
equals its starting stock plus the signed sum of the quantities of all
lines still referencing it.

All functions take an explicit ``owner_id``; nothing here reads the
current request or user.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Mapping

from django.db.models import F

from .aggregation import net_delta, stock_delta
from .conf import allow_negative_stock
from .decorators import stock_operation
from .exceptions import CounterpartyError, InsufficientStock, NotFound
from .forms import ContactInfo, LineItem, OrderPayload
from .models import Client, Order, OrderLine, Product, Supplier
from .validation import OrderType, validate_counterparty

logger = logging.getLogger(__name__)


def _lock_products(owner_id: int, product_ids: Iterable[int]) -> dict[int, Product]:
    """
    Load and row-lock the owner's products, in primary key order.

    Locking in a fixed order keeps two orders touching the same products
    from deadlocking each other.
    """
    ids = sorted(set(product_ids))
    products = {
        p.pk: p
        for p in Product.objects.select_for_update().filter(owner_id=owner_id, pk__in=ids).order_by("pk")
    }
    missing = [pid for pid in ids if pid not in products]
    if missing:
        raise NotFound(f"Product not found: {', '.join(map(str, missing))}")
    return products


def _check_stock(products: Mapping[int, Product], change: Mapping[int, int]) -> None:
    if allow_negative_stock():
        return
    for pid, amount in change.items():
        product = products[pid]
        if amount < 0 and product.stock + amount < 0:
            raise InsufficientStock(pid, available=product.stock, requested=-amount, label=product.sku)


def _adjust_stock(product_id: int, amount: int) -> None:
    Product.objects.filter(pk=product_id).update(stock=F("stock") + amount)


def _apply_delta(delta: Mapping[int, int], sign: int = 1) -> None:
    for pid, amount in delta.items():
        if amount:
            _adjust_stock(pid, sign * amount)


def _price_lines(lines: Iterable[LineItem], products: Mapping[int, Product]) -> list[LineItem]:
    # Lines submitted without a price take the product's current price.
    return [
        line if line.unit_price is not None
        else replace(line, unit_price=products[line.product_id].price)
        for line in lines
    ]


def _insert_lines(order: Order, lines: Iterable[LineItem]) -> None:
    OrderLine.objects.bulk_create([
        OrderLine(
            order=order,
            product_id=line.product_id,
            quantity=line.quantity,
            unit_price=line.unit_price,
        )
        for line in lines
    ])


def _get_counterparty(owner_id: int, order_type: OrderType, pk: int) -> Client | Supplier:
    model = Client if order_type is OrderType.CLIENT else Supplier
    return model.objects.get(owner_id=owner_id, pk=pk)


def _update_contact(counterparty: Client | Supplier, contact: ContactInfo | None) -> None:
    if contact is None:
        return
    changes = contact.changes()
    if not changes:
        return
    for name, value in changes.items():
        setattr(counterparty, name, value)
    counterparty.save(update_fields=[*changes, "updated_at"])


@stock_operation("create")
def create_order(payload: OrderPayload, *, owner_id: int) -> Order:
    """
    Create an order with its lines and apply its stock change.

    Parameters
    ----------
    payload : OrderPayload
        Validated payload with exactly one of client_id / supplier_id.
    owner_id : int
        Owner of the order; the counterparty and products must belong to
        the same owner.

    Raises
    ------
    CounterpartyError
        If both or neither counterparty is set. Nothing is written.
    NotFound
        If the counterparty or a product does not exist for the owner.
    InsufficientStock
        If a client order asks for more units than are in stock.
    OperationFailed
        On any other failure. Nothing is committed.
    """
    order_type = validate_counterparty(payload.client_id, payload.supplier_id)
    counterparty = _get_counterparty(owner_id, order_type, payload.client_id or payload.supplier_id)

    delta = stock_delta(payload.lines, order_type.multiplier)
    products = _lock_products(owner_id, delta)
    _check_stock(products, delta)

    order = Order.objects.create(
        owner_id=owner_id,
        client=counterparty if order_type is OrderType.CLIENT else None,
        supplier=counterparty if order_type is OrderType.SUPPLIER else None,
    )
    _insert_lines(order, _price_lines(payload.lines, products))
    _apply_delta(delta)
    _update_contact(counterparty, payload.contact)

    logger.info(
        "created %s order %s with %d line(s) for owner %s",
        order_type.value, order.order_number, len(payload.lines), owner_id,
    )
    return order


@stock_operation("update")
def update_order(order_id: int, payload: OrderPayload, *, owner_id: int) -> Order:
    """
    Replace all lines of an order and rebalance stock.

    The previous lines' contribution is reversed and the new lines'
    contribution applied, so a product dropped from the order gets all of
    its units back and a product whose quantity changed moves only by the
    difference. The order's client or supplier cannot be changed.
    """
    order = Order.objects.select_for_update().get(owner_id=owner_id, pk=order_id)
    order_type = order.order_type

    if (payload.client_id is not None and payload.client_id != order.client_id) or (
        payload.supplier_id is not None and payload.supplier_id != order.supplier_id
    ):
        raise CounterpartyError("The client or supplier of an existing order cannot be changed.")

    old_delta = stock_delta(order.lines.all(), order_type.multiplier)
    new_delta = stock_delta(payload.lines, order_type.multiplier)
    products = _lock_products(owner_id, set(old_delta) | set(new_delta))
    _check_stock(products, net_delta(old_delta, new_delta))

    _apply_delta(old_delta, sign=-1)
    order.lines.all().delete()
    order.save(update_fields=["updated_at"])
    _insert_lines(order, _price_lines(payload.lines, products))
    _apply_delta(new_delta)
    _update_contact(order.counterparty, payload.contact)

    logger.info("updated order %s for owner %s", order.order_number, owner_id)
    return order


@stock_operation("delete")
def delete_order(order_id: int, *, owner_id: int) -> None:
    """Delete an order and its lines, giving back (or taking out) their stock."""
    order = Order.objects.select_for_update().get(owner_id=owner_id, pk=order_id)

    delta = stock_delta(order.lines.all(), order.order_type.multiplier)
    products = _lock_products(owner_id, delta)
    _check_stock(products, {pid: -amount for pid, amount in delta.items()})

    _apply_delta(delta, sign=-1)
    order.lines.all().delete()
    order.delete()

    logger.info("deleted order %s for owner %s", order.order_number, owner_id)

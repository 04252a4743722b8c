from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Mapping, Protocol


class Line(Protocol):
    """
    Anything that looks like an order line.

    Both persisted ``OrderLine`` rows and payload ``LineItem`` objects
    satisfy it, so totals can be computed before or after saving.
    """
    product_id: int
    quantity: int
    unit_price: Decimal | None


def compute_cost(lines: Iterable[Line]) -> Decimal:
    """Sum of quantity * unit_price over the given lines."""
    return sum(
        (line.quantity * (line.unit_price or Decimal("0")) for line in lines),
        Decimal("0"),
    )


def compute_item_count(lines: Iterable[Line]) -> int:
    """Total number of units over the given lines."""
    return sum(line.quantity for line in lines)


def stock_delta(lines: Iterable[Line], multiplier: int) -> dict[int, int]:
    """
    Net stock change per product implied by a set of lines.

    Lines referencing the same product are summed, not merged, so an order
    holding two lines of 3 and 4 units of one product yields a single
    entry of ``multiplier * 7``.

    Parameters
    ----------
    lines : Iterable[Line]
        Order lines (persisted or not).
    multiplier : int
        -1 for client orders (sales), +1 for supplier orders (purchases).

    Returns
    -------
    dict[int, int]
        Mapping of product id to signed stock change.
    """
    delta: dict[int, int] = defaultdict(int)
    for line in lines:
        delta[line.product_id] += multiplier * line.quantity
    return dict(delta)


def net_delta(old: Mapping[int, int], new: Mapping[int, int]) -> dict[int, int]:
    """Change per product when ``old`` is reversed and ``new`` applied."""
    return {pid: new.get(pid, 0) - old.get(pid, 0) for pid in set(old) | set(new)}

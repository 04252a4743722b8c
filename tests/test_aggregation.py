from decimal import Decimal

from order_stock.aggregation import compute_cost, compute_item_count, net_delta, stock_delta
from order_stock.forms import LineItem


def test_cost_sums_quantity_times_price():
    lines = [
        LineItem(product_id=1, quantity=5, unit_price=Decimal("10")),
        LineItem(product_id=2, quantity=3, unit_price=Decimal("2.50")),
    ]
    assert compute_cost(lines) == Decimal("57.50")


def test_cost_and_count_of_no_lines_are_zero():
    assert compute_cost([]) == Decimal("0")
    assert compute_item_count([]) == 0


def test_item_count_sums_quantities():
    lines = [LineItem(1, 5, Decimal("1")), LineItem(2, 7, Decimal("1"))]
    assert compute_item_count(lines) == 12


def test_client_delta_is_negative():
    assert stock_delta([LineItem(1, 5, Decimal("10"))], -1) == {1: -5}


def test_supplier_delta_is_positive():
    assert stock_delta([LineItem(1, 30, Decimal("2"))], 1) == {1: 30}


def test_duplicate_products_are_summed():
    lines = [LineItem(1, 3), LineItem(2, 1), LineItem(1, 4)]
    assert stock_delta(lines, -1) == {1: -7, 2: -1}


def test_net_delta_covers_removed_and_added_products():
    old = {1: -5, 2: -2}
    new = {1: -8, 3: -1}
    assert net_delta(old, new) == {1: -3, 2: 2, 3: -1}


def test_net_delta_of_identical_sets_is_zero():
    delta = {1: -5, 2: 4}
    assert all(v == 0 for v in net_delta(delta, delta).values())

import pytest

from order_stock import CounterpartyError, OrderStockError, OrderType, validate_counterparty


def test_client_only_is_a_client_order():
    assert validate_counterparty(3, None) is OrderType.CLIENT


def test_supplier_only_is_a_supplier_order():
    assert validate_counterparty(None, 7) is OrderType.SUPPLIER


def test_both_counterparties_are_rejected():
    with pytest.raises(CounterpartyError, match="cannot have both"):
        validate_counterparty(3, 7)


def test_neither_counterparty_is_rejected():
    with pytest.raises(CounterpartyError, match="must have either"):
        validate_counterparty(None, None)


def test_counterparty_error_is_reported_on_order_type_field():
    try:
        validate_counterparty(None, None)
    except OrderStockError as e:
        assert e.code == "invalid_counterparty"
        assert e.field == "order_type"
    else:
        raise AssertionError("Expected CounterpartyError")


def test_multipliers():
    assert OrderType.CLIENT.multiplier == -1
    assert OrderType.SUPPLIER.multiplier == 1

from datetime import date
from decimal import Decimal

import pytest

from order_stock.exceptions import PayloadError
from order_stock.forms import ContactInfo, LineItem, parse_order_payload, parse_order_query
from order_stock.validation import OrderType


def test_parses_client_order():
    payload = parse_order_payload({
        "client_id": 3,
        "lines": [
            {"product_id": 1, "quantity": 5, "unit_price": "10.00"},
            {"product_id": 2, "quantity": "2"},
        ],
    })

    assert payload.client_id == 3
    assert payload.supplier_id is None
    assert payload.lines == (
        LineItem(product_id=1, quantity=5, unit_price=Decimal("10.00")),
        LineItem(product_id=2, quantity=2, unit_price=None),
    )
    assert payload.contact is None


def test_lines_are_required():
    with pytest.raises(PayloadError) as exc_info:
        parse_order_payload({"client_id": 3, "lines": []})
    assert "lines" in exc_info.value.errors


def test_line_errors_are_keyed_by_index():
    with pytest.raises(PayloadError) as exc_info:
        parse_order_payload({
            "supplier_id": 1,
            "lines": [
                {"product_id": 1, "quantity": 1},
                {"product_id": 2, "quantity": 0, "unit_price": "-1"},
            ],
        })
    errors = exc_info.value.errors
    assert set(errors) == {"lines.1.quantity", "lines.1.unit_price"}


def test_only_submitted_contact_fields_are_kept():
    payload = parse_order_payload({
        "client_id": 3,
        "lines": [{"product_id": 1, "quantity": 1}],
        "contact_info": {"contact_phone": "+355 69 123 4567", "address": ""},
    })
    assert payload.contact == ContactInfo(contact_phone="+355 69 123 4567", address="")
    assert payload.contact.changes() == {"contact_phone": "+355 69 123 4567", "address": ""}


def test_invalid_contact_email():
    with pytest.raises(PayloadError) as exc_info:
        parse_order_payload({
            "client_id": 3,
            "lines": [{"product_id": 1, "quantity": 1}],
            "contact_info": {"contact_email": "not-an-email"},
        })
    assert "contact_info.contact_email" in exc_info.value.errors


def test_non_object_payload():
    with pytest.raises(PayloadError):
        parse_order_payload(["lines"])


def test_order_query_defaults():
    query = parse_order_query({})

    assert query["type"] is OrderType.CLIENT
    assert query["page"] == 1
    assert query["per_page"] == 50
    assert query["sort_direction"] == "desc"
    assert query["start_date"] is None


def test_order_query_parses_dates():
    query = parse_order_query({"type": "supplier", "start_date": "2024-01-31", "end_date": "2024-02-01"})

    assert query["type"] is OrderType.SUPPLIER
    assert query["start_date"] == date(2024, 1, 31)
    assert query["end_date"] == date(2024, 2, 1)


def test_order_query_errors():
    with pytest.raises(PayloadError) as exc:
        parse_order_query({
            "start_date": "2024-13-01",
            "sort_direction": "sideways",
            "per_page": "500",
        })

    assert set(exc.value.errors) == {"start_date", "sort_direction", "per_page"}

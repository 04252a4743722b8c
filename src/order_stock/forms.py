from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping

from django import forms
from django.utils import timezone

from .exceptions import PayloadError
from .querysets import SORT_FIELDS
from .validation import OrderType

CONTACT_FIELDS = ("name", "contact_email", "contact_phone", "address")

DEFAULT_PER_PAGE = 50
MAX_PER_PAGE = 100


@dataclass(frozen=True)
class LineItem:
    product_id: int
    quantity: int
    # None means "use the product's current price".
    unit_price: Decimal | None = None


@dataclass(frozen=True)
class ContactInfo:
    """
    Contact details submitted alongside an order.

    Fields left as None were not submitted and are not touched on the
    client or supplier.
    """
    name: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    address: str | None = None

    def changes(self) -> dict[str, str]:
        return {
            name: getattr(self, name)
            for name in CONTACT_FIELDS
            if getattr(self, name) is not None
        }


@dataclass(frozen=True)
class OrderPayload:
    lines: tuple[LineItem, ...]
    client_id: int | None = None
    supplier_id: int | None = None
    contact: ContactInfo | None = None


class OrderForm(forms.Form):
    client_id = forms.IntegerField(min_value=1, required=False)
    supplier_id = forms.IntegerField(min_value=1, required=False)


class OrderLineForm(forms.Form):
    product_id = forms.IntegerField(min_value=1)
    quantity = forms.IntegerField(min_value=1)
    unit_price = forms.DecimalField(min_value=0, max_digits=10, decimal_places=2, required=False)


class ContactInfoForm(forms.Form):
    name = forms.CharField(max_length=255, required=False)
    contact_email = forms.EmailField(max_length=50, required=False)
    contact_phone = forms.CharField(max_length=20, required=False)
    address = forms.CharField(max_length=255, required=False)


def _collect(errors: dict[str, list[str]], form: forms.Form, prefix: str = "") -> None:
    for name, items in form.errors.get_json_data().items():
        key = f"{prefix}{name}" if name != "__all__" else prefix.rstrip(".") or name
        errors.setdefault(key, []).extend(item["message"] for item in items)


def parse_order_payload(data: Mapping[str, Any]) -> OrderPayload:
    """
    Validate a decoded order payload and turn it into an ``OrderPayload``.

    Expected shape::

        {
            "client_id": 3,                 # or "supplier_id"
            "lines": [{"product_id": 1, "quantity": 5, "unit_price": "10.00"}],
            "contact_info": {"contact_phone": "+355 69 123 4567"},
        }

    The client/supplier exclusivity is not checked here; the services
    check it when creating the order.

    Raises
    ------
    PayloadError
        With every field error found, keyed by field path.
    """
    if not isinstance(data, Mapping):
        raise PayloadError({"__all__": ["Expected a JSON object."]})

    errors: dict[str, list[str]] = {}

    order_form = OrderForm(data)
    if not order_form.is_valid():
        _collect(errors, order_form)

    raw_lines = data.get("lines")
    lines: list[LineItem] = []
    if not isinstance(raw_lines, list) or not raw_lines:
        errors["lines"] = ["At least one line item is required."]
    else:
        for index, raw_line in enumerate(raw_lines):
            if not isinstance(raw_line, Mapping):
                errors[f"lines.{index}"] = ["Expected an object."]
                continue
            line_form = OrderLineForm(raw_line)
            if not line_form.is_valid():
                _collect(errors, line_form, prefix=f"lines.{index}.")
                continue
            lines.append(LineItem(**line_form.cleaned_data))

    contact = None
    raw_contact = data.get("contact_info")
    if raw_contact is not None:
        if not isinstance(raw_contact, Mapping):
            errors["contact_info"] = ["Expected an object."]
        else:
            contact_form = ContactInfoForm(raw_contact)
            if contact_form.is_valid():
                contact = ContactInfo(**{
                    name: value
                    for name, value in contact_form.cleaned_data.items()
                    if name in raw_contact
                })
            else:
                _collect(errors, contact_form, prefix="contact_info.")

    if errors:
        raise PayloadError(errors)

    return OrderPayload(
        lines=tuple(lines),
        client_id=order_form.cleaned_data.get("client_id"),
        supplier_id=order_form.cleaned_data.get("supplier_id"),
        contact=contact,
    )


class OrderListForm(forms.Form):
    """
    Query string of the order list.

    Dates are calendar days: ``end_date`` includes the whole day.
    """

    type = forms.ChoiceField(choices=[(t.value, t.value) for t in OrderType], required=False)
    search = forms.CharField(max_length=255, required=False)
    start_date = forms.DateField(required=False)
    end_date = forms.DateField(required=False)
    page = forms.IntegerField(min_value=1, required=False)
    per_page = forms.IntegerField(min_value=1, max_value=MAX_PER_PAGE, required=False)
    sort_by = forms.ChoiceField(choices=[(name, name) for name in SORT_FIELDS], required=False)
    sort_direction = forms.ChoiceField(choices=[("asc", "asc"), ("desc", "desc")], required=False)

    def clean_end_date(self):
        end_date = self.cleaned_data.get("end_date")
        if end_date and end_date > timezone.localdate():
            raise forms.ValidationError("End date cannot be in the future.")
        return end_date

    def clean(self):
        cleaned = super().clean()
        start_date, end_date = cleaned.get("start_date"), cleaned.get("end_date")
        if start_date and end_date and start_date > end_date:
            self.add_error(None, "Start date cannot be after end date.")
        cleaned["type"] = OrderType(cleaned.get("type") or OrderType.CLIENT.value)
        cleaned["page"] = cleaned.get("page") or 1
        cleaned["per_page"] = cleaned.get("per_page") or DEFAULT_PER_PAGE
        cleaned["sort_direction"] = cleaned.get("sort_direction") or "desc"
        return cleaned


def parse_order_query(params: Mapping[str, Any]) -> dict[str, Any]:
    """
    Validate the order list query string.

    Raises
    ------
    PayloadError
        With every field error found; form-wide errors are keyed ``date_range``.
    """
    form = OrderListForm(params)
    if not form.is_valid():
        errors: dict[str, list[str]] = {}
        _collect(errors, form)
        if "__all__" in errors:
            errors["date_range"] = errors.pop("__all__")
        raise PayloadError(errors)
    return form.cleaned_data

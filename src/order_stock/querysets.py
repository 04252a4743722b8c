from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.db import models
from django.db.models import DecimalField, ExpressionWrapper, F, Q, Sum, Value
from django.db.models.functions import Coalesce

from .validation import OrderType

# Public sort keys mapped to the column or annotation they order by.
SORT_FIELDS = {
    "created_at": "created_at",
    "order_number": "order_number",
    "total_amount": "cost_total",
    "item_count": "item_total",
}


class OrderQuerySet(models.QuerySet):
    def for_owner(self, owner_id: int) -> OrderQuerySet:
        return self.filter(owner_id=owner_id)

    def of_type(self, order_type: OrderType | str) -> OrderQuerySet:
        if OrderType(order_type) is OrderType.CLIENT:
            return self.filter(client__isnull=False).select_related("client")
        return self.filter(supplier__isnull=False).select_related("supplier")

    def search(self, term: str) -> OrderQuerySet:
        """Match the order number or the counterparty's name."""
        if not term:
            return self
        return self.filter(
            Q(order_number__icontains=term)
            | Q(client__name__icontains=term)
            | Q(supplier__name__icontains=term)
        )

    def created_between(self, start: date | None = None, end: date | None = None) -> OrderQuerySet:
        """Orders created on or after ``start`` and on or before ``end``, whole days included."""
        qs = self
        if start is not None:
            qs = qs.filter(created_at__date__gte=start)
        if end is not None:
            qs = qs.filter(created_at__date__lte=end)
        return qs

    def with_totals(self) -> OrderQuerySet:
        """
        Annotate ``cost_total`` and ``item_total`` computed in SQL.

        Same values as ``Order.cost`` / ``Order.item_count`` but usable for
        sorting without loading the lines.
        """
        money = DecimalField(max_digits=14, decimal_places=2)
        return self.annotate(
            cost_total=Coalesce(
                Sum(
                    ExpressionWrapper(
                        F("lines__quantity") * F("lines__unit_price"),
                        output_field=money,
                    )
                ),
                Value(Decimal("0")),
                output_field=money,
            ),
            item_total=Coalesce(
                Sum("lines__quantity"), Value(0), output_field=models.IntegerField()
            ),
        )

    def sorted_by(self, field: str | None = None, direction: str = "asc") -> OrderQuerySet:
        """
        Order by one of ``SORT_FIELDS``; newest first when no field is given.

        Raises
        ------
        ValueError
            For an unknown field or a direction other than asc/desc.
        """
        if not field:
            return self.order_by("-created_at", "-pk")
        if field not in SORT_FIELDS:
            raise ValueError(f"Cannot sort orders by {field!r}. Choices: {sorted(SORT_FIELDS)}")
        if direction not in ("asc", "desc"):
            raise ValueError(f"Sort direction must be 'asc' or 'desc', got {direction!r}")

        qs = self
        column = SORT_FIELDS[field]
        if column in ("cost_total", "item_total") and column not in qs.query.annotations:
            qs = qs.with_totals()
        prefix = "-" if direction == "desc" else ""
        return qs.order_by(f"{prefix}{column}", f"{prefix}pk")

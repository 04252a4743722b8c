from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q

from .aggregation import compute_cost, compute_item_count
from .querysets import OrderQuerySet
from .validation import OrderType


def new_order_number() -> str:
    return str(uuid.uuid4())


class TimestampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Counterparty(TimestampedModel):
    """
    Shared fields of clients and suppliers.

    Contact fields may be refreshed by the order services when an order is
    submitted together with new contact details.
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="%(class)ss"
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    contact_email = models.EmailField(max_length=50, blank=True, default="")
    contact_phone = models.CharField(max_length=20, blank=True, default="")
    address = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        abstract = True

    def __str__(self) -> str:
        return self.name


class Client(Counterparty):
    class Meta:
        db_table = "clients"
        constraints = [
            models.UniqueConstraint(fields=["owner", "name"], name="client_name_unique_per_owner"),
        ]


class Supplier(Counterparty):
    class Meta:
        db_table = "suppliers"
        constraints = [
            models.UniqueConstraint(fields=["owner", "name"], name="supplier_name_unique_per_owner"),
        ]


class Product(TimestampedModel):
    """
    A sellable item and its current stock level.

    ``stock`` is maintained by the order services; it may also be edited
    directly by an administrator.
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="products"
    )
    name = models.CharField(max_length=255)
    sku = models.CharField(max_length=12)
    price = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal("0"))]
    )
    stock = models.IntegerField(default=0)

    class Meta:
        db_table = "products"
        constraints = [
            models.UniqueConstraint(fields=["owner", "sku"], name="product_sku_unique_per_owner"),
            models.UniqueConstraint(fields=["owner", "name"], name="product_name_unique_per_owner"),
        ]

    def __str__(self) -> str:
        return f"{self.sku} ({self.stock})"


class Order(TimestampedModel):
    """
    A client sale or a supplier purchase.

    Exactly one of ``client`` / ``supplier`` is set; this is checked by
    ``validate_counterparty`` before creation and enforced again by a
    database constraint. Create, update and delete orders through
    ``order_stock.services`` so product stock stays consistent.
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="orders"
    )
    order_number = models.CharField(
        max_length=36, unique=True, default=new_order_number, editable=False
    )
    client = models.ForeignKey(
        Client, null=True, blank=True, on_delete=models.CASCADE, related_name="orders"
    )
    supplier = models.ForeignKey(
        Supplier, null=True, blank=True, on_delete=models.CASCADE, related_name="orders"
    )

    objects = OrderQuerySet.as_manager()

    class Meta:
        db_table = "orders"
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(client__isnull=False, supplier__isnull=True)
                    | Q(client__isnull=True, supplier__isnull=False)
                ),
                name="order_has_exactly_one_counterparty",
            ),
        ]

    def __str__(self) -> str:
        return self.order_number

    @property
    def order_type(self) -> OrderType:
        return OrderType.CLIENT if self.client_id is not None else OrderType.SUPPLIER

    @property
    def counterparty(self) -> Client | Supplier:
        return self.client if self.order_type is OrderType.CLIENT else self.supplier

    @property
    def cost(self) -> Decimal:
        return compute_cost(self.lines.all())

    @property
    def item_count(self) -> int:
        return compute_item_count(self.lines.all())


class OrderLine(TimestampedModel):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="lines")
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="order_lines")
    quantity = models.PositiveIntegerField()
    # Price at the time of the order, independent of later product price changes.
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        db_table = "order_products"
        constraints = [
            models.CheckConstraint(condition=Q(quantity__gte=1), name="order_line_quantity_positive"),
            models.CheckConstraint(condition=Q(unit_price__gte=0), name="order_line_price_non_negative"),
        ]

    def __str__(self) -> str:
        return f"{self.quantity} x {self.product_id} @ {self.unit_price}"

from django.contrib import admin

from .models import Client, Order, OrderLine, Product, Supplier


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """
    Products, including direct edits of ``stock`` (e.g. after a stock take).
    """

    list_display = ("sku", "name", "price", "stock", "owner")
    list_filter = ("owner",)
    search_fields = ("sku", "name")


class CounterpartyAdmin(admin.ModelAdmin):
    list_display = ("name", "contact_email", "contact_phone", "owner")
    list_filter = ("owner",)
    search_fields = ("name", "contact_email", "contact_phone")


admin.site.register(Client, CounterpartyAdmin)
admin.site.register(Supplier, CounterpartyAdmin)


class OrderLineInline(admin.TabularInline):
    model = OrderLine
    fields = ("product", "quantity", "unit_price")
    readonly_fields = fields
    extra = 0
    can_delete = False

    def has_add_permission(self, request, obj=None) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Read-only view of orders.

    Orders are created, changed and deleted only through
    ``order_stock.services``, which keep product stock in step.
    """

    list_display = ("order_number", "client", "supplier", "owner", "created_at")
    list_filter = ("owner",)
    search_fields = ("order_number", "client__name", "supplier__name")
    readonly_fields = ("order_number", "owner", "client", "supplier", "created_at", "updated_at")
    inlines = [OrderLineInline]

    def has_add_permission(self, request) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False

from django.apps import AppConfig


class OrderStockConfig(AppConfig):
    name = "order_stock"
    verbose_name = "Orders and stock"
    default_auto_field = "django.db.models.BigAutoField"

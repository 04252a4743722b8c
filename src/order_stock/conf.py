from django.conf import settings


def allow_negative_stock() -> bool:
    """
    Whether an order may drive a product's stock below zero.

    Controlled by the ``ORDER_STOCK_ALLOW_NEGATIVE_STOCK`` Django setting
    (default ``False``). Read on every call so tests can override it.
    """
    return bool(getattr(settings, "ORDER_STOCK_ALLOW_NEGATIVE_STOCK", False))

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Callable, TypeVar

from django.core.exceptions import ObjectDoesNotExist
from django.db import transaction

from .exceptions import NotFound, OperationFailed, OrderStockError

logger = logging.getLogger(__name__)

Fn = TypeVar("Fn", bound=Callable[..., Any])


def stock_operation(action: str) -> Callable[[Fn], Fn]:
    """
    Decorator that runs an order operation as one atomic unit.

    Everything the wrapped function writes (order row, lines, stock
    changes, contact updates) is committed together or not at all.

    Examples
    --------
    @stock_operation("create")
    def create_order(payload, *, owner_id):
        ...

    Failure behavior
    ----------------
    - OrderStockError subclasses are re-raised as they are
    - ObjectDoesNotExist (a ``.get()`` that found nothing) becomes NotFound
    - any other exception becomes OperationFailed, chained to the original

    In every case the transaction has been rolled back before the caller
    sees the exception.
    """
    def decorator(fn: Fn) -> Fn:
        @wraps(fn)
        def wrapper(*args: Any, **kwargs: Any):
            try:
                with transaction.atomic():
                    return fn(*args, **kwargs)
            except OrderStockError as e:
                logger.info("order %s rejected: %s", action, e)
                raise
            except ObjectDoesNotExist as e:
                logger.info("order %s rejected: %s", action, e)
                raise NotFound(str(e)) from e
            except Exception as e:
                logger.exception("order %s failed", action)
                raise OperationFailed(action, e) from e

        return wrapper  # type: ignore[return-value]

    return decorator

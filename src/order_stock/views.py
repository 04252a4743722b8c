from __future__ import annotations

import json
from typing import Any

from django.core.paginator import Paginator
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.http import require_http_methods

from .aggregation import compute_cost, compute_item_count
from .exceptions import (
    CounterpartyError,
    InsufficientStock,
    NotFound,
    OperationFailed,
    OrderStockError,
    PayloadError,
)
from .forms import parse_order_payload, parse_order_query
from .models import Order
from .services import create_order, delete_order, update_order

# Most specific first.
_ERROR_STATUS = (
    (PayloadError, 422),
    (CounterpartyError, 422),
    (NotFound, 404),
    (InsufficientStock, 409),
    (OperationFailed, 400),
)


def _json(ok: bool, *, status: int = 200, **fields: Any) -> JsonResponse:
    """
    Small helper to keep responses consistent across endpoints.
    """
    return JsonResponse({"ok": ok, **fields}, status=status)


def _error(exc: OrderStockError, submitted: Any = None) -> JsonResponse:
    """
    Turn a rejected operation into a response.

    The submitted payload is echoed back as ``input`` so the caller can
    show the form again with what the user typed.
    """
    status = next((code for cls, code in _ERROR_STATUS if isinstance(exc, cls)), 400)
    fields: dict[str, Any] = {"detail": str(exc), "code": exc.code}
    if isinstance(exc, PayloadError):
        fields["errors"] = exc.errors
    elif isinstance(exc, CounterpartyError):
        fields["errors"] = {exc.field: [str(exc)]}
    if submitted is not None:
        fields["input"] = submitted
    return _json(False, status=status, **fields)


def _unauthorized() -> JsonResponse:
    return _json(False, status=401, detail="authentication required")


def _body(request: HttpRequest) -> Any:
    try:
        return json.loads(request.body or b"{}")
    except ValueError as e:
        raise PayloadError({"__all__": [f"Invalid JSON: {e}"]}) from e


def order_to_dict(order: Order) -> dict[str, Any]:
    lines = list(order.lines.all())
    return {
        "id": order.pk,
        "order_number": order.order_number,
        "type": order.order_type.value,
        "client_id": order.client_id,
        "supplier_id": order.supplier_id,
        "cost": str(compute_cost(lines)),
        "item_count": compute_item_count(lines),
        "created_at": order.created_at.isoformat(),
        "updated_at": order.updated_at.isoformat(),
        "lines": [
            {
                "id": line.pk,
                "product_id": line.product_id,
                "quantity": line.quantity,
                "unit_price": str(line.unit_price),
            }
            for line in lines
        ],
    }


def _list(request: HttpRequest, owner_id: int) -> HttpResponse:
    try:
        query = parse_order_query(request.GET)
    except PayloadError as e:
        return _json(False, status=400, detail=str(e), code=e.code, errors=e.errors)

    qs = (
        Order.objects.for_owner(owner_id)
        .of_type(query["type"])
        .search(query["search"])
        .created_between(query["start_date"], query["end_date"])
        .with_totals()
        .sorted_by(query["sort_by"] or None, query["sort_direction"])
    )
    page = Paginator(qs, query["per_page"]).get_page(query["page"])

    items = [
        {
            "id": order.pk,
            "order_number": order.order_number,
            "counterparty": str(order.counterparty),
            "total_amount": str(order.cost_total),
            "item_count": order.item_total,
            "created_at": order.created_at.isoformat(),
        }
        for order in page
    ]
    return _json(
        True,
        type=query["type"].value,
        items=items,
        pagination={
            "page": page.number,
            "per_page": page.paginator.per_page,
            "total": page.paginator.count,
            "num_pages": page.paginator.num_pages,
            "has_next": page.has_next(),
        },
    )


@require_http_methods(["GET", "POST"])
def order_collection(request: HttpRequest) -> HttpResponse:
    """
    GET lists the user's orders of one type; POST creates an order.
    """
    if not request.user.is_authenticated:
        return _unauthorized()
    owner_id = request.user.pk

    if request.method == "GET":
        return _list(request, owner_id)

    data = None
    try:
        data = _body(request)
        order = create_order(parse_order_payload(data), owner_id=owner_id)
    except OrderStockError as e:
        return _error(e, data)
    return _json(True, status=201, order=order_to_dict(order))


@require_http_methods(["GET", "PUT", "PATCH", "POST", "DELETE"])
def order_detail(request: HttpRequest, pk: int) -> HttpResponse:
    """
    GET shows an order, PUT (or PATCH, POST) replaces its lines,
    DELETE removes it.
    """
    if not request.user.is_authenticated:
        return _unauthorized()
    owner_id = request.user.pk

    if request.method == "GET":
        try:
            order = Order.objects.for_owner(owner_id).get(pk=pk)
        except Order.DoesNotExist:
            return _error(NotFound(f"Order {pk} not found."))
        return _json(True, order=order_to_dict(order))

    if request.method == "DELETE":
        try:
            delete_order(pk, owner_id=owner_id)
        except OrderStockError as e:
            return _error(e)
        return HttpResponse(status=204)

    data = None
    try:
        data = _body(request)
        order = update_order(pk, parse_order_payload(data), owner_id=owner_id)
    except OrderStockError as e:
        return _error(e, data)
    return _json(True, order=order_to_dict(order))

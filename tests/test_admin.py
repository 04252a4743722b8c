import pytest
from django.contrib import admin
from django.test import RequestFactory

from order_stock.admin import OrderAdmin, OrderLineInline, ProductAdmin
from order_stock.models import Client, Order, Product, Supplier

pytestmark = pytest.mark.django_db


@pytest.fixture
def admin_request(admin_user):
    request = RequestFactory().get("/admin/")
    request.user = admin_user
    return request


def test_models_are_registered():
    for model in (Product, Client, Supplier, Order):
        assert admin.site.is_registered(model)


def test_stock_can_be_edited_directly(admin_request, owner, make_product):
    product = make_product(stock=12, price="4.50")
    model_admin = ProductAdmin(Product, admin.site)
    form_class = model_admin.get_form(admin_request, product)

    form = form_class(
        data={
            "owner": owner.pk,
            "name": product.name,
            "sku": product.sku,
            "price": "4.50",
            "stock": "7",
        },
        instance=product,
    )

    assert form.is_valid(), form.errors
    form.save()
    product.refresh_from_db()
    assert product.stock == 7


def test_orders_are_read_only(admin_request):
    order_admin = OrderAdmin(Order, admin.site)
    inline = OrderLineInline(Order, admin.site)

    assert not order_admin.has_add_permission(admin_request)
    assert not order_admin.has_change_permission(admin_request)
    assert not order_admin.has_delete_permission(admin_request)
    assert not inline.has_add_permission(admin_request)
    assert not inline.has_change_permission(admin_request)
    assert not inline.can_delete

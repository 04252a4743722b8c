from django.urls import path

from . import views

app_name = "order_stock"

urlpatterns = [
    path("orders/", views.order_collection, name="order_collection"),
    path("orders/<int:pk>/", views.order_detail, name="order_detail"),
]

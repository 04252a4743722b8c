"""
Django configuration and shared fixtures for the test suite.

Tests run against an in-memory SQLite database by default. Set DATABASE_URL
to a PostgreSQL URL to run them (including the concurrency tests) against
a real server; CI provides one, locally you can use docker compose.
"""

import os
from decimal import Decimal
from urllib.parse import urlparse

import pytest


def _database_settings() -> dict:
    database_url = os.environ.get("DATABASE_URL")
    if not database_url:
        return {"ENGINE": "django.db.backends.sqlite3", "NAME": ":memory:"}

    u = urlparse(database_url)
    if u.scheme not in {"postgres", "postgresql"}:
        raise pytest.UsageError(f"Unsupported DATABASE_URL scheme: {u.scheme!r}")

    return {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": (u.path or "").lstrip("/"),
        "USER": u.username or "",
        "PASSWORD": u.password or "",
        "HOST": u.hostname or "localhost",
        "PORT": str(u.port or 5432),
        "CONN_MAX_AGE": 0,
    }


def pytest_configure() -> None:
    """Configure a minimal Django project (once per test run)."""
    from django.conf import settings

    if settings.configured:
        return

    settings.configure(
        SECRET_KEY="test",
        INSTALLED_APPS=[
            "django.contrib.admin",
            "django.contrib.auth",
            "django.contrib.contenttypes",
            "django.contrib.messages",
            "django.contrib.sessions",
            "order_stock",
        ],
        MIDDLEWARE=[
            "django.contrib.sessions.middleware.SessionMiddleware",
            "django.contrib.auth.middleware.AuthenticationMiddleware",
            "django.contrib.messages.middleware.MessageMiddleware",
        ],
        ROOT_URLCONF="order_stock.urls",
        DATABASES={"default": _database_settings()},
        DEFAULT_AUTO_FIELD="django.db.models.BigAutoField",
        PASSWORD_HASHERS=["django.contrib.auth.hashers.MD5PasswordHasher"],
        ORDER_STOCK_ALLOW_NEGATIVE_STOCK=False,
        TIME_ZONE="UTC",
        USE_TZ=True,
    )


@pytest.fixture
def owner(django_user_model):
    return django_user_model.objects.create_user(username="owner", password="pw")


@pytest.fixture
def other_owner(django_user_model):
    return django_user_model.objects.create_user(username="other", password="pw")


@pytest.fixture
def make_product(owner):
    counter = iter(range(1, 1000))

    def make(stock=0, price="10.00", user=None, **kwargs):
        from order_stock.models import Product

        n = next(counter)
        return Product.objects.create(
            owner=user or owner,
            name=kwargs.pop("name", f"Product {n}"),
            sku=kwargs.pop("sku", f"SKU-{n:04d}"),
            price=Decimal(price),
            stock=stock,
            **kwargs,
        )

    return make


@pytest.fixture
def client_party(owner):
    from order_stock.models import Client

    return Client.objects.create(owner=owner, name="Acme Retail", contact_email="buy@acme.test")


@pytest.fixture
def supplier_party(owner):
    from order_stock.models import Supplier

    return Supplier.objects.create(owner=owner, name="Wholesale Ltd")

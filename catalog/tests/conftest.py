"""
Pytest configuration and fixtures for the catalog API tests.
"""

from contextlib import ExitStack
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, insert

# (name, category, price)
SCENARIO_PRODUCTS = [
    ("Lámpara Nova", "A", 10),
    ("Silla Atlas", "B", 100),
    ("Sofá Orion", "C", 600),
]


def insert_products(engine, rows):
    from app.models import Product

    with engine.begin() as conn:
        conn.execute(
            insert(Product),
            [{"name": n, "category": c, "price": Decimal(str(p))} for n, c, p in rows],
        )


@pytest.fixture
def database_url(tmp_path, monkeypatch):
    """
    Point the application at a fresh SQLite file for each test.
    """
    url = f"sqlite:///{tmp_path / 'catalog.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.setenv("APP_ENV", "test")
    return url


@pytest.fixture
def engine(database_url):
    from app.db import init_db

    eng = create_engine(database_url, future=True)
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def make_client(engine):
    """
    Factory: insert the given rows, then start the app against them.
    The app builds its context on startup, so env vars set before calling
    the factory are honoured.
    """
    from app.main import app

    with ExitStack() as stack:
        def _make(rows=()):
            if rows:
                insert_products(engine, rows)
            return stack.enter_context(TestClient(app))

        yield _make


@pytest.fixture
def client(make_client):
    """Client over the three-product scenario: 10 (A), 100 (B), 600 (C)."""
    return make_client(SCENARIO_PRODUCTS)


@pytest.fixture
def many_products():
    """120 products over three categories, priced 1.00 .. 120.00."""
    categories = ("Hogar", "Ropa", "Libros")
    return [
        (f"Producto {i:03d}", categories[i % 3], i)
        for i in range(1, 121)
    ]

"""
Tests for the synthetic data seeding utility.
"""

import random
from decimal import Decimal

from sqlalchemy import func, select

from app.models import Product
from app.seed import CATEGORIES, category_distribution, generate_product, main, seed


def test_generate_product_is_repeatable():
    a = [generate_product(random.Random(7)) for _ in range(3)]
    b = [generate_product(random.Random(7)) for _ in range(3)]
    assert a == b


def test_generated_values_are_in_range():
    rng = random.Random(1)
    for _ in range(500):
        row = generate_product(rng)
        assert row["category"] in CATEGORIES
        assert Decimal("1") <= row["price"] <= Decimal("1001")
        assert row["price"] == row["price"].quantize(Decimal("0.01"))
        assert row["name"]


def test_seed_inserts_in_batches(engine):
    count = seed(engine, total=250, batch_size=100, rng=random.Random(3))
    assert count == 250

    distribution = category_distribution(engine)
    assert sum(n for _, n in distribution) == 250
    counts = [n for _, n in distribution]
    assert counts == sorted(counts, reverse=True)


def test_seed_truncates_unless_kept(engine):
    seed(engine, total=30, batch_size=7, rng=random.Random(1))
    assert seed(engine, total=10, batch_size=7, rng=random.Random(2)) == 10
    assert seed(engine, total=5, batch_size=7, rng=random.Random(3), truncate=False) == 15


def test_main_creates_table_and_seeds(database_url):
    main(["--total", "40", "--batch-size", "15", "--seed", "42"])

    from sqlalchemy import create_engine

    eng = create_engine(database_url)
    try:
        with eng.connect() as conn:
            total = conn.execute(select(func.count()).select_from(Product)).scalar_one()
        assert total == 40
    finally:
        eng.dispose()

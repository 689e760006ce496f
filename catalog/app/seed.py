"""CLI entry point for filling the productos table with synthetic rows."""

import argparse
import logging
import random
import time
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import delete, func, insert, select
from sqlalchemy.engine import Engine

from .config import Settings, configure_logging
from .db import create_context, init_db
from .models import Product

logger = logging.getLogger(__name__)

CATEGORIES = (
    "Electrónica", "Ropa", "Hogar", "Deportes", "Juguetes",
    "Jardín", "Alimentación", "Belleza", "Salud", "Libros",
    "Música", "Automóvil", "Bebés", "Mascotas", "Oficina",
)

ADJECTIVES = (
    "Práctico", "Elegante", "Ergonómico", "Rústico", "Moderno",
    "Fantástico", "Increíble", "Ligero", "Robusto", "Inteligente",
)
BRANDS = ("Nova", "Atlas", "Orion", "Vega", "Zenit", "Lumen", "Prisma", "Delta")
COLORS = ("Rojo", "Azul", "Negro", "Blanco", "Verde", "Gris", "Amarillo")
MATERIALS = ("Madera", "Metal", "Algodón", "Plástico", "Granito", "Bambú", "Acero")
GENERIC_ITEMS = ("Set", "Kit", "Pack", "Modelo", "Edición", "Colección")

# Category-specific nouns plus the suffix pool used after them.
NAME_TEMPLATES = {
    "Electrónica": (("Smartphone", "Tablet", "Portátil", "TV", "Auriculares", "Altavoz"), BRANDS),
    "Ropa": (("Camiseta", "Pantalón", "Vestido", "Chaqueta", "Zapatillas", "Calcetines"), COLORS),
    "Hogar": (("Sofá", "Mesa", "Lámpara", "Silla", "Estantería", "Alfombra"), MATERIALS),
}


def generate_product(rng: random.Random) -> Dict[str, object]:
    category = rng.choice(CATEGORIES)
    price = Decimal(str(round(rng.random() * 1000 + 1, 2)))

    template = NAME_TEMPLATES.get(category)
    if template is not None:
        nouns, suffixes = template
        name = f"{rng.choice(ADJECTIVES)} {rng.choice(nouns)} {rng.choice(suffixes)}"
    else:
        name = f"{rng.choice(ADJECTIVES)} {rng.choice(GENERIC_ITEMS)} {rng.choice(MATERIALS)}"
    return {"name": name, "category": category, "price": price}


def category_distribution(engine: Engine) -> List[tuple]:
    total = func.count(Product.id).label("total")
    stmt = select(Product.category, total).group_by(Product.category).order_by(total.desc())
    with engine.connect() as conn:
        return [tuple(r) for r in conn.execute(stmt)]


def seed(
    engine: Engine,
    total: int = 100_000,
    batch_size: int = 1_000,
    rng: Optional[random.Random] = None,
    truncate: bool = True,
) -> int:
    """
    Insert `total` synthetic products in batches. Returns the final row count.
    """
    rng = rng or random.Random()
    init_db(engine)

    if truncate:
        with engine.begin() as conn:
            conn.execute(delete(Product))
        logger.info("productos table emptied")

    inserted = 0
    while inserted < total:
        current = min(batch_size, total - inserted)
        rows = [generate_product(rng) for _ in range(current)]
        with engine.begin() as conn:
            conn.execute(insert(Product), rows)
        inserted += current
        logger.info(
            "progress: %d/%d products inserted (%.2f%%)",
            inserted, total, inserted / total * 100,
        )

    with engine.connect() as conn:
        count = conn.execute(select(func.count()).select_from(Product)).scalar_one()
    return int(count)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Populate the productos table with synthetic data.")
    parser.add_argument("--total", type=int, default=100_000, help="Number of products to insert.")
    parser.add_argument("--batch-size", type=int, default=1_000, help="Rows per INSERT batch.")
    parser.add_argument("--seed", type=int, default=None, help="Optional RNG seed for repeatable data.")
    parser.add_argument("--keep", action="store_true", help="Keep existing rows instead of emptying the table.")
    args = parser.parse_args(argv)
    if args.total < 0:
        parser.error("--total must be >= 0")
    if args.batch_size < 1:
        parser.error("--batch-size must be >= 1")
    return args


def main(argv=None) -> None:
    args = parse_args(argv)
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    ctx = create_context(settings)
    try:
        logger.info("generating %d products...", args.total)
        start = time.perf_counter()
        count = seed(
            ctx.engine,
            total=args.total,
            batch_size=args.batch_size,
            rng=random.Random(args.seed),
            truncate=not args.keep,
        )
        logger.info("done in %.2fs, %d products in table", time.perf_counter() - start, count)
        for category, n in category_distribution(ctx.engine):
            logger.info("- %s: %d products", category, n)
    finally:
        ctx.dispose()


if __name__ == "__main__":
    main()

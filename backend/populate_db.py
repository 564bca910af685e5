import logging

from sqlalchemy.orm import Session

from config import settings
from database import open_store
from models.category import Category
from models.product import Product
from models.tag import Tag
from services.products import create_product_with_tags
from services.outcomes import is_failure

logger = logging.getLogger(__name__)

# Demo catalog
CATEGORIES = ["Shirts", "Shorts", "Music", "Hats", "Shoes"]

TAGS = ["rock music", "pop music", "blue", "red", "green", "white", "gold", "pop culture"]

# (name, price, stock, category, tags)
PRODUCTS = [
    ("Plain T-Shirt", 14.99, 14, "Shirts", ["pop culture", "green"]),
    ("Running Sneakers", 90.00, 25, "Shoes", ["rock music", "red"]),
    ("Branded Baseball Hat", 22.99, 12, "Hats", ["pop music", "white", "red"]),
    ("Top 40 Music Compilation Vinyl Record", 12.99, 50, "Music", ["pop music", "pop culture"]),
    ("Cargo Shorts", 29.99, 22, "Shorts", ["blue", "gold"]),
]


def seed(db: Session) -> int:
    """Insert the demo catalog into an empty database. Returns products created."""
    if db.query(Product).first() is not None:
        logger.info("Products already present, skipping seed")
        return 0

    categories = {}
    for name in CATEGORIES:
        category = db.query(Category).filter(Category.name == name).first() or Category(name=name)
        db.add(category)
        categories[name] = category

    tags = {}
    for name in TAGS:
        tag = db.query(Tag).filter(Tag.name == name).first() or Tag(name=name)
        db.add(tag)
        tags[name] = tag

    db.commit()

    created = 0
    for name, price, stock, category_name, tag_names in PRODUCTS:
        outcome = create_product_with_tags(
            db,
            {"name": name, "price": price, "stock": stock, "category_id": categories[category_name].id},
            [tags[t].id for t in tag_names],
        )
        if is_failure(outcome):
            raise RuntimeError(f"Seeding product {name!r} failed: {outcome}")
        created += 1

    logger.info("Seeded %d categories, %d tags, %d products", len(categories), len(tags), created)
    return created


def main():
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    store = open_store(settings.DATABASE_URL, echo=settings.SQL_ECHO)
    store.create_all()
    db = store.session()
    try:
        seed(db)
    finally:
        db.close()
        store.close()


if __name__ == "__main__":
    main()

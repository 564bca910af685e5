# backend/services/categories.py
import logging
from typing import Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.category import Category
from services.outcomes import CategoryDeleted, CategoryInUse, NotFound, StoreFailure

logger = logging.getLogger(__name__)

DELETE_POLICIES = ("orphan", "cascade", "restrict")


def delete_category(
    db: Session, category_id: int, policy: str = "orphan"
) -> Union[CategoryDeleted, NotFound, CategoryInUse, StoreFailure]:
    """Delete a category and deal with its products according to ``policy``.

    orphan   - products stay, their category_id becomes NULL
    cascade  - products (and their tag associations) are deleted too
    restrict - refuse while the category still has products
    """
    if policy not in DELETE_POLICIES:
        raise ValueError(f"Unknown category delete policy: {policy!r}")

    try:
        category = db.query(Category).filter(Category.id == category_id).first()
        if category is None:
            db.rollback()
            logger.warning("Error deleting category with id %s: Not found", category_id)
            return NotFound("category", category_id)

        name = category.name
        products = list(category.products)
        product_ids = tuple(p.id for p in products)

        if policy == "restrict" and product_ids:
            db.rollback()
            logger.warning(
                "Refusing to delete category %s, still used by products %s", category_id, product_ids
            )
            return CategoryInUse(category_id=category_id, product_ids=product_ids)

        for product in products:
            if policy == "cascade":
                db.delete(product)
            else:
                product.category = None

        db.delete(category)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error deleting category with id %s: %s", category_id, e)
        return StoreFailure("delete_category", str(e))

    logger.info(
        "Deleted category %s: %s (policy=%s, products=%s)", category_id, name, policy, product_ids
    )
    return CategoryDeleted(
        category_id=category_id, name=name, policy=policy, affected_products=product_ids
    )

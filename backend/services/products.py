# backend/services/products.py
"""Product writes that touch both the product row and its tag associations.

Each public function runs as one unit of work on the given session: either
every row change commits, or the session is rolled back and a failure
outcome is returned.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from models.category import Category
from models.product import Product
from services.associations import (
    create_association,
    delete_associations,
    find_associations_for,
    missing_tag_ids,
)
from services.outcomes import (
    InvalidReference,
    NoEffectiveChange,
    NotFound,
    ProductCreated,
    ProductDeleted,
    ProductUpdated,
    StoreFailure,
)
from services.reconciler import TagDiff, reconcile_tags

logger = logging.getLogger(__name__)

SCALAR_FIELDS = ("name", "price", "stock", "category_id")


def _with_relations(db: Session):
    return db.query(Product).options(
        joinedload(Product.category),
        selectinload(Product.tags),
    )


def list_products(db: Session) -> List[Product]:
    return _with_relations(db).order_by(Product.id).all()


def get_product(db: Session, product_id: int) -> Optional[Product]:
    return _with_relations(db).filter(Product.id == product_id).first()


def _check_references(
    db: Session, fields: Dict[str, Any], tag_ids: Optional[Iterable[int]]
) -> Optional[InvalidReference]:
    if "category_id" in fields:
        category_id = fields["category_id"]
        if category_id is None or db.get(Category, category_id) is None:
            return InvalidReference("category_id", (category_id,))

    if tag_ids is not None:
        missing = missing_tag_ids(db, tag_ids)
        if missing:
            return InvalidReference("tag_ids", missing)

    return None


def create_product_with_tags(
    db: Session, fields: Dict[str, Any], tag_ids: Iterable[int] = ()
) -> Union[ProductCreated, InvalidReference, StoreFailure]:
    tag_ids = frozenset(tag_ids or ())
    try:
        # A new product always needs a category
        if fields.get("category_id") is None:
            invalid = InvalidReference("category_id", (None,))
        else:
            invalid = _check_references(db, fields, tag_ids)
        if invalid:
            db.rollback()
            logger.warning("Rejected product create, unknown %s %s", invalid.field, invalid.ids)
            return invalid

        product = Product(**{k: v for k, v in fields.items() if k in SCALAR_FIELDS})
        db.add(product)
        db.flush()
        product_id = product.id

        for tag_id in sorted(tag_ids):
            create_association(db, product_id, tag_id)

        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error creating a new product: %s", e)
        return StoreFailure("create_product", str(e))

    logger.info("Created product %s with tags %s", product_id, sorted(tag_ids))
    return ProductCreated(product=get_product(db, product_id), tags=tag_ids)


def update_product_and_tags(
    db: Session,
    product_id: int,
    fields: Dict[str, Any],
    desired_tag_ids: Optional[Iterable[int]] = None,
) -> Union[ProductUpdated, NotFound, InvalidReference, NoEffectiveChange, StoreFailure]:
    """Apply scalar field changes and, if given, the desired tag set in one transaction.

    ``desired_tag_ids=None`` leaves the product's tags untouched; an empty
    list detaches every tag. Current association rows are read inside the
    transaction, after the product row is locked, so the diff is never
    computed against stale rows.
    """
    if desired_tag_ids is not None:
        desired_tag_ids = list(desired_tag_ids)

    try:
        product = (
            db.query(Product)
            .filter(Product.id == product_id)
            .with_for_update()
            .first()
        )
        if product is None:
            db.rollback()
            logger.warning("Error updating product with id %s: Not found", product_id)
            return NotFound("product", product_id)

        invalid = _check_references(db, fields, desired_tag_ids)
        if invalid:
            db.rollback()
            logger.warning(
                "Rejected update of product %s, unknown %s %s", product_id, invalid.field, invalid.ids
            )
            return invalid

        changes = {
            key: value
            for key, value in fields.items()
            if key in SCALAR_FIELDS and getattr(product, key) != value
        }

        current = find_associations_for(db, product_id)
        tags_before = frozenset(tag_id for _, tag_id in current)
        if desired_tag_ids is None:
            diff = TagDiff()
        else:
            diff = reconcile_tags(current, desired_tag_ids)

        if not changes and diff.is_empty:
            db.rollback()
            logger.info("Update of product %s describes no change", product_id)
            return NoEffectiveChange("product", product_id)

        for key, value in changes.items():
            setattr(product, key, value)
        db.flush()

        delete_associations(db, diff.to_remove)
        for tag_id in sorted(diff.to_add):
            create_association(db, product_id, tag_id)

        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error updating product with id %s: %s", product_id, e)
        return StoreFailure("update_product", str(e))

    product = get_product(db, product_id)
    tags_after = frozenset(tag.id for tag in product.tags)
    logger.info(
        "Updated product %s: fields=%s tags %s > %s",
        product_id, sorted(changes), sorted(tags_before), sorted(tags_after),
    )
    return ProductUpdated(
        product=product,
        tags_before=tags_before,
        tags_after=tags_after,
        changed_fields=tuple(sorted(changes)),
    )


def delete_product(db: Session, product_id: int) -> Union[ProductDeleted, NotFound, StoreFailure]:
    try:
        product = db.query(Product).filter(Product.id == product_id).first()
        if product is None:
            db.rollback()
            logger.warning("Error deleting product with id %s: Not found", product_id)
            return NotFound("product", product_id)

        name = product.name
        # Association rows go with the product (ON DELETE CASCADE)
        db.delete(product)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error deleting product with id %s: %s", product_id, e)
        return StoreFailure("delete_product", str(e))

    logger.info("Deleted product %s: %s", product_id, name)
    return ProductDeleted(product_id=product_id, name=name)

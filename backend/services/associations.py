# backend/services/associations.py
from typing import Iterable, List, Set, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from models.product_tag import ProductTag
from models.tag import Tag


def find_associations_for(db: Session, product_id: int) -> List[Tuple[int, int]]:
    """Return ``(row_id, tag_id)`` for every association row of a product."""
    rows = db.execute(
        select(ProductTag.id, ProductTag.tag_id)
        .where(ProductTag.product_id == product_id)
        .order_by(ProductTag.id)
    ).all()
    return [(row_id, tag_id) for row_id, tag_id in rows]


def create_association(db: Session, product_id: int, tag_id: int) -> int:
    link = ProductTag(product_id=product_id, tag_id=tag_id)
    db.add(link)
    db.flush()
    return link.id


def delete_associations(db: Session, row_ids: Iterable[int]) -> int:
    row_ids = list(row_ids)
    if not row_ids:
        return 0
    deleted = (
        db.query(ProductTag)
        .filter(ProductTag.id.in_(row_ids))
        .delete(synchronize_session="fetch")
    )
    db.flush()
    return deleted


def missing_tag_ids(db: Session, tag_ids: Iterable[int]) -> Tuple[int, ...]:
    """Ids from ``tag_ids`` that have no Tag row, sorted."""
    wanted: Set[int] = set(tag_ids)
    if not wanted:
        return ()
    found = set(db.execute(select(Tag.id).where(Tag.id.in_(wanted))).scalars())
    return tuple(sorted(wanted - found))

# backend/routes/products.py
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from services import products as product_service
from services.outcomes import is_failure
from utils.audit import write_log
from utils.errors import http_error_for
from utils.summary import all_products_rows, log_table, single_product_rows
import schemas.product as product_schemas

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["Products"])


# ---- HELPERS ----
def _fail(db: Session, action: str, outcome, meta: Dict[str, Any]) -> HTTPException:
    write_log(
        db, action=action, resource="products", status="FAIL",
        meta={**meta, "reason": type(outcome).__name__},
    )
    return http_error_for(outcome)


def _scalars(payload, exclude_none: bool = False) -> Dict[str, Any]:
    return payload.model_dump(exclude={"tag_ids"}, exclude_none=exclude_none)


def _update(
    db: Session, product_id: int, fields: Dict[str, Any], tag_ids: Optional[List[int]], action: str
) -> product_schemas.ProductUpdateOut:
    outcome = product_service.update_product_and_tags(db, product_id, fields, tag_ids)
    if is_failure(outcome):
        raise _fail(db, action, outcome, {"id": product_id})

    out = product_schemas.ProductUpdateOut(
        product=product_schemas.ProductOut.model_validate(outcome.product),
        tags_before=sorted(outcome.tags_before),
        tags_after=sorted(outcome.tags_after),
        changed_fields=list(outcome.changed_fields),
    )
    write_log(
        db, action=action, resource="products", status="SUCCESS",
        meta={
            "id": product_id,
            "fields": list(outcome.changed_fields),
            "tags_before": out.tags_before,
            "tags_after": out.tags_after,
        },
    )
    return out


# =========================
# PRODUCT LIST
# =========================
@router.get("", response_model=List[product_schemas.ProductOut])
def list_products(db: Session = Depends(get_db)):
    products = product_service.list_products(db)
    logger.info("Viewing all products (%d)", len(products))
    log_table(logger, "Products", all_products_rows(products))
    return [product_schemas.ProductOut.model_validate(p) for p in products]


# =========================
# SINGLE PRODUCT
# =========================
@router.get("/{product_id}", response_model=product_schemas.ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    product = product_service.get_product(db, product_id)
    if not product:
        logger.warning("Error finding product with id %s: Not found", product_id)
        raise HTTPException(status_code=404, detail=f"No product found with id {product_id}")

    logger.info("Viewing product %s: %s", product.id, product.name)
    log_table(logger, f"Product {product.id}", single_product_rows(product))
    return product_schemas.ProductOut.model_validate(product)


# =========================
# CREATE PRODUCT
# =========================
@router.post("", response_model=product_schemas.ProductOut, status_code=201)
def add_product(payload: product_schemas.ProductCreate, db: Session = Depends(get_db)):
    fields = _scalars(payload)
    outcome = product_service.create_product_with_tags(db, fields, payload.tag_ids or [])
    if is_failure(outcome):
        raise _fail(db, "PRODUCT_CREATE", outcome, {"name": payload.name})

    out = product_schemas.ProductOut.model_validate(outcome.product)
    write_log(
        db, action="PRODUCT_CREATE", resource="products", status="SUCCESS",
        meta={"id": out.id, "category_id": out.category_id, "tags": sorted(outcome.tags)},
    )
    return out


# =========================
# UPDATE PRODUCT (PUT - full)
# =========================
@router.put("/{product_id}", response_model=product_schemas.ProductUpdateOut)
def update_product(
    product_id: int, payload: product_schemas.ProductReplace, db: Session = Depends(get_db),
):
    return _update(db, product_id, _scalars(payload), payload.tag_ids, "PRODUCT_UPDATE")


# =========================
# PARTIAL UPDATE (PATCH)
# =========================
@router.patch("/{product_id}", response_model=product_schemas.ProductUpdateOut)
def edit_product(
    product_id: int, payload: product_schemas.ProductPatch, db: Session = Depends(get_db),
):
    # Fields left out (or sent as null) keep their stored value
    return _update(db, product_id, _scalars(payload, exclude_none=True), payload.tag_ids, "PRODUCT_EDIT")


# =========================
# DELETE
# =========================
@router.delete("/{product_id}", response_model=product_schemas.ProductDeleteOut)
def delete_product(product_id: int, db: Session = Depends(get_db)):
    outcome = product_service.delete_product(db, product_id)
    if is_failure(outcome):
        raise _fail(db, "PRODUCT_DELETE", outcome, {"id": product_id})

    write_log(db, action="PRODUCT_DELETE", resource="products", status="SUCCESS", meta={"id": product_id})
    return {"detail": f"Product '{outcome.name}' deleted"}

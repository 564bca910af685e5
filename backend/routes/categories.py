# backend/routes/categories.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from database import get_db
from models.category import Category
from services.categories import delete_category as delete_category_with_policy
from services.outcomes import is_failure
from utils.audit import write_log
from utils.errors import http_error_for
from utils.summary import all_categories_rows, log_table, single_category_rows
import schemas.category as category_schemas

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/categories", tags=["Categories"])


# ---- HELPERS ----
def _fail(db: Session, action: str, status_code: int, detail: str, meta: dict, reason: str) -> HTTPException:
    write_log(db, action=action, resource="categories", status="FAIL", meta={**meta, "reason": reason})
    return HTTPException(status_code=status_code, detail=detail)


def _get_or_404(db: Session, category_id: int, action: str, audit: str = None) -> Category:
    category = (
        db.query(Category)
        .options(selectinload(Category.products))
        .filter(Category.id == category_id)
        .first()
    )
    if not category:
        logger.warning("Error %s category with id %s: Not found", action, category_id)
        detail = f"No category found with id {category_id}"
        if audit:
            raise _fail(db, audit, 404, detail, {"id": category_id}, "NotFound")
        raise HTTPException(status_code=404, detail=detail)
    return category


def _name_taken(db: Session, name: str, exclude_id: int = None) -> bool:
    query = db.query(Category).filter(func.lower(Category.name) == name.lower())
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    return query.first() is not None


# =========================
# CATEGORY LIST
# =========================
@router.get("", response_model=List[category_schemas.CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    categories = (
        db.query(Category)
        .options(selectinload(Category.products))
        .order_by(Category.id)
        .all()
    )
    logger.info("Viewing all categories (%d)", len(categories))
    log_table(logger, "Categories", all_categories_rows(categories))
    return categories


# =========================
# SINGLE CATEGORY
# =========================
@router.get("/{category_id}", response_model=category_schemas.CategoryOut)
def get_category(category_id: int, db: Session = Depends(get_db)):
    category = _get_or_404(db, category_id, "finding")
    logger.info("Viewing category %s: %s", category.id, category.name)
    if not category.products:
        logger.info("Currently no products in category %s", category.id)
    log_table(logger, f"Category {category.id}", single_category_rows(category))
    return category


# =========================
# CREATE CATEGORY
# =========================
@router.post("", response_model=category_schemas.CategoryOut, status_code=201)
def create_category(payload: category_schemas.CategoryCreate, db: Session = Depends(get_db)):
    taken = f"Category '{payload.name}' already exists"
    if _name_taken(db, payload.name):
        raise _fail(db, "CATEGORY_CREATE", 409, taken, {"name": payload.name}, "NameTaken")

    category = Category(name=payload.name)
    db.add(category)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise _fail(db, "CATEGORY_CREATE", 409, taken, {"name": payload.name}, "IntegrityError")
    db.refresh(category)

    out = category_schemas.CategoryOut.model_validate(category)
    write_log(db, action="CATEGORY_CREATE", resource="categories", status="SUCCESS", meta={"id": out.id, "name": out.name})
    logger.info("Created category %s: %s", out.id, out.name)
    return out


# =========================
# RENAME CATEGORY
# =========================
@router.put("/{category_id}", response_model=category_schemas.CategoryOut)
def update_category(category_id: int, payload: category_schemas.CategoryUpdate, db: Session = Depends(get_db)):
    category = _get_or_404(db, category_id, "updating", audit="CATEGORY_UPDATE")

    old_name = category.name
    meta = {"id": category_id, "name": payload.name}
    taken = f"Category '{payload.name}' already exists"
    if payload.name == old_name:
        raise _fail(
            db, "CATEGORY_UPDATE", 400, f"Request describes no change to category {category_id}",
            meta, "NoEffectiveChange",
        )
    if _name_taken(db, payload.name, exclude_id=category_id):
        raise _fail(db, "CATEGORY_UPDATE", 409, taken, meta, "NameTaken")

    category.name = payload.name
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise _fail(db, "CATEGORY_UPDATE", 409, taken, meta, "IntegrityError")
    db.refresh(category)

    out = category_schemas.CategoryOut.model_validate(category)
    write_log(
        db, action="CATEGORY_UPDATE", resource="categories", status="SUCCESS",
        meta={"id": category_id, "was": old_name, "now": out.name},
    )
    logger.info("Updated category %s: %s > %s", category_id, old_name, out.name)
    return out


# =========================
# DELETE
# =========================
@router.delete("/{category_id}", response_model=category_schemas.CategoryDeleteOut)
def delete_category(category_id: int, request: Request, db: Session = Depends(get_db)):
    policy = request.app.state.settings.CATEGORY_DELETE_POLICY
    outcome = delete_category_with_policy(db, category_id, policy)
    if is_failure(outcome):
        write_log(
            db, action="CATEGORY_DELETE", resource="categories", status="FAIL",
            meta={"id": category_id, "policy": policy, "reason": type(outcome).__name__},
        )
        raise http_error_for(outcome)

    write_log(
        db, action="CATEGORY_DELETE", resource="categories", status="SUCCESS",
        meta={"id": category_id, "policy": policy, "products": list(outcome.affected_products)},
    )
    return {
        "detail": f"Category '{outcome.name}' deleted",
        "policy": outcome.policy,
        "affected_products": list(outcome.affected_products),
    }

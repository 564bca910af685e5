# backend/routes/tags.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from database import get_db
from models.tag import Tag
from utils.audit import write_log
from utils.summary import all_tags_rows, log_table, single_tag_rows
import schemas.tag as tag_schemas

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tags", tags=["Tags"])


# ---- HELPERS ----
def _fail(db: Session, action: str, status_code: int, detail: str, meta: dict, reason: str) -> HTTPException:
    write_log(db, action=action, resource="tags", status="FAIL", meta={**meta, "reason": reason})
    return HTTPException(status_code=status_code, detail=detail)


def _get_or_404(db: Session, tag_id: int, action: str, audit: str = None) -> Tag:
    tag = db.query(Tag).options(selectinload(Tag.products)).filter(Tag.id == tag_id).first()
    if not tag:
        logger.warning("Error %s tag with id %s: Not found", action, tag_id)
        detail = f"No tag found with id {tag_id}"
        if audit:
            raise _fail(db, audit, 404, detail, {"id": tag_id}, "NotFound")
        raise HTTPException(status_code=404, detail=detail)
    return tag


def _name_taken(db: Session, name: str, exclude_id: int = None) -> bool:
    query = db.query(Tag).filter(func.lower(Tag.name) == name.lower())
    if exclude_id is not None:
        query = query.filter(Tag.id != exclude_id)
    return query.first() is not None


# =========================
# TAG LIST
# =========================
@router.get("", response_model=List[tag_schemas.TagOut])
def list_tags(db: Session = Depends(get_db)):
    tags = db.query(Tag).options(selectinload(Tag.products)).order_by(Tag.id).all()
    logger.info("Viewing all tags (%d)", len(tags))
    log_table(logger, "Tags", all_tags_rows(tags))
    return tags


# =========================
# SINGLE TAG
# =========================
@router.get("/{tag_id}", response_model=tag_schemas.TagOut)
def get_tag(tag_id: int, db: Session = Depends(get_db)):
    tag = _get_or_404(db, tag_id, "finding")
    logger.info("Viewing tag %s: %s", tag.id, tag.name)
    log_table(logger, f"Tag {tag.id}", single_tag_rows(tag))
    return tag


# =========================
# CREATE TAG
# =========================
@router.post("", response_model=tag_schemas.TagOut, status_code=201)
def create_tag(payload: tag_schemas.TagCreate, db: Session = Depends(get_db)):
    taken = f"Tag '{payload.name}' already exists"
    if _name_taken(db, payload.name):
        raise _fail(db, "TAG_CREATE", 409, taken, {"name": payload.name}, "NameTaken")

    tag = Tag(name=payload.name)
    db.add(tag)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise _fail(db, "TAG_CREATE", 409, taken, {"name": payload.name}, "IntegrityError")
    db.refresh(tag)

    out = tag_schemas.TagOut.model_validate(tag)
    write_log(db, action="TAG_CREATE", resource="tags", status="SUCCESS", meta={"id": out.id, "name": out.name})
    logger.info("Created tag %s: %s", out.id, out.name)
    return out


# =========================
# RENAME TAG
# =========================
@router.put("/{tag_id}", response_model=tag_schemas.TagOut)
def update_tag(tag_id: int, payload: tag_schemas.TagUpdate, db: Session = Depends(get_db)):
    tag = _get_or_404(db, tag_id, "updating", audit="TAG_UPDATE")

    old_name = tag.name
    meta = {"id": tag_id, "name": payload.name}
    taken = f"Tag '{payload.name}' already exists"
    if payload.name == old_name:
        raise _fail(db, "TAG_UPDATE", 400, f"Request describes no change to tag {tag_id}", meta, "NoEffectiveChange")
    if _name_taken(db, payload.name, exclude_id=tag_id):
        raise _fail(db, "TAG_UPDATE", 409, taken, meta, "NameTaken")

    tag.name = payload.name
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise _fail(db, "TAG_UPDATE", 409, taken, meta, "IntegrityError")
    db.refresh(tag)

    out = tag_schemas.TagOut.model_validate(tag)
    write_log(
        db, action="TAG_UPDATE", resource="tags", status="SUCCESS",
        meta={"id": tag_id, "was": old_name, "now": out.name},
    )
    logger.info("Updated tag %s: %s > %s", tag_id, old_name, out.name)
    return out


# =========================
# DELETE
# =========================
@router.delete("/{tag_id}")
def delete_tag(tag_id: int, db: Session = Depends(get_db)):
    tag = _get_or_404(db, tag_id, "deleting", audit="TAG_DELETE")
    tag_name = tag.name
    # Association rows for this tag are removed with it
    db.delete(tag)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error deleting tag with id %s: %s", tag_id, e)
        raise _fail(db, "TAG_DELETE", 500, f"Could not delete tag {tag_id}", {"id": tag_id}, "StoreFailure")

    write_log(db, action="TAG_DELETE", resource="tags", status="SUCCESS", meta={"id": tag_id})
    logger.info("Deleted tag %s: %s", tag_id, tag_name)
    return {"detail": f"Tag '{tag_name}' deleted"}

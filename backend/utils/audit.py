import logging

from sqlalchemy.orm import Session
from models.log import Log

logger = logging.getLogger(__name__)


def write_log(db: Session, *, action: str, resource: str, status: str = "SUCCESS", meta=None) -> Log:
    """Record one catalog mutation. Commits on its own, so call it after the business write."""
    meta = meta or {}
    entry = Log(action=action, resource=resource, status=status, meta=meta)
    db.add(entry)
    db.commit()
    logger.debug("audit %s %s %s %s", resource, action, status, meta)
    return entry

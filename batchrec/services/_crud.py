from __future__ import annotations

import logging

from fastapi import HTTPException
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from batchrec.core.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from batchrec.core.errors import PersistenceError

logger = logging.getLogger(__name__)


def commit_refresh(db: Session, obj):
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def delete_commit(db: Session, obj, label: str) -> None:
    """Delete ``obj``; a row still referenced elsewhere raises PersistenceError."""
    obj_id = obj.id
    try:
        db.delete(obj)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("deleting %s %s failed: %s", label, obj_id, e)
        raise PersistenceError(f"{label} {obj_id} is still in use and cannot be deleted") from e


def get_or_404(db: Session, model, obj_id, label: str):
    obj = db.get(model, obj_id)
    if obj is None:
        raise HTTPException(404, f"{label} not found")
    return obj


def search_page(query: Query, columns, q: str | None, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE):
    """Case-insensitive substring filter over ``columns``, newest first, one page.

    Returns (rows, total).
    """
    if q and q.strip():
        pattern = f"%{q.strip()}%"
        query = query.filter(or_(*[col.ilike(pattern) for col in columns]))
    total = query.order_by(None).count()
    page = max(page, 1)
    page_size = min(max(page_size, 1), MAX_PAGE_SIZE)
    model = query.column_descriptions[0]["entity"]
    query = query.order_by(model.created_at.desc(), model.id.desc())
    rows = query.offset((page - 1) * page_size).limit(page_size).all()
    return rows, total


def row_dict(obj) -> dict:
    """Column values of an ORM row keyed by attribute name."""
    return {col.key: getattr(obj, col.key) for col in obj.__mapper__.column_attrs}

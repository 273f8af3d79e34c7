from __future__ import annotations

import logging

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from batchrec.core.config import SPEC_LOOKUP_LIMIT, DefaultAssignees
from batchrec.core.errors import NotFound, PersistenceError, ValidationFailure
from batchrec.db.models.bmr import BMR
from batchrec.db.models.reports import RMTestReport
from batchrec.documents.bmr_sheet import render_bmr_sheet
from batchrec.documents.layout import Document
from batchrec.documents.sampling_advice import render_sampling_advice
from batchrec.documents.transfer_slip import render_transfer_slip
from batchrec.domain.mapper import to_domain, to_persisted
from batchrec.domain.types import BMRData
from batchrec.forms.state import FormState, validate
from batchrec.services._crud import commit_refresh, delete_commit, row_dict, search_page

logger = logging.getLogger(__name__)

DOCUMENTS = {
    "bmr-sheet": render_bmr_sheet,
    "transfer-slip": render_transfer_slip,
    "sampling-advice": render_sampling_advice,
}

SEARCH_COLUMNS = (BMR.batch_no, BMR.product_name, BMR.product_code)

# Columns the store keeps outside the record itself.
STAMPS = ("generated_by", "created_at", "updated_at")


class SqlBMRStore:
    """BMR rows in the ``bmr`` table, as plain dicts."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, record_id: int) -> dict:
        row = self.db.get(BMR, record_id)
        if row is None:
            raise NotFound(f"BMR {record_id} not found")
        return row_dict(row)

    def save(self, row: dict) -> dict:
        record_id = row.get("id")
        try:
            if record_id is None:
                obj = BMR(**row)
            else:
                obj = self.db.get(BMR, record_id)
                if obj is None:
                    raise NotFound(f"BMR {record_id} not found")
                for key, value in row.items():
                    setattr(obj, key, value)
            commit_refresh(self.db, obj)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("saving BMR %s failed", record_id)
            raise PersistenceError(str(e.__cause__ or e)) from e
        logger.info("saved BMR %s (%s)", obj.id, obj.batch_no)
        return row_dict(obj)

    def delete(self, record_id: int) -> None:
        obj = self.db.get(BMR, record_id)
        if obj is None:
            raise NotFound(f"BMR {record_id} not found")
        delete_commit(self.db, obj, "BMR")

    def search_specifications(self, query: str, limit: int = SPEC_LOOKUP_LIMIT) -> list[dict]:
        pattern = f"%{query}%"
        rows = (
            self.db.query(RMTestReport)
            .filter(or_(RMTestReport.report_no.ilike(pattern), RMTestReport.product_name.ilike(pattern)))
            .order_by(RMTestReport.created_at.desc())
            .limit(limit)
            .all()
        )
        return [
            {"id": r.id, "report_no": r.report_no, "product_name": r.product_name, "batch_no": r.batch_no}
            for r in rows
        ]


def list_bmrs(db: Session, q: str | None, page: int, page_size: int):
    return search_page(db.query(BMR), SEARCH_COLUMNS, q, page, page_size)


def load_bmr(db: Session, record_id: int, assignees: DefaultAssignees | None = None) -> BMRData:
    return to_domain(SqlBMRStore(db).get(record_id), assignees)


def save_bmr(db: Session, record: BMRData, author_id: str | None = None) -> dict:
    errors = validate(FormState(record=record))
    if errors:
        raise ValidationFailure(errors)
    return SqlBMRStore(db).save(to_persisted(record, author_id=author_id))


def bmr_out(row: dict, assignees: DefaultAssignees | None = None) -> dict:
    """A stored row as clients read it: the normalized record with its author and timestamps."""
    out = to_persisted(to_domain(row, assignees))
    out.update({key: row.get(key) for key in STAMPS})
    return out


def render_bmr_document(db: Session, record_id: int, kind: str) -> Document:
    render = DOCUMENTS.get(kind)
    if render is None:
        raise NotFound(f"Unknown document {kind!r}")
    return render(load_bmr(db, record_id))

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from batchrec.core.errors import NotFound, PersistenceError, ValidationFailure
from batchrec.db.models.master import Supplier
from batchrec.db.models.reports import RMTestReport
from batchrec.documents.layout import Document
from batchrec.documents.rm_certificate import render_rm_certificate
from batchrec.domain.mapper import report_to_domain, report_to_persisted
from batchrec.domain.types import IncomingReport
from batchrec.forms.report_form import prepare_for_save, validate_report
from batchrec.services._crud import commit_refresh, delete_commit, row_dict, search_page

logger = logging.getLogger(__name__)

SEARCH_COLUMNS = (RMTestReport.report_no, RMTestReport.product_name, RMTestReport.batch_no)


def report_out(row: RMTestReport) -> dict:
    out = report_to_persisted(report_to_domain(row_dict(row)))
    out["supplier_name"] = row.supplier.name if row.supplier else None
    out["created_at"] = row.created_at
    return out


def list_reports(db: Session, q: str | None, page: int, page_size: int):
    return search_page(db.query(RMTestReport), SEARCH_COLUMNS, q, page, page_size)


def get_report(db: Session, report_id: int) -> RMTestReport:
    row = db.get(RMTestReport, report_id)
    if row is None:
        raise NotFound(f"Report {report_id} not found")
    return row


def save_report(db: Session, report: IncomingReport, author_id: str | None = None) -> RMTestReport:
    report = prepare_for_save(report)
    errors = validate_report(report)
    if errors:
        raise ValidationFailure(errors)

    values = report_to_persisted(report, author_id=author_id)
    try:
        if report.id is None:
            row = RMTestReport(**values)
        else:
            row = get_report(db, report.id)
            for key, value in values.items():
                setattr(row, key, value)
        commit_refresh(db, row)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("saving report %s failed", report.report_no)
        raise PersistenceError(str(e.__cause__ or e)) from e
    logger.info("saved test report %s", row.report_no)
    return row


def delete_report(db: Session, report_id: int) -> None:
    delete_commit(db, get_report(db, report_id), "Report")


def render_certificate(db: Session, report_id: int, with_signature: bool = True) -> Document:
    row = get_report(db, report_id)
    supplier = db.get(Supplier, row.supplier_id) if row.supplier_id is not None else None
    return render_rm_certificate(
        report_to_domain(row_dict(row)),
        supplier_name=supplier.name if supplier else None,
        with_signature=with_signature,
    )

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from batchrec.core.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, get_assignees
from batchrec.core.errors import NotFound, PersistenceError, RenderError, ValidationFailure
from batchrec.core.security import Principal, get_principal
from batchrec.db.session import get_db
from batchrec.documents.layout import to_pdf_bytes
from batchrec.domain.mapper import report_to_domain, report_to_persisted
from batchrec.domain.report_templates import DEFAULT_LEVEL
from batchrec.domain.types import PERFORMANCE_LEVELS, REPORT_RESULTS
from batchrec.forms.report_form import change_performance_level, new_report
from batchrec.services.reports import service as svc

router = APIRouter(prefix="/rm-test-reports", tags=["rm-test-reports"])


class ReportIn(BaseModel):
    product_name: str = ""
    report_no: str = ""
    performance_level: str = DEFAULT_LEVEL
    batch_no: str | None = None
    supplier_id: int | None = None
    batch_size: str | None = None
    invoice_no: str | None = None
    invoice_date: str | None = None
    mfg_date: str | None = None
    exp_date: str | None = None
    sample_qty: str | None = None
    sample_date: str | None = None
    release_date: str | None = None
    fabric_composition: str | None = None
    parameters_results: list[dict[str, Any]] = Field(default_factory=list)
    biocompatibility_result: list[dict[str, Any]] = Field(default_factory=list)
    visual_results: list[dict[str, Any]] = Field(default_factory=list)
    result: str = "Comply"
    tested_by: str | None = None
    reviewed_by: str | None = None


def _level_or_400(level: str) -> str:
    if level not in PERFORMANCE_LEVELS:
        raise HTTPException(400, f"Unknown performance level {level!r}")
    return level


def _result_or_400(result: str) -> str:
    if result not in REPORT_RESULTS:
        raise HTTPException(400, f"Result must be one of {', '.join(REPORT_RESULTS)}")
    return result


def _save(db: Session, payload: ReportIn, principal: Principal, report_id: int | None = None) -> dict:
    _level_or_400(payload.performance_level)
    _result_or_400(payload.result)
    values = payload.model_dump()
    values["id"] = report_id
    try:
        row = svc.save_report(db, report_to_domain(values), author_id=principal.user_id)
    except ValidationFailure as e:
        raise HTTPException(400, {"error": "validation_failed", "fields": e.errors})
    except NotFound as e:
        raise HTTPException(404, str(e))
    except PersistenceError as e:
        raise HTTPException(409, str(e))
    return svc.report_out(row)


@router.get("")
def list_reports(
    q: str | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    rows, total = svc.list_reports(db, q, page, page_size)
    return {"items": [svc.report_out(r) for r in rows], "total": total, "page": page, "page_size": page_size}


@router.get("/template")
def report_template(level: str = DEFAULT_LEVEL):
    return report_to_persisted(new_report(get_assignees(), _level_or_400(level)))


@router.post("/relevel")
def relevel(payload: ReportIn, level: str):
    report = report_to_domain(payload.model_dump())
    return report_to_persisted(change_performance_level(report, _level_or_400(level)))


@router.post("")
def create_report(payload: ReportIn, db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    return _save(db, payload, principal)


@router.get("/{report_id}")
def get_report(report_id: int, db: Session = Depends(get_db)):
    try:
        return svc.report_out(svc.get_report(db, report_id))
    except NotFound:
        raise HTTPException(404, "Report not found")


@router.put("/{report_id}")
def update_report(report_id: int, payload: ReportIn, db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    return _save(db, payload, principal, report_id=report_id)


@router.delete("/{report_id}")
def delete_report(report_id: int, db: Session = Depends(get_db)):
    try:
        svc.delete_report(db, report_id)
    except NotFound:
        raise HTTPException(404, "Report not found")
    except PersistenceError as e:
        raise HTTPException(409, str(e))
    return {"ok": True}


@router.get("/{report_id}/certificate")
def certificate(report_id: int, with_signature: bool = True, db: Session = Depends(get_db)):
    try:
        document = svc.render_certificate(db, report_id, with_signature=with_signature)
        data = to_pdf_bytes(document)
    except NotFound:
        raise HTTPException(404, "Report not found")
    except RenderError as e:
        raise HTTPException(500, str(e))
    return Response(
        content=data,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{document.filename}"'},
    )

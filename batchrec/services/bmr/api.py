from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from batchrec.core.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, get_assignees
from batchrec.core.errors import InvariantError, NotFound, PersistenceError, RenderError, ValidationFailure
from batchrec.core.security import Principal, get_principal
from batchrec.db.session import get_db
from batchrec.documents.layout import to_pdf_bytes
from batchrec.domain.mapper import to_domain
from batchrec.services.bmr import service as svc

router = APIRouter(prefix="/bmr", tags=["bmr"])


class BMRIn(BaseModel):
    bmr_type: str = "standard"
    product_type: str | None = None
    product_name: str | None = None
    product_code: str | None = None
    brand_name: str | None = None
    product_size: str | None = None
    batch_no: str | None = None
    batch_size: str | None = None
    mfg_date: str | None = None
    exp_date: str | None = None
    type_of_packing: str | None = None
    date_of_commencement: str | None = None
    date_of_completion: str | None = None

    raw_materials: list[dict[str, Any]] = Field(default_factory=list)
    packing_materials: list[dict[str, Any]] = Field(default_factory=list)
    kit_contents: list[dict[str, Any]] = Field(default_factory=list)
    process_steps: dict[str, Any] = Field(default_factory=dict)
    sterilization: dict[str, Any] = Field(default_factory=dict)
    labeling: dict[str, Any] = Field(default_factory=dict)
    final_packing: dict[str, Any] = Field(default_factory=dict)
    declarations: dict[str, Any] = Field(default_factory=dict)

    status: str = "draft"
    raw_material_for_specification: int | None = None
    document_no: str | None = None
    revision_no: str | None = None
    issue_no: str | None = None


def _summary(row) -> dict:
    return {
        "id": row.id,
        "bmr_type": row.bmr_type,
        "product_name": row.product_name,
        "product_code": row.product_code,
        "batch_no": row.batch_no,
        "batch_size": row.batch_size,
        "mfg_date": row.mfg_date,
        "status": row.status,
        "created_at": row.created_at,
    }


def _save(db: Session, payload: BMRIn, principal: Principal, record_id: int | None = None) -> dict:
    row = payload.model_dump()
    if record_id is not None:
        row["id"] = record_id
    try:
        record = to_domain(row, get_assignees())
        saved = svc.save_bmr(db, record, author_id=principal.user_id)
    except ValidationFailure as e:
        raise HTTPException(400, {"error": "validation_failed", "fields": e.errors})
    except InvariantError as e:
        raise HTTPException(400, str(e))
    except NotFound as e:
        raise HTTPException(404, str(e))
    except PersistenceError as e:
        raise HTTPException(409, str(e))
    return svc.bmr_out(saved, get_assignees())


def _pdf(db: Session, bmr_id: int, kind: str, disposition: str) -> Response:
    try:
        document = svc.render_bmr_document(db, bmr_id, kind)
        data = to_pdf_bytes(document)
    except NotFound as e:
        raise HTTPException(404, str(e))
    except RenderError as e:
        raise HTTPException(500, str(e))
    return Response(
        content=data,
        media_type="application/pdf",
        headers={"Content-Disposition": f'{disposition}; filename="{document.filename}"'},
    )


@router.get("")
def list_bmrs(
    q: str | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    rows, total = svc.list_bmrs(db, q, page, page_size)
    return {"items": [_summary(r) for r in rows], "total": total, "page": page, "page_size": page_size}


@router.get("/specifications")
def search_specifications(q: str = "", db: Session = Depends(get_db)):
    if not q.strip():
        return []
    return svc.SqlBMRStore(db).search_specifications(q.strip())


@router.post("")
def create_bmr(payload: BMRIn, db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    return _save(db, payload, principal)


@router.get("/{bmr_id}")
def get_bmr(bmr_id: int, db: Session = Depends(get_db)):
    try:
        row = svc.SqlBMRStore(db).get(bmr_id)
    except NotFound:
        raise HTTPException(404, "BMR not found")
    return svc.bmr_out(row, get_assignees())


@router.put("/{bmr_id}")
def update_bmr(bmr_id: int, payload: BMRIn, db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    return _save(db, payload, principal, record_id=bmr_id)


@router.delete("/{bmr_id}")
def delete_bmr(bmr_id: int, db: Session = Depends(get_db)):
    try:
        svc.SqlBMRStore(db).delete(bmr_id)
    except NotFound:
        raise HTTPException(404, "BMR not found")
    except PersistenceError as e:
        raise HTTPException(409, str(e))
    return {"ok": True}


@router.get("/{bmr_id}/documents/{kind}")
def download_document(bmr_id: int, kind: str, db: Session = Depends(get_db)):
    return _pdf(db, bmr_id, kind, "attachment")


@router.get("/{bmr_id}/print/{kind}")
def print_document(bmr_id: int, kind: str, db: Session = Depends(get_db)):
    return _pdf(db, bmr_id, kind, "inline")

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from batchrec.core.errors import PersistenceError
from batchrec.db.models.master import Fabric, Supplier
from batchrec.db.session import get_db
from batchrec.services._crud import commit_refresh, delete_commit, get_or_404

router = APIRouter(prefix="/fabrics", tags=["fabrics"])


class FabricIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=256)
    supplier_id: int | None = None
    width: str | None = Field(default=None, max_length=64)


def _out(row: Fabric) -> dict:
    return {
        "id": row.id,
        "name": row.name,
        "supplier_id": row.supplier_id,
        "supplier_name": row.supplier.name if row.supplier else None,
        "width": row.width,
        "created_at": row.created_at,
    }


def _check_supplier(db: Session, supplier_id: int | None) -> None:
    if supplier_id is not None and db.get(Supplier, supplier_id) is None:
        raise HTTPException(400, "Unknown supplier")


@router.get("")
def list_fabrics(q: str | None = None, db: Session = Depends(get_db)):
    query = db.query(Fabric)
    if q and q.strip():
        query = query.filter(Fabric.name.ilike(f"%{q.strip()}%"))
    rows = query.order_by(Fabric.created_at.desc(), Fabric.id.desc()).all()
    return [_out(r) for r in rows]


@router.post("")
def create_fabric(payload: FabricIn, db: Session = Depends(get_db)):
    _check_supplier(db, payload.supplier_id)
    row = Fabric(name=payload.name.strip(), supplier_id=payload.supplier_id, width=payload.width)
    return _out(commit_refresh(db, row))


@router.get("/{fabric_id}")
def get_fabric(fabric_id: int, db: Session = Depends(get_db)):
    return _out(get_or_404(db, Fabric, fabric_id, "Fabric"))


@router.put("/{fabric_id}")
def update_fabric(fabric_id: int, payload: FabricIn, db: Session = Depends(get_db)):
    row = get_or_404(db, Fabric, fabric_id, "Fabric")
    _check_supplier(db, payload.supplier_id)
    row.name = payload.name.strip()
    row.supplier_id = payload.supplier_id
    row.width = payload.width
    return _out(commit_refresh(db, row))


@router.delete("/{fabric_id}")
def delete_fabric(fabric_id: int, db: Session = Depends(get_db)):
    try:
        delete_commit(db, get_or_404(db, Fabric, fabric_id, "Fabric"), "Fabric")
    except PersistenceError as e:
        raise HTTPException(409, str(e))
    return {"ok": True}

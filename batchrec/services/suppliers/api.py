from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from batchrec.db.models.master import Supplier
from batchrec.db.session import get_db
from batchrec.core.errors import PersistenceError
from batchrec.services._crud import commit_refresh, delete_commit, get_or_404

router = APIRouter(prefix="/suppliers", tags=["suppliers"])


class SupplierIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=256)


def _out(row: Supplier) -> dict:
    return {"id": row.id, "name": row.name, "created_at": row.created_at}


@router.get("")
def list_suppliers(q: str | None = None, db: Session = Depends(get_db)):
    query = db.query(Supplier)
    if q and q.strip():
        query = query.filter(Supplier.name.ilike(f"%{q.strip()}%"))
    rows = query.order_by(Supplier.created_at.desc(), Supplier.id.desc()).all()
    return [_out(r) for r in rows]


@router.post("")
def create_supplier(payload: SupplierIn, db: Session = Depends(get_db)):
    return _out(commit_refresh(db, Supplier(name=payload.name.strip())))


@router.get("/{supplier_id}")
def get_supplier(supplier_id: int, db: Session = Depends(get_db)):
    return _out(get_or_404(db, Supplier, supplier_id, "Supplier"))


@router.put("/{supplier_id}")
def update_supplier(supplier_id: int, payload: SupplierIn, db: Session = Depends(get_db)):
    row = get_or_404(db, Supplier, supplier_id, "Supplier")
    row.name = payload.name.strip()
    return _out(commit_refresh(db, row))


@router.delete("/{supplier_id}")
def delete_supplier(supplier_id: int, db: Session = Depends(get_db)):
    row = get_or_404(db, Supplier, supplier_id, "Supplier")
    try:
        delete_commit(db, row, "Supplier")
    except PersistenceError as e:
        raise HTTPException(409, str(e))
    return {"ok": True}

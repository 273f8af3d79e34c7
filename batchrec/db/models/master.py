"""
Supplier and fabric (raw material) master data.
"""

from __future__ import annotations

from sqlalchemy import String, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from batchrec.db.base import Base
from batchrec.db.models.common import HasId, HasCreatedAt


class Supplier(Base, HasId, HasCreatedAt):
    __tablename__ = "suppliers"

    name: Mapped[str] = mapped_column(String(256), nullable=False, index=True)


class Fabric(Base, HasId, HasCreatedAt):
    __tablename__ = "fabrics"

    name: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    # A supplier still referenced here cannot be deleted.
    supplier_id: Mapped[int | None] = mapped_column(ForeignKey("suppliers.id"), nullable=True, index=True)
    width: Mapped[str | None] = mapped_column(String(64), nullable=True)

    supplier: Mapped[Supplier | None] = relationship()

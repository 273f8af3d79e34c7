"""
Incoming raw-material test reports (one fabric lot's lab results).
"""

from __future__ import annotations

from sqlalchemy import String, ForeignKey, JSON, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from batchrec.db.base import Base
from batchrec.db.models.common import HasId, HasCreatedAt, HasUpdatedAt
from batchrec.db.models.master import Supplier


class RMTestReport(Base, HasId, HasCreatedAt, HasUpdatedAt):
    __tablename__ = "rm_test_reports"

    product_name: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    report_no: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    performance_level: Mapped[str] = mapped_column(String(16), default="LEVEL 3", nullable=False)  # LEVEL 1..4
    batch_no: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    supplier_id: Mapped[int | None] = mapped_column(ForeignKey("suppliers.id"), nullable=True, index=True)
    batch_size: Mapped[str | None] = mapped_column(String(64), nullable=True)
    invoice_no: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Dates are kept as text; the mapper owns parsing.
    invoice_date: Mapped[str | None] = mapped_column(String(40), nullable=True)
    mfg_date: Mapped[str | None] = mapped_column(String(40), nullable=True)
    exp_date: Mapped[str | None] = mapped_column(String(40), nullable=True)
    sample_date: Mapped[str | None] = mapped_column(String(40), nullable=True)
    release_date: Mapped[str | None] = mapped_column(String(40), nullable=True)

    sample_qty: Mapped[str | None] = mapped_column(String(64), nullable=True)
    fabric_composition: Mapped[str | None] = mapped_column(Text, nullable=True)

    parameters_results: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    biocompatibility_result: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    visual_results: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    result: Mapped[str] = mapped_column(String(32), default="Comply", nullable=False)  # Comply|Does not Comply
    tested_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    generated_by: Mapped[str | None] = mapped_column(String(64), nullable=True)

    supplier: Mapped[Supplier | None] = relationship()

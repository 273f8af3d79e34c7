"""
Batch Manufacturing Records.

Scalar identity columns are flat; every nested section is a JSON document with
camelCase keys. process_steps is keyed by stage and its shape depends on bmr_type.
"""

from __future__ import annotations

from sqlalchemy import String, ForeignKey, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from batchrec.db.base import Base
from batchrec.db.models.common import HasId, HasCreatedAt, HasUpdatedAt
from batchrec.db.models.reports import RMTestReport


class BMR(Base, HasId, HasCreatedAt, HasUpdatedAt):
    __tablename__ = "bmr"

    bmr_type: Mapped[str] = mapped_column(String(16), default="standard", nullable=False)  # standard|kit
    product_type: Mapped[str | None] = mapped_column(String(16), nullable=True)  # Gown|Drape|Cover|Kit
    product_name: Mapped[str | None] = mapped_column(String(256), nullable=True, index=True)
    product_code: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    brand_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    product_size: Mapped[str | None] = mapped_column(String(64), nullable=True)
    batch_no: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    batch_size: Mapped[str | None] = mapped_column(String(64), nullable=True)
    type_of_packing: Mapped[str | None] = mapped_column(String(256), nullable=True)

    mfg_date: Mapped[str | None] = mapped_column(String(40), nullable=True)
    exp_date: Mapped[str | None] = mapped_column(String(40), nullable=True)
    date_of_commencement: Mapped[str | None] = mapped_column(String(40), nullable=True)
    date_of_completion: Mapped[str | None] = mapped_column(String(40), nullable=True)

    raw_materials: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    packing_materials: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    kit_contents: Mapped[list | None] = mapped_column(JSON, nullable=True)
    process_steps: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    sterilization: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    labeling: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    final_packing: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    declarations: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

    status: Mapped[str] = mapped_column(String(16), default="draft", nullable=False)  # draft|final|released
    raw_material_for_specification: Mapped[int | None] = mapped_column(ForeignKey("rm_test_reports.id"), nullable=True, index=True)

    document_no: Mapped[str | None] = mapped_column(String(64), nullable=True)
    revision_no: Mapped[str | None] = mapped_column(String(64), nullable=True)
    issue_no: Mapped[str | None] = mapped_column(String(64), nullable=True)
    generated_by: Mapped[str | None] = mapped_column(String(64), nullable=True)

    specification: Mapped[RMTestReport | None] = relationship()

Index("ix_bmr_type_created", BMR.bmr_type, BMR.created_at)

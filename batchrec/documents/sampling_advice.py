from __future__ import annotations

from reportlab.lib.units import mm
from reportlab.platypus import PageBreak, Paragraph

from batchrec.core.config import COMPANY_NAME
from batchrec.documents.layout import (
    Document,
    STYLES,
    label_value_table,
    signature_row,
    slip_header,
    spacer,
    text,
)
from batchrec.domain.types import BMRData

SAMPLING_REF = "SMPLQC-12"
CONTROL_SAMPLE_REF = "SMPLFG-01"
DEFAULT_SAMPLE_QTY = "2 Units"
DEFAULT_CONTROL_SAMPLE_QTY = "02 Unit"


def _grid(pairs) -> list:
    return [label_value_table(pairs, per_row=1), spacer(20 * mm)]


def _sampling_page(bmr: BMRData) -> list:
    return [
        slip_header(SAMPLING_REF),
        Paragraph("Sampling Advice", STYLES["SlipTitle"]),
        label_value_table([
            ("From:", "Production"),
            ("Ref. No. :", f"{bmr.batch_no or '---'} / SA"),
        ]),
        spacer(),
        text("To: The Office QC", "Body"),
        text("Pls. collect the following sample for Finished Product", "Body"),
        spacer(),
        *_grid([
            ("Name of Item/Product", bmr.product_name),
            ("Lot/Batch No.", bmr.batch_no),
            ("Lot/Batch/Target Size", bmr.batch_size),
            ("Manufactured By", COMPANY_NAME),
            ("Date of Manufacturing", bmr.mfg_date),
            ("Date of Expiry", bmr.exp_date),
            ("Sample Qty.", bmr.final_packing.control_sample_qty or DEFAULT_SAMPLE_QTY),
        ]),
        signature_row(["ISSUED BY", "DRAWN BY / DATE"], ["PRODUCTION", "QC DEPARTMENT"]),
    ]


def _control_sample_page(bmr: BMRData) -> list:
    return [
        slip_header(CONTROL_SAMPLE_REF),
        Paragraph("Request Slip for Collection for Control Sample", STYLES["SlipTitle"]),
        label_value_table([
            ("From:", "Production"),
            ("S. No. :", f"{bmr.batch_no or '---'} / CS"),
        ]),
        spacer(),
        text("To: The Office QC", "Body"),
        text("Pls. collect the control sample of following batch No.", "Body"),
        spacer(),
        *_grid([
            ("Name of Product", bmr.product_name),
            ("Batch No./Lot No.", bmr.batch_no),
            ("Sample Qty.", bmr.final_packing.control_sample_qty or DEFAULT_CONTROL_SAMPLE_QTY),
            ("Mfg Date", bmr.mfg_date),
            ("Exp. Date", bmr.exp_date),
        ]),
        signature_row(["Head of Production", "Received By / Date"], ["", "QC DEPARTMENT"]),
    ]


def render_sampling_advice(bmr: BMRData) -> Document:
    """Two pages: the QC sampling advice and the control-sample collection request."""
    return Document(
        title=f"Sampling_Advice_{bmr.batch_no}",
        filename=f"Sampling_Advice_{bmr.batch_no or 'draft'}.pdf",
        story=[*_sampling_page(bmr), PageBreak(), *_control_sample_page(bmr)],
    )

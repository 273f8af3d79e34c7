"""
In-house raw material test report (the certificate printed for one incoming
fabric lot).
"""

from __future__ import annotations

import logging
import os

from reportlab.lib.units import mm
from reportlab.platypus import Image, KeepTogether, Table, TableStyle

from batchrec.core.config import SIGNATURE_DIR
from batchrec.documents.layout import (
    CONTENT_WIDTH,
    Document,
    HeaderInfo,
    grid_table,
    label_value_table,
    section,
    spacer,
    text,
)
from batchrec.domain.dates import display
from batchrec.domain.types import IncomingReport, TestResult

logger = logging.getLogger(__name__)

CERTIFICATE_HEADER = HeaderInfo(
    title="IN-HOUSE RAW MATERIAL TEST REPORT",
    doc_no="SMPL/QC/RM/01",
    rev_no="01 & 05.08.2025",
    issue_no="01 & 06.08.2025",
    page_label="Page No. {page} of {total}",
    footer_right="Raw Material Test Report",
    border=True,
)

SIGNATURE_FILES = {"tested_by": "tested_by.png", "reviewed_by": "reviewed_by.png"}


def _day(value) -> str:
    return display(value, "%d.%m.%Y") or "---"


def _month(value) -> str:
    return display(value, "%m.%Y") or "---"


def _result_table(title: str, results: list[TestResult], show_unit: bool = False) -> KeepTogether:
    head = ["S.No.", "TEST", "STANDARD REQUIREMENTS"] + (["UNIT"] if show_unit else []) + ["RESULT"]
    rows: list[list] = [head]
    for r in results:
        row = [r.s_no, r.test, r.standard]
        if show_unit:
            row.append(r.unit or "---")
        row.append(r.result)
        rows.append(row)
    widths = [0.08, 0.37, 0.25, 0.12, 0.18] if show_unit else [0.08, 0.42, 0.3, 0.2]
    return KeepTogether([section(title), grid_table(rows, widths)])


def _signature_image(key: str):
    if not SIGNATURE_DIR:
        return None
    path = os.path.join(SIGNATURE_DIR, SIGNATURE_FILES[key])
    if not os.path.exists(path):
        logger.warning("signature image %s not found", path)
        return None
    return Image(path, width=30 * mm, height=12 * mm)


def _signatures(report: IncomingReport, with_signature: bool) -> Table:
    cells = []
    for key, label, name in (
        ("tested_by", "Tested By", report.tested_by),
        ("reviewed_by", "Reviewed By", report.reviewed_by),
    ):
        image = _signature_image(key) if with_signature else None
        cells.append([image or spacer(12 * mm), text(label, "CellBold"), text(name)])
    table = Table([cells], colWidths=[CONTENT_WIDTH / 2] * 2)
    table.setStyle(TableStyle([("ALIGN", (0, 0), (-1, -1), "CENTER"), ("VALIGN", (0, 0), (-1, -1), "BOTTOM")]))
    return table


def render_rm_certificate(
    report: IncomingReport,
    supplier_name: str | None = None,
    with_signature: bool = True,
) -> Document:
    details = label_value_table([
        ("Product Name", report.product_name),
        ("T.R. No.", report.report_no),
        ("Batch No.", report.batch_no),
        ("Supplier Name", supplier_name or "---"),
        ("Invoice No.", report.invoice_no),
        ("Invoice Date", _day(report.invoice_date)),
        ("Total Batch Size", report.batch_size),
        ("Sample Qty.", report.sample_qty),
        ("Date of Sample", _day(report.sample_date)),
        ("Mfg. Date", _month(report.mfg_date)),
        ("Exp. Date", _month(report.exp_date)),
        ("Release Date", _day(report.release_date)),
        ("Performance Level", report.performance_level),
        ("Fabric Composition", report.fabric_composition),
    ])
    final = grid_table(
        [[text("Final Result", "CellBold"),
          text(f"The samples {report.result} with all the specifications as per the standard", "CellBold")]],
        [0.25, 0.75],
        header=False,
        label_cols=(0,),
    )
    story = [
        details,
        spacer(),
        _result_table("Fabric Test Parameters", report.parameters_results, show_unit=True),
        _result_table("Biocompatibility Test (External Lab)", report.biocompatibility_result),
        _result_table("Visual Defects", report.visual_results),
        KeepTogether([spacer(), final, spacer(8 * mm), _signatures(report, with_signature)]),
    ]
    return Document(
        title=f"RM_Report_{report.report_no}",
        filename=f"RM_Report_{report.report_no or 'draft'}.pdf",
        story=story,
        header=CERTIFICATE_HEADER,
    )

from __future__ import annotations

from datetime import date

from reportlab.lib.units import mm
from reportlab.platypus import Paragraph

from batchrec.documents.layout import (
    Document,
    STYLES,
    grid_table,
    label_value_table,
    signature_row,
    slip_header,
    spacer,
    text,
)
from batchrec.domain.types import BMRData

FORMAT_REF = "SMPLMTL-04"
EMPTY_TEXT = "No materials found for this batch."


def render_transfer_slip(bmr: BMRData, today: date | None = None) -> Document:
    """Material requisition slip listing raw then packing materials, numbered from 1."""
    today = today or date.today()
    materials = [*bmr.raw_materials, *bmr.packing_materials]

    widths = [0.08, 0.4, 0.1, 0.12, 0.12, 0.18]
    rows: list[list] = [["S.No.", "Product Description", "Unit", "Qty. Req.", "Qty. Iss.", "Lot No"]]
    for idx, item in enumerate(materials):
        rows.append([idx + 1, item.name, item.unit, item.required_qty, item.issued_qty, item.lot_no])
    if not materials:
        rows.append([text(EMPTY_TEXT, "CellCenter"), "", "", "", "", ""])
    table = grid_table(rows, widths)
    if not materials:
        table.setStyle([("SPAN", (0, 1), (-1, 1))])

    story = [
        slip_header(FORMAT_REF),
        Paragraph("Material Requisition Slip", STYLES["SlipTitle"]),
        label_value_table([
            ("From:", "Production"),
            ("Date:", today.strftime("%d-%m-%Y")),
            ("Material Required for:", bmr.product_name),
            ("", ""),
            ("Batch No:", bmr.batch_no),
            ("Department:", "Production"),
        ]),
        spacer(),
        table,
        spacer(25 * mm),
        signature_row(["Requisitioned By", "Sanctioned By", "Issued By", "Received By"]),
    ]
    return Document(
        title=f"Material_Transfer_Slip_{bmr.batch_no}",
        filename=f"Material_Transfer_Slip_{bmr.batch_no or 'draft'}.pdf",
        story=story,
    )

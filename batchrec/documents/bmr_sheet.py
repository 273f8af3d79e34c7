"""
The printable Batch Manufacturing Record (sections 1 to 8).

Section 4 is rendered from the record's own process-step variant; kit
records also get a kit-contents table.
"""

from __future__ import annotations

from reportlab.lib.units import mm
from reportlab.platypus import KeepTogether

from batchrec.documents.layout import (
    Document,
    HeaderInfo,
    grid_table,
    label_value_table,
    section,
    signature_row,
    spacer,
    text,
)
from batchrec.domain.dates import display
from batchrec.domain.stages import STAGES
from batchrec.domain.types import BMRData, KitProcessSteps, StandardProcessSteps

STANDARD_HEADER = HeaderInfo(
    title="Batch Manufacturing Record",
    doc_no="SMPL/PRD/BMR/01",
    rev_no="01 & 01.01.2023",
    issue_no="01 & 01.01.2023",
)
KIT_HEADER = HeaderInfo(
    title="Batch Manufacturing Record",
    doc_no="SMPL/PRD/BMR/02",
    rev_no="01 & 24.06.2023",
    issue_no="02 & 01.07.2023",
)

DEFAULT_DECLARATION = (
    "I verify that all the raw materials, equipment's, machinery and preparations "
    "are satisfactory to the best of my knowledge."
)


def _time(value) -> str:
    return display(value, "%H:%M")


def _product_details(bmr: BMRData) -> list:
    return [
        section("1. Product & Batch Details"),
        label_value_table([
            ("Product Name", bmr.product_name),
            ("Product Code", bmr.product_code),
            ("Brand Name", bmr.brand_name),
            ("Product Size", bmr.product_size),
            ("Batch No", bmr.batch_no),
            ("Batch Size", bmr.batch_size),
            ("Mfg. Date", bmr.mfg_date),
            ("Exp. Date", bmr.exp_date),
            ("Commencement", bmr.date_of_commencement),
            ("Completion", bmr.date_of_completion),
            ("Type of Packing", bmr.type_of_packing),
            ("Product Type", bmr.product_type),
        ]),
    ]


def _kit_contents(bmr: BMRData) -> list:
    rows = [["S#", "Description", "Unit", "Qty", "Size", "Material Used", "Supplier"]]
    for idx, item in enumerate(bmr.kit_contents):
        rows.append([idx + 1, item.item_name, item.unit, item.qty, item.size, item.material_used, item.supplier])
    return [section("Kit Contents Detail"), grid_table(rows, [0.05, 0.25, 0.1, 0.1, 0.1, 0.2, 0.2])]


def _materials(bmr: BMRData) -> list:
    raw = [["S#", "Material Name", "Unit", "Lot No", "Req Qty", "Iss Qty", "Verified By"]]
    for idx, rm in enumerate(bmr.raw_materials):
        raw.append([idx + 1, rm.name, rm.unit, rm.lot_no, rm.required_qty, rm.issued_qty, rm.verified_by])
    packing = [["S#", "Packing Material", "Unit", "Lot No", "Req", "Iss", "Used", "Verified"]]
    for idx, pm in enumerate(bmr.packing_materials):
        packing.append([idx + 1, pm.name, pm.unit, pm.lot_no, pm.required_qty, pm.issued_qty, pm.used_qty, pm.verified_by])
    return [
        section("2. Raw Material Table"),
        grid_table(raw, [0.05, 0.3, 0.1, 0.15, 0.1, 0.1, 0.2]),
        section("3. Packing Material Table"),
        grid_table(packing, [0.05, 0.25, 0.1, 0.15, 0.1, 0.1, 0.1, 0.15]),
    ]


def _standard_steps(steps: StandardProcessSteps) -> list:
    out = []
    for stage in STAGES:
        step = steps[stage]
        out.append(KeepTogether([
            text(stage.standard_key, "CellBold"),
            label_value_table([
                ("Date", step.date),
                ("Start / End", f"{_time(step.start_time)} / {_time(step.end_time)}"),
                ("Operator", step.operator),
                ("Ver. Prod", step.verified_production),
                ("Exp / Prod Qty", f"{step.expected_qty} / {step.qty_produced}"),
                ("Rej / Ver QA", f"{step.rejection} / {step.verified_qa}"),
                ("Reprocessed Qty", step.reprocessed_qty),
                ("Temp / Humidity", f"{step.temperature} / {step.humidity}"),
            ]),
            spacer(),
        ]))
    return out


def _kit_steps(steps: KitProcessSteps) -> list:
    out = []
    for stage in STAGES:
        kit_stage = steps[stage]
        rows = [["Item Name", "Date", "Start", "End", "Qty", "Operator"]]
        for item in kit_stage.items:
            rows.append([
                item.item_name, item.date, _time(item.start_time), _time(item.end_time),
                item.qty_produced, item.operator,
            ])
        out.append(KeepTogether([
            text(stage.label, "CellBold"),
            grid_table(rows, [0.3, 0.15, 0.1, 0.1, 0.1, 0.25]),
            grid_table([[
                f"Verified By (Prod): {kit_stage.verified_production or '---'}",
                f"Verified By (QA): {kit_stage.verified_qa or '---'}",
            ]], [0.5, 0.5], header=False),
            spacer(),
        ]))
    return out


def _process(bmr: BMRData) -> list:
    steps = bmr.checked_steps()
    out = [section("4. Manufacturing Process")]
    if bmr.is_kit:
        out.extend(_kit_steps(steps))
    else:
        out.extend(_standard_steps(steps))
    return out


def _closing(bmr: BMRData) -> list:
    st, lb, fp, dc = bmr.sterilization, bmr.labeling, bmr.final_packing, bmr.declarations
    return [
        section("5. Sterilization"),
        label_value_table([
            ("Type", st.type),
            ("Date", st.date),
            ("Qty", st.qty),
            ("Ref / Cycle No", f"{st.ref_no} / {st.cycle_no}"),
            ("Operator", st.operator_no),
            ("Verified", st.verified_by),
        ]),
        section("6. Labeling"),
        label_value_table([
            ("Date / Time", display(lb.date_time, "%d-%m-%Y %H:%M")),
            ("Labeled Qty", lb.qty),
            ("Rejection", lb.rejection),
            ("Operator", lb.operator),
            ("Prod Ver.", lb.production_verification),
            ("QA Ver.", lb.qa_verification),
        ]),
        section("7. Final Packing & Yield"),
        label_value_table([
            ("Total Qty", fp.total_qty),
            ("Final Packed", fp.final_packed_qty),
            ("Control Sample", fp.control_sample_qty),
            ("Surgeon Sample", fp.surgeon_sample_qty),
            ("Testing Qty", fp.testing_qty),
            ("Actual Yield", fp.actual_yield),
        ]),
        KeepTogether([
            section("8. Declarations & Release"),
            text(dc.manufacturing_declaration or DEFAULT_DECLARATION, "BodyItalic"),
            spacer(),
            label_value_table([
                ("Release Date", dc.release_date),
                ("Test Report No", dc.test_report_no),
            ]),
            spacer(10 * mm),
            signature_row(
                ["Head Production", "Head QA"],
                [f"({dc.head_production or 'SIGNATURE'})", f"({dc.qa_head or 'SIGNATURE'})"],
            ),
        ]),
    ]


def render_bmr_sheet(bmr: BMRData) -> Document:
    process = _process(bmr)
    story = _product_details(bmr)
    if bmr.is_kit:
        story.extend(_kit_contents(bmr))
    story.extend(_materials(bmr))
    story.extend(process)
    story.extend(_closing(bmr))
    return Document(
        title=f"BMR_{bmr.batch_no}",
        filename=f"BMR_{bmr.batch_no or 'draft'}.pdf",
        story=story,
        header=KIT_HEADER if bmr.is_kit else STANDARD_HEADER,
    )

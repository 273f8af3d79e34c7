from __future__ import annotations

import io
from datetime import date

import pytest
from pypdf import PdfReader

from batchrec.core.errors import InvariantError, RenderError
from batchrec.documents.bmr_sheet import render_bmr_sheet
from batchrec.documents.export import DocumentExporter, print_when_ready
from batchrec.documents.layout import to_pdf_bytes
from batchrec.documents.rm_certificate import render_rm_certificate
from batchrec.documents.sampling_advice import render_sampling_advice
from batchrec.documents.transfer_slip import EMPTY_TEXT, render_transfer_slip
from batchrec.domain.dates import Unparsed
from batchrec.domain.stages import BMRType, Stage
from batchrec.domain.types import (
    BMRData,
    FinalPacking,
    KitContent,
    PackingMaterial,
    RawMaterial,
    TestResult,
)
from batchrec.forms import state as fs
from batchrec.forms.notifier import LogNotifier
from batchrec.forms.report_form import new_report


def _pages(data: bytes) -> list[str]:
    return [page.extract_text() for page in PdfReader(io.BytesIO(data)).pages]


def _bmr(**kw) -> BMRData:
    base = dict(
        product_name="Surgical Gown L",
        product_code="SG-L",
        batch_no="B-001",
        batch_size="500 Pcs",
        mfg_date=date(2024, 1, 1),
        exp_date=date(2027, 1, 1),
        raw_materials=[RawMaterial("1", "SMS Fabric", "m", "L-1", "900", "900")],
        packing_materials=[PackingMaterial("1", "Pouch", "Pcs", "P-1", "500", "510")],
    )
    base.update(kw)
    return BMRData(**base)


def test_standard_sheet_has_all_sections_and_header():
    doc = render_bmr_sheet(_bmr())
    texts = doc.texts()
    assert doc.filename == "BMR_B-001.pdf"
    for title in ("2. Raw Material Table", "4. Manufacturing Process", "6. Labeling"):
        assert title in texts
    assert "4.1 Cutting" in texts
    assert "Kit Contents Detail" not in texts
    first = _pages(to_pdf_bytes(doc))[0]
    assert "SMPL/PRD/BMR/01" in first
    assert "Page No: 1 of" in first


def test_kit_sheet_lists_contents_and_items_per_stage():
    st = fs.new_state(BMRType.KIT)
    st = fs.add_row(st, "kit_items", Stage.CUTTING)
    st = fs.set_field(st, ("process_steps", Stage.CUTTING, "items", 0, "item_name"), "Drape 90x90")
    record = st.record
    record.batch_no = "K-9"
    record.kit_contents = [KitContent("1", "Gown", "Pcs", "1", "L", "SMS", "Acme")]
    doc = render_bmr_sheet(record)
    texts = doc.texts()
    assert "Kit Contents Detail" in texts
    assert "Drape 90x90" in texts
    assert "Verified By (QA): Jyoti" in texts
    assert "SMPL/PRD/BMR/02" in _pages(to_pdf_bytes(doc))[0]


def test_unparsed_dates_print_as_stored():
    doc = render_bmr_sheet(_bmr(mfg_date=Unparsed("sometime in May")))
    assert "sometime in May" in doc.texts()


def test_transfer_slip_lists_raw_then_packing():
    doc = render_transfer_slip(_bmr(), today=date(2024, 2, 1))
    texts = doc.texts()
    assert doc.filename == "Material_Transfer_Slip_B-001.pdf"
    assert texts.index("SMS Fabric") < texts.index("Pouch")
    assert "01-02-2024" in texts
    assert "Requisitioned By" in " ".join(texts)
    assert len(_pages(to_pdf_bytes(doc))) == 1


def test_transfer_slip_without_materials():
    doc = render_transfer_slip(BMRData(), today=date(2024, 2, 1))
    assert EMPTY_TEXT in doc.texts()
    assert doc.filename == "Material_Transfer_Slip_draft.pdf"
    assert len(_pages(to_pdf_bytes(doc))) == 1


def test_sampling_advice_is_two_pages_with_default_quantities():
    doc = render_sampling_advice(_bmr())
    texts = doc.texts()
    assert "2 Units" in texts
    assert "02 Unit" in texts
    assert "B-001 / SA" in texts
    assert "B-001 / CS" in texts
    assert len(_pages(to_pdf_bytes(doc))) == 2


def test_sampling_advice_uses_control_sample_quantity():
    doc = render_sampling_advice(_bmr(final_packing=FinalPacking(control_sample_qty="5 Pcs")))
    texts = doc.texts()
    assert texts.count("5 Pcs") == 2
    assert "2 Units" not in texts


def test_certificate_text():
    report = new_report()
    report.report_no = "TR-5"
    report.invoice_date = date(2025, 8, 1)
    report.mfg_date = date(2025, 7, 1)
    report.parameters_results[0] = TestResult("1.", "Basic Weight (GSM)", "35 to 100 GSM", "45", "")
    doc = render_rm_certificate(report, supplier_name="Acme Nonwovens", with_signature=False)
    texts = doc.texts()
    assert "The samples Comply with all the specifications as per the standard" in texts
    assert "01.08.2025" in texts
    assert "07.2025" in texts
    assert "---" in texts
    assert "Acme Nonwovens" in texts
    first = _pages(to_pdf_bytes(doc))[0]
    assert "SMPL/QC/RM/01" in first
    assert "Page No. 1 of" in first


def test_exporter_delivers_file_and_clears_flag():
    notifier = LogNotifier()
    delivered = {}
    exporter = DocumentExporter(notifier, lambda name, data: delivered.update({name: data}))
    seen = []

    def render(bmr):
        seen.append(exporter.generating)
        return render_transfer_slip(bmr)

    assert exporter.export(render, _bmr()) is True
    assert seen == [True]
    assert exporter.generating is False
    assert delivered["Material_Transfer_Slip_B-001.pdf"].startswith(b"%PDF")
    assert notifier.messages[-1].message == "Material_Transfer_Slip_B-001.pdf downloaded"


def test_exporter_failure_skips_the_sink():
    notifier = LogNotifier()
    sunk = []
    exporter = DocumentExporter(notifier, lambda name, data: sunk.append(name))

    def broken(_):
        raise RenderError("no fonts")

    assert exporter.export(broken, _bmr()) is False
    assert sunk == []
    assert exporter.generating is False
    assert notifier.errors == ["Failed to generate PDF: no fonts"]


def test_print_when_ready_hands_over_the_pdf():
    got = []
    data = print_when_ready(render_sampling_advice(_bmr()), got.append)
    assert got == [data]
    assert data.startswith(b"%PDF")


def test_broken_story_surfaces_as_render_error():
    doc = render_transfer_slip(_bmr())
    doc.story.append(object())
    with pytest.raises(RenderError):
        to_pdf_bytes(doc)


@pytest.mark.parametrize("render", [render_bmr_sheet, render_transfer_slip, render_sampling_advice])
@pytest.mark.parametrize("bmr_type", [BMRType.STANDARD, BMRType.KIT])
def test_blank_records_still_render(render, bmr_type):
    assert to_pdf_bytes(render(BMRData(bmr_type=bmr_type))).startswith(b"%PDF")


def test_blank_certificate_still_renders():
    doc = render_rm_certificate(new_report(), with_signature=True)
    assert to_pdf_bytes(doc).startswith(b"%PDF")


def test_retyped_record_is_refused_on_render():
    record = BMRData(bmr_type=BMRType.KIT)
    record.bmr_type = BMRType.STANDARD
    with pytest.raises(InvariantError):
        render_bmr_sheet(record)

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from batchrec.core.config import DefaultAssignees
from batchrec.core.errors import InvariantError
from batchrec.domain.dates import Unparsed
from batchrec.domain.mapper import to_domain, to_persisted, report_to_domain, report_to_persisted
from batchrec.domain.stages import BMRType, Stage, STAGES
from batchrec.domain.types import (
    BMRData,
    BMRStatus,
    Declarations,
    FinalPacking,
    IncomingReport,
    KitContent,
    KitProcessItem,
    KitProcessSteps,
    KitStage,
    Labeling,
    PackingMaterial,
    ProcessStep,
    RawMaterial,
    StandardProcessSteps,
    Sterilization,
    TestResult,
)

T0 = datetime(2024, 1, 5, 9, 30, tzinfo=timezone.utc)
T1 = datetime(2024, 1, 5, 17, 0, tzinfo=timezone.utc)


def _common(**kw) -> dict:
    base = dict(
        id=7,
        product_type="Gown",
        product_name="Surgical Gown L",
        product_code="SG-L",
        brand_name="SHI",
        product_size="L",
        batch_no="B-001",
        batch_size="500 Pcs",
        mfg_date=date(2024, 1, 1),
        exp_date=date(2027, 1, 1),
        type_of_packing="Single pouch",
        date_of_commencement=date(2024, 1, 2),
        date_of_completion=date(2024, 1, 9),
        raw_materials=[RawMaterial("1", "SMS Fabric", "m", "L-1", "900", "900", "Rahul Yadav", "Nayan Singh")],
        packing_materials=[PackingMaterial("1", "Pouch", "Pcs", "P-1", "500", "510", "500", "10", "Rahul Yadav", "Nayan Singh")],
        sterilization=Sterilization("ETO", date(2024, 1, 8), "500", "R-1", "C-9", "Monu", "Jyoti"),
        labeling=Labeling(T1, "500", "0", "Asha", "Nayan Singh", "Jyoti"),
        final_packing=FinalPacking("500", "2", "2", "490", "98.40%", "2"),
        declarations=Declarations("Bhupesh Singh", "Jyoti", date(2024, 1, 10), "TR-001", "Declared", "Released"),
        status=BMRStatus.FINAL,
        raw_material_for_specification=3,
        document_no="SMPL/PRD/BMR/01",
        revision_no="01",
        issue_no="01",
    )
    base.update(kw)
    return base


def _full_step(n: int) -> ProcessStep:
    return ProcessStep(
        date=date(2024, 1, 3), start_time=T0, end_time=T1, operator=f"Op{n}",
        verified_production="Nayan Singh", verified_qa="Jyoti", qty_produced="500",
        rejection="1", expected_qty="500", reprocessed_qty="0", temperature="22", humidity="45",
    )


def _full_item(name: str) -> KitProcessItem:
    return KitProcessItem(
        item_name=name, date=date(2024, 1, 3), start_time=T0, end_time=T1, qty_produced="50",
        expected_qty="50", rejection="0", reprocessed_qty="0", temperature="22", humidity="45", operator="Op",
    )


def test_standard_record_round_trips():
    record = BMRData(
        bmr_type=BMRType.STANDARD,
        process_steps=StandardProcessSteps({s: _full_step(i) for i, s in enumerate(STAGES)}),
        **_common(),
    )
    assert to_domain(to_persisted(record)) == record


def test_kit_record_round_trips():
    record = BMRData(
        bmr_type=BMRType.KIT,
        kit_contents=[KitContent("1", "Gown", "Pcs", "1", "L", "SMS", "Acme")],
        process_steps=KitProcessSteps({
            s: KitStage([_full_item("Gown"), _full_item("Drape")], "Nayan Singh", "Jyoti") for s in STAGES
        }),
        **_common(product_type="Kit"),
    )
    row = to_persisted(record)
    assert set(row["process_steps"]) == {s.kit_key for s in STAGES}
    assert to_domain(row) == record


def test_persisted_dates_are_iso_text():
    record = BMRData(**_common())
    row = to_persisted(record)
    assert row["mfg_date"] == "2024-01-01"
    assert row["labeling"]["dateTime"] == "2024-01-05T17:00:00+00:00"
    assert row["process_steps"]["4.1 Cutting"]["verifiedQA"] == ""


def test_kit_items_accept_list_numeric_object_and_bare_list():
    row = {
        "bmr_type": "kit",
        "process_steps": {
            "step1_cutting": {
                "items": {"10": {"itemName": "C"}, "2": {"itemName": "B"}, "1": {"itemName": "A"}},
                "verifiedProduction": "Prod Lead",
            },
            "step2_stitching": [{"itemName": "Legacy"}],
            "step3_draping": {"items": [{"itemName": "Listed"}]},
        },
    }
    steps = to_domain(row).process_steps
    assert isinstance(steps, KitProcessSteps)
    assert [i.item_name for i in steps[Stage.CUTTING].items] == ["A", "B", "C"]
    assert steps[Stage.CUTTING].verified_production == "Prod Lead"
    assert steps[Stage.CUTTING].verified_qa == "Jyoti"
    assert [i.item_name for i in steps[Stage.STITCHING].items] == ["Legacy"]
    assert [i.item_name for i in steps[Stage.DRAPING].items] == ["Listed"]
    assert steps[Stage.SEALING].items == []


def test_kit_record_reads_items_stored_under_standard_stage_names():
    row = {"bmr_type": "kit", "process_steps": {"4.1 Cutting": {"items": [{"itemName": "Gown", "qtyProduced": 50}]}}}
    items = to_domain(row).process_steps[Stage.CUTTING].items
    assert items[0].item_name == "Gown"
    assert items[0].qty_produced == "50"


def test_standard_record_ignores_list_shaped_stage():
    row = {"process_steps": {"4.1 Cutting": [{"itemName": "Gown"}], "4.2 Stitching": {"items": [], "operator": "x"}}}
    record = to_domain(row)
    assert record.bmr_type is BMRType.STANDARD
    cutting = record.process_steps[Stage.CUTTING]
    assert cutting == ProcessStep(verified_production="Nayan Singh", verified_qa="Jyoti")
    assert record.process_steps[Stage.STITCHING].operator == ""


def test_defaults_fill_blank_people_and_brand():
    assignees = DefaultAssignees(production_verifier="P", qa_verifier="Q", sterilization_operator="S",
                                 head_production="H", qa_head="QH", material_measurer="M", material_verifier="V")
    row = {
        "raw_materials": [{"name": "Fabric", "measuredBy": ""}],
        "sterilization": {"type": "ETO"},
        "declarations": {"qaHead": "Someone"},
    }
    record = to_domain(row, assignees)
    assert record.brand_name == "SHI"
    assert record.raw_materials[0].measured_by == "M"
    assert record.raw_materials[0].verified_by == "V"
    assert record.sterilization.operator_no == "S"
    assert record.labeling.production_verification == "P"
    assert record.declarations.head_production == "H"
    assert record.declarations.qa_head == "Someone"
    assert record.process_steps[Stage.PACKING].verified_qa == "Q"


def test_unreadable_dates_survive_verbatim():
    row = {
        "mfg_date": "31/12/2024",
        "exp_date": "2026-03-01T00:00:00.000Z",
        "process_steps": {"4.1 Cutting": {"startTime": "half past nine", "endTime": "2024-01-05T10:00:00Z"}},
    }
    record = to_domain(row)
    assert record.mfg_date == Unparsed("31/12/2024")
    assert record.exp_date == date(2026, 3, 1)
    step = record.process_steps[Stage.CUTTING]
    assert step.start_time == Unparsed("half past nine")
    assert step.end_time == datetime(2024, 1, 5, 10, 0, tzinfo=timezone.utc)
    out = to_persisted(record)
    assert out["mfg_date"] == "31/12/2024"
    assert out["process_steps"]["4.1 Cutting"]["startTime"] == "half past nine"


def test_empty_row_is_a_standard_draft():
    record = to_domain({"status": "archived", "bmr_type": None})
    assert record.bmr_type is BMRType.STANDARD
    assert record.status is BMRStatus.DRAFT
    assert record.mfg_date is None
    assert record.raw_materials == []


def test_id_and_author_only_when_present():
    row = to_persisted(BMRData())
    assert "id" not in row
    assert "generated_by" not in row
    row = to_persisted(BMRData(id=4), author_id="user-1")
    assert row["id"] == 4
    assert row["generated_by"] == "user-1"


def test_record_rejects_mismatched_step_variant():
    with pytest.raises(InvariantError):
        BMRData(bmr_type=BMRType.KIT, process_steps=StandardProcessSteps())


def test_report_round_trips():
    report = IncomingReport(
        id=2,
        product_name="SMS Fabric",
        report_no="TR-9",
        performance_level="LEVEL 2",
        batch_no="L-1",
        supplier_id=5,
        batch_size="1000 m",
        invoice_no="INV-1",
        invoice_date=date(2025, 8, 1),
        mfg_date=date(2025, 7, 1),
        exp_date=date(2027, 7, 1),
        sample_qty="2 m",
        sample_date=date(2025, 8, 2),
        release_date=date(2025, 8, 3),
        fabric_composition="PP",
        parameters_results=[TestResult("1.", "Basic Weight (GSM)", "35 to 100 GSM ± 2 GSM", "45", "GSM")],
        biocompatibility_result=[TestResult("1", "Cytotoxicity", "Non - cytotoxic", "Pass")],
        visual_results=[TestResult("1", "Insect", "Visual", "Not Found")],
        result="Comply",
        tested_by="Monu",
        reviewed_by="Jyoti",
    )
    row = report_to_persisted(report, author_id="u")
    assert row["generated_by"] == "u"
    assert row["parameters_results"][0] == {
        "sNo": "1.", "test": "Basic Weight (GSM)", "standard": "35 to 100 GSM ± 2 GSM", "result": "45", "unit": "GSM",
    }
    assert report_to_domain(row) == report


def test_report_accepts_iso_datetimes():
    report = report_to_domain({"invoice_date": "2025-08-01T18:30:00.000Z", "result": None})
    assert report.invoice_date == date(2025, 8, 1)
    assert report.result == "Comply"
    assert report.performance_level == "LEVEL 3"


def test_plain_text_dates_are_written_as_given():
    out = to_persisted(BMRData(mfg_date="31/12/2024", exp_date="2027-01-01"))
    assert (out["mfg_date"], out["exp_date"]) == ("31/12/2024", "2027-01-01")


def test_retyped_record_is_refused_on_write():
    record = BMRData(bmr_type=BMRType.KIT)
    record.bmr_type = BMRType.STANDARD
    with pytest.raises(InvariantError):
        to_persisted(record)

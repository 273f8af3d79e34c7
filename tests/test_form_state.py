from __future__ import annotations

from datetime import date, datetime

import pytest

from batchrec.core.errors import InvariantError
from batchrec.domain.dates import Unparsed
from batchrec.domain.stages import BMRType, Stage
from batchrec.forms import state as fs


def test_yield_follows_batch_size_and_packed_quantities():
    st = fs.new_state()
    st = fs.set_field(st, ("batch_size",), "42 Set")
    assert st.record.final_packing.actual_yield is None
    st = fs.set_field(st, "final_packing.final_packed_qty", "40")
    assert st.record.final_packing.actual_yield == "95.24%"
    st = fs.set_field(st, ("final_packing", "testing_qty"), "2")
    assert st.record.final_packing.actual_yield == "100.00%"


def test_yield_left_unset_without_positive_batch_size():
    st = fs.new_state()
    st = fs.set_field(st, "batch_size", "0")
    st = fs.set_field(st, "final_packing.final_packed_qty", "40")
    assert st.record.final_packing.actual_yield is None
    st = fs.set_field(st, "batch_size", "")
    assert st.record.final_packing.actual_yield is None


def test_parse_quantity_strips_units():
    assert fs.parse_quantity("1,200 Pcs") == 1200.0
    assert fs.parse_quantity("12.5 kg") == 12.5
    assert fs.parse_quantity("n/a") is None
    assert fs.parse_quantity(None) is None


def test_set_field_leaves_previous_state_untouched():
    before = fs.new_state()
    after = fs.set_field(before, ("process_steps", Stage.CUTTING, "operator"), "Ravi")
    assert after.record.process_steps[Stage.CUTTING].operator == "Ravi"
    assert before.record.process_steps[Stage.CUTTING].operator == ""


def test_set_field_rejects_unknown_path():
    with pytest.raises(KeyError):
        fs.set_field(fs.new_state(), ("nope",), "x")
    with pytest.raises(InvariantError):
        fs.set_field(fs.new_state(), ("bmr_type",), "kit")


def test_new_rows_carry_default_people_and_are_numbered():
    st = fs.new_state()
    st = fs.add_row(st, "raw_materials")
    st = fs.add_row(st, "packing_materials")
    raw = st.record.raw_materials[0]
    packing = st.record.packing_materials[0]
    assert (raw.s_no, raw.measured_by, raw.verified_by) == ("1", "Rahul Yadav", "Nayan Singh")
    assert packing.returned_qty == "0"


def test_removing_a_row_renumbers_the_rest():
    st = fs.new_state()
    for name in ("a", "b", "c"):
        st = fs.add_row(st, "raw_materials")
        st = fs.set_field(st, ("raw_materials", len(st.record.raw_materials) - 1, "name"), name)
    st = fs.remove_row(st, "raw_materials", 1)
    assert [(r.s_no, r.name) for r in st.record.raw_materials] == [("1", "a"), ("2", "c")]
    with pytest.raises(IndexError):
        fs.remove_row(st, "raw_materials", 5)


def test_kit_sections_only_on_kit_records():
    with pytest.raises(InvariantError):
        fs.add_row(fs.new_state(BMRType.STANDARD), "kit_contents")
    st = fs.add_row(fs.new_state(BMRType.KIT), "kit_items", Stage.SEALING)
    st = fs.add_row(st, "kit_contents")
    assert len(st.record.process_steps[Stage.SEALING].items) == 1
    assert st.record.kit_contents[0].s_no == "1"


def test_validate_lists_missing_required_fields():
    errors = fs.validate(fs.new_state())
    assert set(errors) == {
        "product_type", "product_name", "raw_material_for_specification",
        "product_code", "batch_no", "type_of_packing",
    }
    st = fs.new_state()
    for path, value in [
        ("product_type", "Gown"), ("product_name", "Gown"), ("raw_material_for_specification", 1),
        ("product_code", "G1"), ("batch_no", "B1"), ("type_of_packing", "Pouch"),
    ]:
        st = fs.set_field(st, path, value)
    assert fs.validate(st) == {}


def test_new_state_seeds_brand_and_signatories():
    st = fs.new_state(BMRType.KIT)
    assert st.record.brand_name == "SHI"
    assert st.record.process_steps[Stage.CUTTING].verified_qa == "Jyoti"
    assert st.record.declarations.head_production == "Bhupesh Singh"
    assert st.record.process_steps[Stage.CUTTING].items == []


def test_dotted_paths_name_stages_by_value():
    st = fs.set_field(fs.new_state(), "process_steps.sealing.temperature", "24")
    assert fs.get_field(st, ("process_steps", Stage.SEALING, "temperature")) == "24"
    with pytest.raises(KeyError):
        fs.get_field(st, "process_steps.ironing")


def test_date_fields_hold_dates_after_an_edit():
    st = fs.set_field(fs.new_state(), "mfg_date", "2024-01-01")
    assert st.record.mfg_date == date(2024, 1, 1)
    st = fs.set_field(st, "exp_date", "next spring")
    assert st.record.exp_date == Unparsed("next spring")
    st = fs.set_field(st, ("process_steps", Stage.CUTTING, "start_time"), "2024-01-05T09:30:00")
    assert st.record.process_steps[Stage.CUTTING].start_time == datetime(2024, 1, 5, 9, 30)

"""
Immutable edit state for one BMR and the pure operations on it.

Every operation copies the record, applies the change and hands back a new
FormState; callers never mutate a state in place.
"""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass, field, fields
from typing import Any, Union

from batchrec.core.config import DefaultAssignees
from batchrec.core.errors import InvariantError
from batchrec.domain.dates import coerce
from batchrec.domain.mapper import to_domain
from batchrec.domain.stages import BMRType, Stage
from batchrec.domain.types import (
    BMRData,
    RawMaterial,
    PackingMaterial,
    KitContent,
    KitProcessItem,
    KitProcessSteps,
    StandardProcessSteps,
    FinalPacking,
)

PathPart = Union[str, int, Stage]
Path = tuple[PathPart, ...]

REQUIRED_FIELDS: dict[str, str] = {
    "product_type": "Please select a product type",
    "product_name": "Please enter the product name",
    "raw_material_for_specification": "Please select a raw material test report",
    "product_code": "Please enter the product code",
    "batch_no": "Please enter the batch number",
    "type_of_packing": "Please enter the type of packing",
}

_YIELD_PATHS: set[Path] = {
    ("batch_size",),
    ("final_packing", "final_packed_qty"),
    ("final_packing", "testing_qty"),
}

_SECTIONS = ("raw_materials", "packing_materials", "kit_contents", "kit_items")

_NUMBER = re.compile(r"[0-9]*\.?[0-9]+|[0-9]+")


@dataclass(frozen=True)
class FormState:
    record: BMRData = field(default_factory=BMRData)
    assignees: DefaultAssignees = field(default_factory=DefaultAssignees)

    def evolve(self, record: BMRData) -> "FormState":
        return FormState(record=record, assignees=self.assignees)


def new_state(bmr_type: BMRType | str = BMRType.STANDARD, assignees: DefaultAssignees | None = None) -> FormState:
    """Blank record of ``bmr_type`` with brand and signatories pre-filled."""
    assignees = assignees or DefaultAssignees()
    record = to_domain({"bmr_type": BMRType.parse(bmr_type).value}, assignees)
    return FormState(record=record, assignees=assignees)


def _normalize(path) -> Path:
    if isinstance(path, str):
        return tuple(int(p) if p.isdigit() else p for p in path.split("."))
    return tuple(path)


def _stage(part: PathPart) -> Stage:
    try:
        return Stage(part)
    except ValueError:
        raise KeyError(part) from None


def _step(obj, part: PathPart):
    if isinstance(obj, (StandardProcessSteps, KitProcessSteps)):
        return obj[_stage(part)]
    if isinstance(part, Stage):
        raise KeyError(part)
    if isinstance(part, int):
        return obj[part]
    if not hasattr(obj, part):
        raise KeyError(part)
    return getattr(obj, part)


def _assign(obj, part: PathPart, value: Any) -> None:
    if isinstance(obj, KitProcessSteps):
        obj.stages[_stage(part)] = value
    elif isinstance(obj, StandardProcessSteps):
        obj.steps[_stage(part)] = value
    elif isinstance(part, Stage):
        raise KeyError(part)
    elif isinstance(part, int):
        obj[part] = value
    else:
        if part not in {f.name for f in fields(obj)}:
            raise KeyError(part)
        setattr(obj, part, value)


def get_field(state: FormState, path) -> Any:
    obj = state.record
    for part in _normalize(path):
        obj = _step(obj, part)
    return obj


def set_field(state: FormState, path, value: Any) -> FormState:
    path = _normalize(path)
    if not path:
        raise KeyError("empty path")
    if path == ("bmr_type",) or path == ("process_steps",):
        raise InvariantError("bmr_type and process_steps are fixed for the life of a form")
    record = copy.deepcopy(state.record)
    parent = record
    for part in path[:-1]:
        parent = _step(parent, part)
    leaf = path[-1]
    _assign(parent, leaf, coerce(leaf, value) if isinstance(leaf, str) else value)
    next_state = state.evolve(record)
    if path in _YIELD_PATHS:
        next_state = recompute_yield(next_state)
    return next_state


# ---- repeatable rows ----

def _rows_for(record: BMRData, section: str, stage: Stage | None) -> list:
    if section not in _SECTIONS:
        raise KeyError(section)
    if section in ("kit_contents", "kit_items") and not record.is_kit:
        raise InvariantError(f"{section} only exists on kit records")
    if section == "kit_items":
        if stage is None:
            raise KeyError("kit_items needs a stage")
        return record.process_steps[stage].items
    return getattr(record, section)


def _renumber(rows: list) -> None:
    for idx, row in enumerate(rows):
        if hasattr(row, "s_no"):
            row.s_no = str(idx + 1)


def _blank_row(section: str, assignees: DefaultAssignees):
    if section == "raw_materials":
        return RawMaterial(measured_by=assignees.material_measurer, verified_by=assignees.material_verifier)
    if section == "packing_materials":
        return PackingMaterial(
            measured_by=assignees.material_measurer,
            verified_by=assignees.material_verifier,
            returned_qty="0",
        )
    if section == "kit_contents":
        return KitContent()
    return KitProcessItem()


def add_row(state: FormState, section: str, stage: Stage | None = None) -> FormState:
    record = copy.deepcopy(state.record)
    rows = _rows_for(record, section, stage)
    rows.append(_blank_row(section, state.assignees))
    _renumber(rows)
    return state.evolve(record)


def remove_row(state: FormState, section: str, index: int, stage: Stage | None = None) -> FormState:
    record = copy.deepcopy(state.record)
    rows = _rows_for(record, section, stage)
    if index < 0 or index >= len(rows):
        raise IndexError(f"{section} has no row {index}")
    del rows[index]
    _renumber(rows)
    return state.evolve(record)


# ---- derived values ----

def parse_quantity(text) -> float | None:
    """Leading number of ``text`` once non-numeric characters are stripped ("42 Set" -> 42.0)."""
    if text is None:
        return None
    cleaned = re.sub(r"[^0-9.]", "", str(text))
    match = _NUMBER.match(cleaned)
    return float(match.group()) if match else None


def recompute_yield(state: FormState) -> FormState:
    record = state.record
    batch_size = parse_quantity(record.batch_size)
    packed = parse_quantity(record.final_packing.final_packed_qty)
    testing = parse_quantity(record.final_packing.testing_qty) or 0.0
    if batch_size is None or batch_size <= 0 or packed is None:
        return state
    value = f"{(packed + testing) / batch_size * 100:.2f}%"
    if value == record.final_packing.actual_yield:
        return state
    record = copy.deepcopy(record)
    record.final_packing = FinalPacking(**{
        **{f.name: getattr(record.final_packing, f.name) for f in fields(FinalPacking)},
        "actual_yield": value,
    })
    return state.evolve(record)


def validate(state: FormState) -> dict[str, str]:
    errors = {}
    for name, message in REQUIRED_FIELDS.items():
        value = getattr(state.record, name)
        if value is None or (isinstance(value, str) and not value.strip()):
            errors[name] = message
    return errors

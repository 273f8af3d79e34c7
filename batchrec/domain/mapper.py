"""
Persisted row <-> in-memory record.

Rows are plain dicts keyed by column name; the nested sections are JSON
documents with camelCase keys. Both directions are total: unknown shapes
degrade to empty values and unreadable dates to ``Unparsed``.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Mapping

from batchrec.core.config import DEFAULT_BRAND, DefaultAssignees
from batchrec.domain.dates import DATE_FIELDS, DATETIME_FIELDS, coerce, parse_date, format_date, format_datetime
from batchrec.domain.stages import BMRType, STAGES
from batchrec.domain.types import (
    BMRData,
    BMRStatus,
    RawMaterial,
    PackingMaterial,
    KitContent,
    ProcessStep,
    KitProcessItem,
    KitStage,
    StandardProcessSteps,
    KitProcessSteps,
    Sterilization,
    Labeling,
    FinalPacking,
    Declarations,
    IncomingReport,
    TestResult,
)

_KEY_OVERRIDES = {"verified_qa": "verifiedQA"}


def camel(name: str) -> str:
    if name in _KEY_OVERRIDES:
        return _KEY_OVERRIDES[name]
    head, *rest = name.split("_")
    return head + "".join(p[:1].upper() + p[1:] for p in rest)


def _text(value) -> str:
    if value is None:
        return ""
    return str(value)


def _int_or_none(value) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _decode(name: str, raw, optional: bool):
    if name in DATE_FIELDS or name in DATETIME_FIELDS:
        return coerce(name, raw)
    if optional and raw is None:
        return None
    return _text(raw)


def _encode(name: str, value):
    if name in DATE_FIELDS:
        return format_date(value)
    if name in DATETIME_FIELDS:
        return format_datetime(value)
    return value


def _load(cls, doc, defaults: Mapping[str, str] | None = None, skip: tuple[str, ...] = ()):
    """Build a leaf dataclass from a camelCase JSON object; blanks take ``defaults``."""
    doc = doc if isinstance(doc, Mapping) else {}
    defaults = defaults or {}
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        if f.name in skip:
            continue
        value = _decode(f.name, doc.get(camel(f.name)), optional=f.default is None)
        if not value and f.name in defaults:
            value = defaults[f.name]
        kwargs[f.name] = value
    return cls(**kwargs)


def _dump(obj, skip: tuple[str, ...] = ()) -> dict:
    return {camel(f.name): _encode(f.name, getattr(obj, f.name)) for f in fields(obj) if f.name not in skip}


def _rows(cls, value, defaults: Mapping[str, str] | None = None) -> list:
    if isinstance(value, Mapping):
        value = _ordered_values(value)
    if not isinstance(value, list):
        return []
    return [_load(cls, item, defaults) for item in value]


def _ordered_values(mapping: Mapping) -> list:
    """Values of an object keyed by numeric strings, in numeric key order."""
    def key(k):
        n = _int_or_none(k)
        return (n is None, n if n is not None else 0, str(k))
    return [mapping[k] for k in sorted(mapping, key=key)]


def _get(row, name: str, default=None):
    if isinstance(row, Mapping):
        return row.get(name, default)
    return getattr(row, name, default)


# ---- process steps ----

def _stage_value(doc: Mapping, stage, bmr_type: BMRType):
    for key in stage.lookup_keys(bmr_type):
        if key in doc:
            return doc[key]
    return None


def _standard_steps(doc: Mapping, assignees: DefaultAssignees) -> StandardProcessSteps:
    defaults = {
        "verified_production": assignees.production_verifier,
        "verified_qa": assignees.qa_verifier,
    }
    steps = {}
    for stage in STAGES:
        value = _stage_value(doc, stage, BMRType.STANDARD)
        if not isinstance(value, Mapping) or "items" in value:
            value = {}
        steps[stage] = _load(ProcessStep, value, defaults)
    return StandardProcessSteps(steps)


def _kit_steps(doc: Mapping, assignees: DefaultAssignees) -> KitProcessSteps:
    stages = {}
    for stage in STAGES:
        value = _stage_value(doc, stage, BMRType.KIT)
        if isinstance(value, list):
            items, signed = value, {}
        elif isinstance(value, Mapping):
            items, signed = value.get("items"), value
        else:
            items, signed = [], {}
        stages[stage] = KitStage(
            items=_rows(KitProcessItem, items),
            verified_production=_text(signed.get("verifiedProduction")) or assignees.production_verifier,
            verified_qa=_text(signed.get("verifiedQA")) or assignees.qa_verifier,
        )
    return KitProcessSteps(stages)


def _dump_steps(record: BMRData) -> dict:
    out = {}
    steps = record.checked_steps()
    bmr_type = BMRType.parse(record.bmr_type)
    for stage in STAGES:
        key = stage.storage_key(bmr_type)
        if bmr_type is BMRType.KIT:
            kit_stage = steps[stage]
            out[key] = {
                "items": [_dump(item) for item in kit_stage.items],
                "verifiedProduction": kit_stage.verified_production,
                "verifiedQA": kit_stage.verified_qa,
            }
        else:
            out[key] = _dump(steps[stage])
    return out


# ---- BMR ----

def _status(value) -> BMRStatus:
    try:
        return BMRStatus(value)
    except ValueError:
        return BMRStatus.DRAFT


def to_domain(row, assignees: DefaultAssignees | None = None) -> BMRData:
    assignees = assignees or DefaultAssignees()
    bmr_type = BMRType.parse(_get(row, "bmr_type"))

    doc = _get(row, "process_steps")
    doc = doc if isinstance(doc, Mapping) else {}
    if bmr_type is BMRType.KIT:
        steps = _kit_steps(doc, assignees)
    else:
        steps = _standard_steps(doc, assignees)

    material_defaults = {
        "measured_by": assignees.material_measurer,
        "verified_by": assignees.material_verifier,
    }
    product_type = _get(row, "product_type")

    return BMRData(
        bmr_type=bmr_type,
        id=_int_or_none(_get(row, "id")),
        product_type=str(product_type) if product_type else None,
        product_name=_text(_get(row, "product_name")),
        product_code=_text(_get(row, "product_code")),
        brand_name=_text(_get(row, "brand_name")) or DEFAULT_BRAND,
        product_size=_text(_get(row, "product_size")),
        batch_no=_text(_get(row, "batch_no")),
        batch_size=_text(_get(row, "batch_size")),
        mfg_date=parse_date(_get(row, "mfg_date")),
        exp_date=parse_date(_get(row, "exp_date")),
        type_of_packing=_text(_get(row, "type_of_packing")),
        date_of_commencement=parse_date(_get(row, "date_of_commencement")),
        date_of_completion=parse_date(_get(row, "date_of_completion")),
        raw_materials=_rows(RawMaterial, _get(row, "raw_materials"), material_defaults),
        packing_materials=_rows(PackingMaterial, _get(row, "packing_materials"), material_defaults),
        kit_contents=_rows(KitContent, _get(row, "kit_contents")),
        process_steps=steps,
        sterilization=_load(Sterilization, _get(row, "sterilization"), {
            "operator_no": assignees.sterilization_operator,
            "verified_by": assignees.qa_verifier,
        }),
        labeling=_load(Labeling, _get(row, "labeling"), {
            "production_verification": assignees.production_verifier,
            "qa_verification": assignees.qa_verifier,
        }),
        final_packing=_load(FinalPacking, _get(row, "final_packing")),
        declarations=_load(Declarations, _get(row, "declarations"), {
            "head_production": assignees.head_production,
            "qa_head": assignees.qa_head,
        }),
        status=_status(_get(row, "status")),
        raw_material_for_specification=_int_or_none(_get(row, "raw_material_for_specification")),
        document_no=_text(_get(row, "document_no")),
        revision_no=_text(_get(row, "revision_no")),
        issue_no=_text(_get(row, "issue_no")),
    )


def to_persisted(record: BMRData, author_id: str | None = None) -> dict:
    row = {
        "bmr_type": BMRType.parse(record.bmr_type).value,
        "product_type": record.product_type or None,
        "product_name": record.product_name,
        "product_code": record.product_code,
        "brand_name": record.brand_name or DEFAULT_BRAND,
        "product_size": record.product_size,
        "batch_no": record.batch_no,
        "batch_size": record.batch_size,
        "mfg_date": format_date(record.mfg_date),
        "exp_date": format_date(record.exp_date),
        "type_of_packing": record.type_of_packing,
        "date_of_commencement": format_date(record.date_of_commencement),
        "date_of_completion": format_date(record.date_of_completion),
        "raw_materials": [_dump(r) for r in record.raw_materials],
        "packing_materials": [_dump(r) for r in record.packing_materials],
        "kit_contents": [_dump(r) for r in record.kit_contents],
        "process_steps": _dump_steps(record),
        "sterilization": _dump(record.sterilization),
        "labeling": _dump(record.labeling),
        "final_packing": _dump(record.final_packing),
        "declarations": _dump(record.declarations),
        "status": _status(record.status).value,
        "raw_material_for_specification": _int_or_none(record.raw_material_for_specification),
        "document_no": record.document_no,
        "revision_no": record.revision_no,
        "issue_no": record.issue_no,
    }
    if record.id is not None:
        row["id"] = record.id
    if author_id:
        row["generated_by"] = author_id
    return row


# ---- incoming test report ----

_REPORT_SCALARS = (
    "product_name", "report_no", "performance_level", "batch_no", "batch_size",
    "invoice_no", "sample_qty", "fabric_composition", "result", "tested_by", "reviewed_by",
)
_REPORT_DATES = ("invoice_date", "mfg_date", "exp_date", "sample_date", "release_date")
_REPORT_TABLES = ("parameters_results", "biocompatibility_result", "visual_results")


def report_to_domain(row) -> IncomingReport:
    kwargs: dict[str, Any] = {name: _text(_get(row, name)) for name in _REPORT_SCALARS}
    kwargs.update({name: parse_date(_get(row, name)) for name in _REPORT_DATES})
    kwargs.update({name: _rows(TestResult, _get(row, name)) for name in _REPORT_TABLES})
    kwargs["performance_level"] = kwargs["performance_level"] or "LEVEL 3"
    kwargs["result"] = kwargs["result"] or "Comply"
    return IncomingReport(
        id=_int_or_none(_get(row, "id")),
        supplier_id=_int_or_none(_get(row, "supplier_id")),
        **kwargs,
    )


def report_to_persisted(report: IncomingReport, author_id: str | None = None) -> dict:
    row: dict[str, Any] = {name: getattr(report, name) for name in _REPORT_SCALARS}
    row.update({name: format_date(getattr(report, name)) for name in _REPORT_DATES})
    row.update({name: [_dump(r) for r in getattr(report, name)] for name in _REPORT_TABLES})
    row["supplier_id"] = report.supplier_id
    if report.id is not None:
        row["id"] = report.id
    if author_id:
        row["generated_by"] = author_id
    return row

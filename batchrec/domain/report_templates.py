"""
Static test-parameter templates for incoming raw-material reports.

Parameter standards depend on the report's performance level; the
biocompatibility and visual tables are the same for every level.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from batchrec.domain.types import TestResult

DEFAULT_LEVEL = "LEVEL 3"


@dataclass(frozen=True)
class ParameterSpec:
    standard: str
    unit: str


_TENSILE = ParameterSpec("≥ 20 / 2.1", "N")
_ELONGATION = ParameterSpec("Min 30%", "%")
_BURSTING = ParameterSpec("≥ 40 / 0.4", "kPa")


def _level(impact: str, hydrostatic: str) -> dict[str, ParameterSpec]:
    return {
        "Basic Weight (GSM)": ParameterSpec("35 to 100 GSM ± 2 GSM", "GSM"),
        "Impact Penetration (gm)": ParameterSpec(impact, "g"),
        "Hydrostatic Resistance": ParameterSpec(hydrostatic, "cmwc"),
        "Tensile Strength - Dry (MD) (Newton/Kgf)": _TENSILE,
        "Tensile Strength - Dry (CD) (Newton/Kgf)": _TENSILE,
        "Tensile Strength - Wet (MD) (Newton/Kgf)": _TENSILE,
        "Tensile Strength - Wet (CD) (Newton/Kgf)": _TENSILE,
        "Elongation - MD (Dry)": _ELONGATION,
        "Elongation - CD (Dry)": _ELONGATION,
        "Elongation - MD (Wet)": _ELONGATION,
        "Elongation - CD (Wet)": _ELONGATION,
        "Bursting Strength - Dry (kPa/kg/cm²)": _BURSTING,
        "Bursting Strength - Wet (kPa/kg/cm²)": _BURSTING,
        "Cleanliness Microbial (CFU/100 cm²)": ParameterSpec("≤ 300", "CFU/100 cm²"),
    }


LEVEL_CONFIG: dict[str, dict[str, ParameterSpec]] = {
    "LEVEL 1": _level("≤ 4.5", "NA"),
    "LEVEL 2": _level("≤ 1.0", "≥ 20"),
    "LEVEL 3": _level("≤ 1.0", "≥ 50"),
    "LEVEL 4": _level("NA", "NA"),
}

_NA_WHEN_NOT_APPLICABLE = ("Impact", "Hydrostatic", "Cleanliness")

DEFAULT_BIOCOMPATIBILITY: tuple[TestResult, ...] = (
    TestResult("1", "Cytotoxicity", "Non - cytotoxic", "ISO 10993-10:2021 & OECD 406"),
    TestResult("2", "Skin Irritation", "Non - irritant", "ISO 10993-23:2021"),
    TestResult("3", "Skin Sensitization", "Non - sensitizer", "ISO 10993-5:2009"),
)

DEFAULT_VISUAL: tuple[TestResult, ...] = (
    TestResult("1", "Insect", "Visual", "Not Found"),
    TestResult("2", "Foreign Material & Oil", "Visual", "Not Found"),
    TestResult("3", "Hard Spots", "Visual", "Not Found"),
    TestResult("4", "Thin Spots", "Visual", "Not Found"),
    TestResult("5", "Holes", "Visual", "Not Found"),
    TestResult("6", "Roll Width", "Visual", ""),
    TestResult("7", "Core Inner Diameter", "Visual", ""),
    TestResult("8", "Core Length", "Visual", ""),
)


def level_config(level: str) -> dict[str, ParameterSpec]:
    return LEVEL_CONFIG.get(level) or LEVEL_CONFIG[DEFAULT_LEVEL]


def default_parameters(level: str) -> list[TestResult]:
    rows = []
    for idx, (test, spec) in enumerate(level_config(level).items()):
        not_applicable = spec.standard == "NA" and any(k in test for k in _NA_WHEN_NOT_APPLICABLE)
        rows.append(TestResult(
            s_no=f"{idx + 1}.",
            test=test,
            standard=spec.standard,
            unit=spec.unit,
            result="NA" if not_applicable else "",
        ))
    return rows


def default_biocompatibility() -> list[TestResult]:
    return [replace(r) for r in DEFAULT_BIOCOMPATIBILITY]


def default_visual() -> list[TestResult]:
    return [replace(r) for r in DEFAULT_VISUAL]


def relevel_parameters(current: list[TestResult], level: str) -> list[TestResult]:
    """Template rows for ``level`` keeping already-entered result/unit values by position."""
    out = []
    for idx, row in enumerate(default_parameters(level)):
        existing = current[idx] if idx < len(current) else None
        if existing is not None:
            row = replace(row, result=existing.result or row.result, unit=existing.unit or row.unit)
        out.append(row)
    return out


def merge_static(results: list[TestResult], defaults: list[TestResult]) -> list[TestResult]:
    """Fill template text (s_no/test/standard/unit) the form left empty from ``defaults``."""
    merged = []
    for idx, row in enumerate(results or []):
        base = defaults[idx] if idx < len(defaults) else TestResult()
        merged.append(TestResult(
            s_no=row.s_no or base.s_no,
            test=row.test or base.test,
            standard=row.standard or base.standard,
            result=row.result,
            unit=row.unit if row.unit is not None else base.unit,
        ))
    return merged

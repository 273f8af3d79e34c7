"""
In-memory, edit-time shape of a Batch Manufacturing Record and its
incoming raw-material test report.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Union

from batchrec.core.errors import InvariantError
from batchrec.domain.dates import DateValue, DateTimeValue
from batchrec.domain.stages import BMRType, Stage, STAGES


class BMRStatus(str, Enum):
    DRAFT = "draft"
    FINAL = "final"
    RELEASED = "released"


@dataclass
class RawMaterial:
    s_no: str = ""
    name: str = ""
    unit: str = ""
    lot_no: str = ""
    required_qty: str = ""
    issued_qty: str = ""
    measured_by: str = ""
    verified_by: str = ""


@dataclass
class PackingMaterial:
    s_no: str = ""
    name: str = ""
    unit: str = ""
    lot_no: str = ""
    required_qty: str = ""
    issued_qty: str = ""
    used_qty: str = ""
    returned_qty: str = ""
    measured_by: str = ""
    verified_by: str = ""


@dataclass
class KitContent:
    s_no: str = ""
    item_name: str = ""
    unit: str = ""
    qty: str = ""
    size: str = ""
    material_used: str = ""
    supplier: str = ""


@dataclass
class ProcessStep:
    date: DateValue = None
    start_time: DateTimeValue = None
    end_time: DateTimeValue = None
    operator: str = ""
    verified_production: str = ""
    verified_qa: str = ""
    qty_produced: str = ""
    rejection: str = ""
    expected_qty: str = ""
    reprocessed_qty: str = ""
    temperature: str = ""
    humidity: str = ""


@dataclass
class KitProcessItem:
    item_name: str = ""
    date: DateValue = None
    start_time: DateTimeValue = None
    end_time: DateTimeValue = None
    qty_produced: str = ""
    expected_qty: str = ""
    rejection: str = ""
    reprocessed_qty: str = ""
    temperature: str = ""
    humidity: str = ""
    operator: str = ""


@dataclass
class KitStage:
    items: list[KitProcessItem] = field(default_factory=list)
    verified_production: str = ""
    verified_qa: str = ""


def _complete(mapping: dict, factory) -> dict:
    out = {}
    for key in mapping:
        if not isinstance(key, Stage):
            raise InvariantError(f"Unknown process stage: {key!r}")
    for stage in STAGES:
        out[stage] = mapping[stage] if stage in mapping else factory()
    return out


@dataclass
class StandardProcessSteps:
    """One operator/quantity row per stage."""

    steps: dict[Stage, ProcessStep] = field(default_factory=dict)
    kind: ClassVar[BMRType] = BMRType.STANDARD

    def __post_init__(self):
        self.steps = _complete(self.steps, ProcessStep)

    def __getitem__(self, stage: Stage) -> ProcessStep:
        return self.steps[stage]


@dataclass
class KitProcessSteps:
    """One row per kit component per stage, plus the stage's verification signatures."""

    stages: dict[Stage, KitStage] = field(default_factory=dict)
    kind: ClassVar[BMRType] = BMRType.KIT

    def __post_init__(self):
        self.stages = _complete(self.stages, KitStage)

    def __getitem__(self, stage: Stage) -> KitStage:
        return self.stages[stage]


ProcessSteps = Union[StandardProcessSteps, KitProcessSteps]


def empty_process_steps(bmr_type: BMRType) -> ProcessSteps:
    return KitProcessSteps() if bmr_type is BMRType.KIT else StandardProcessSteps()


@dataclass
class Sterilization:
    type: str = ""  # ETO|Gamma
    date: DateValue = None
    qty: str = ""
    ref_no: str = ""
    cycle_no: str = ""
    operator_no: str = ""
    verified_by: str = ""


@dataclass
class Labeling:
    date_time: DateTimeValue = None
    qty: str = ""
    rejection: str = ""
    operator: str = ""
    production_verification: str = ""
    qa_verification: str = ""


@dataclass
class FinalPacking:
    total_qty: str = ""
    control_sample_qty: str = ""
    surgeon_sample_qty: str = ""
    final_packed_qty: str = ""
    actual_yield: str | None = None
    testing_qty: str = ""


@dataclass
class Declarations:
    head_production: str = ""
    qa_head: str = ""
    release_date: DateValue = None
    test_report_no: str = ""
    manufacturing_declaration: str = ""
    batch_release_order: str = ""


@dataclass
class BMRData:
    bmr_type: BMRType = BMRType.STANDARD
    id: int | None = None
    product_type: str | None = None  # Gown|Drape|Cover|Kit
    product_name: str = ""
    product_code: str = ""
    brand_name: str = ""
    product_size: str = ""
    batch_no: str = ""
    batch_size: str = ""
    mfg_date: DateValue = None
    exp_date: DateValue = None
    type_of_packing: str = ""
    date_of_commencement: DateValue = None
    date_of_completion: DateValue = None

    raw_materials: list[RawMaterial] = field(default_factory=list)
    packing_materials: list[PackingMaterial] = field(default_factory=list)
    kit_contents: list[KitContent] = field(default_factory=list)

    process_steps: ProcessSteps | None = None

    sterilization: Sterilization = field(default_factory=Sterilization)
    labeling: Labeling = field(default_factory=Labeling)
    final_packing: FinalPacking = field(default_factory=FinalPacking)
    declarations: Declarations = field(default_factory=Declarations)

    status: BMRStatus = BMRStatus.DRAFT
    raw_material_for_specification: int | None = None
    document_no: str = ""
    revision_no: str = ""
    issue_no: str = ""

    def __post_init__(self):
        self.bmr_type = BMRType.parse(self.bmr_type)
        self.status = BMRStatus(self.status)
        if self.process_steps is None:
            self.process_steps = empty_process_steps(self.bmr_type)
        self.checked_steps()

    def checked_steps(self) -> ProcessSteps:
        """``process_steps`` after confirming they still match ``bmr_type``."""
        bmr_type = BMRType.parse(self.bmr_type)
        steps = self.process_steps
        if steps is None or steps.kind is not bmr_type:
            kind = steps.kind.value if steps is not None else "no"
            raise InvariantError(f"{bmr_type.value} record carries {kind} process steps")
        return steps

    @property
    def is_kit(self) -> bool:
        return self.bmr_type is BMRType.KIT


# ---- Incoming test report ----

PERFORMANCE_LEVELS = ("LEVEL 1", "LEVEL 2", "LEVEL 3", "LEVEL 4")
REPORT_RESULTS = ("Comply", "Does not Comply")


@dataclass
class TestResult:
    __test__ = False  # keep pytest from collecting this

    s_no: str = ""
    test: str = ""
    standard: str = ""
    result: str = ""
    unit: str | None = None


@dataclass
class IncomingReport:
    id: int | None = None
    product_name: str = ""
    report_no: str = ""
    performance_level: str = "LEVEL 3"
    batch_no: str = ""
    supplier_id: int | None = None
    batch_size: str = ""
    invoice_no: str = ""
    invoice_date: DateValue = None
    mfg_date: DateValue = None
    exp_date: DateValue = None
    sample_qty: str = ""
    sample_date: DateValue = None
    release_date: DateValue = None
    fabric_composition: str = ""
    parameters_results: list[TestResult] = field(default_factory=list)
    biocompatibility_result: list[TestResult] = field(default_factory=list)
    visual_results: list[TestResult] = field(default_factory=list)
    result: str = "Comply"
    tested_by: str = ""
    reviewed_by: str = ""


@dataclass
class Fabric:
    id: int | None = None
    name: str = ""
    supplier_id: int | None = None
    width: str = ""

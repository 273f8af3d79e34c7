"""Edit helpers for incoming raw-material test reports."""

from __future__ import annotations

from dataclasses import replace

from batchrec.core.config import DefaultAssignees
from batchrec.domain.report_templates import (
    DEFAULT_LEVEL,
    default_parameters,
    default_biocompatibility,
    default_visual,
    relevel_parameters,
    merge_static,
)
from batchrec.domain.types import IncomingReport, Fabric

REQUIRED_REPORT_FIELDS = (
    "product_name", "report_no", "performance_level", "batch_no", "supplier_id",
    "batch_size", "invoice_no", "invoice_date", "sample_qty", "sample_date",
    "release_date", "fabric_composition", "result", "tested_by", "reviewed_by",
)


def new_report(assignees: DefaultAssignees | None = None, level: str = DEFAULT_LEVEL) -> IncomingReport:
    assignees = assignees or DefaultAssignees()
    return IncomingReport(
        performance_level=level,
        parameters_results=default_parameters(level),
        biocompatibility_result=default_biocompatibility(),
        visual_results=default_visual(),
        result="Comply",
        tested_by=assignees.tested_by,
        reviewed_by=assignees.reviewed_by,
    )


def change_performance_level(report: IncomingReport, level: str) -> IncomingReport:
    """Switch level on an unsaved report; saved reports keep their stored standards."""
    if report.id is not None:
        return replace(report, performance_level=level)
    return replace(
        report,
        performance_level=level,
        parameters_results=relevel_parameters(report.parameters_results, level),
    )


def select_fabric(report: IncomingReport, fabric: Fabric) -> IncomingReport:
    if fabric.supplier_id is None:
        return replace(report, product_name=fabric.name)
    return replace(report, product_name=fabric.name, supplier_id=fabric.supplier_id)


def _with_template(results, defaults):
    return merge_static(results, defaults) if results else defaults


def prepare_for_save(report: IncomingReport) -> IncomingReport:
    """Restore template text on every table; a table sent empty gets the full template."""
    return replace(
        report,
        parameters_results=_with_template(report.parameters_results, default_parameters(report.performance_level)),
        biocompatibility_result=_with_template(report.biocompatibility_result, default_biocompatibility()),
        visual_results=_with_template(report.visual_results, default_visual()),
    )


def validate_report(report: IncomingReport) -> dict[str, str]:
    errors = {}
    for name in REQUIRED_REPORT_FIELDS:
        value = getattr(report, name)
        if value is None or (isinstance(value, str) and not value.strip()):
            errors[name] = "This field is required"
    return errors

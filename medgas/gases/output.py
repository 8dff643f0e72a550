"""
Facility Report Formatters

Human, JSON and markdown renderings of a FacilityResult and of the advisory
validation warnings.
"""

import json
from typing import List

from medgas.core.output import OutputFormat, format_number
from medgas.gases.base import FacilityResult, ValidationWarning
from medgas.gases.export import to_rows


def _value(value) -> str:
    if isinstance(value, float):
        return format_number(value)
    return str(value)


def format_facility_report(
    result: FacilityResult,
    fmt: OutputFormat = OutputFormat.HUMAN,
    title: str = "MEDICAL GAS SIZING",
) -> str:
    """
    Format a facility result as a report.

    Args:
        result: Computed facility result
        fmt: Output format
        title: Report heading

    Returns:
        Formatted report
    """
    fmt = OutputFormat(fmt)
    if fmt == OutputFormat.JSON:
        return json.dumps(result.to_dict(), indent=2, default=str)

    rows = [r for r in to_rows(result) if r["section"] != "Warnings"]
    lines = []

    if fmt == OutputFormat.MARKDOWN:
        lines.extend([f"# {title}", ""])
        section = None
        for r in rows:
            if r["section"] != section:
                section = r["section"]
                lines.extend(["", f"## {section}", "", "| Parameter | Value | Unit |",
                              "|-----------|-------|------|"])
            lines.append(f"| {r['parameter']} | {_value(r['value'])} | {r['unit']} |")
        if not rows:
            lines.append("No points selected.")
    else:
        lines.extend([title, "=" * len(title)])
        section = None
        for r in rows:
            if r["section"] != section:
                section = r["section"]
                lines.extend(["", section.upper(), "-" * len(section)])
            unit = f" {r['unit']}" if r["unit"] else ""
            lines.append(f"  {r['parameter']:<34} {_value(r['value'])}{unit}")
        if not rows:
            lines.extend(["", "No points selected."])

    warnings = result.validation + result.data_quality
    if warnings:
        lines.extend(["", format_validation_report(warnings, fmt)])

    return "\n".join(lines)


def format_validation_report(
    warnings: List[ValidationWarning],
    fmt: OutputFormat = OutputFormat.HUMAN,
) -> str:
    """
    Format advisory warnings, grouped by rule.

    Args:
        warnings: Validation and data-quality warnings
        fmt: Output format

    Returns:
        Formatted report
    """
    fmt = OutputFormat(fmt)
    if fmt == OutputFormat.JSON:
        return json.dumps([w.to_dict() for w in warnings], indent=2)

    by_rule = {}
    for w in warnings:
        by_rule.setdefault(w.rule.value, []).append(w)

    lines = []
    if fmt == OutputFormat.MARKDOWN:
        lines.extend(["## Warnings", ""])
        for rule, items in by_rule.items():
            lines.append(f"### {rule}")
            for w in items:
                lines.append(f"- **{w.room_name}**: {w.message}")
            lines.append("")
        lines.append(f"**Total**: {len(warnings)}")
    else:
        lines.extend(["WARNINGS", "========"])
        for rule, items in by_rule.items():
            lines.append(f"{rule} ({len(items)}):")
            for w in items:
                lines.append(f"  {w.room_name}: {w.message}")
        if not warnings:
            lines.append("No warnings.")
        lines.append(f"Summary: {len(warnings)} warning(s)")

    return "\n".join(lines)

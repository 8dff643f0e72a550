"""
Result Export

Flattens a FacilityResult into {section, parameter, value, unit} rows and
writes them as CSV or XLSX. Gases without demand are left out, like the on-screen
report.
"""

import csv
from pathlib import Path
from typing import Any, Dict, List, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from medgas.core.logging import get_logger
from medgas.gases.base import GAS_TYPES, FacilityResult, GasKey, PipeSizing, SourceTier

logger = get_logger("medgas.gases.export")

CSV_FIELDS = ["section", "parameter", "value", "unit"]

# (header, width) per CSV_FIELDS column
_XLSX_COLUMNS = [("Section", 34), ("Parameter", 36), ("Value", 16), ("Unit", 10)]

_HEADER_FONT = Font(bold=True, color="FFFFFF", size=11)
_HEADER_FILL = PatternFill(start_color="2F5496", end_color="2F5496", fill_type="solid")
_HEADER_ALIGN = Alignment(horizontal="center", vertical="center")

_AIR_SECTION = "Compressed air / AGSS"


def _row(section: str, parameter: str, value: Any, unit: str = "") -> Dict[str, Any]:
    return {"section": section, "parameter": parameter, "value": value, "unit": unit}


def _pipe_rows(section: str, pipe: PipeSizing) -> List[Dict[str, Any]]:
    return [
        _row(section, "Pipe outer diameter", pipe.outer_diameter, "mm"),
        _row(section, "Pipe wall thickness", pipe.wall_thickness, "mm"),
        _row(section, "Pipe inner diameter (calculated)", pipe.inner_diameter_computed, "mm"),
        _row(section, "Standard pipe", "yes" if pipe.standard else "no"),
    ]


def _tier_rows(section: str, tier: SourceTier) -> List[Dict[str, Any]]:
    rows = [
        _row(section, f"{tier.equipment} primary", tier.primary, tier.unit),
        _row(section, f"{tier.equipment} secondary", tier.secondary, tier.unit),
    ]
    if tier.emergency is not None:
        rows.append(_row(section, f"{tier.equipment} emergency", tier.emergency, tier.unit))
    return rows


def has_demand(result: FacilityResult, gas: GasKey) -> bool:
    demand = result.gas(gas).demand
    return demand.total_points > 0 or demand.total_flow_lpm > 0


def to_rows(result: FacilityResult, gases: Optional[List[GasKey]] = None) -> List[Dict[str, Any]]:
    """
    Flatten a facility result for export.

    Args:
        result: Computed facility result
        gases: Gases to include (default: every gas with demand)

    Returns:
        List of row dicts with keys section, parameter, value, unit
    """
    if gases is None:
        gases = [g for g in GasKey if g in result.gases and has_demand(result, g)]

    rows: List[Dict[str, Any]] = []
    for gas in gases:
        gas_result = result.gas(gas)
        demand = gas_result.demand
        section = GAS_TYPES[gas].label

        rows.append(_row(section, "Rooms", demand.rooms_count))
        rows.append(_row(section, "Points", demand.total_points))
        if demand.total_daily_liters is not None:
            rows.append(_row(section, "Daily volume", demand.total_daily_liters, "l/day"))
        rows.append(_row(section, "Average flow", demand.total_flow_lpm, "l/min"))
        rows.append(_row(section, "Average flow", demand.total_flow_m3h, "m3/h"))
        rows.extend(_pipe_rows(section, gas_result.pipe))
        for tier in gas_result.sources.tiers:
            rows.extend(_tier_rows(section, tier))

        reserve = gas_result.sources.critical_reserve
        if reserve is not None and reserve.liters > 0:
            rows.append(_row(section, f"Critical reserve ({reserve.hours:g} h)", reserve.liters, "l"))
            rows.append(_row(section, "Critical reserve flow", reserve.flow_m3h, "m3/h"))
            rows.append(_row(section, "Critical reserve cylinders", reserve.cylinders, "pcs"))

    air = result.air_system
    if air.with_agss_lpm > 0:
        rows.append(_row(_AIR_SECTION, "Rooms", air.rooms_count))
        rows.append(_row(_AIR_SECTION, "Points", air.total_points))
        rows.append(_row(_AIR_SECTION, "Flow without AGSS", air.without_agss_lpm, "l/min"))
        rows.append(_row(_AIR_SECTION, "Flow with AGSS", air.with_agss_lpm, "l/min"))
        rows.append(_row(_AIR_SECTION, "AGSS extraction", air.agss_m3h, "m3/h"))
        if air.pipe is not None:
            rows.extend(_pipe_rows(_AIR_SECTION, air.pipe))
        for tier in air.tiers:
            rows.extend(_tier_rows(_AIR_SECTION, tier))

    for w in result.validation + result.data_quality:
        rows.append(_row("Warnings", w.room_name, w.message))

    return rows


def write_csv(rows: List[Dict[str, Any]], path: Path) -> Path:
    """
    Write export rows to a CSV file, creating parent directories.

    Returns:
        The path written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        writer.writerows(rows)

    logger.info("Exported %d rows to %s", len(rows), path)
    return path


def write_xlsx(rows: List[Dict[str, Any]], path: Path, sheet_name: str = "Results") -> Path:
    """
    Write export rows to a single-sheet workbook with a styled header.

    Returns:
        The path written
    """
    path = Path(path)

    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name

    for col_idx, (header, width) in enumerate(_XLSX_COLUMNS, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.alignment = _HEADER_ALIGN
        ws.column_dimensions[get_column_letter(col_idx)].width = width

    for row_idx, row in enumerate(rows, start=2):
        for col_idx, key in enumerate(CSV_FIELDS, start=1):
            ws.cell(row=row_idx, column=col_idx, value=row.get(key, ""))

    ws.freeze_panes = "A2"

    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(str(path))

    logger.info("Exported %d rows to %s", len(rows), path)
    return path


def write_rows(rows: List[Dict[str, Any]], path: Path) -> Path:
    """Write rows as XLSX when the path ends in .xlsx, else as CSV."""
    if Path(path).suffix.lower() == ".xlsx":
        return write_xlsx(rows, path)
    return write_csv(rows, path)

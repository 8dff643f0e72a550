"""
Medical Gas Calculator

Input contract and the full sizing pipeline:

    selection -> normalize -> demand per gas -> {source sizing, pipe}
                           -> air system composite
                           -> validation (advisory)

Implements DisciplineCalculator so the pipeline can be dispatched by name,
with module-level run_*() functions for direct use.
"""

import math
from dataclasses import asdict, dataclass, field
from numbers import Integral, Real
from typing import Any, Dict, List, Mapping, Optional

from medgas.core.logging import get_logger
from medgas.gases.base import (
    CalculationResult,
    DemandResult,
    DisciplineCalculator,
    FacilityResult,
    GasKey,
    GasResult,
    InputError,
    InvalidPointCountError,
    parse_gas_key,
)
from medgas.gases.constants import DEFAULT_CONSTANTS, SizingConstants
from medgas.gases.demand import (
    ManualUnit,
    Selection,
    aggregate_all,
    air_system_demand,
    manual_demand,
)
from medgas.gases.pipe import select_pipe
from medgas.gases.registry import (
    Configuration,
    RoomCatalog,
    catalog_from_dicts,
    default_catalog,
)
from medgas.gases.reserve import air_system_tiers, critical_reserve_liters, size_sources
from medgas.gases.validators import missing_requirements, validate_selection

logger = get_logger("medgas.gases.engine")


# ---------------------------------------------------------------------------
# Input contract
# ---------------------------------------------------------------------------

def _point_count(room_key: str, gas_key: str, value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidPointCountError(room_key, gas_key, value)
    if isinstance(value, Integral):
        count = int(value)
    elif math.isfinite(value) and float(value).is_integer():
        count = int(value)
    else:
        raise InvalidPointCountError(room_key, gas_key, value)
    if count < 0:
        raise InvalidPointCountError(room_key, gas_key, value)
    return count


def normalize_selection(catalog: RoomCatalog, selection: Optional[Mapping[str, Any]]) -> Dict[str, Dict[GasKey, int]]:
    """
    Validate a raw selection against the catalog.

    Args:
        catalog: Room catalog the selection refers to
        selection: room key -> {gas key: point count}

    Returns:
        room key -> {GasKey: int}, zero counts dropped

    Raises:
        UnknownRoomKeyError: room key not in the catalog
        UnknownGasKeyError: gas key not a known gas
        InvalidPointCountError: negative, fractional, non-numeric or non-finite count
    """
    normalized: Dict[str, Dict[GasKey, int]] = {}
    for room_key, counts in (selection or {}).items():
        catalog.get(str(room_key))
        if counts is not None and not isinstance(counts, Mapping):
            raise InputError(f"Point counts for room {room_key!r} must map gas keys to counts")
        per_gas: Dict[GasKey, int] = {}
        for gas_key, value in (counts or {}).items():
            gas = parse_gas_key(gas_key)
            points = _point_count(str(room_key), gas.value, value)
            if points:
                per_gas[gas] = per_gas.get(gas, 0) + points
        if per_gas:
            normalized[str(room_key)] = per_gas
    return normalized


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

def _size_demands(
    demands: Mapping[GasKey, DemandResult],
    catalog: RoomCatalog,
    selection: Selection,
    constants: SizingConstants,
    reserve_liters: float,
    calculation_type: str,
) -> FacilityResult:
    gases: Dict[GasKey, GasResult] = {}
    for gas, demand in demands.items():
        gases[gas] = GasResult(
            demand=demand,
            sources=size_sources(demand, constants, reserve_liters),
            pipe=select_pipe(demand.total_flow_lpm, constants),
        )

    air = air_system_demand(demands, catalog, selection)
    air.tiers = air_system_tiers(air)
    air.pipe = select_pipe(air.with_agss_lpm, constants)

    return FacilityResult(calculation_type=calculation_type, gases=gases, air_system=air)


def compute(
    catalog: RoomCatalog,
    selection: Optional[Mapping[str, Any]],
    constants: SizingConstants = DEFAULT_CONSTANTS,
) -> FacilityResult:
    """
    Size every gas for a facility.

    Args:
        catalog: Room catalog (already merged with any settings configuration)
        selection: room key -> {gas key: point count}
        constants: Sizing constants table

    Returns:
        FacilityResult with per-gas demand/sources/pipe, the air system and
        advisory warnings

    Raises:
        InputError: On any input-contract violation; nothing is computed.
    """
    normalized = normalize_selection(catalog, selection)

    demands = aggregate_all(catalog, normalized, constants)
    reserve = critical_reserve_liters(catalog, normalized, constants)
    result = _size_demands(demands, catalog, normalized, constants, reserve, "facility")

    result.validation = validate_selection(catalog, normalized)
    result.data_quality = missing_requirements(catalog, normalized)

    for w in result.data_quality:
        logger.warning("Data quality: %s (%s): %s", w.room_key, w.gas.value, w.message)
        result.warnings.append(f"{w.room_name}: {w.message}")
    for w in result.validation:
        logger.info("Validation: %s: %s", w.room_key, w.rule.value)

    logger.debug(
        "Computed %d rooms: O2 %.1f l/day, air %.1f l/min (with AGSS), vacuum %.1f l/min",
        len(normalized),
        demands[GasKey.OXYGEN].total_daily_liters or 0.0,
        result.air_system.with_agss_lpm,
        demands[GasKey.VACUUM].total_flow_lpm,
    )
    return result


def compute_manual(
    totals: Mapping[Any, float],
    units: Optional[Mapping[Any, Any]] = None,
    constants: SizingConstants = DEFAULT_CONSTANTS,
) -> FacilityResult:
    """
    Size sources and pipes from system totals entered by hand.

    Args:
        totals: gas key -> total (l/min or l/day)
        units: gas key -> ManualUnit value (default per_minute)
        constants: Sizing constants table

    Gases without a total are sized for zero demand. There is no room
    matrix, so no critical reserve and no validation.
    """
    units = {parse_gas_key(k): ManualUnit(v) for k, v in (units or {}).items()}
    entered = {parse_gas_key(k): float(v) for k, v in totals.items()}

    demands = {
        gas: manual_demand(gas, entered.get(gas, 0.0), units.get(gas, ManualUnit.PER_MINUTE))
        for gas in GasKey
    }
    return _size_demands(demands, RoomCatalog(), {}, constants, 0.0, "manual")


# ---------------------------------------------------------------------------
# Reactive recalculation
# ---------------------------------------------------------------------------

@dataclass
class RecalculationSession:
    """
    Recompute on every input change, keeping the last valid result.

    An input error leaves last_result untouched and is kept in last_error.
    """

    catalog: RoomCatalog
    constants: SizingConstants = DEFAULT_CONSTANTS
    last_result: Optional[FacilityResult] = None
    last_error: Optional[InputError] = None

    def recompute(self, selection: Optional[Mapping[str, Any]]) -> Optional[FacilityResult]:
        try:
            result = compute(self.catalog, selection, self.constants)
        except InputError as e:
            logger.warning("Recalculation rejected, keeping last valid result: %s", e)
            self.last_error = e
            return self.last_result

        self.last_result = result
        self.last_error = None
        return result

    def reconfigure(self, configuration: Configuration, base: RoomCatalog) -> None:
        """Switch to a catalog rebuilt from base + configuration."""
        self.catalog = configuration.apply(base)


# ---------------------------------------------------------------------------
# Module-level run_*() functions (used by the CLI and the calculator)
# ---------------------------------------------------------------------------

def _catalog_from_params(params: Dict[str, Any]) -> RoomCatalog:
    rooms = params.get("catalog")
    catalog = catalog_from_dicts(rooms) if rooms is not None else default_catalog()
    configuration = params.get("configuration")
    if configuration:
        catalog = Configuration.from_dict(configuration).apply(catalog)
    return catalog


def run_facility(params: Dict[str, Any]) -> Dict[str, Any]:
    """
    Run the full facility calculation.

    Params:
        selection: room key -> {gas key: points}
        catalog: Optional list of room entries (default: configured catalog)
        configuration: Optional settings overrides
        constants: Optional SizingConstants

    Returns:
        FacilityResult as a dict.
    """
    catalog = _catalog_from_params(params)
    constants = params.get("constants") or DEFAULT_CONSTANTS
    return compute(catalog, params.get("selection"), constants).to_dict()


def run_pipe(params: Dict[str, Any]) -> Dict[str, Any]:
    """
    Run pipe selection for a single flow.

    Params:
        flow_lpm: Design flow (l/min)
    """
    constants = params.get("constants") or DEFAULT_CONSTANTS
    return asdict(select_pipe(float(params.get("flow_lpm", 0)), constants))


def run_manual(params: Dict[str, Any]) -> Dict[str, Any]:
    """
    Run sizing from manually entered totals.

    Params:
        totals: gas key -> total
        units: gas key -> 'per_minute' | 'per_day'
    """
    constants = params.get("constants") or DEFAULT_CONSTANTS
    return compute_manual(params.get("totals") or {}, params.get("units"), constants).to_dict()


# ---------------------------------------------------------------------------
# DisciplineCalculator implementation
# ---------------------------------------------------------------------------

@dataclass
class MedicalGasResult(CalculationResult):
    """Calculation result with the output data attached."""

    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        # Flatten data into top-level for convenience
        d.update(d.pop("data"))
        return d


_CALC_DISPATCH = {
    "facility": run_facility,
    "pipe": run_pipe,
    "manual": run_manual,
}


class MedicalGasCalculator(DisciplineCalculator):
    """Medical gas discipline calculator implementing the DisciplineCalculator ABC."""

    @property
    def discipline_name(self) -> str:
        return "medical-gas"

    def available_calculations(self) -> List[str]:
        return list(_CALC_DISPATCH.keys())

    def run_calculation(self, calculation_type: str, params: Dict[str, Any]) -> CalculationResult:
        """
        Dispatch to the appropriate run_*() function.

        Args:
            calculation_type: One of 'facility', 'pipe', 'manual'.
            params: Input parameters dict.

        Returns:
            MedicalGasResult with data populated.

        Raises:
            ValueError: If calculation_type is unknown (InputError for bad input).
        """
        func = _CALC_DISPATCH.get(calculation_type)
        if func is None:
            raise ValueError(
                f"Unknown calculation type: {calculation_type}. "
                f"Available: {', '.join(self.available_calculations())}"
            )

        data = func(params)

        return MedicalGasResult(
            calculation_type=calculation_type,
            warnings=list(data.get("warnings", [])),
            data=data,
        )

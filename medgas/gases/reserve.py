"""
Source Sizing
=============

Primary, secondary and emergency supply sources for each gas.

- Oxygen: liquid oxygen vaporizer, cylinder manifold and concentrator, plus
  a 3-hour reserve for critical rooms at K = 1.
- N2O / CO2: cylinder manifold, primary = secondary = full daily demand.
- Air5 / Air8 / AGSS: one working set and one identical standby set, each at
  100 % of the flow (no derating).
- Vacuum: three units, each at 100 % of the total flow.
"""

import math
from typing import Callable, Dict, List

from medgas.gases.base import (
    AirSystemResult,
    CriticalReserve,
    DemandResult,
    GasKey,
    SourceSizing,
    SourceTier,
)
from medgas.gases.constants import DEFAULT_CONSTANTS, LITERS_PER_M3, SizingConstants
from medgas.gases.demand import Selection, daily_to_lpm
from medgas.gases.registry import RoomCatalog

VAPORIZER = "vaporizer"
CYLINDERS = "cylinders"
CONCENTRATOR = "concentrator"
COMPRESSOR = "compressor"
COMPRESSOR_WITH_AGSS = "compressor_with_agss"
COMPRESSOR_WITHOUT_AGSS = "compressor_without_agss"
AGSS_STATION = "agss_station"
VACUUM_PUMP = "vacuum_pump"


def _daily(demand: DemandResult) -> float:
    return demand.total_daily_liters or 0.0


def _cylinders(liters: float, cylinder_volume: float) -> int:
    return math.ceil(liters / cylinder_volume)


# ---------------------------------------------------------------------------
# Oxygen
# ---------------------------------------------------------------------------

def critical_reserve_liters(
    catalog: RoomCatalog,
    selection: Selection,
    constants: SizingConstants = DEFAULT_CONSTANTS,
) -> float:
    """
    Oxygen volume to cover critical rooms for the reserve period.

    Only rooms flagged critical_reserve count. Their normal usage factor and
    daily hours are ignored: V = flowRate x N x 1 x 3 h x 60.
    """
    minutes = constants.critical_reserve_hours * 60
    volumes = []
    for room in catalog:
        if not room.critical_reserve:
            continue
        points = selection.get(room.key, {}).get(GasKey.OXYGEN, 0)
        requirement = room.requirement(GasKey.OXYGEN)
        if points <= 0 or requirement is None:
            continue
        volumes.append(
            requirement.flow_rate * points * constants.critical_reserve_usage_factor * minutes
        )
    return math.fsum(volumes)


def size_critical_reserve(liters: float, constants: SizingConstants = DEFAULT_CONSTANTS) -> CriticalReserve:
    hours = constants.critical_reserve_hours
    return CriticalReserve(
        hours=hours,
        liters=liters,
        flow_m3h=liters / LITERS_PER_M3 / hours if liters > 0 else 0.0,
        cylinders=_cylinders(liters, constants.oxygen_cylinder_volume_l),
    )


def size_oxygen_sources(
    demand: DemandResult,
    constants: SizingConstants = DEFAULT_CONSTANTS,
    reserve_liters: float = 0.0,
) -> SourceSizing:
    """
    Oxygen supply: vaporizer (m3 of liquid), cylinders (count), concentrator (l/min).

    Primary and secondary each carry 100 % of demand; the emergency source
    covers 0.1 day. Cylinder counts never drop below one.
    """
    daily = _daily(demand)
    daily_m3 = daily / LITERS_PER_M3
    volume = constants.oxygen_cylinder_volume_l

    vaporizer_main = daily_m3 * constants.vaporizer_main_days / constants.liquid_to_gas_expansion
    vaporizer_emergency = daily_m3 * constants.vaporizer_emergency_days / constants.liquid_to_gas_expansion

    cylinders_main = max(1, _cylinders(daily * constants.cylinder_main_days, volume))
    cylinders_emergency = max(1, _cylinders(daily * constants.emergency_days, volume))

    concentrator = daily_to_lpm(daily)
    concentrator_emergency = daily_to_lpm(daily * constants.emergency_days)

    return SourceSizing(
        gas=GasKey.OXYGEN,
        tiers=[
            SourceTier(VAPORIZER, "m3", vaporizer_main, vaporizer_main, vaporizer_emergency),
            SourceTier(CYLINDERS, "pcs", cylinders_main, cylinders_main, cylinders_emergency),
            SourceTier(CONCENTRATOR, "l/min", concentrator, concentrator, concentrator_emergency),
        ],
        critical_reserve=size_critical_reserve(reserve_liters, constants),
    )


# ---------------------------------------------------------------------------
# N2O / CO2
# ---------------------------------------------------------------------------

def size_cylinder_bank(demand: DemandResult, constants: SizingConstants = DEFAULT_CONSTANTS) -> SourceSizing:
    """Cylinder manifold sized for one day; primary = secondary, no emergency tier."""
    volume = constants.cylinder_volume(demand.gas.value)
    cylinders = _cylinders(_daily(demand), volume)
    return SourceSizing(
        gas=demand.gas,
        tiers=[SourceTier(CYLINDERS, "pcs", cylinders, cylinders)],
    )


# ---------------------------------------------------------------------------
# Compressed air / AGSS / vacuum
# ---------------------------------------------------------------------------

def size_compressor_sources(demand: DemandResult, constants: SizingConstants = DEFAULT_CONSTANTS) -> SourceSizing:
    flow = demand.total_flow_lpm
    equipment = AGSS_STATION if demand.gas == GasKey.AGSS else COMPRESSOR
    return SourceSizing(
        gas=demand.gas,
        tiers=[SourceTier(equipment, "l/min", flow, flow, flow)],
    )


def size_vacuum_sources(demand: DemandResult, constants: SizingConstants = DEFAULT_CONSTANTS) -> SourceSizing:
    """Three vacuum units, each able to carry the full flow."""
    flow = demand.total_flow_lpm
    return SourceSizing(
        gas=GasKey.VACUUM,
        tiers=[SourceTier(VACUUM_PUMP, "l/min", flow, flow, flow)],
    )


def air_system_tiers(air: AirSystemResult) -> List[SourceTier]:
    """Equipment rows for the combined compressed-air plant."""
    return [
        SourceTier(COMPRESSOR_WITH_AGSS, "l/min", air.with_agss_lpm, air.with_agss_lpm, air.with_agss_lpm),
        SourceTier(AGSS_STATION, "l/min", air.agss_lpm, air.agss_lpm, air.agss_lpm),
        SourceTier(
            COMPRESSOR_WITHOUT_AGSS, "l/min",
            air.without_agss_lpm, air.without_agss_lpm, air.without_agss_lpm,
        ),
    ]


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

_SIZING_DISPATCH: Dict[GasKey, Callable[[DemandResult, SizingConstants], SourceSizing]] = {
    GasKey.N2O: size_cylinder_bank,
    GasKey.CO2: size_cylinder_bank,
    GasKey.AIR5: size_compressor_sources,
    GasKey.AIR8: size_compressor_sources,
    GasKey.AGSS: size_compressor_sources,
    GasKey.VACUUM: size_vacuum_sources,
}


def size_sources(
    demand: DemandResult,
    constants: SizingConstants = DEFAULT_CONSTANTS,
    reserve_liters: float = 0.0,
) -> SourceSizing:
    """
    Size the supply sources for one gas from its aggregated demand.

    Args:
        demand: Aggregated demand for the gas
        constants: Sizing constants
        reserve_liters: Critical-room reserve volume (oxygen only)
    """
    if demand.gas == GasKey.OXYGEN:
        return size_oxygen_sources(demand, constants, reserve_liters)
    return _SIZING_DISPATCH[demand.gas](demand, constants)

"""
Demand Calculation
==================

Per-room demand and system aggregation for every gas:

- Daily-volume gases (O2, N2O, CO2): V = flowRate x N x K x hours x 60 (l/day)
- Rate-based gases (Air5, vacuum):   V = flowRate x N x K (l/min)
- Fixed-rate gases:                  Air8 = 350 x N x K (l/min),
                                     AGSS = 3 m3/h x N (no usage factor)

Selections passed in here are already normalized by the engine: room keys
exist in the catalog, gas keys are GasKey, point counts are ints >= 0.
"""

import math
from enum import Enum
from typing import Dict, List, Mapping, Optional

from medgas.gases.base import (
    GAS_TYPES,
    AirSystemResult,
    DemandResult,
    FormulaKind,
    GasKey,
    GasRequirement,
    GasType,
    MisconfiguredRequirementError,
    RoomContribution,
    RoomType,
    parse_gas_key,
)
from medgas.gases.constants import (
    DEFAULT_CONSTANTS,
    HOURS_PER_DAY,
    LITERS_PER_M3,
    MINUTES_PER_DAY,
    MINUTES_PER_HOUR,
    SizingConstants,
)
from medgas.gases.registry import RoomCatalog

Selection = Mapping[str, Mapping[GasKey, int]]


class ManualUnit(str, Enum):
    """Unit of a manually entered system total."""
    PER_MINUTE = "per_minute"  # l/min
    PER_DAY = "per_day"        # l/day


# ---------------------------------------------------------------------------
# Unit conversions
# ---------------------------------------------------------------------------

def daily_to_lpm(daily_liters: float) -> float:
    """Average flow over a day, l/min."""
    return daily_liters / MINUTES_PER_DAY


def daily_to_m3h(daily_liters: float) -> float:
    """Average flow over a day, m3/h."""
    return daily_liters / LITERS_PER_M3 / HOURS_PER_DAY


def lpm_to_m3h(flow_lpm: float) -> float:
    return flow_lpm * MINUTES_PER_HOUR / LITERS_PER_M3


def m3h_to_lpm(flow_m3h: float) -> float:
    return flow_m3h * LITERS_PER_M3 / MINUTES_PER_HOUR


# ---------------------------------------------------------------------------
# Per-room demand
# ---------------------------------------------------------------------------

def room_daily_liters(requirement: GasRequirement, points: int) -> float:
    """Daily volume for one room, l/day."""
    if points == 0:
        return 0.0
    return (
        requirement.flow_rate * points * requirement.usage_factor
        * requirement.hours_per_day * MINUTES_PER_HOUR
    )


def fixed_rate_lpm(gas_type: GasType, constants: SizingConstants = DEFAULT_CONSTANTS) -> float:
    """Per-point flow for fixed-rate gases, l/min."""
    if gas_type.key == GasKey.AIR8:
        return constants.air8_lpm_per_point
    if gas_type.key == GasKey.AGSS:
        return m3h_to_lpm(constants.agss_m3h_per_point)
    raise ValueError(f"{gas_type.key.value} is not a fixed-rate gas")


def room_flow_lpm(
    gas_type: GasType,
    requirement: GasRequirement,
    points: int,
    constants: SizingConstants = DEFAULT_CONSTANTS,
) -> float:
    """Simultaneous flow for one room, l/min (rate-based and fixed-rate gases)."""
    if points == 0:
        return 0.0

    if gas_type.kind == FormulaKind.FIXED_RATE:
        per_point = fixed_rate_lpm(gas_type, constants)
    else:
        per_point = requirement.flow_rate

    factor = requirement.usage_factor if gas_type.applies_usage_factor else 1.0
    return per_point * points * factor


def room_contribution(
    gas: GasKey,
    room: RoomType,
    points: int,
    constants: SizingConstants = DEFAULT_CONSTANTS,
) -> Optional[RoomContribution]:
    """
    Demand of one room for one gas.

    Returns:
        RoomContribution, or None when the room has no requirement for the gas
        (the caller reports that as a data-quality issue).

    Raises:
        MisconfiguredRequirementError: daily-volume gas without hours_per_day.
    """
    gas_type = GAS_TYPES[gas]
    requirement = room.requirement(gas)
    if requirement is None:
        return None

    if gas_type.kind == FormulaKind.DAILY_VOLUME:
        if requirement.hours_per_day is None:
            raise MisconfiguredRequirementError(
                room.key, gas.value, "daily-volume gas requires hours_per_day"
            )
        daily = room_daily_liters(requirement, points)
        return RoomContribution(room.key, points, daily, daily_to_lpm(daily))

    return RoomContribution(room.key, points, None, room_flow_lpm(gas_type, requirement, points, constants))


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def aggregate_demand(
    gas: GasKey,
    catalog: RoomCatalog,
    selection: Selection,
    constants: SizingConstants = DEFAULT_CONSTANTS,
) -> DemandResult:
    """
    Sum per-room contributions for one gas.

    Points are counted for every room that has them; flow and volume only
    for rooms with a requirement for the gas.
    """
    gas = parse_gas_key(gas)
    gas_type = GAS_TYPES[gas]

    total_points = 0
    rooms_count = 0
    contributions: List[RoomContribution] = []

    for room in catalog:
        points = selection.get(room.key, {}).get(gas, 0)
        if points <= 0:
            continue
        rooms_count += 1
        total_points += points

        contribution = room_contribution(gas, room, points, constants)
        if contribution is not None:
            contributions.append(contribution)

    # fsum keeps the total independent of room order
    if gas_type.kind == FormulaKind.DAILY_VOLUME:
        daily = math.fsum(c.daily_liters for c in contributions)
        return DemandResult(
            gas=gas,
            total_points=total_points,
            rooms_count=rooms_count,
            total_daily_liters=daily,
            total_flow_lpm=daily_to_lpm(daily),
            total_flow_m3h=daily_to_m3h(daily),
            contributions=contributions,
        )

    flow = math.fsum(c.flow_lpm for c in contributions)
    return DemandResult(
        gas=gas,
        total_points=total_points,
        rooms_count=rooms_count,
        total_daily_liters=None,
        total_flow_lpm=flow,
        total_flow_m3h=lpm_to_m3h(flow),
        contributions=contributions,
    )


def aggregate_all(
    catalog: RoomCatalog,
    selection: Selection,
    constants: SizingConstants = DEFAULT_CONSTANTS,
) -> Dict[GasKey, DemandResult]:
    return {gas: aggregate_demand(gas, catalog, selection, constants) for gas in GasKey}


def air_system_demand(
    demands: Mapping[GasKey, DemandResult],
    catalog: RoomCatalog,
    selection: Selection,
) -> AirSystemResult:
    """
    Combined compressed-air figures from the Air5, Air8 and AGSS demands.

    Returns an AirSystemResult without tiers or pipe; those are added by
    source sizing and pipe selection.
    """
    air5 = demands[GasKey.AIR5]
    air8 = demands[GasKey.AIR8]
    agss = demands[GasKey.AGSS]

    air_gases = (GasKey.AIR5, GasKey.AIR8, GasKey.AGSS)
    rooms_count = sum(
        1 for room in catalog
        if any(selection.get(room.key, {}).get(g, 0) > 0 for g in air_gases)
    )

    without_agss = air5.total_flow_lpm + air8.total_flow_lpm
    with_agss = without_agss + agss.total_flow_lpm

    return AirSystemResult(
        total_points=air5.total_points + air8.total_points + agss.total_points,
        rooms_count=rooms_count,
        air5_lpm=air5.total_flow_lpm,
        air8_lpm=air8.total_flow_lpm,
        agss_m3h=agss.total_flow_m3h,
        agss_lpm=agss.total_flow_lpm,
        without_agss_lpm=without_agss,
        with_agss_lpm=with_agss,
        without_agss_m3h=lpm_to_m3h(without_agss),
        with_agss_m3h=lpm_to_m3h(with_agss),
    )


# ---------------------------------------------------------------------------
# Manual totals
# ---------------------------------------------------------------------------

def manual_demand(gas: GasKey, value: float, unit: ManualUnit = ManualUnit.PER_MINUTE) -> DemandResult:
    """
    Demand from a system total entered by hand instead of a room matrix.

    Daily-volume gases keep a daily volume (l/min totals are scaled by 1440);
    rate gases keep a flow (l/day totals are divided by 1440).
    """
    gas = parse_gas_key(gas)
    unit = ManualUnit(unit)
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"Manual total must be a finite number >= 0, got {value}")

    if GAS_TYPES[gas].kind == FormulaKind.DAILY_VOLUME:
        daily = value if unit == ManualUnit.PER_DAY else value * MINUTES_PER_DAY
        return DemandResult(
            gas=gas,
            total_daily_liters=daily,
            total_flow_lpm=daily_to_lpm(daily),
            total_flow_m3h=daily_to_m3h(daily),
        )

    flow = value / MINUTES_PER_DAY if unit == ManualUnit.PER_DAY else value
    return DemandResult(gas=gas, total_flow_lpm=flow, total_flow_m3h=lpm_to_m3h(flow))

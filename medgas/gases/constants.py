"""
Sizing Constants
================

Single table of the fixed design-code constants used by demand aggregation,
source sizing and pipe selection. Nothing else in the package re-declares
these numbers.
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional, Tuple

MINUTES_PER_DAY = 1440
HOURS_PER_DAY = 24
LITERS_PER_M3 = 1000
MINUTES_PER_HOUR = 60


@dataclass(frozen=True)
class PipeSize:
    """Standard copper pipe: largest margined inner diameter it accepts."""
    max_inner: float       # mm
    outer_diameter: float  # mm
    wall_thickness: float  # mm


# Ordered smallest to largest
STANDARD_PIPES: Tuple[PipeSize, ...] = (
    PipeSize(6, 8, 1),
    PipeSize(10, 12, 1),
    PipeSize(13, 15, 1),
    PipeSize(16, 18, 1),
    PipeSize(20, 22, 1),
    PipeSize(26, 28, 1),
    PipeSize(32, 35, 1.5),
    PipeSize(39, 42, 1.5),
)


@dataclass(frozen=True)
class SizingConstants:
    """Design constants for medical gas sizing."""

    # Cylinders (40 l bottle, gas volume at delivery pressure)
    oxygen_cylinder_volume_l: float = 6000.0
    co2_cylinder_volume_l: float = 6000.0
    n2o_cylinder_volume_l: float = 3000.0

    # Liquid oxygen vaporizer
    liquid_to_gas_expansion: float = 860.0
    vaporizer_main_days: float = 5.0
    vaporizer_emergency_days: float = 0.1

    # Cylinder manifolds and concentrators
    cylinder_main_days: float = 3.0
    emergency_days: float = 0.1

    # Critical-room oxygen reserve
    critical_reserve_hours: float = 3.0
    critical_reserve_usage_factor: float = 1.0

    # Fixed per-point rates
    air8_lpm_per_point: float = 350.0
    agss_m3h_per_point: float = 3.0

    # Pipe diameter formula: coefficient * sqrt(m3/h / reference) + margin
    pipe_coefficient: float = 18.8
    pipe_reference_m3h: float = 10.0
    pipe_margin_mm: float = 2.0
    oversize_wall_thickness_mm: float = 1.5

    def cylinder_volume(self, gas_key: str) -> float:
        """Cylinder gas volume for a cylinder-supplied gas."""
        volumes = {
            "oxygen": self.oxygen_cylinder_volume_l,
            "co2": self.co2_cylinder_volume_l,
            "n2o": self.n2o_cylinder_volume_l,
        }
        if gas_key not in volumes:
            raise ValueError(f"No cylinder volume defined for gas: {gas_key}")
        return volumes[gas_key]

    def to_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


DEFAULT_CONSTANTS = SizingConstants()


def constants_with_overrides(overrides: Optional[Mapping[str, Any]]) -> SizingConstants:
    """
    Build a constants table with selected values replaced.

    Args:
        overrides: Mapping of field name -> numeric value

    Raises:
        ValueError: If a name is not a known constant or a value is not positive.
    """
    if not overrides:
        return DEFAULT_CONSTANTS

    known = {f.name for f in fields(SizingConstants)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ValueError(
            f"Unknown sizing constant(s): {', '.join(unknown)}. "
            f"Available: {', '.join(sorted(known))}"
        )

    values = {}
    for name, value in overrides.items():
        number = float(value)
        if number <= 0:
            raise ValueError(f"Sizing constant {name} must be positive, got {value}")
        values[name] = number

    return replace(DEFAULT_CONSTANTS, **values)


def load_constants() -> SizingConstants:
    """Constants table with the overrides from config.yaml applied."""
    from medgas.core.config import get_config_value

    return constants_with_overrides(get_config_value("constants", default={}))

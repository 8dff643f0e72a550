"""
Base types for medical gas calculations.

Gas table, room/requirement model, derived result records and the
input-contract errors shared by every calculation module.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class GasKey(str, Enum):
    OXYGEN = "oxygen"
    N2O = "n2o"
    CO2 = "co2"
    AIR5 = "air5"
    AIR8 = "air8"
    AGSS = "agss"
    VACUUM = "vacuum"


class FormulaKind(str, Enum):
    """How a gas turns points into demand."""
    DAILY_VOLUME = "daily-volume"   # flowRate * N * K * hours * 60 -> l/day
    RATE_BASED = "rate-based"       # flowRate * N * K -> l/min
    FIXED_RATE = "fixed-rate"       # fixed per-point rate, configured flowRate ignored


class ValidationRule(str, Enum):
    AGSS_WITHOUT_AIR = "AGSS_WITHOUT_AIR"
    N2O_WITHOUT_AGSS_OR_AIR = "N2O_WITHOUT_AGSS_OR_AIR"
    MISSING_GAS_REQUIREMENT = "MISSING_GAS_REQUIREMENT"


# ---------------------------------------------------------------------------
# Input-contract errors
# ---------------------------------------------------------------------------

class InputError(ValueError):
    """Input rejected before it reaches the calculation core."""


class UnknownRoomKeyError(InputError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Unknown room key: {key!r}")


class UnknownGasKeyError(InputError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(
            f"Unknown gas key: {key!r}. Available: {', '.join(g.value for g in GasKey)}"
        )


class InvalidPointCountError(InputError):
    def __init__(self, room_key: str, gas_key: str, value: Any):
        self.room_key = room_key
        self.gas_key = gas_key
        self.value = value
        super().__init__(
            f"Invalid point count for {room_key}/{gas_key}: {value!r} "
            "(expected a non-negative integer)"
        )


class MisconfiguredRequirementError(InputError):
    def __init__(self, room_key: str, gas_key: str, reason: str):
        self.room_key = room_key
        self.gas_key = gas_key
        super().__init__(f"Misconfigured {gas_key} requirement for room {room_key!r}: {reason}")


def parse_gas_key(value: Any) -> GasKey:
    """Coerce a string to GasKey, raising UnknownGasKeyError."""
    if isinstance(value, GasKey):
        return value
    try:
        return GasKey(str(value).strip().lower())
    except ValueError:
        raise UnknownGasKeyError(str(value)) from None


# ---------------------------------------------------------------------------
# Gas table and room model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GasType:
    key: GasKey
    short_name: str
    label: str
    unit: str
    kind: FormulaKind
    applies_usage_factor: bool = True


GAS_TYPES: Dict[GasKey, GasType] = {
    GasKey.OXYGEN: GasType(GasKey.OXYGEN, "O2", "Oxygen (O2)", "l/day", FormulaKind.DAILY_VOLUME),
    GasKey.N2O: GasType(GasKey.N2O, "N2O", "Nitrous oxide (N2O)", "l/day", FormulaKind.DAILY_VOLUME),
    GasKey.CO2: GasType(GasKey.CO2, "CO2", "Carbon dioxide (CO2)", "l/day", FormulaKind.DAILY_VOLUME),
    GasKey.AIR5: GasType(GasKey.AIR5, "Air5", "Medical air 0.4 MPa (Air 5)", "l/min", FormulaKind.RATE_BASED),
    GasKey.AIR8: GasType(GasKey.AIR8, "Air8", "Surgical air 0.8 MPa (Air 8)", "l/min", FormulaKind.FIXED_RATE),
    GasKey.AGSS: GasType(
        GasKey.AGSS, "AGSS", "Anaesthetic gas scavenging (AGSS)", "l/min",
        FormulaKind.FIXED_RATE, applies_usage_factor=False,
    ),
    GasKey.VACUUM: GasType(GasKey.VACUUM, "VAC", "Medical vacuum", "l/min", FormulaKind.RATE_BASED),
}


@dataclass(frozen=True)
class GasRequirement:
    """Per-room gas parameters: nominal flow per point, daily hours, usage factor."""
    flow_rate: float = 0.0
    hours_per_day: Optional[float] = None
    usage_factor: float = 1.0

    def __post_init__(self):
        for name in ("flow_rate", "hours_per_day", "usage_factor"):
            value = getattr(self, name)
            if value is not None and not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value}")
        if self.flow_rate < 0:
            raise ValueError(f"flow_rate must be >= 0, got {self.flow_rate}")
        if self.hours_per_day is not None and self.hours_per_day < 0:
            raise ValueError(f"hours_per_day must be >= 0, got {self.hours_per_day}")
        if not 0 <= self.usage_factor <= 1:
            raise ValueError(f"usage_factor must be between 0 and 1, got {self.usage_factor}")

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "GasRequirement":
        data = data or {}
        hours = data.get("hours_per_day", data.get("hoursPerDay"))
        usage = data.get("usage_factor", data.get("usageFactor"))
        return cls(
            flow_rate=float(data.get("flow_rate", data.get("flowRate", 0)) or 0),
            hours_per_day=float(hours) if hours is not None else None,
            usage_factor=float(usage) if usage is not None else 1.0,
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"flow_rate": self.flow_rate, "usage_factor": self.usage_factor}
        if self.hours_per_day is not None:
            d["hours_per_day"] = self.hours_per_day
        return d


@dataclass(frozen=True)
class RoomType:
    key: str
    name: str
    requirements: Mapping[GasKey, GasRequirement] = field(default_factory=dict)
    critical_reserve: bool = False

    def requirement(self, gas: GasKey) -> Optional[GasRequirement]:
        """Requirement for a gas, or None when the gas is not applicable here."""
        return self.requirements.get(gas)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "critical_reserve": self.critical_reserve,
            "requirements": {g.value: r.to_dict() for g, r in self.requirements.items()},
        }


# ---------------------------------------------------------------------------
# Derived results
# ---------------------------------------------------------------------------

@dataclass
class CalculationResult:
    calculation_type: str = ""
    warnings: List[str] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return self.__dict__.copy()


@dataclass(frozen=True)
class RoomContribution:
    room_key: str
    points: int
    daily_liters: Optional[float]
    flow_lpm: float


@dataclass
class DemandResult:
    gas: GasKey
    total_points: int = 0
    rooms_count: int = 0
    total_daily_liters: Optional[float] = None
    total_flow_lpm: float = 0.0
    total_flow_m3h: float = 0.0
    contributions: List[RoomContribution] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gas": self.gas.value,
            "total_points": self.total_points,
            "rooms_count": self.rooms_count,
            "total_daily_liters": self.total_daily_liters,
            "total_flow_lpm": self.total_flow_lpm,
            "total_flow_m3h": self.total_flow_m3h,
        }


@dataclass(frozen=True)
class SourceTier:
    """One equipment row: capacity of the primary, secondary and emergency sources."""
    equipment: str
    unit: str
    primary: float
    secondary: float
    emergency: Optional[float] = None


@dataclass(frozen=True)
class CriticalReserve:
    """Oxygen reserve covering critical rooms for a fixed number of hours at K=1."""
    hours: float
    liters: float
    flow_m3h: float
    cylinders: int


@dataclass
class SourceSizing:
    gas: GasKey
    tiers: List[SourceTier] = field(default_factory=list)
    critical_reserve: Optional[CriticalReserve] = None

    def tier(self, equipment: str) -> Optional[SourceTier]:
        for t in self.tiers:
            if t.equipment == equipment:
                return t
        return None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "gas": self.gas.value,
            "tiers": [t.__dict__.copy() for t in self.tiers],
        }
        if self.critical_reserve is not None:
            d["critical_reserve"] = self.critical_reserve.__dict__.copy()
        return d


@dataclass(frozen=True)
class PipeSizing:
    flow_lpm: float
    hourly_m3: float
    inner_diameter_computed: float
    inner_with_margin: float
    outer_diameter: float
    wall_thickness: float
    actual_inner: float
    standard: bool = True

    def describe(self) -> str:
        return (
            f"OD {self.outer_diameter:g} mm x {self.wall_thickness:g} mm "
            f"(calc. inner {self.inner_diameter_computed:g} mm)"
        )


@dataclass(frozen=True)
class ValidationWarning:
    room_key: str
    room_name: str
    rule: ValidationRule
    message: str
    gas: Optional[GasKey] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "room_key": self.room_key,
            "room_name": self.room_name,
            "rule": self.rule.value,
            "message": self.message,
            "gas": self.gas.value if self.gas else None,
        }


@dataclass
class GasResult:
    demand: DemandResult
    sources: SourceSizing
    pipe: PipeSizing

    def to_dict(self) -> Dict[str, Any]:
        return {
            "demand": self.demand.to_dict(),
            "sources": self.sources.to_dict(),
            "pipe": self.pipe.__dict__.copy(),
        }


@dataclass
class AirSystemResult:
    """Combined compressed-air plant: Air5 + Air8, with and without AGSS."""
    total_points: int = 0
    rooms_count: int = 0
    air5_lpm: float = 0.0
    air8_lpm: float = 0.0
    agss_m3h: float = 0.0
    agss_lpm: float = 0.0
    without_agss_lpm: float = 0.0
    with_agss_lpm: float = 0.0
    without_agss_m3h: float = 0.0
    with_agss_m3h: float = 0.0
    tiers: List[SourceTier] = field(default_factory=list)
    pipe: Optional[PipeSizing] = None

    def to_dict(self) -> Dict[str, Any]:
        d = {k: v for k, v in self.__dict__.items() if k not in ("tiers", "pipe")}
        d["tiers"] = [t.__dict__.copy() for t in self.tiers]
        d["pipe"] = self.pipe.__dict__.copy() if self.pipe else None
        return d


@dataclass
class FacilityResult(CalculationResult):
    gases: Dict[GasKey, GasResult] = field(default_factory=dict)
    air_system: AirSystemResult = field(default_factory=AirSystemResult)
    validation: List[ValidationWarning] = field(default_factory=list)
    data_quality: List[ValidationWarning] = field(default_factory=list)

    def gas(self, key: GasKey) -> GasResult:
        return self.gases[parse_gas_key(key)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "calculation_type": self.calculation_type,
            "warnings": list(self.warnings),
            "notes": list(self.notes),
            "gases": {k.value: r.to_dict() for k, r in self.gases.items()},
            "air_system": self.air_system.to_dict(),
            "validation": [w.to_dict() for w in self.validation],
            "data_quality": [w.to_dict() for w in self.data_quality],
        }


class DisciplineCalculator(ABC):
    """Abstract base class for discipline calculators."""

    @property
    @abstractmethod
    def discipline_name(self) -> str:
        pass

    @abstractmethod
    def available_calculations(self) -> List[str]:
        pass

    @abstractmethod
    def run_calculation(self, calculation_type: str, params: Dict[str, Any]) -> CalculationResult:
        pass

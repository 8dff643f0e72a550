"""
Selection Validators

Advisory cross-gas checks over the room/point matrix. Results never block
sizing; they are reported next to it.

Rules:
    AGSS_WITHOUT_AIR         - AGSS points with neither Air5 nor Air8 points
    N2O_WITHOUT_AGSS_OR_AIR  - N2O points without AGSS, or without any air
    MISSING_GAS_REQUIREMENT  - points for a gas the room type has no
                               parameters for (counted as zero demand)
"""

from typing import List, Mapping

from medgas.gases.base import GAS_TYPES, GasKey, ValidationRule, ValidationWarning
from medgas.gases.demand import Selection
from medgas.gases.registry import RoomCatalog


_MESSAGES = {
    ValidationRule.AGSS_WITHOUT_AIR: "AGSS without air: AGSS points need Air5 or Air8 points in the room",
    ValidationRule.N2O_WITHOUT_AGSS_OR_AIR: "N2O without AGSS/air: N2O points need AGSS and Air5 or Air8 points",
}


def check_room(counts: Mapping[GasKey, int]) -> List[ValidationRule]:
    """
    Cross-gas rules violated by one room's point counts.

    Args:
        counts: gas -> points for the room (missing gases count as zero)
    """
    agss = counts.get(GasKey.AGSS, 0)
    n2o = counts.get(GasKey.N2O, 0)
    has_air = counts.get(GasKey.AIR5, 0) > 0 or counts.get(GasKey.AIR8, 0) > 0

    violated = []
    if agss > 0 and not has_air:
        violated.append(ValidationRule.AGSS_WITHOUT_AIR)
    if n2o > 0 and (agss == 0 or not has_air):
        violated.append(ValidationRule.N2O_WITHOUT_AGSS_OR_AIR)
    return violated


def validate_selection(catalog: RoomCatalog, selection: Selection) -> List[ValidationWarning]:
    """Apply the cross-gas rules to every selected room, in catalog order."""
    warnings = []
    for room in catalog:
        counts = selection.get(room.key)
        if not counts:
            continue
        for rule in check_room(counts):
            warnings.append(ValidationWarning(
                room_key=room.key,
                room_name=room.name,
                rule=rule,
                message=_MESSAGES[rule],
            ))
    return warnings


def missing_requirements(catalog: RoomCatalog, selection: Selection) -> List[ValidationWarning]:
    """Rooms with points for a gas that has no requirement in that room type."""
    warnings = []
    for room in catalog:
        for gas, points in (selection.get(room.key) or {}).items():
            if points > 0 and room.requirement(gas) is None:
                warnings.append(ValidationWarning(
                    room_key=room.key,
                    room_name=room.name,
                    rule=ValidationRule.MISSING_GAS_REQUIREMENT,
                    message=(
                        f"{points} {GAS_TYPES[gas].short_name} point(s) but no "
                        f"{gas.value} parameters for this room type; counted as zero"
                    ),
                    gas=gas,
                ))
    return warnings

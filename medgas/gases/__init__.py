"""
medgas Gases Module

Room catalog, demand aggregation, supply source sizing, pipe selection and
advisory validation for medical gases.
"""

from medgas.gases.base import (
    DisciplineCalculator,
    CalculationResult,
    FacilityResult,
    GasKey,
    InputError,
)
from medgas.gases.engine import MedicalGasCalculator, RecalculationSession, compute, compute_manual

__all__ = [
    "DisciplineCalculator",
    "CalculationResult",
    "FacilityResult",
    "GasKey",
    "InputError",
    "MedicalGasCalculator",
    "RecalculationSession",
    "compute",
    "compute_manual",
]

"""
Pipe Diameter Selection
=======================

Velocity-based inner diameter estimate and selection of a standard copper
pipe. Used by every gas and by the combined air system.

    hourly_m3 = flow * 60 / 1000
    inner     = 18.8 * sqrt(hourly_m3 / 10)       (rounded to 0.01 mm)
    margined  = inner + 2

The smallest standard pipe whose inner bound is >= margined is selected.
Above the table the outer diameter is the margined value with a 1.5 mm wall.
"""

import math
from typing import Sequence

from medgas.gases.base import PipeSizing
from medgas.gases.constants import DEFAULT_CONSTANTS, STANDARD_PIPES, PipeSize, SizingConstants
from medgas.gases.demand import lpm_to_m3h


def round_half_up(value: float, digits: int = 2) -> float:
    """Round halves away from zero for non-negative values (0.125 -> 0.13)."""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def inner_diameter_mm(flow_lpm: float, constants: SizingConstants = DEFAULT_CONSTANTS) -> float:
    """Computed inner diameter for a flow, mm, rounded to 0.01 mm."""
    hourly_m3 = lpm_to_m3h(flow_lpm)
    raw = constants.pipe_coefficient * math.sqrt(hourly_m3 / constants.pipe_reference_m3h)
    return round_half_up(raw, 2)


def select_pipe(
    flow_lpm: float,
    constants: SizingConstants = DEFAULT_CONSTANTS,
    table: Sequence[PipeSize] = STANDARD_PIPES,
) -> PipeSizing:
    """
    Select a pipe for an aggregate flow.

    Args:
        flow_lpm: Design flow, l/min (>= 0)
        constants: Sizing constants (formula coefficient, margin, oversize wall)
        table: Standard pipes ordered by size

    Returns:
        PipeSizing with the computed and selected dimensions

    Raises:
        ValueError: If the flow is negative or not finite.
    """
    if not math.isfinite(flow_lpm) or flow_lpm < 0:
        raise ValueError(f"Flow must be a finite number >= 0, got {flow_lpm}")

    inner = inner_diameter_mm(flow_lpm, constants)
    margined = inner + constants.pipe_margin_mm

    for pipe in table:
        if margined <= pipe.max_inner:
            outer, wall, standard = pipe.outer_diameter, pipe.wall_thickness, True
            break
    else:
        outer = round_half_up(margined, 2)
        wall = constants.oversize_wall_thickness_mm
        standard = False

    return PipeSizing(
        flow_lpm=flow_lpm,
        hourly_m3=lpm_to_m3h(flow_lpm),
        inner_diameter_computed=inner,
        inner_with_margin=margined,
        outer_diameter=outer,
        wall_thickness=wall,
        actual_inner=outer - 2 * wall,
        standard=standard,
    )

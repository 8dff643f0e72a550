"""Tests for standard pipe selection."""

import math

import pytest

from medgas.gases.constants import STANDARD_PIPES, PipeSize
from medgas.gases.pipe import inner_diameter_mm, round_half_up, select_pipe


def test_round_half_up():
    assert round_half_up(0.125) == 0.13
    assert round_half_up(14.5624) == 14.56
    assert round_half_up(2.5, 0) == 3


def test_inner_diameter_at_100_lpm():
    assert inner_diameter_mm(100) == pytest.approx(14.56)


def test_100_lpm_selects_22mm():
    pipe = select_pipe(100)
    assert pipe.hourly_m3 == pytest.approx(6.0)
    assert pipe.inner_with_margin == pytest.approx(16.56)
    assert pipe.outer_diameter == 22
    assert pipe.wall_thickness == 1
    assert pipe.actual_inner == 20
    assert pipe.standard


def test_zero_flow_selects_smallest():
    pipe = select_pipe(0)
    assert pipe.inner_diameter_computed == 0
    assert pipe.outer_diameter == 8
    assert pipe.actual_inner == 6


def test_oxygen_average_flow():
    # 42000 l/day -> 1.75 m3/h -> 7.86 mm + 2
    pipe = select_pipe(42000 / 1440)
    assert pipe.inner_diameter_computed == pytest.approx(7.86)
    assert pipe.outer_diameter == 12


def test_above_table_is_non_standard():
    pipe = select_pipe(1000)
    assert pipe.inner_diameter_computed == pytest.approx(46.05)
    assert pipe.outer_diameter == pytest.approx(48.05)
    assert pipe.wall_thickness == 1.5
    assert pipe.actual_inner == pytest.approx(45.05)
    assert not pipe.standard


def test_selection_never_shrinks_within_table():
    previous = 0
    for flow in range(0, 650, 25):
        outer = select_pipe(flow).outer_diameter
        assert outer >= previous
        previous = outer


def test_margined_diameter_fits_selected_bound():
    for flow in (5, 50, 150, 300, 500):
        pipe = select_pipe(flow)
        bound = next(p.max_inner for p in STANDARD_PIPES if p.outer_diameter == pipe.outer_diameter)
        assert pipe.inner_with_margin <= bound


def test_custom_table():
    table = (PipeSize(20, 25, 2),)
    pipe = select_pipe(100, table=table)
    assert pipe.outer_diameter == 25
    assert pipe.actual_inner == 21


@pytest.mark.parametrize("flow", [-1, math.nan, math.inf])
def test_invalid_flow(flow):
    with pytest.raises(ValueError):
        select_pipe(flow)


def _flow_for_inner(inner_mm):
    """Flow (l/min) whose computed inner diameter is exactly inner_mm."""
    return 10 * (inner_mm / 18.8) ** 2 * 1000 / 60


@pytest.mark.parametrize("inner, outer", [
    (4.0, 8),
    (8.0, 12),
    (14.0, 18),
    (24.0, 28),
    (37.0, 42),
])
def test_margined_diameter_on_bound_selects_that_pipe(inner, outer):
    pipe = select_pipe(_flow_for_inner(inner))
    assert pipe.inner_diameter_computed == pytest.approx(inner)
    assert pipe.inner_with_margin == pytest.approx(inner + 2)
    assert pipe.outer_diameter == outer
    assert pipe.standard


def test_margined_diameter_just_over_bound_steps_up():
    pipe = select_pipe(_flow_for_inner(14.01))
    assert pipe.inner_with_margin == pytest.approx(16.01)
    assert pipe.outer_diameter == 22

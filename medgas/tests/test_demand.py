"""Tests for per-room demand and system aggregation."""

import pytest

from medgas.gases.base import (
    GAS_TYPES,
    GasKey,
    GasRequirement,
    MisconfiguredRequirementError,
    RoomType,
)
from medgas.gases.demand import (
    ManualUnit,
    aggregate_all,
    aggregate_demand,
    air_system_demand,
    daily_to_lpm,
    daily_to_m3h,
    fixed_rate_lpm,
    lpm_to_m3h,
    m3h_to_lpm,
    manual_demand,
    room_contribution,
)
from medgas.gases.registry import RoomCatalog, catalog_from_dicts


def _sel(**rooms):
    """Selection with GasKey keys, as the engine passes it down."""
    return {room: {GasKey(g): n for g, n in counts.items()} for room, counts in rooms.items()}


class TestConversions:
    def test_daily_to_lpm(self):
        assert daily_to_lpm(1440) == 1.0

    def test_daily_to_m3h(self):
        assert daily_to_m3h(24000) == 1.0

    def test_lpm_m3h_round_trip_values(self):
        assert lpm_to_m3h(100) == pytest.approx(6.0)
        assert m3h_to_lpm(3) == pytest.approx(50.0)


class TestOxygen:
    def test_operating_room_daily_volume(self, catalog):
        demand = aggregate_demand(GasKey.OXYGEN, catalog, _sel(operating={"oxygen": 10}))
        assert demand.total_daily_liters == pytest.approx(42000)
        assert round(demand.total_flow_lpm, 2) == 29.17
        assert demand.total_flow_m3h == pytest.approx(1.75)
        assert demand.total_points == 10
        assert demand.rooms_count == 1

    def test_two_rooms_sum(self, catalog):
        demand = aggregate_demand("oxygen", catalog, _sel(operating={"oxygen": 10}, ward={"oxygen": 4}))
        # ward: 8 x 4 x 0.5 x 24 x 60 = 23040
        assert demand.total_daily_liters == pytest.approx(42000 + 23040)
        assert demand.rooms_count == 2
        assert [c.room_key for c in demand.contributions] == ["operating", "ward"]


class TestRateGases:
    def test_air5_uses_usage_factor(self, catalog):
        demand = aggregate_demand(GasKey.AIR5, catalog, _sel(operating={"air5": 2}))
        assert demand.total_daily_liters is None
        assert demand.total_flow_lpm == pytest.approx(84.0)

    def test_air8_fixed_rate_ignores_flow_rate(self, catalog):
        demand = aggregate_demand(GasKey.AIR8, catalog, _sel(operating={"air8": 2}))
        assert demand.total_flow_lpm == pytest.approx(350 * 2 * 0.7)

    def test_vacuum(self, catalog):
        demand = aggregate_demand(GasKey.VACUUM, catalog, _sel(operating={"vacuum": 3}, ward={"vacuum": 10}))
        assert demand.total_flow_lpm == pytest.approx(40 * 3 * 0.7 + 20 * 10 * 0.3)


class TestAGSS:
    def test_five_points_is_250_lpm(self, catalog):
        demand = aggregate_demand(GasKey.AGSS, catalog, _sel(operating={"agss": 5}))
        assert demand.total_flow_m3h == pytest.approx(15.0)
        assert demand.total_flow_lpm == pytest.approx(250.0)

    def test_configured_flow_and_factor_ignored(self):
        catalog = catalog_from_dicts([
            {"key": "theatre", "gases": {"agss": {"flow_rate": 99, "usage_factor": 0.2}}},
        ])
        demand = aggregate_demand(GasKey.AGSS, catalog, _sel(theatre={"agss": 5}))
        assert demand.total_flow_lpm == pytest.approx(250.0)

    def test_fixed_rate_per_point(self):
        assert fixed_rate_lpm(GAS_TYPES[GasKey.AGSS]) == pytest.approx(50.0)
        assert fixed_rate_lpm(GAS_TYPES[GasKey.AIR8]) == 350.0
        with pytest.raises(ValueError):
            fixed_rate_lpm(GAS_TYPES[GasKey.OXYGEN])


class TestRoomContribution:
    def test_not_applicable_returns_none(self, catalog):
        assert room_contribution(GasKey.AGSS, catalog.get("ward"), 2) is None

    def test_zero_points(self, catalog):
        contribution = room_contribution(GasKey.OXYGEN, catalog.get("operating"), 0)
        assert contribution.daily_liters == 0.0
        assert contribution.flow_lpm == 0.0

    def test_daily_volume_without_hours(self):
        room = RoomType("lab", "Lab", {GasKey.CO2: GasRequirement(15, None, 1.0)})
        with pytest.raises(MisconfiguredRequirementError):
            room_contribution(GasKey.CO2, room, 1)


class TestAggregationProperties:
    def test_points_without_requirement_counted_but_zero(self, catalog):
        demand = aggregate_demand(GasKey.AGSS, catalog, _sel(ward={"agss": 2}))
        assert demand.total_points == 2
        assert demand.rooms_count == 1
        assert demand.total_flow_lpm == 0.0
        assert demand.contributions == []

    def test_additivity(self, catalog):
        a = _sel(operating={"oxygen": 3, "vacuum": 2})
        b = _sel(ward={"oxygen": 7, "vacuum": 5})
        both = _sel(operating={"oxygen": 3, "vacuum": 2}, ward={"oxygen": 7, "vacuum": 5})
        for gas in (GasKey.OXYGEN, GasKey.VACUUM):
            split = aggregate_demand(gas, catalog, a).total_flow_lpm + aggregate_demand(gas, catalog, b).total_flow_lpm
            assert aggregate_demand(gas, catalog, both).total_flow_lpm == pytest.approx(split)

    def test_room_order_independent(self, catalog):
        reversed_catalog = RoomCatalog(reversed(list(catalog)))
        selection = _sel(operating={"oxygen": 10}, ward={"oxygen": 3})
        assert (
            aggregate_demand(GasKey.OXYGEN, catalog, selection).total_daily_liters
            == aggregate_demand(GasKey.OXYGEN, reversed_catalog, selection).total_daily_liters
        )

    def test_empty_selection(self, catalog):
        demands = aggregate_all(catalog, {})
        assert set(demands) == set(GasKey)
        for demand in demands.values():
            assert demand.total_points == 0
            assert demand.total_flow_lpm == 0.0
        assert demands[GasKey.OXYGEN].total_daily_liters == 0.0


class TestAirSystem:
    def test_with_and_without_agss(self, catalog):
        selection = _sel(operating={"air5": 2, "air8": 1, "agss": 5})
        air = air_system_demand(aggregate_all(catalog, selection), catalog, selection)
        assert air.without_agss_lpm == pytest.approx(84.0 + 245.0)
        assert air.with_agss_lpm == pytest.approx(84.0 + 245.0 + 250.0)
        assert air.agss_m3h == pytest.approx(15.0)
        assert air.total_points == 8
        assert air.rooms_count == 1


class TestManualDemand:
    def test_oxygen_per_day(self):
        demand = manual_demand(GasKey.OXYGEN, 42000, ManualUnit.PER_DAY)
        assert demand.total_daily_liters == 42000
        assert demand.total_points == 0

    def test_oxygen_per_minute(self):
        demand = manual_demand("oxygen", 10, "per_minute")
        assert demand.total_daily_liters == pytest.approx(14400)
        assert demand.total_flow_lpm == pytest.approx(10)

    def test_rate_gas_per_day(self):
        demand = manual_demand(GasKey.VACUUM, 14400, ManualUnit.PER_DAY)
        assert demand.total_daily_liters is None
        assert demand.total_flow_lpm == pytest.approx(10)

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            manual_demand(GasKey.AIR5, -1)

    def test_unknown_unit(self):
        with pytest.raises(ValueError):
            manual_demand(GasKey.AIR5, 1, "per_week")

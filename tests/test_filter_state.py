"""
Unit tests for FilterState transitions and the two-tier predicate.
"""

import dataclasses
from datetime import date, datetime, time

import pytest

from roadwatch import config as cfg
from roadwatch.core.filter_state import DateRange, FilterState
from roadwatch.core.region_presets import RegionPresetResolver


@pytest.fixture
def resolver():
    return RegionPresetResolver()


class TestDefaults:
    """Initial filter state."""

    def test_default_is_full_year_2021(self):
        state = FilterState.default()

        assert state.date_range.start == datetime(2021, 1, 1, 0, 0)
        assert state.date_range.end == datetime.combine(date(2021, 12, 31), time.max)
        assert state.weather == frozenset()
        assert state.regions == frozenset()
        assert state.region_mode == cfg.MANUAL_MODE
        assert state.is_manual

    def test_state_is_immutable(self):
        state = FilterState.default()
        with pytest.raises(dataclasses.FrozenInstanceError):
            state.region_mode = "Region 9"


class TestDateRange:
    """Date range construction and transitions."""

    def test_inverted_range_is_swapped(self):
        dr = DateRange(datetime(2021, 5, 1), datetime(2021, 2, 1))
        assert dr.start == datetime(2021, 2, 1)
        assert dr.end == datetime(2021, 5, 1)

    def test_set_date_range_widens_dates_to_whole_days(self):
        state = FilterState.default().set_date_range(date(2021, 3, 1), date(2021, 3, 3))

        assert state.date_range.start == datetime(2021, 3, 1, 0, 0)
        assert state.date_range.end == datetime.combine(date(2021, 3, 3), time.max)

    def test_set_date_range_swaps_inverted_input(self):
        state = FilterState.default().set_date_range(date(2021, 3, 3), date(2021, 3, 1))

        assert state.date_range.start == datetime(2021, 3, 1, 0, 0)
        assert state.date_range.end == datetime.combine(date(2021, 3, 3), time.max)

    def test_set_date_range_accepts_strings(self):
        state = FilterState.default().set_date_range("2021-02-01", "2021-02-03")

        assert state.date_range.start == datetime(2021, 2, 1)
        assert state.date_range.end.date() == date(2021, 2, 3)
        assert state.date_range.end.time() == time.max

    def test_set_date_range_clamps_to_extent(self):
        extent = (datetime(2021, 3, 5, 10, 0), datetime(2021, 3, 20, 8, 0))
        state = FilterState.default().set_date_range(
            date(2021, 1, 1), date(2021, 12, 31), extent=extent
        )

        assert state.date_range.start == datetime(2021, 3, 5, 0, 0)
        assert state.date_range.end == datetime.combine(date(2021, 3, 20), time.max)

    def test_set_date_range_outside_extent_uses_full_extent(self):
        extent = (datetime(2016, 2, 8, 5, 0), datetime(2016, 11, 30, 22, 0))
        state = FilterState.default().set_date_range(
            date(2021, 1, 1), date(2021, 12, 31), extent=extent
        )

        assert state.date_range.start == datetime(2016, 2, 8, 0, 0)
        assert state.date_range.end == datetime.combine(date(2016, 11, 30), time.max)

    def test_original_state_unchanged(self):
        original = FilterState.default()
        original.set_date_range(date(2021, 3, 1), date(2021, 3, 3))

        assert original.date_range.start == datetime(2021, 1, 1)


class TestPredicate:
    """matches() at the global and detail tiers."""

    def test_date_bounds_are_inclusive(self, make_record):
        state = FilterState.default()

        assert state.matches(make_record(timestamp=datetime(2021, 1, 1, 0, 0)))
        assert state.matches(make_record(timestamp=datetime(2021, 12, 31, 23, 59, 59)))
        assert not state.matches(make_record(timestamp=datetime(2020, 12, 31, 23, 59)))
        assert not state.matches(make_record(timestamp=datetime(2022, 1, 1, 0, 0)))

    def test_empty_weather_set_means_no_restriction(self, make_record):
        state = FilterState.default()
        assert state.matches(make_record(weather_condition="Heavy Snow"))

    def test_weather_restriction(self, make_record):
        state = FilterState.default().set_weather(["Rain", "Fog"])

        assert state.matches(make_record(weather_condition="Rain"))
        assert not state.matches(make_record(weather_condition="Clear"))

    def test_regions_only_apply_at_detail_tier(self, make_record):
        state = FilterState.default().toggle_region("CA")
        tx = make_record(region_code="TX")

        assert state.matches(tx)
        assert not state.matches(tx, narrow_to_regions=True)
        assert state.matches(make_record(region_code="CA"), narrow_to_regions=True)

    def test_empty_region_set_matches_everything_at_detail_tier(self, make_record):
        state = FilterState.default()
        assert state.matches(make_record(region_code="WY"), narrow_to_regions=True)


class TestWeatherTransitions:
    def test_toggle_weather_adds_and_removes(self):
        state = FilterState.default().toggle_weather("Rain")
        assert state.weather == {"Rain"}

        state = state.toggle_weather("Rain")
        assert state.weather == frozenset()

    def test_toggle_weather_strips_whitespace(self):
        state = FilterState.default().toggle_weather("  Rain ")
        assert state.weather == {"Rain"}

    def test_set_weather_replaces(self):
        state = FilterState.default().set_weather(["Rain"]).set_weather([" Snow"])
        assert state.weather == {"Snow"}


class TestRegionTransitions:
    """Direct region clicks versus preset selection."""

    def test_manual_toggle_adds_and_removes(self):
        state = FilterState.default().toggle_region("CA").toggle_region("TX")
        assert state.regions == {"CA", "TX"}

        state = state.toggle_region("CA")
        assert state.regions == {"TX"}
        assert state.region_mode == cfg.MANUAL_MODE

    def test_select_preset_replaces_selection(self, resolver):
        state = FilterState.default().toggle_region("TX").select_preset("Region 9", resolver)

        assert state.region_mode == "Region 9"
        assert state.regions == {"AZ", "CA", "HI", "NV"}
        assert not state.is_manual

    def test_click_in_preset_mode_breaks_out_to_single_region(self, resolver):
        state = FilterState.default().select_preset("Region 9", resolver)
        state = state.toggle_region("TX")

        assert state.region_mode == cfg.MANUAL_MODE
        assert state.regions == {"TX"}

    def test_click_on_preset_member_keeps_only_that_region(self, resolver):
        state = FilterState.default().select_preset("Region 9", resolver)
        state = state.toggle_region("CA")

        assert state.region_mode == cfg.MANUAL_MODE
        assert state.regions == {"CA"}

    def test_manual_after_preset_keeps_regions(self, resolver):
        state = FilterState.default().select_preset("Region 1", resolver)
        state = state.select_preset(cfg.MANUAL_MODE, resolver)

        assert state.region_mode == cfg.MANUAL_MODE
        assert state.regions == {"CT", "ME", "MA", "NH", "RI", "VT"}

    def test_unknown_preset_leaves_state_unchanged(self, resolver):
        state = FilterState.default().toggle_region("CA")
        assert state.select_preset("Region 99", resolver) is state

    def test_set_regions_switches_to_manual(self, resolver):
        state = FilterState.default().select_preset("Region 2", resolver)
        state = state.set_regions(["CA", "OR"])

        assert state.region_mode == cfg.MANUAL_MODE
        assert state.regions == {"CA", "OR"}

    def test_clear_regions(self, resolver):
        state = FilterState.default().select_preset("Region 2", resolver).clear_regions()

        assert state.regions == frozenset()
        assert state.is_manual

    def test_describe_mentions_mode(self):
        text = FilterState.default().toggle_region("CA").describe()
        assert "2021-01-01..2021-12-31" in text
        assert "mode=Manual" in text

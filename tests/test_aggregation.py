"""
Unit tests for per-group aggregation and the detail-view reductions.
"""

from datetime import datetime

import pytest

from roadwatch import config as cfg
from roadwatch.core.aggregation import (
    aggregate,
    group_by_region,
    mean_or_none,
    monthly_counts,
    severity_by_weather,
    total_count,
    weather_options,
)


class TestAggregate:
    """aggregate() grouped by region."""

    def test_counts_and_average_severity(self, make_record):
        records = [
            make_record(severity=2, region_code="CA"),
            make_record(severity=4, region_code="CA"),
            make_record(severity=1, region_code="TX"),
        ]
        stats = aggregate(records)

        assert stats["CA"].count == 2
        assert stats["CA"].average_severity == pytest.approx(3.0)
        assert stats["TX"].count == 1
        assert stats["TX"].average_severity == pytest.approx(1.0)
        assert total_count(stats) == 3

    def test_night_and_day_split(self, make_record):
        records = [
            make_record(timestamp=datetime(2021, 5, 1, 21, 0)),
            make_record(timestamp=datetime(2021, 5, 1, 3, 0)),
            make_record(timestamp=datetime(2021, 5, 1, 6, 0)),
            make_record(timestamp=datetime(2021, 5, 1, 19, 59)),
            make_record(timestamp=datetime(2021, 5, 1, 20, 0)),
        ]
        stat = aggregate(records)["CA"]

        assert stat.night_count == 3
        assert stat.day_count == 2
        assert stat.night_count + stat.day_count == stat.count

    def test_severity_histogram(self, make_record):
        records = [make_record(severity=s) for s in (1, 2, 2, 4)]
        stat = aggregate(records)["CA"]

        assert stat.severity_histogram == {1: 1, 2: 2, 3: 0, 4: 1}

    def test_poor_weather_pct(self, make_record):
        records = [
            make_record(weather_condition="Light Rain"),
            make_record(weather_condition="Fair"),
            make_record(weather_condition="Heavy Snow"),
            make_record(weather_condition="Partly Cloudy"),
        ]
        assert aggregate(records)["CA"].poor_weather_pct == pytest.approx(50.0)

    def test_averages_are_none_without_values(self, make_record):
        stat = aggregate([make_record(), make_record()])["CA"]

        assert stat.average_temperature is None
        assert stat.average_humidity is None

    def test_averages_skip_missing_values(self, make_record):
        records = [
            make_record(temperature=50.0, humidity=None),
            make_record(temperature=None, humidity=80.0),
            make_record(temperature=70.0, humidity=None),
        ]
        stat = aggregate(records)["CA"]

        assert stat.average_temperature == pytest.approx(60.0)
        assert stat.average_humidity == pytest.approx(80.0)

    def test_unknown_region_codes_are_bucketed(self, make_record):
        records = [
            make_record(region_code="ZZ"),
            make_record(region_code=cfg.UNKNOWN_GROUP),
            make_record(region_code="CA"),
        ]
        stats = aggregate(records)

        assert stats[cfg.UNKNOWN_GROUP].count == 2
        assert "ZZ" not in stats

    def test_empty_input(self):
        assert aggregate([]) == {}

    def test_custom_group_fn(self, make_record):
        records = [make_record(severity=s) for s in (1, 1, 3)]
        stats = aggregate(records, group_fn=lambda r: r.severity)

        assert stats[1].count == 2
        assert stats[3].count == 1

    def test_metric_value_lookup(self, make_record):
        stat = aggregate([make_record(timestamp=datetime(2021, 1, 1, 23, 0))])["CA"]

        assert stat.metric_value("night_count") == 1
        with pytest.raises(ValueError):
            stat.metric_value("temperature")


class TestHelpers:
    def test_group_by_region(self, make_record):
        assert group_by_region(make_record(region_code="NV")) == "NV"
        assert group_by_region(make_record(region_code="XX")) == cfg.UNKNOWN_GROUP

    def test_mean_or_none(self):
        assert mean_or_none([]) is None
        assert mean_or_none([None, None]) is None
        assert mean_or_none([1, None, 3]) == pytest.approx(2.0)


class TestSeverityByWeather:
    """Stacked severity bar rows."""

    def test_rows_sorted_by_total(self, make_record):
        records = [
            make_record(weather_condition="Rain", severity=3),
            make_record(weather_condition="Rain", severity=2),
            make_record(weather_condition="Clear", severity=2),
            make_record(weather_condition="Fog", severity=4),
        ]
        rows = severity_by_weather(records)

        assert [r.category for r in rows] == ["Rain", "Clear", "Fog"]
        assert rows[0].counts == {1: 0, 2: 1, 3: 1, 4: 0}
        assert rows[0].total == 2

    def test_top_n(self, make_record):
        records = [make_record(weather_condition=f"Cond {i}") for i in range(15)]
        rows = severity_by_weather(records, top_n=10)

        assert len(rows) == 10
        assert rows[0].category == "Cond 0"


class TestMonthlyCounts:
    def test_counts_per_month_in_order(self, make_record):
        records = [
            make_record(timestamp=datetime(2021, 3, 31, 23, 0)),
            make_record(timestamp=datetime(2021, 1, 2)),
            make_record(timestamp=datetime(2021, 3, 1)),
        ]
        monthly = monthly_counts(records)

        assert [m.month for m in monthly] == [datetime(2021, 1, 1), datetime(2021, 3, 1)]
        assert [m.count for m in monthly] == [1, 2]

    def test_empty(self):
        assert monthly_counts([]) == []


class TestWeatherOptions:
    def test_most_frequent_first_with_counts(self, make_record):
        records = [make_record(weather_condition="Rain") for _ in range(3)]
        records.append(make_record(weather_condition="Clear"))

        assert weather_options(records) == [("Rain", "Rain (3)"), ("Clear", "Clear (1)")]

    def test_limit(self, make_record):
        records = [make_record(weather_condition=f"W{i}") for i in range(30)]
        assert len(weather_options(records, limit=25)) == 25

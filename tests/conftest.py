"""
Shared fixtures for the roadwatch test suite.
"""

from datetime import datetime
from itertools import count

import pytest

from roadwatch import config as cfg
from roadwatch.models.incident import AggregatedStat, Record


@pytest.fixture
def make_record():
    """Factory for Records with sensible defaults."""
    ids = count(1)

    def _make(
        timestamp=datetime(2021, 6, 15, 12, 0),
        severity=2,
        region_code="CA",
        weather_condition="Clear",
        temperature=None,
        humidity=None,
    ):
        return Record(
            id=f"A-{next(ids)}",
            timestamp=timestamp,
            severity=severity,
            region_code=region_code,
            weather_condition=weather_condition,
            temperature=temperature,
            humidity=humidity,
        )

    return _make


@pytest.fixture
def make_stat():
    """Factory for AggregatedStat with only the count filled in."""

    def _make(n):
        return AggregatedStat(
            count=n,
            night_count=0,
            day_count=n,
            severity_histogram={level: 0 for level in cfg.SEVERITY_LEVELS},
            average_severity=None,
            poor_weather_pct=0.0,
        )

    return _make


@pytest.fixture
def sample_records(make_record):
    """Small working set spread over three states and one out-of-range year."""
    return [
        make_record(datetime(2021, 1, 5, 8, 30), 2, "CA", "Clear", 55.0, 40.0),
        make_record(datetime(2021, 1, 5, 22, 10), 4, "CA", "Rain", 48.0, 90.0),
        make_record(datetime(2021, 2, 10, 14, 0), 3, "CA", "Fog", None, None),
        make_record(datetime(2021, 1, 5, 9, 0), 1, "TX", "Clear", 70.0, 30.0),
        make_record(datetime(2021, 3, 1, 2, 45), 2, "TX", "Rain", 62.0, 85.0),
        make_record(datetime(2021, 3, 2, 17, 20), 3, "NY", "Snow", 20.0, 75.0),
        make_record(datetime(2020, 12, 31, 23, 0), 2, "NY", "Clear", 30.0, 50.0),
    ]

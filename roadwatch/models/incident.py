"""
Incident data models and type definitions.

This module provides the immutable data structures that flow through the
filter, aggregation and trend pipeline. Everything here is created once and
replaced wholesale, never patched in place.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Tuple

from roadwatch import config as cfg
from roadwatch.utils.weather_utils import is_night


@dataclass(frozen=True)
class Record:
    """A single accident record from the working set."""

    id: str
    timestamp: datetime
    severity: int
    region_code: str
    weather_condition: str = cfg.UNKNOWN_GROUP
    temperature: Optional[float] = None
    humidity: Optional[float] = None

    def __post_init__(self):
        if self.severity not in cfg.SEVERITY_LEVELS:
            raise ValueError(
                f"Record {self.id}: severity must be one of {cfg.SEVERITY_LEVELS}, got {self.severity!r}"
            )

    @property
    def is_night(self) -> bool:
        return is_night(self.timestamp)


@dataclass(frozen=True)
class AggregatedStat:
    """Per-group statistics for the map view."""

    count: int
    night_count: int
    day_count: int
    severity_histogram: Dict[int, int]
    average_severity: Optional[float]
    poor_weather_pct: float
    average_temperature: Optional[float] = None
    average_humidity: Optional[float] = None

    def metric_value(self, key: str) -> Optional[float]:
        """Look up a map metric (see config.MAP_METRICS) by key."""
        if key not in cfg.MAP_METRICS:
            raise ValueError(f"Unknown map metric: {key}")
        return getattr(self, key)


@dataclass(frozen=True)
class TrendPoint:
    """One day x group bucket of the trend view."""

    date: datetime
    group: str
    count: int
    severity_avg: Optional[float]
    temp_avg: Optional[float]
    humidity_avg: Optional[float]
    poor_weather_pct: float


@dataclass(frozen=True)
class Series:
    """Time-ordered trend points for one group."""

    group: str
    points: Tuple[TrendPoint, ...]

    @property
    def total_count(self) -> int:
        return sum(p.count for p in self.points)

    def __len__(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class SeverityBreakdown:
    """Severity counts for one weather condition (stacked bar row)."""

    category: str
    counts: Dict[int, int]
    total: int


@dataclass(frozen=True)
class MonthlyCount:
    month: datetime
    count: int


@dataclass(frozen=True)
class SummaryEntry:
    group: str
    count: int
    share: float


@dataclass(frozen=True)
class Summary:
    """Label-panel summary of the current selection."""

    title: str
    subtitle: str
    subtotal: int
    baseline_total: int
    share_of_baseline: float
    entries: Tuple[SummaryEntry, ...] = field(default_factory=tuple)
    more_count: int = 0
    display_names: str = ""
    is_national: bool = True

    @property
    def truncated(self) -> bool:
        return self.more_count > 0

    @property
    def more_label(self) -> str:
        return f"+{self.more_count} more" if self.more_count else ""

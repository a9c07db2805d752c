"""
Filter state and predicate composition.

FilterState is an immutable value: every user action (date edit, weather tag,
region click, preset pick) goes through a transition method that returns a new
state. The predicate is applied at two tiers:

- global scope (date + weather): drives the map, so every region is colored
  under the same date/weather scope
- detail scope (global + regions): drives the bar, line and trend views

Usage:
    state = FilterState.default()
    state = state.toggle_region("CA").toggle_region("TX")
    detail = [r for r in records if state.matches(r, narrow_to_regions=True)]
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from typing import FrozenSet, Iterable, Optional, Tuple, Union

from roadwatch import config as cfg
from roadwatch.core.region_presets import RegionPresetResolver
from roadwatch.models.incident import Record
from roadwatch.utils.date_util import end_of_day, start_of_day
from roadwatch.utils.log_util import app_logger

logger = app_logger(__name__)

DateInput = Union[date, datetime, str]


@dataclass(frozen=True)
class DateRange:
    """Inclusive [start, end] range; inverted bounds are swapped on creation."""

    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start > self.end:
            logger.debug(f"Swapping inverted date range {self.start} > {self.end}")
            start, end = self.end, self.start
            object.__setattr__(self, "start", start)
            object.__setattr__(self, "end", end)

    def contains(self, timestamp: datetime) -> bool:
        return self.start <= timestamp <= self.end


def _floor_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min)


def _ceil_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.max)


@dataclass(frozen=True)
class FilterState:
    """Current combination of date, weather and region filters."""

    date_range: DateRange
    weather: FrozenSet[str] = field(default_factory=frozenset)
    regions: FrozenSet[str] = field(default_factory=frozenset)
    region_mode: str = cfg.MANUAL_MODE

    @classmethod
    def default(cls) -> "FilterState":
        """Full year 2021, no weather or region restriction, Manual mode."""
        return cls(
            date_range=DateRange(
                start_of_day(cfg.DEFAULT_START_DATE), end_of_day(cfg.DEFAULT_END_DATE)
            )
        )

    @property
    def is_manual(self) -> bool:
        return self.region_mode == cfg.MANUAL_MODE

    # Predicate ########################

    def matches(self, record: Record, narrow_to_regions: bool = False) -> bool:
        """
        Evaluate the filter against one record.

        :param record: Record to test
        :param narrow_to_regions: Also require the record's region to be selected
            (detail views); the map uses the global scope only
        :return: True if the record passes
        """
        if not self.date_range.contains(record.timestamp):
            return False
        if self.weather and record.weather_condition not in self.weather:
            return False
        if narrow_to_regions and self.regions and record.region_code not in self.regions:
            return False
        return True

    # Transitions ########################

    def set_date_range(
        self,
        start: DateInput,
        end: DateInput,
        extent: Optional[Tuple[datetime, datetime]] = None,
    ) -> "FilterState":
        """
        Replace the date range.

        Plain dates are widened to whole days. When the dataset extent is given
        the bounds are clamped into it, and a range that misses the extent
        entirely becomes the whole extent. Inverted bounds are swapped.

        :param start: Range start (date, datetime or string)
        :param end: Range end (date, datetime or string)
        :param extent: Optional (min, max) timestamps of the working set
        :return: New FilterState
        """
        if start_of_day(start) > start_of_day(end):
            start, end = end, start

        lo = start_of_day(start)
        hi = end_of_day(end)

        if extent is not None:
            lo = max(lo, _floor_day(extent[0]))
            hi = min(hi, _ceil_day(extent[1]))
            if lo > hi:
                logger.debug(f"Date range outside data extent {extent}; using the full extent")
                lo, hi = _floor_day(extent[0]), _ceil_day(extent[1])

        return replace(self, date_range=DateRange(lo, hi))

    def set_weather(self, conditions: Iterable[str]) -> "FilterState":
        return replace(self, weather=frozenset(c.strip() for c in conditions))

    def toggle_weather(self, condition: str) -> "FilterState":
        condition = condition.strip()
        if condition in self.weather:
            return replace(self, weather=self.weather - {condition})
        return replace(self, weather=self.weather | {condition})

    def toggle_region(self, region_code: str) -> "FilterState":
        """
        Apply a direct region click.

        In preset mode the click breaks out to Manual and the clicked region
        becomes the only selection. In Manual mode the region is toggled.
        """
        if not self.is_manual:
            return replace(
                self, region_mode=cfg.MANUAL_MODE, regions=frozenset([region_code])
            )
        if region_code in self.regions:
            return replace(self, regions=self.regions - {region_code})
        return replace(self, regions=self.regions | {region_code})

    def select_preset(
        self, preset_name: str, resolver: RegionPresetResolver
    ) -> "FilterState":
        """
        Switch region mode to a preset (or back to Manual).

        Manual keeps whatever regions are selected. A known preset replaces the
        selection with its table entry. Unknown names leave the state as is.
        """
        if preset_name == cfg.MANUAL_MODE:
            return replace(self, region_mode=cfg.MANUAL_MODE)

        if not resolver.is_preset(preset_name):
            logger.warning(f"Ignoring selection of unknown preset {preset_name!r}")
            return self

        return replace(
            self, region_mode=preset_name, regions=resolver.resolve(preset_name)
        )

    def set_regions(self, region_codes: Iterable[str]) -> "FilterState":
        """Replace the selection outright (e.g. from a multiselect); mode becomes Manual."""
        return replace(self, region_mode=cfg.MANUAL_MODE, regions=frozenset(region_codes))

    def clear_regions(self) -> "FilterState":
        return replace(self, region_mode=cfg.MANUAL_MODE, regions=frozenset())

    def describe(self) -> str:
        return (
            f"{self.date_range.start:%Y-%m-%d}..{self.date_range.end:%Y-%m-%d} "
            f"weather={sorted(self.weather)} regions={len(self.regions)} mode={self.region_mode}"
        )

"""
Dashboard Manager

Orchestrates the working set, the current FilterState and the recompute pass
that keeps the map, severity bar, monthly line and trend views consistent.

Key concepts:
- The working set is a read-only tuple of Records loaded once
- Every filter-change event commits a new FilterState and runs one synchronous
  recompute pass that produces a frozen DashboardSnapshot
- Map stats use the global scope (date + weather); bar, line and trend views
  use the detail scope (global + selected regions)
- Snapshots carry a generation number; commit() discards any snapshot older
  than the latest pass (last write wins)
- Renderers subscribe through on_filter_state_changed / on_aggregates_updated
  / on_series_updated instead of being called directly

Usage:
    manager = DashboardManager(load_records(path).records)
    manager.on_series_updated(lambda snap: redraw(snap.series))
    manager.toggle_region("CA")
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Dict, Hashable, List, Optional, Sequence, Tuple

from roadwatch import config as cfg
from roadwatch.core.aggregation import (
    aggregate,
    monthly_counts,
    severity_by_weather,
    total_count,
    weather_options,
)
from roadwatch.core.filter_state import DateInput, FilterState
from roadwatch.core.metrics import DEFAULT_METRIC, get_metric, value_domain
from roadwatch.core.region_presets import RegionPresetResolver
from roadwatch.core.selection_summary import summarize
from roadwatch.core.trend_series import TrendSeriesBuilder, get_grouping
from roadwatch.models.incident import (
    AggregatedStat,
    MonthlyCount,
    Record,
    Series,
    SeverityBreakdown,
    Summary,
)
from roadwatch.utils.log_util import app_logger

logger = app_logger(__name__)

Listener = Callable[["DashboardSnapshot"], None]


@dataclass(frozen=True)
class DashboardSnapshot:
    """Everything the renderers need for one filter state."""

    generation: int
    state: FilterState
    metric_key: str
    grouping_key: str
    map_metric: str
    region_stats: Dict[Hashable, AggregatedStat]
    baseline_total: int
    summary: Summary
    severity_breakdown: Tuple[SeverityBreakdown, ...]
    monthly: Tuple[MonthlyCount, ...]
    series: Tuple[Series, ...]
    value_domain: Tuple[float, float]
    detail_count: int


class DashboardManager:
    """
    Owns the current filter state and publishes recompute results.

    All event methods are synchronous: they commit the new state, run one
    recompute pass and notify subscribers before returning the snapshot.
    """

    def __init__(
        self,
        records: Sequence[Record],
        resolver: Optional[RegionPresetResolver] = None,
        state: Optional[FilterState] = None,
        metric_key: str = DEFAULT_METRIC,
        grouping_key: str = "all",
        map_metric: str = "count",
        top_n: int = cfg.TREND_TOP_N,
    ):
        get_metric(metric_key)
        get_grouping(grouping_key)
        if map_metric not in cfg.MAP_METRICS:
            raise ValueError(f"Unknown map metric: {map_metric}")

        self.records: Tuple[Record, ...] = tuple(records)
        self.resolver = resolver or RegionPresetResolver()
        self.state = state or FilterState.default()
        self.metric_key = metric_key
        self.grouping_key = grouping_key
        self.map_metric = map_metric
        self.trend_builder = TrendSeriesBuilder(
            metric_key=metric_key, group_fn=get_grouping(grouping_key), top_n=top_n
        )

        self.snapshot: Optional[DashboardSnapshot] = None
        self._generation = 0
        self._state_listeners: List[Callable[[FilterState], None]] = []
        self._aggregate_listeners: List[Listener] = []
        self._series_listeners: List[Listener] = []

        stamps = [r.timestamp for r in self.records]
        self.date_extent: Optional[Tuple[datetime, datetime]] = (
            (min(stamps), max(stamps)) if stamps else None
        )
        logger.info(f"Dashboard initialized with {len(self.records)} records")

    # Subscriptions ########################

    @staticmethod
    def _subscribe(listeners: list, callback) -> Callable[[], None]:
        listeners.append(callback)

        def unsubscribe():
            if callback in listeners:
                listeners.remove(callback)

        return unsubscribe

    def on_filter_state_changed(self, callback: Callable[[FilterState], None]) -> Callable[[], None]:
        return self._subscribe(self._state_listeners, callback)

    def on_aggregates_updated(self, callback: Listener) -> Callable[[], None]:
        return self._subscribe(self._aggregate_listeners, callback)

    def on_series_updated(self, callback: Listener) -> Callable[[], None]:
        return self._subscribe(self._series_listeners, callback)

    # Events ########################

    def change_date_range(self, start: DateInput, end: DateInput) -> DashboardSnapshot:
        return self._apply(self.state.set_date_range(start, end, extent=self.date_extent))

    def toggle_weather(self, condition: str) -> DashboardSnapshot:
        return self._apply(self.state.toggle_weather(condition))

    def set_weather(self, conditions) -> DashboardSnapshot:
        return self._apply(self.state.set_weather(conditions))

    def toggle_region(self, region_code: str) -> DashboardSnapshot:
        """Map click callback: break out of a preset, then toggle."""
        return self._apply(self.state.toggle_region(region_code))

    def select_preset(self, preset_name: str) -> DashboardSnapshot:
        return self._apply(self.state.select_preset(preset_name, self.resolver))

    def set_regions(self, region_codes) -> DashboardSnapshot:
        return self._apply(self.state.set_regions(region_codes))

    def clear_regions(self) -> DashboardSnapshot:
        return self._apply(self.state.clear_regions())

    def change_metric(self, metric_key: str) -> DashboardSnapshot:
        get_metric(metric_key)
        self.metric_key = metric_key
        return self.recompute()

    def change_grouping(self, grouping_key: str) -> DashboardSnapshot:
        get_grouping(grouping_key)
        self.grouping_key = grouping_key
        return self.recompute()

    def change_map_metric(self, map_metric: str) -> DashboardSnapshot:
        """Map coloring only; stats are unchanged so no recompute is needed."""
        if map_metric not in cfg.MAP_METRICS:
            raise ValueError(f"Unknown map metric: {map_metric}")
        self.map_metric = map_metric
        if self.snapshot is None:
            return self.recompute()
        self.snapshot = replace(self.snapshot, map_metric=map_metric)
        self._notify(self._aggregate_listeners, self.snapshot)
        return self.snapshot

    def weather_options(self, limit: int = cfg.WEATHER_OPTION_LIMIT):
        return weather_options(self.records, limit=limit)

    # Pipeline ########################

    def _apply(self, new_state: FilterState) -> DashboardSnapshot:
        self.state = new_state
        logger.debug(f"Filter state: {new_state.describe()}")
        for callback in list(self._state_listeners):
            callback(new_state)
        return self.recompute()

    def _trend_filter_set(self, state: FilterState):
        if self.grouping_key == "region" and state.regions:
            return state.regions
        return None

    def compute(self, state: FilterState, generation: int) -> DashboardSnapshot:
        """Run the aggregation pass for a given state without committing it."""
        global_records = [r for r in self.records if state.matches(r)]
        region_stats = aggregate(global_records)
        baseline_total = total_count(region_stats)

        detail_records = [r for r in global_records if state.matches(r, narrow_to_regions=True)]

        series = self.trend_builder.set_data(
            detail_records,
            metric=self.metric_key,
            group_fn=get_grouping(self.grouping_key),
            filter_set=self._trend_filter_set(state),
        )

        return DashboardSnapshot(
            generation=generation,
            state=state,
            metric_key=self.metric_key,
            grouping_key=self.grouping_key,
            map_metric=self.map_metric,
            region_stats=region_stats,
            baseline_total=baseline_total,
            summary=summarize(
                region_stats, state.regions, baseline_total, region_mode=state.region_mode
            ),
            severity_breakdown=tuple(severity_by_weather(detail_records)),
            monthly=tuple(monthly_counts(detail_records)),
            series=tuple(series),
            value_domain=value_domain(series, self.metric_key),
            detail_count=len(detail_records),
        )

    def begin_pass(self) -> int:
        """Stamp a new recompute pass; older in-flight passes become stale."""
        self._generation += 1
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def commit(self, snapshot: DashboardSnapshot) -> bool:
        """
        Publish a snapshot unless a newer pass has started since it was computed.

        :return: True if the snapshot was published
        """
        if not self.is_current(snapshot.generation):
            logger.debug(
                f"Discarding stale snapshot {snapshot.generation} (current {self._generation})"
            )
            return False

        self.snapshot = snapshot
        self._notify(self._aggregate_listeners, snapshot)
        self._notify(self._series_listeners, snapshot)
        return True

    def recompute(self) -> DashboardSnapshot:
        """Synchronous end-to-end pass for the current state."""
        generation = self.begin_pass()
        snapshot = self.compute(self.state, generation)
        self.commit(snapshot)
        logger.debug(
            f"Pass {generation}: {snapshot.baseline_total} global, "
            f"{snapshot.detail_count} detail, {len(snapshot.series)} series"
        )
        return snapshot

    @staticmethod
    def _notify(listeners: list, snapshot: DashboardSnapshot) -> None:
        for callback in list(listeners):
            callback(snapshot)

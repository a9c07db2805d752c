"""
trend_series.py

Daily trend series for the zoomable trend chart.

Records are bucketed by (day, group), each bucket is reduced to a TrendPoint
and the points are split into one Series per group. When no explicit group
filter is active and there are more than TREND_TOP_N groups, only the
highest-volume groups are kept (total count descending, group key ascending
on ties). Everything is rebuilt from scratch on every change of data,
grouping, metric or filter set.

Usage:
    builder = TrendSeriesBuilder(metric_key="count", group_fn=GROUPINGS["region"])
    series = builder.set_data(detail_records)
"""

from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

import pandas as pd

from roadwatch import config as cfg
from roadwatch.core.aggregation import group_by_region
from roadwatch.core.metrics import DEFAULT_METRIC, MetricSpec, get_metric
from roadwatch.models.incident import Record, Series, TrendPoint
from roadwatch.utils.date_util import to_day
from roadwatch.utils.log_util import app_logger
from roadwatch.utils.weather_utils import is_poor_weather

logger = app_logger(__name__)

TrendGroupFn = Callable[[Record], Optional[str]]

GROUPINGS: Dict[str, TrendGroupFn] = {
    "all": lambda r: cfg.ALL_DATA_GROUP,
    "region": group_by_region,
    "weather": lambda r: r.weather_condition,
    "severity": lambda r: f"Severity {r.severity}",
    "day_night": lambda r: "Night" if r.is_night else "Day",
}

GROUPING_LABELS = {
    "all": "All Data",
    "region": "State",
    "weather": "Weather Condition",
    "severity": "Severity",
    "day_night": "Day / Night",
}


def get_grouping(key: str) -> TrendGroupFn:
    """
    Resolve a grouping key to its group function.

    :raises ValueError: for unrecognized keys
    """
    try:
        return GROUPINGS[key]
    except KeyError:
        raise ValueError(
            f"Unknown grouping {key!r}; expected one of {sorted(GROUPINGS)}"
        ) from None


def _none_if_nan(value) -> Optional[float]:
    return None if pd.isna(value) else float(value)


def _prepare_frame(
    records: Iterable[Record], group_fn: TrendGroupFn, filter_set: Optional[Set[str]]
) -> pd.DataFrame:
    """Flatten records into a frame, dropping undated, ungrouped and filtered-out rows."""
    rows = []
    for record in records:
        day = to_day(record.timestamp)
        if day is None:
            continue

        group = group_fn(record)
        if group is None or group == "":
            continue
        group = str(group)
        if filter_set and group not in filter_set:
            continue

        rows.append(
            {
                "date": day,
                "group": group,
                "severity": record.severity,
                "temp": record.temperature,
                "humidity": record.humidity,
                "poor": 1 if is_poor_weather(record.weather_condition) else 0,
            }
        )

    df = pd.DataFrame(rows, columns=["date", "group", "severity", "temp", "humidity", "poor"])
    for col in ("severity", "temp", "humidity"):
        df[col] = pd.to_numeric(df[col], errors="coerce")
    return df


def _reduce_buckets(df: pd.DataFrame) -> pd.DataFrame:
    """One row per (date, group) with the TrendPoint statistics."""
    return (
        df.groupby(["date", "group"], sort=False)
        .agg(
            record_count=("poor", "size"),
            severity_avg=("severity", "mean"),
            temp_avg=("temp", "mean"),
            humidity_avg=("humidity", "mean"),
            poor_weather_pct=("poor", "mean"),
        )
        .reset_index()
    )


def rank_groups(totals: Dict[str, int]) -> List[str]:
    """Group keys ordered by total count descending, key ascending on ties."""
    return [g for g, _ in sorted(totals.items(), key=lambda item: (-item[1], item[0]))]


def build_series(
    records: Iterable[Record],
    group_fn: TrendGroupFn,
    metric_key: str = DEFAULT_METRIC,
    filter_set: Optional[Set[str]] = None,
    top_n: int = cfg.TREND_TOP_N,
) -> List[Series]:
    """
    Reaggregate records into per-group daily series.

    :param records: Detail-scope records
    :param group_fn: Record -> group key; None/empty results are dropped
    :param metric_key: Plotted metric (validated, does not change the points)
    :param filter_set: Optional set of group keys to keep; non-empty disables top-N
    :param top_n: Maximum number of groups kept when no filter set is active
    :return: Series ordered by total count descending, points date ascending
    """
    get_metric(metric_key)

    df = _prepare_frame(records, group_fn, filter_set)
    if df.empty:
        logger.debug("No trend data after filtering")
        return []

    buckets = _reduce_buckets(df)
    buckets["poor_weather_pct"] = buckets["poor_weather_pct"] * 100.0

    totals = buckets.groupby("group")["record_count"].sum().to_dict()
    ranked = rank_groups({str(k): int(v) for k, v in totals.items()})

    if len(ranked) > top_n and not filter_set:
        logger.debug(f"Collapsing {len(ranked)} groups to top {top_n}")
        ranked = ranked[:top_n]

    buckets = buckets[buckets["group"].isin(ranked)].sort_values(["group", "date"])

    points_by_group: Dict[str, List[TrendPoint]] = {g: [] for g in ranked}
    for row in buckets.itertuples(index=False):
        points_by_group[row.group].append(
            TrendPoint(
                date=pd.Timestamp(row.date).to_pydatetime(),
                group=row.group,
                count=int(row.record_count),
                severity_avg=_none_if_nan(row.severity_avg),
                temp_avg=_none_if_nan(row.temp_avg),
                humidity_avg=_none_if_nan(row.humidity_avg),
                poor_weather_pct=float(row.poor_weather_pct),
            )
        )

    series = [Series(group=g, points=tuple(points_by_group[g])) for g in ranked]
    logger.debug(f"Built {len(series)} trend series from {len(df)} records")
    return series


class TrendSeriesBuilder:
    """
    Holds the current trend configuration and the series built from it.

    Changing the metric, grouping or filter set always triggers a full rebuild
    through set_data(); existing series are never patched.
    """

    def __init__(
        self,
        metric_key: str = DEFAULT_METRIC,
        group_fn: Optional[TrendGroupFn] = None,
        filter_set: Optional[Set[str]] = None,
        top_n: int = cfg.TREND_TOP_N,
    ):
        get_metric(metric_key)
        self.metric_key = metric_key
        self.group_fn = group_fn or GROUPINGS["all"]
        self.filter_set = frozenset(filter_set) if filter_set else None
        self.top_n = top_n
        self.series: List[Series] = []

    @property
    def metric(self) -> MetricSpec:
        return get_metric(self.metric_key)

    def build(
        self,
        records: Iterable[Record],
        group_fn: Optional[TrendGroupFn] = None,
        metric_key: Optional[str] = None,
        filter_set: Optional[Set[str]] = None,
    ) -> List[Series]:
        """Build series with explicit arguments, falling back to the current config."""
        return build_series(
            records,
            group_fn or self.group_fn,
            metric_key or self.metric_key,
            filter_set if filter_set is not None else self.filter_set,
            self.top_n,
        )

    def set_data(
        self,
        records: Iterable[Record],
        metric: Optional[str] = None,
        group_fn: Optional[TrendGroupFn] = None,
        filter_set: Optional[Set[str]] = None,
    ) -> List[Series]:
        """
        Replace the configuration and rebuild every series.

        The filter set is replaced on every call; omitting it clears it.
        """
        if metric:
            get_metric(metric)
            self.metric_key = metric
        if group_fn:
            self.group_fn = group_fn
        self.filter_set = frozenset(filter_set) if filter_set else None

        self.series = build_series(
            records, self.group_fn, self.metric_key, self.filter_set, self.top_n
        )
        return self.series

    def date_extent(self) -> Optional[Tuple]:
        """(first, last) date across the current series, None when empty."""
        dates = [p.date for s in self.series for p in s.points]
        if not dates:
            return None
        return min(dates), max(dates)

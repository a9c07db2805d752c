"""
aggregation.py

Reduces filtered record collections into the per-group statistics behind the
map, severity bar and monthly line views.

All functions are pure: they take an iterable of Records and return new
structures. Averages only use non-null values and come back as None when a
bucket has no usable value, never 0.
"""

from collections import Counter, defaultdict
from typing import Callable, Dict, Hashable, Iterable, List, Optional, Tuple

from roadwatch import config as cfg
from roadwatch.models.incident import AggregatedStat, MonthlyCount, Record, SeverityBreakdown
from roadwatch.utils.date_util import month_start
from roadwatch.utils.log_util import app_logger
from roadwatch.utils.weather_utils import format_count, is_poor_weather

logger = app_logger(__name__)

GroupFn = Callable[[Record], Hashable]


def group_by_region(record: Record) -> str:
    """Region code, or the Unknown bucket for codes outside the region table."""
    if record.region_code in cfg.KNOWN_REGION_CODES:
        return record.region_code
    return cfg.UNKNOWN_GROUP


def mean_or_none(values: Iterable[Optional[float]]) -> Optional[float]:
    """Mean of the non-null values, None if there are none."""
    valid = [v for v in values if v is not None]
    if not valid:
        return None
    return sum(valid) / len(valid)


def _reduce_bucket(rows: List[Record]) -> AggregatedStat:
    count = len(rows)
    night_count = sum(1 for r in rows if r.is_night)
    histogram = {level: 0 for level in cfg.SEVERITY_LEVELS}
    for r in rows:
        histogram[r.severity] += 1
    poor = sum(1 for r in rows if is_poor_weather(r.weather_condition))

    return AggregatedStat(
        count=count,
        night_count=night_count,
        day_count=count - night_count,
        severity_histogram=histogram,
        average_severity=mean_or_none(r.severity for r in rows),
        poor_weather_pct=100.0 * poor / count if count else 0.0,
        average_temperature=mean_or_none(r.temperature for r in rows),
        average_humidity=mean_or_none(r.humidity for r in rows),
    )


def aggregate(
    records: Iterable[Record], group_fn: GroupFn = group_by_region
) -> Dict[Hashable, AggregatedStat]:
    """
    Bucket records by group_fn and reduce each bucket to an AggregatedStat.

    :param records: Filtered records
    :param group_fn: Record -> group key (region code by default)
    :return: Dict of group key -> AggregatedStat
    """
    buckets: Dict[Hashable, List[Record]] = defaultdict(list)
    for record in records:
        buckets[group_fn(record)].append(record)

    stats = {key: _reduce_bucket(rows) for key, rows in buckets.items()}
    logger.debug(f"Aggregated {sum(s.count for s in stats.values())} records into {len(stats)} groups")
    return stats


def total_count(stats: Dict[Hashable, AggregatedStat]) -> int:
    return sum(s.count for s in stats.values())


def severity_by_weather(
    records: Iterable[Record], top_n: int = cfg.SEVERITY_BAR_TOP_N
) -> List[SeverityBreakdown]:
    """
    Severity counts per weather condition for the stacked bar view.

    :param records: Detail-scope records
    :param top_n: Number of conditions to keep
    :return: Rows sorted by total descending (condition ascending on ties)
    """
    counts: Dict[str, Dict[int, int]] = defaultdict(
        lambda: {level: 0 for level in cfg.SEVERITY_LEVELS}
    )
    for record in records:
        counts[record.weather_condition][record.severity] += 1

    rows = [
        SeverityBreakdown(category=condition, counts=levels, total=sum(levels.values()))
        for condition, levels in counts.items()
    ]
    rows.sort(key=lambda row: (-row.total, row.category))
    return rows[:top_n]


def monthly_counts(records: Iterable[Record]) -> List[MonthlyCount]:
    """Record counts per calendar month, oldest first."""
    counter = Counter(month_start(r.timestamp) for r in records)
    return [MonthlyCount(month=m, count=counter[m]) for m in sorted(counter)]


def weather_options(
    records: Iterable[Record], limit: int = cfg.WEATHER_OPTION_LIMIT
) -> List[Tuple[str, str]]:
    """
    Most frequent weather conditions for the weather picker.

    :param records: Working set records
    :param limit: Maximum number of options
    :return: List of (condition, label) where label reads like "Rain (1,234)"
    """
    counter = Counter(r.weather_condition for r in records)
    ranked = sorted(counter.items(), key=lambda item: (-item[1], item[0]))[:limit]
    return [(condition, f"{condition} ({format_count(n)})") for condition, n in ranked]

#!/usr/bin/env python3
"""
summary_report.py: Text report of accident statistics for a filter selection.

Runs the same filter/aggregation pass the dashboard uses and prints the
selection summary, the busiest states, the severity breakdown by weather and
the trend series that would be plotted.

Usage:
    python -m roadwatch.cli.summary_report data/accidents.csv \
        [--start 2021-01-01] [--end 2021-12-31] [--weather Rain --weather Snow] \
        [--preset "Region 9" | --region CA --region TX] [--metric count] [--group-by region]
"""

import argparse
from typing import List, Optional

from roadwatch import config as cfg
from roadwatch.core.dashboard import DashboardManager, DashboardSnapshot
from roadwatch.core.loader import load_records
from roadwatch.core.metrics import METRICS, get_metric
from roadwatch.core.trend_series import GROUPINGS
from roadwatch.utils.log_util import app_logger
from roadwatch.utils.weather_utils import format_count

logger = app_logger(__name__, log_file="summary_report.log")


def print_summary(snapshot: DashboardSnapshot) -> None:
    summary = snapshot.summary
    print(f"📍 {summary.title.upper()}")
    print("=" * 40)
    print(summary.subtitle)
    if summary.display_names:
        print(summary.display_names)
    print(
        f"{format_count(summary.subtotal)} accidents "
        f"({summary.share_of_baseline:.1f}% of {format_count(summary.baseline_total)} in date/weather scope)"
    )
    for entry in summary.entries:
        print(f"  {entry.group:<10} {format_count(entry.count):>10}  {entry.share:5.1f}%")
    if summary.truncated:
        print(f"  {summary.more_label}")
    print()


def print_top_regions(snapshot: DashboardSnapshot, limit: int = 10) -> None:
    print("🗺️  BUSIEST STATES")
    print("=" * 40)
    ranked = sorted(
        snapshot.region_stats.items(), key=lambda item: (-item[1].count, str(item[0]))
    )
    for code, stat in ranked[:limit]:
        avg = f"{stat.average_severity:.2f}" if stat.average_severity is not None else "—"
        print(
            f"  {code:<8} {format_count(stat.count):>10}  "
            f"night {format_count(stat.night_count):>8}  avg sev {avg}  "
            f"poor wx {stat.poor_weather_pct:5.1f}%"
        )
    print()


def print_severity_breakdown(snapshot: DashboardSnapshot) -> None:
    print("🌧️  SEVERITY BY WEATHER")
    print("=" * 40)
    for row in snapshot.severity_breakdown:
        levels = " ".join(f"S{lvl}:{row.counts[lvl]:>6}" for lvl in cfg.SEVERITY_LEVELS)
        print(f"  {row.category[:22]:<22} {format_count(row.total):>8}  {levels}")
    print()


def print_trends(snapshot: DashboardSnapshot) -> None:
    spec = get_metric(snapshot.metric_key)
    print(f"📈 DAILY TRENDS ({spec.label})")
    print("=" * 40)
    for s in snapshot.series:
        values = [spec.value(p) for p in s.points]
        valid = [v for v in values if v is not None]
        latest = spec.format(valid[-1]) if valid else spec.format(None)
        print(
            f"  {s.group:<20} {len(s.points):>4} days  "
            f"{format_count(s.total_count):>8} accidents  latest {latest}"
        )
    print()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Accident summary for a filter selection")
    parser.add_argument("data_file", help="CSV file with accident records")
    parser.add_argument("--start", help="Range start, YYYY-MM-DD")
    parser.add_argument("--end", help="Range end, YYYY-MM-DD")
    parser.add_argument("--weather", action="append", default=[], help="Weather condition (repeatable)")
    parser.add_argument("--preset", choices=list(cfg.REGION_PRESETS), help="Region preset")
    parser.add_argument("--region", action="append", default=[], help="State code (repeatable)")
    parser.add_argument("--metric", choices=list(METRICS), default="count")
    parser.add_argument("--group-by", choices=list(GROUPINGS), default="region")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    result = load_records(args.data_file)
    if not result.records:
        print("No usable records found.")
        return 1

    manager = DashboardManager(
        result.records, metric_key=args.metric, grouping_key=args.group_by
    )

    if args.start or args.end:
        extent = manager.date_extent
        manager.change_date_range(args.start or extent[0], args.end or extent[1])
    if args.weather:
        manager.set_weather(args.weather)
    if args.preset:
        manager.select_preset(args.preset)
    for code in args.region:
        manager.toggle_region(code.upper())

    snapshot = manager.snapshot or manager.recompute()
    logger.info(f"Report for {snapshot.state.describe()}")

    print_summary(snapshot)
    print_top_regions(snapshot)
    print_severity_breakdown(snapshot)
    print_trends(snapshot)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

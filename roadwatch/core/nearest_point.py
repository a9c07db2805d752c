"""
Nearest-point hit testing for the trend chart tooltip.

For each visible series the point nearest the query date is found by a
center bisect, projected through the current time scale and the metric's
value scale, and its pixel distance to the pointer measured. The closest
candidate across series wins, unless it is farther than the hit distance,
in which case the pointer is over empty space.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Sequence

import numpy as np

from roadwatch import config as cfg
from roadwatch.core.metrics import get_metric
from roadwatch.core.zoom_transform import TimeScale, build_value_scale, project_series
from roadwatch.models.incident import Series, TrendPoint
from roadwatch.utils.date_util import format_display_date


@dataclass(frozen=True)
class LocatedPoint:
    group: str
    point: TrendPoint
    px: float
    py: float
    distance: float


def bisect_center(dates: Sequence[datetime], query: datetime) -> int:
    """
    Index of the date nearest to query in an ascending sequence.

    Equidistant neighbours resolve to the later one.

    :param dates: Ascending dates (must not be empty)
    :param query: Query date
    :return: Index into dates
    """
    origin = dates[0]
    stamps = np.array([(d - origin).total_seconds() for d in dates], dtype=float)
    q = (query - origin).total_seconds()
    i = int(np.searchsorted(stamps, q, side="left"))
    i = min(i, len(stamps) - 1)
    if i > 0 and q - stamps[i - 1] < stamps[i] - q:
        return i - 1
    return i


def locate(
    series: Sequence[Series],
    query_date: datetime,
    query_y: float,
    x_scale: TimeScale,
    y_scale: Callable[[float], float],
    metric_key: str,
    max_distance: float = cfg.HIT_DISTANCE_PX,
    highlighted: Optional[str] = None,
) -> Optional[LocatedPoint]:
    """
    Closest plotted point to the query position across series.

    :param series: Trend series
    :param query_date: Date under the pointer
    :param query_y: Pointer y in pixels
    :param x_scale: Current (zoomed) time scale
    :param y_scale: Metric value scale
    :param metric_key: Plotted metric
    :param max_distance: Hit-test threshold in pixels
    :param highlighted: If set, only this series is searched
    :return: LocatedPoint, or None when nothing is within max_distance
    """
    query_x = x_scale(query_date)

    candidates = series
    if highlighted is not None:
        candidates = [s for s in series if s.group == highlighted]

    best: Optional[LocatedPoint] = None
    for group, projected in project_series(candidates, x_scale, y_scale, metric_key):
        if not projected:
            continue

        hit = projected[bisect_center([pp.point.date for pp in projected], query_date)]
        distance = float(np.hypot(hit.px - query_x, hit.py - query_y))

        if best is None or distance < best.distance:
            best = LocatedPoint(group=group, point=hit.point, px=hit.px, py=hit.py, distance=distance)

    if best is None or best.distance > max_distance:
        return None
    return best


def locate_at(
    series: Sequence[Series],
    px: float,
    py: float,
    x_scale: TimeScale,
    y_scale: Callable[[float], float],
    metric_key: str,
    max_distance: float = cfg.HIT_DISTANCE_PX,
    highlighted: Optional[str] = None,
) -> Optional[LocatedPoint]:
    """Same as locate() for a pointer given in pixels."""
    return locate(
        series,
        x_scale.invert(px),
        py,
        x_scale,
        y_scale,
        metric_key,
        max_distance=max_distance,
        highlighted=highlighted,
    )



def locate_value(
    series: Sequence[Series],
    query_date: datetime,
    query_value: float,
    x_scale: TimeScale,
    metric_key: str,
    height: float,
    max_distance: float = cfg.HIT_DISTANCE_PX,
    highlighted: Optional[str] = None,
) -> Optional[LocatedPoint]:
    """
    Same as locate() for a pointer given in data coordinates, as a chart
    selection reports it. The value is projected through the metric's value
    scale for a plot of the given height.
    """
    y_scale = build_value_scale(series, metric_key, height)
    return locate(
        series,
        query_date,
        y_scale(query_value),
        x_scale,
        y_scale,
        metric_key,
        max_distance=max_distance,
        highlighted=highlighted,
    )

def format_tooltip(located: LocatedPoint, metric_key: str) -> str:
    """Tooltip text: group, date and formatted metric value on separate lines."""
    spec = get_metric(metric_key)
    value = spec.format(spec.value(located.point))
    return f"{located.group}\n{format_display_date(located.point.date)}\n{spec.label}: {value}"

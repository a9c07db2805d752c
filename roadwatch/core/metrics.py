"""
Trend metric definitions.

Each metric key resolves once to a MetricSpec carrying the TrendPoint field
selector, the display formatter, the axis label and the y-domain policy, so
chart and tooltip code never branch on the key themselves.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional, Tuple

from roadwatch.models.incident import Series, TrendPoint

MISSING_VALUE = "—"

# Domain policies
FIXED = "fixed"
ZERO_PADDED_MAX = "zero_padded_max"
PADDED_EXTENT = "padded_extent"


@dataclass(frozen=True)
class MetricSpec:
    key: str
    label: str
    selector: Callable[[TrendPoint], Optional[float]]
    formatter: Callable[[float], str]
    domain_policy: str
    fixed_domain: Optional[Tuple[float, float]] = None

    def value(self, point: TrendPoint) -> Optional[float]:
        return self.selector(point)

    def format(self, value: Optional[float]) -> str:
        if value is None:
            return MISSING_VALUE
        return self.formatter(value)


METRICS: Dict[str, MetricSpec] = {
    "severity_avg": MetricSpec(
        key="severity_avg",
        label="Average Severity (1-4)",
        selector=lambda p: p.severity_avg,
        formatter=lambda v: f"{v:.1f}",
        domain_policy=FIXED,
        fixed_domain=(0.0, 4.0),
    ),
    "count": MetricSpec(
        key="count",
        label="Total Accidents",
        selector=lambda p: p.count,
        formatter=lambda v: f"{int(round(v)):,}",
        domain_policy=ZERO_PADDED_MAX,
    ),
    "poor_weather_pct": MetricSpec(
        key="poor_weather_pct",
        label="Poor Weather %",
        selector=lambda p: p.poor_weather_pct,
        formatter=lambda v: f"{v:.1f}%",
        domain_policy=FIXED,
        fixed_domain=(0.0, 100.0),
    ),
    "temp_avg": MetricSpec(
        key="temp_avg",
        label="Avg Temp (°F)",
        selector=lambda p: p.temp_avg,
        formatter=lambda v: f"{v:.0f}",
        domain_policy=PADDED_EXTENT,
    ),
    "humidity_avg": MetricSpec(
        key="humidity_avg",
        label="Avg Humidity (%)",
        selector=lambda p: p.humidity_avg,
        formatter=lambda v: f"{v:.0f}",
        domain_policy=PADDED_EXTENT,
    ),
}

DEFAULT_METRIC = "severity_avg"


def get_metric(key: str) -> MetricSpec:
    """
    Resolve a metric key.

    :param key: One of METRICS
    :return: MetricSpec
    :raises ValueError: for unrecognized keys
    """
    try:
        return METRICS[key]
    except KeyError:
        raise ValueError(
            f"Unknown metric {key!r}; expected one of {sorted(METRICS)}"
        ) from None


def compute_domain(spec: MetricSpec, values: Iterable[Optional[float]]) -> Tuple[float, float]:
    """
    Y-axis domain for a metric given the plotted values.

    :param spec: Metric definition
    :param values: Metric values (None entries are ignored)
    :return: (low, high) domain
    """
    if spec.domain_policy == FIXED:
        return spec.fixed_domain

    valid = [v for v in values if v is not None]

    if spec.domain_policy == ZERO_PADDED_MAX:
        top = max(valid) if valid else 0
        return (0.0, (top or 10) * 1.1)

    if not valid:
        return (0.0, 1.0)
    return (max(0.0, min(valid) * 0.9), max(valid) * 1.1)


def value_domain(series: Iterable[Series], metric_key: str) -> Tuple[float, float]:
    """Y-domain across all series for the given metric."""
    spec = get_metric(metric_key)
    return compute_domain(spec, (spec.value(p) for s in series for p in s.points))

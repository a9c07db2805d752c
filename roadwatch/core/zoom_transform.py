"""
Zoom and pan for the trend chart's time axis.

The base TimeScale maps the full date extent of the current series onto the
plot width and stays fixed for a render pass. Pointer gestures only replace
the ZoomTransform value (scale factor k and translation x); the visible scale
is derived as base(date) * k + x. Series data is never touched by a gesture,
so a tick costs one re-projection of the already aggregated points.

Key concepts:
- TimeScale / LinearScale: linear maps from data values to pixels, invertible
- ZoomTransform: immutable (k, x) affine value, k clamped to ZOOM_SCALE_EXTENT
- ZoomTransformController: holds the base scale and the current transform,
  turns wheel/drag gestures into new transforms and notifies listeners

Usage:
    base = TimeScale.from_extent(builder.date_extent(), width=640)
    zoom = ZoomTransformController(base)
    zoom.wheel(delta_y=-120, anchor_px=320)
    visible = zoom.current_scale
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional, Tuple

import numpy as np

from roadwatch import config as cfg
from roadwatch.core.metrics import get_metric, value_domain
from roadwatch.models.incident import Series, TrendPoint
from roadwatch.utils.log_util import app_logger

logger = app_logger(__name__)

# Wheel delta multipliers per DOM deltaMode (pixel, line, page)
WHEEL_DELTA_FACTORS = {0: 0.002, 1: 0.05, 2: 1.0}


@dataclass(frozen=True)
class TimeScale:
    """Linear mapping from datetimes to pixel positions."""

    domain: Tuple[datetime, datetime]
    range: Tuple[float, float]

    @classmethod
    def from_extent(
        cls, extent: Tuple[datetime, datetime], width: float, offset: float = 0.0
    ) -> "TimeScale":
        return cls(domain=(extent[0], extent[1]), range=(offset, offset + width))

    @property
    def _span_seconds(self) -> float:
        return (self.domain[1] - self.domain[0]).total_seconds()

    def __call__(self, value: datetime) -> float:
        r0, r1 = self.range
        span = self._span_seconds
        if span == 0:
            return (r0 + r1) / 2
        t = (value - self.domain[0]).total_seconds() / span
        return r0 + t * (r1 - r0)

    def invert(self, px: float) -> datetime:
        r0, r1 = self.range
        if r1 == r0:
            return self.domain[0]
        t = (px - r0) / (r1 - r0)
        return self.domain[0] + timedelta(seconds=t * self._span_seconds)


@dataclass(frozen=True)
class LinearScale:
    """Linear mapping from metric values to pixel positions."""

    domain: Tuple[float, float]
    range: Tuple[float, float]

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if d1 == d0:
            return (r0 + r1) / 2
        return r0 + (value - d0) / (d1 - d0) * (r1 - r0)

    def invert(self, px: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if r1 == r0:
            return d0
        return d0 + (px - r0) / (r1 - r0) * (d1 - d0)


def clamp_scale_factor(k: float, extent: Tuple[float, float] = cfg.ZOOM_SCALE_EXTENT) -> float:
    """Clamp a requested scale factor into the allowed extent."""
    return float(np.clip(k, extent[0], extent[1]))


@dataclass(frozen=True)
class ZoomTransform:
    """Affine transform of the x axis: px' = px * k + x."""

    k: float = 1.0
    x: float = 0.0

    def __post_init__(self):
        k = clamp_scale_factor(self.k)
        if k != self.k:
            logger.debug(f"Clamping zoom scale factor {self.k} to {k}")
            object.__setattr__(self, "k", k)

    def apply_x(self, px: float) -> float:
        return px * self.k + self.x

    def invert_x(self, px: float) -> float:
        return (px - self.x) / self.k

    def translate_by(self, dx: float) -> "ZoomTransform":
        return ZoomTransform(self.k, self.x + dx)

    def scale_to(
        self,
        k: float,
        anchor_px: float,
        extent: Tuple[float, float] = cfg.ZOOM_SCALE_EXTENT,
    ) -> "ZoomTransform":
        """
        New transform with scale factor k, keeping the point under anchor_px fixed.

        :param k: Requested scale factor (clamped into extent)
        :param anchor_px: Screen position that stays put
        :param extent: Allowed (min, max) scale factor
        """
        k = clamp_scale_factor(k, extent)
        base_px = self.invert_x(anchor_px)
        return ZoomTransform(k, anchor_px - base_px * k)

    def rescale(self, base: TimeScale) -> TimeScale:
        """Visible scale: same pixel range, domain narrowed by the transform."""
        r0, r1 = base.range
        return TimeScale(
            domain=(base.invert(self.invert_x(r0)), base.invert(self.invert_x(r1))),
            range=base.range,
        )

    @property
    def is_identity(self) -> bool:
        return self.k == 1.0 and self.x == 0.0


IDENTITY = ZoomTransform()


class ZoomTransformController:
    """
    Current zoom state of the trend chart.

    Holds the base scale for this render pass and the current transform.
    Gesture methods return the new transform and notify subscribers with it.
    """

    def __init__(
        self,
        base_scale: TimeScale,
        scale_extent: Tuple[float, float] = cfg.ZOOM_SCALE_EXTENT,
    ):
        self.base_scale = base_scale
        self.scale_extent = scale_extent
        self.transform = IDENTITY
        self._listeners: List[Callable[[ZoomTransform], None]] = []

    @property
    def current_scale(self) -> TimeScale:
        return self.transform.rescale(self.base_scale)

    def visible_domain(self) -> Tuple[datetime, datetime]:
        return self.current_scale.domain

    def position(self, value: datetime) -> float:
        """Screen x of a date under the current transform."""
        return self.transform.apply_x(self.base_scale(value))

    # Gestures ########################

    def wheel(self, delta_y: float, anchor_px: float, delta_mode: int = 0) -> ZoomTransform:
        """
        Zoom about the pointer for one wheel tick.

        :param delta_y: Wheel deltaY (negative zooms in)
        :param anchor_px: Pointer x position
        :param delta_mode: 0 pixel, 1 line, 2 page
        """
        factor = 2 ** (-delta_y * WHEEL_DELTA_FACTORS.get(delta_mode, 1.0))
        return self.zoom_to(self.transform.k * factor, anchor_px)

    def zoom_by(self, factor: float, anchor_px: Optional[float] = None) -> ZoomTransform:
        return self.zoom_to(self.transform.k * factor, anchor_px)

    def zoom_to(self, k: float, anchor_px: Optional[float] = None) -> ZoomTransform:
        """Set the scale factor, anchored at anchor_px (plot center by default)."""
        if anchor_px is None:
            anchor_px = sum(self.base_scale.range) / 2
        return self._commit(self.transform.scale_to(k, anchor_px, self.scale_extent))

    def drag(self, dx: float) -> ZoomTransform:
        """Pan by dx pixels."""
        return self._commit(self.transform.translate_by(dx))

    def reset(self) -> ZoomTransform:
        """Back to the identity transform (full-range view)."""
        return self._commit(IDENTITY)

    def rebase(self, base_scale: TimeScale) -> ZoomTransform:
        """Start a new render pass with a new base scale at identity."""
        self.base_scale = base_scale
        return self._commit(IDENTITY)

    # Listeners ########################

    def subscribe(self, callback: Callable[[ZoomTransform], None]) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _commit(self, transform: ZoomTransform) -> ZoomTransform:
        self.transform = transform
        logger.debug(f"Zoom transform k={transform.k:.3f} x={transform.x:.1f}")
        for callback in list(self._listeners):
            callback(transform)
        return transform


# Projection ########################


@dataclass(frozen=True)
class ProjectedPoint:
    point: TrendPoint
    px: float
    py: float


def build_value_scale(
    series: Iterable[Series], metric_key: str, height: float, offset: float = 0.0
) -> LinearScale:
    """Y scale for a metric: domain from the metric's policy, range bottom-up."""
    return LinearScale(
        domain=value_domain(series, metric_key), range=(offset + height, offset)
    )


def project_series(
    series: Iterable[Series],
    x_scale: Callable[[datetime], float],
    y_scale: Callable[[float], float],
    metric_key: str,
) -> List[Tuple[str, List[ProjectedPoint]]]:
    """
    Screen coordinates for every plottable point.

    Points without a value for the metric are skipped (drawn as line gaps).

    :param series: Trend series
    :param x_scale: Current (zoomed) time scale
    :param y_scale: Metric value scale
    :param metric_key: Plotted metric
    :return: List of (group, projected points)
    """
    spec = get_metric(metric_key)
    projected = []
    for s in series:
        points = []
        for p in s.points:
            value = spec.value(p)
            if value is None:
                continue
            points.append(ProjectedPoint(point=p, px=x_scale(p.date), py=y_scale(value)))
        projected.append((s.group, points))
    return projected

"""
visualization.py
Plotly figure builders for the accident explorer.

Each builder takes the plain outputs of the pipeline (stats dicts, breakdown
rows, series) and returns a go.Figure; none of them touch records or filter
state.

Functions:
- create_region_map: Choropleth of a map metric per state, selection outlined
- create_severity_bar_chart: Severity counts stacked per weather condition
- create_monthly_line_chart: Accident counts per month
- create_trend_chart: One line per trend series, x range from the zoom scale
"""

from datetime import datetime
from typing import Dict, Hashable, Iterable, Optional, Sequence, Tuple

import plotly.graph_objects as go

from roadwatch import config as cfg
from roadwatch.core.chart_config import (
    apply_bar_layout,
    apply_standard_axes,
    apply_time_series_layout,
    get_default_margins,
    get_map_colorscale,
    get_series_palette,
    get_severity_colors,
)
from roadwatch.core.metrics import get_metric
from roadwatch.models.incident import AggregatedStat, MonthlyCount, Series, SeverityBreakdown
from roadwatch.utils.log_util import app_logger

logger = app_logger(__name__)


def _empty_figure(message: str, height: int = 350) -> go.Figure:
    fig = go.Figure()
    fig.add_annotation(
        text=message, xref="paper", yref="paper", x=0.5, y=0.5, showarrow=False
    )
    fig.update_layout(height=height, template="plotly_white")
    fig.update_xaxes(visible=False)
    fig.update_yaxes(visible=False)
    return fig


def create_region_map(
    stats: Dict[Hashable, AggregatedStat],
    selected: Iterable[str] = (),
    map_metric: str = "count",
    height: int = 450,
) -> go.Figure:
    """
    Choropleth of a map metric per state.

    :param stats: Region code -> AggregatedStat (global scope)
    :param selected: Selected region codes, drawn with a heavy outline
    :param map_metric: Key from config.MAP_METRICS
    :param height: Chart height in pixels
    :return: Plotly figure
    """
    if map_metric not in cfg.MAP_METRICS:
        raise ValueError(f"Unknown map metric: {map_metric}")

    selected = set(selected)
    codes = sorted(k for k in stats if k in cfg.KNOWN_REGION_CODES)
    if not codes:
        return _empty_figure("No accidents in the current date/weather scope", height)

    values = [stats[c].metric_value(map_metric) for c in codes]
    hover = [
        f"{c}<br>{stats[c].count:,} accidents<br>"
        f"{stats[c].night_count:,} night / {stats[c].day_count:,} day"
        for c in codes
    ]

    fig = go.Figure(
        go.Choropleth(
            locations=codes,
            z=values,
            locationmode="USA-states",
            colorscale=get_map_colorscale(),
            colorbar_title=cfg.MAP_METRICS[map_metric],
            text=hover,
            hoverinfo="text",
            marker_line_color=["#111111" if c in selected else "white" for c in codes],
            marker_line_width=[2.5 if c in selected else 0.5 for c in codes],
        )
    )
    fig.update_layout(
        geo_scope="usa",
        height=height,
        margin=dict(l=0, r=0, t=10, b=0),
        clickmode="event+select",
    )
    return fig


def create_severity_bar_chart(
    breakdown: Sequence[SeverityBreakdown], title: Optional[str] = None
) -> go.Figure:
    """
    Stacked bar of severity counts per weather condition.

    :param breakdown: Rows from aggregation.severity_by_weather
    :param title: Optional chart title
    :return: Plotly figure
    """
    if not breakdown:
        return _empty_figure("No accidents in the current filter scope")

    colors = get_severity_colors()
    categories = [row.category for row in breakdown]

    fig = go.Figure()
    for level, color in colors.items():
        counts = [row.counts[level] for row in breakdown]
        shares = [
            100.0 * row.counts[level] / row.total if row.total else 0.0 for row in breakdown
        ]
        fig.add_trace(
            go.Bar(
                x=categories,
                y=counts,
                name=f"Severity {level}",
                marker_color=color,
                customdata=shares,
                hovertemplate=(
                    "<b>%{x}</b><br>Severity " + str(level)
                    + "<br>%{y:,} accidents<br>(%{customdata:.1f}% of %{x})<extra></extra>"
                ),
            )
        )

    return apply_bar_layout(fig, title=title)


def create_monthly_line_chart(monthly: Sequence[MonthlyCount]) -> go.Figure:
    """Accident count per month with markers."""
    if not monthly:
        return _empty_figure("No accidents in the current filter scope")

    fmt = "%b %Y" if len(monthly) > 12 else "%B"
    fig = go.Figure(
        go.Scatter(
            x=[m.month for m in monthly],
            y=[m.count for m in monthly],
            mode="lines+markers",
            line=dict(color=get_severity_colors()[4], width=3, shape="spline"),
            marker=dict(size=7),
            hovertemplate="%{x|%B %Y}: %{y:,} accidents<extra></extra>",
        )
    )
    fig = apply_time_series_layout(fig)
    fig = apply_standard_axes(fig, yaxis_title="Accidents", showgrid_x=False)
    fig.update_xaxes(tickformat=fmt)
    fig.update_yaxes(rangemode="tozero")
    return fig


def create_trend_chart(
    series: Sequence[Series],
    metric_key: str,
    x_range: Optional[Tuple[datetime, datetime]] = None,
    y_range: Optional[Tuple[float, float]] = None,
    highlighted: Optional[str] = None,
    height: int = 380,
) -> go.Figure:
    """
    Multi-series daily trend chart.

    :param series: Trend series (already ranked)
    :param metric_key: Plotted metric
    :param x_range: Visible time domain, e.g. ZoomTransformController.visible_domain()
    :param y_range: Metric value domain
    :param highlighted: Series to emphasize; others are dimmed
    :param height: Chart height in pixels
    :return: Plotly figure
    """
    spec = get_metric(metric_key)
    if not series:
        return _empty_figure("No trend data for the current filters", height)

    palette = get_series_palette()
    fig = go.Figure()
    for i, s in enumerate(series):
        values = [spec.value(p) for p in s.points]
        dimmed = highlighted is not None and s.group != highlighted
        fig.add_trace(
            go.Scatter(
                x=[p.date for p in s.points],
                y=values,
                name=s.group,
                mode="lines+markers",
                marker=dict(size=4),
                connectgaps=False,
                opacity=0.25 if dimmed else 1.0,
                line=dict(color=palette[i % len(palette)], width=2),
                customdata=[spec.format(v) for v in values],
                hovertemplate=(
                    f"<b>{s.group}</b><br>%{{x|%b %d, %Y}}<br>{spec.label}: %{{customdata}}<extra></extra>"
                ),
            )
        )

    fig = apply_time_series_layout(fig, height=height, showlegend=True)
    fig = apply_standard_axes(
        fig,
        yaxis_title=spec.label,
        xaxis_range=list(x_range) if x_range else None,
        yaxis_range=list(y_range) if y_range else None,
    )
    fig.update_layout(margin=get_default_margins(), legend_orientation="h", legend_y=-0.15)
    logger.debug(f"Trend chart: {len(series)} series, metric {metric_key}")
    return fig

"""
chart_config.py

Shared Plotly layout, axis and color helpers for the accident charts.

Keeps margins, palettes and axis styling in one place so the map, severity
bar, monthly line and trend figures look consistent.
"""

from typing import Dict, List, Optional

import plotly.graph_objects as go

from roadwatch import config as cfg


def get_default_margins(compact: bool = False) -> Dict[str, int]:
    """
    Get standard margin configurations for charts.

    :param compact: If True, returns reduced margins for side panels
    :return: Dictionary with margin settings
    """
    if compact:
        return dict(l=30, r=10, t=30, b=40)
    return dict(l=60, r=20, t=40, b=50)


def get_severity_colors() -> Dict[int, str]:
    """
    Severity color ramp, light to dark (darker = more severe).

    :return: Dictionary of severity level -> hex color
    """
    return dict(zip(cfg.SEVERITY_LEVELS, ["#ffda79", "#ff9f43", "#ee5253", "#5f27cd"]))


def get_series_palette() -> List[str]:
    """Categorical palette for trend lines (d3 category10 order)."""
    return [
        "#1f77b4", "#ff7f0e", "#2ca02c", "#d62728", "#9467bd",
        "#8c564b", "#e377c2", "#7f7f7f", "#bcbd22", "#17becf",
    ]


def get_map_colorscale() -> list:
    """
    Sequential colorscale for the choropleth.

    :return: Plotly colorscale list
    """
    return [
        [0.0, "#fff5eb"],
        [0.25, "#fdd0a2"],
        [0.5, "#fd8d3c"],
        [0.75, "#d94801"],
        [1.0, "#7f2704"],
    ]


def apply_time_series_layout(
    fig: go.Figure,
    height: int = 350,
    showlegend: bool = False,
    title: Optional[str] = None,
    compact: bool = False,
    hovermode: str = "closest",
) -> go.Figure:
    """
    Apply standard time series chart layout configuration.

    :param fig: Plotly figure to configure
    :param height: Chart height in pixels
    :param showlegend: Whether to show legend
    :param title: Chart title (optional)
    :param compact: Use compact margins if True
    :param hovermode: Hover mode setting
    :return: Configured figure
    """
    layout_config = {
        "height": height,
        "margin": get_default_margins(compact),
        "showlegend": showlegend,
        "hovermode": hovermode,
        "template": "plotly_white",
    }

    if title:
        layout_config["title"] = title

    fig.update_layout(**layout_config)
    return fig


def apply_standard_axes(
    fig: go.Figure,
    xaxis_title: str = "",
    yaxis_title: str = "",
    showgrid_x: bool = True,
    showgrid_y: bool = True,
    yaxis_range: Optional[List[float]] = None,
    xaxis_range: Optional[list] = None,
) -> go.Figure:
    """
    Apply standard axis configuration.

    :param fig: Plotly figure to configure
    :param xaxis_title: X-axis title
    :param yaxis_title: Y-axis title
    :param showgrid_x: Whether to show x-axis grid
    :param showgrid_y: Whether to show y-axis grid
    :param yaxis_range: Fixed y range (e.g. from a metric's domain policy)
    :param xaxis_range: Fixed x range (e.g. the zoomed time domain)
    :return: Configured figure
    """
    xaxis_config = {
        "title": xaxis_title,
        "showgrid": showgrid_x,
        "gridcolor": "lightgray",
    }
    yaxis_config = {
        "title": yaxis_title,
        "showgrid": showgrid_y,
        "gridcolor": "lightgray",
    }

    if xaxis_range is not None:
        xaxis_config["range"] = list(xaxis_range)
    if yaxis_range is not None:
        yaxis_config["range"] = list(yaxis_range)

    fig.update_xaxes(**xaxis_config)
    fig.update_yaxes(**yaxis_config)
    return fig


def apply_bar_layout(
    fig: go.Figure,
    title: Optional[str] = None,
    height: int = 350,
    yaxis_title: str = "Accidents",
) -> go.Figure:
    """
    Stacked bar layout with angled category labels.

    :param fig: Plotly figure to configure
    :param title: Chart title (optional)
    :param height: Chart height in pixels
    :param yaxis_title: Y-axis title
    :return: Configured figure
    """
    layout_config = {
        "barmode": "stack",
        "height": height,
        "template": "plotly_white",
        "margin": dict(l=45, r=10, t=40, b=90),
        "legend_title_text": "Severity",
        "yaxis_title": yaxis_title,
    }
    if title:
        layout_config["title"] = title

    fig.update_layout(**layout_config)
    fig.update_xaxes(tickangle=-35)
    fig.update_yaxes(tickformat="~s", showgrid=True, gridcolor="lightgray")
    return fig

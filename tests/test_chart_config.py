"""
Unit tests for chart configuration helpers.

Tests all helper functions in roadwatch.core.chart_config to ensure
they return valid Plotly configuration objects.
"""

import pytest
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


class TestDefaultMargins:
    """Test get_default_margins helper function."""

    def test_default_margins(self):
        """Test default margin configuration."""
        margins = get_default_margins()

        assert isinstance(margins, dict)
        assert set(margins) == {"l", "r", "t", "b"}
        assert all(isinstance(v, (int, float)) for v in margins.values())
        assert margins == {"l": 60, "r": 20, "t": 40, "b": 50}

    def test_compact_margins(self):
        """Test compact margin configuration."""
        assert get_default_margins(compact=True) == {"l": 30, "r": 10, "t": 30, "b": 40}


class TestColors:
    """Test color helpers."""

    def test_one_color_per_severity(self):
        colors = get_severity_colors()

        assert list(colors) == list(cfg.SEVERITY_LEVELS)
        assert all(c.startswith("#") for c in colors.values())

    def test_series_palette_covers_top_n(self):
        palette = get_series_palette()

        assert len(palette) >= cfg.TREND_TOP_N
        assert len(set(palette)) == len(palette)

    def test_map_colorscale_structure(self):
        colorscale = get_map_colorscale()

        for item in colorscale:
            assert len(item) == 2
            assert 0 <= item[0] <= 1
            assert isinstance(item[1], str)

        values = [item[0] for item in colorscale]
        assert min(values) == 0.0
        assert max(values) == 1.0


class TestTimeSeriesLayout:
    """Test apply_time_series_layout helper function."""

    def test_default_layout(self):
        """Test layout with default parameters."""
        fig = apply_time_series_layout(go.Figure())

        assert isinstance(fig, go.Figure)
        assert fig.layout.height == 350
        assert fig.layout.showlegend is False
        assert fig.layout.hovermode == "closest"
        assert fig.layout.margin.l == 60

    def test_custom_parameters(self):
        """Test layout with custom parameters."""
        fig = apply_time_series_layout(
            go.Figure(), height=500, showlegend=True, title="Daily Trends", compact=True
        )

        assert fig.layout.height == 500
        assert fig.layout.showlegend is True
        assert fig.layout.title.text == "Daily Trends"
        assert fig.layout.margin.l == 30


class TestStandardAxes:
    """Test apply_standard_axes helper function."""

    def test_default_axes(self):
        fig = apply_standard_axes(go.Figure())

        assert fig.layout.xaxis.title.text == ""
        assert fig.layout.yaxis.title.text == ""
        assert fig.layout.xaxis.showgrid is True
        assert fig.layout.yaxis.showgrid is True
        assert fig.layout.xaxis.range is None

    def test_custom_axes(self):
        fig = apply_standard_axes(
            go.Figure(),
            xaxis_title="Date",
            yaxis_title="Total Accidents",
            showgrid_x=False,
            yaxis_range=(0.0, 4.0),
        )

        assert fig.layout.xaxis.title.text == "Date"
        assert fig.layout.yaxis.title.text == "Total Accidents"
        assert fig.layout.xaxis.showgrid is False
        assert tuple(fig.layout.yaxis.range) == (0.0, 4.0)


class TestBarLayout:
    def test_stacked(self):
        fig = apply_bar_layout(go.Figure(), title="Severity by Weather")

        assert fig.layout.barmode == "stack"
        assert fig.layout.title.text == "Severity by Weather"
        assert fig.layout.yaxis.title.text == "Accidents"
        assert fig.layout.xaxis.tickangle == -35


class TestIntegration:
    """Integration tests for combined helper usage."""

    def test_complete_chart_setup(self):
        fig = go.Figure(go.Scatter(x=[1, 2], y=[3, 4]))
        fig = apply_time_series_layout(fig, title="Integration Test Chart", height=400)
        fig = apply_standard_axes(fig, xaxis_title="Date", yaxis_title="Accidents")

        assert fig.layout.title.text == "Integration Test Chart"
        assert fig.layout.height == 400
        assert fig.layout.xaxis.title.text == "Date"
        assert len(fig.data) == 1

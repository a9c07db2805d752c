"""
dashboard.py rendering for the accident explorer page
"""

from typing import Optional

import streamlit as st

import roadwatch.core.visualization as rw_viz
from roadwatch import config as cfg
from roadwatch.core.dashboard import DashboardManager, DashboardSnapshot
from roadwatch.core.metrics import METRICS
from roadwatch.core.nearest_point import format_tooltip, locate_value
from roadwatch.core.trend_series import GROUPING_LABELS
from roadwatch.core.zoom_transform import TimeScale, ZoomTransformController
from roadwatch.models.incident import Summary
from roadwatch.utils.date_util import to_datetime
from roadwatch.utils.log_util import app_logger
from roadwatch.utils.weather_utils import format_count

logger = app_logger(__name__)

TREND_PLOT_WIDTH = 640.0
TREND_PLOT_HEIGHT = 380


def get_manager(records) -> DashboardManager:
    """One DashboardManager per browser session."""
    if "manager" not in st.session_state:
        manager = DashboardManager(records)
        if manager.date_extent is not None:
            # the default window may fall outside the data; the date picker rejects that
            window = manager.state.date_range
            manager.change_date_range(window.start, window.end)
        else:
            manager.recompute()
        st.session_state["manager"] = manager
    return st.session_state["manager"]


def _get_zoom(snapshot: DashboardSnapshot) -> Optional[ZoomTransformController]:
    """Zoom controller for the current snapshot; rebased whenever the series change."""
    dates = [p.date for s in snapshot.series for p in s.points]
    if not dates:
        return None

    base = TimeScale.from_extent((min(dates), max(dates)), TREND_PLOT_WIDTH)
    zoom = st.session_state.get("zoom")
    if zoom is None:
        zoom = ZoomTransformController(base)
        st.session_state["zoom"] = zoom
    if st.session_state.get("zoom_generation") != snapshot.generation:
        zoom.rebase(base)
        st.session_state["zoom_generation"] = snapshot.generation
    return zoom


def render_filters(manager: DashboardManager) -> None:
    """Date, weather and region widgets; each change goes through the manager."""
    state = manager.state
    extent = manager.date_extent

    col1, col2, col3 = st.columns([1, 2, 1])

    with col1:
        picked = st.date_input(
            "Date range",
            value=(state.date_range.start.date(), state.date_range.end.date()),
            min_value=extent[0].date() if extent else None,
            max_value=extent[1].date() if extent else None,
        )
        if isinstance(picked, (tuple, list)) and len(picked) == 2:
            start, end = picked
            if (start, end) != (state.date_range.start.date(), state.date_range.end.date()):
                manager.change_date_range(start, end)

    with col2:
        options = manager.weather_options()
        labels = dict(options)
        current = sorted(manager.state.weather)
        weather = st.multiselect(
            "Weather conditions",
            options=sorted(set(labels) | set(current)),
            default=current,
            format_func=lambda c: labels.get(c, c),
            placeholder="+ Add Condition...",
        )
        if set(weather) != set(manager.state.weather):
            manager.set_weather(weather)

    with col3:
        names = manager.resolver.preset_names()
        mode = manager.state.region_mode
        preset = st.selectbox(
            "Region preset", names, index=names.index(mode) if mode in names else 0
        )
        if preset != manager.state.region_mode:
            manager.select_preset(preset)

    regions = st.multiselect(
        "States",
        options=sorted(cfg.KNOWN_REGION_CODES),
        default=sorted(manager.state.regions),
    )
    if set(regions) != set(manager.state.regions):
        manager.set_regions(regions)


def render_summary(summary: Summary) -> None:
    st.markdown(f"**{summary.title}**")
    st.caption(summary.subtitle)
    if summary.display_names:
        st.caption(summary.display_names)

    st.metric(
        "Accidents",
        format_count(summary.subtotal),
        f"{summary.share_of_baseline:.1f}% of date/weather scope",
        delta_color="off",
    )
    for entry in summary.entries:
        st.write(f"{entry.group}: {format_count(entry.count)} ({entry.share:.1f}%)")
    if summary.truncated:
        st.caption(summary.more_label)


def render_map(manager: DashboardManager, snapshot: DashboardSnapshot) -> None:
    """Choropleth; clicking a state runs the region click rule."""
    map_metric = st.selectbox(
        "Map metric",
        list(cfg.MAP_METRICS),
        index=list(cfg.MAP_METRICS).index(snapshot.map_metric),
        format_func=lambda k: cfg.MAP_METRICS[k],
    )
    if map_metric != snapshot.map_metric:
        snapshot = manager.change_map_metric(map_metric)

    fig = rw_viz.create_region_map(
        snapshot.region_stats, snapshot.state.regions, snapshot.map_metric
    )
    event = st.plotly_chart(
        fig, width="stretch", key="region_map", on_select="rerun", selection_mode="points"
    )

    points = event.selection.points if event and event.selection else []
    clicked = tuple(p.get("location") for p in points if p.get("location"))
    if clicked and clicked != st.session_state.get("last_map_click"):
        st.session_state["last_map_click"] = clicked
        for code in clicked:
            manager.toggle_region(code)
        st.rerun()
    elif not clicked:
        st.session_state["last_map_click"] = None


def render_trend(manager: DashboardManager, snapshot: DashboardSnapshot) -> None:
    col1, col2, col3 = st.columns(3)
    with col1:
        metric_keys = list(METRICS)
        metric = st.selectbox(
            "Trend metric",
            metric_keys,
            index=metric_keys.index(snapshot.metric_key),
            format_func=lambda k: METRICS[k].label,
        )
    with col2:
        grouping_keys = list(GROUPING_LABELS)
        grouping = st.selectbox(
            "Group by",
            grouping_keys,
            index=grouping_keys.index(snapshot.grouping_key),
            format_func=lambda k: GROUPING_LABELS[k],
        )
    with col3:
        highlight = st.selectbox(
            "Highlight", ["(none)"] + [s.group for s in snapshot.series]
        )

    if metric != snapshot.metric_key:
        snapshot = manager.change_metric(metric)
    if grouping != snapshot.grouping_key:
        snapshot = manager.change_grouping(grouping)

    zoom = _get_zoom(snapshot)
    x_range = None
    if zoom is not None:
        zcol1, zcol2 = st.columns(2)
        with zcol1:
            k = st.slider("Zoom", *cfg.ZOOM_SCALE_EXTENT, value=1.0, step=0.5)
        with zcol2:
            focus = st.slider("Focus", 0.0, 1.0, value=0.5, step=0.01)
        zoom.reset()
        zoom.zoom_to(k, anchor_px=focus * TREND_PLOT_WIDTH)
        x_range = zoom.visible_domain()

    highlighted = None if highlight == "(none)" else highlight
    fig = rw_viz.create_trend_chart(
        snapshot.series,
        snapshot.metric_key,
        x_range=x_range,
        y_range=snapshot.value_domain,
        highlighted=highlighted,
        height=TREND_PLOT_HEIGHT,
    )
    event = st.plotly_chart(
        fig, width="stretch", key="trend_chart", on_select="rerun", selection_mode="points"
    )

    points = event.selection.points if event and event.selection else []
    if zoom is not None and points:
        picked = points[0]
        query_date = to_datetime(picked.get("x"))
        if query_date is None or picked.get("y") is None:
            return
        located = locate_value(
            snapshot.series,
            query_date,
            float(picked["y"]),
            zoom.current_scale,
            snapshot.metric_key,
            TREND_PLOT_HEIGHT,
            highlighted=highlighted,
        )
        if located is None:
            st.caption("No data point near the selection")
        else:
            st.text(format_tooltip(located, snapshot.metric_key))


def render(records) -> None:
    manager = get_manager(records)

    render_filters(manager)
    snapshot = manager.snapshot or manager.recompute()

    row1 = st.columns([2, 1])
    with row1[0]:
        render_map(manager, snapshot)
    with row1[1]:
        render_summary(manager.snapshot.summary)

    snapshot = manager.snapshot
    row2 = st.columns([1, 1])
    with row2[0]:
        st.subheader("Severity by Weather")
        st.plotly_chart(
            rw_viz.create_severity_bar_chart(snapshot.severity_breakdown),
            width="stretch",
        )
    with row2[1]:
        st.subheader("Accidents per Month")
        st.plotly_chart(
            rw_viz.create_monthly_line_chart(snapshot.monthly), width="stretch"
        )

    st.subheader("Daily Trends")
    render_trend(manager, snapshot)
    logger.debug(f"Rendered snapshot {manager.snapshot.generation}")

"""
Selection summary for the label panel.

Turns the per-region stats and the current region selection into totals and
percentages: the selection's share of the baseline scope, and each selected
region's share of the selection subtotal.
"""

from typing import Dict, Hashable, Iterable

from roadwatch import config as cfg
from roadwatch.models.incident import AggregatedStat, Summary, SummaryEntry
from roadwatch.utils.log_util import app_logger

logger = app_logger(__name__)


def _pct(part: float, whole: float) -> float:
    return 100.0 * part / whole if whole else 0.0


def _display_names(names: Iterable[str], max_chars: int = cfg.SUMMARY_NAMES_MAX_CHARS) -> str:
    joined = ", ".join(names)
    if len(joined) > max_chars:
        return joined[:max_chars] + "..."
    return joined


def summarize(
    stats: Dict[Hashable, AggregatedStat],
    selection: Iterable[str],
    baseline_total: int,
    region_mode: str = cfg.MANUAL_MODE,
    max_entries: int = cfg.SUMMARY_MAX_ENTRIES,
) -> Summary:
    """
    Summarize the current selection against the baseline scope.

    :param stats: Group key -> AggregatedStat for the global (map) scope
    :param selection: Selected group keys; empty means national view
    :param baseline_total: Record count of the baseline scope
    :param region_mode: Current region mode, used for the title
    :param max_entries: Breakdown entries kept before truncating with "+N more"
    :return: Summary
    """
    selected = sorted(set(selection))
    is_national = not selected

    if is_national:
        counts = {str(key): stat.count for key, stat in stats.items()}
    else:
        counts = {key: stats[key].count if key in stats else 0 for key in selected}

    subtotal = sum(counts.values())
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    entries = [
        SummaryEntry(group=key, count=count, share=_pct(count, subtotal))
        for key, count in ranked
    ]
    more_count = max(0, len(entries) - max_entries)
    entries = entries[:max_entries]

    if is_national:
        title = "National View (All States)"
        subtitle = f"Data across {len(stats)} states"
        share = 100.0
        names = ""
    else:
        title = region_mode if region_mode != cfg.MANUAL_MODE else "Custom Selection"
        subtitle = f"{len(selected)} State{'s' if len(selected) > 1 else ''} Selected"
        share = _pct(subtotal, baseline_total)
        names = _display_names(selected)

    logger.debug(f"{title}: {subtotal} of {baseline_total} records ({share:.1f}%)")

    return Summary(
        title=title,
        subtitle=subtitle,
        subtotal=subtotal,
        baseline_total=baseline_total,
        share_of_baseline=share,
        entries=tuple(entries),
        more_count=more_count,
        display_names=names,
        is_national=is_national,
    )

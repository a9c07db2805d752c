"""
Weather utility functions for condition normalization and classification.

This module provides reusable weather-related helpers that can be used
across the loader, aggregation and trend modules.
"""

from datetime import datetime
from typing import Optional

from roadwatch import config as cfg


def normalize_condition(condition: Optional[str]) -> str:
    """
    Trim a raw weather condition, falling back to "Unknown" when absent.

    :param condition: Raw condition text (may be None, NaN or blank)
    :return: Normalized condition string
    """
    if not isinstance(condition, str):
        return cfg.UNKNOWN_GROUP
    trimmed = condition.strip()
    return trimmed if trimmed else cfg.UNKNOWN_GROUP


def is_poor_weather(condition: Optional[str]) -> bool:
    """
    Classify a condition as adverse.

    Fair/clear conditions are checked against an explicit allow-list first,
    then the condition is matched against the adverse keyword hints.

    :param condition: Weather condition text
    :return: True if the condition is considered poor weather
    """
    if not condition:
        return False
    text = str(condition).lower()
    if text in cfg.FAIR_WEATHER_CONDITIONS:
        return False
    return any(hint in text for hint in cfg.POOR_WEATHER_HINTS)


def is_night_hour(hour: int) -> bool:
    return hour >= cfg.NIGHT_START_HOUR or hour < cfg.NIGHT_END_HOUR


def is_night(timestamp: datetime) -> bool:
    """True when the timestamp falls between 20:00 and 05:59."""
    return is_night_hour(timestamp.hour)


def format_count(value: int) -> str:
    """Thousands-separated count, e.g. 12,345."""
    return f"{value:,}"

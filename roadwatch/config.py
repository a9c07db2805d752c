# config.py
"""
Configurations for the Roadwatch accident explorer.

This module contains the region preset tables, the known region codes and the
tuning constants shared across the filter, aggregation and chart modules.
"""

from datetime import date

MANUAL_MODE = "Manual"
UNKNOWN_GROUP = "Unknown"
ALL_DATA_GROUP = "All Data"

# Default analysis window: full year 2021
DEFAULT_START_DATE = date(2021, 1, 1)
DEFAULT_END_DATE = date(2021, 12, 31)

# Night is hour >= 20 or hour < 6
NIGHT_START_HOUR = 20
NIGHT_END_HOUR = 6

SEVERITY_LEVELS = (1, 2, 3, 4)

# Trend chart tuning
TREND_TOP_N = 8
HIT_DISTANCE_PX = 50.0
ZOOM_SCALE_EXTENT = (1.0, 50.0)

# Detail views
SEVERITY_BAR_TOP_N = 10
SUMMARY_MAX_ENTRIES = 10
SUMMARY_NAMES_MAX_CHARS = 60
WEATHER_OPTION_LIMIT = 25

# Map coloring metrics: key -> legend title
MAP_METRICS = {
    "count": "Accidents",
    "night_count": "Night Accidents",
    "day_count": "Day Accidents",
    "average_severity": "Average Severity",
    "poor_weather_pct": "Poor Weather %",
}

# Region presets ########################
# Federal (DOT) regions and AASHTO regional associations. The tables overlap.

REGION_PRESETS = {
    "Region 1": ["CT", "ME", "MA", "NH", "RI", "VT"],
    "Region 2": ["NY", "NJ"],
    "Region 3": ["DE", "MD", "PA", "VA", "WV"],
    "Region 4": ["AL", "FL", "GA", "KY", "MS", "NC", "SC", "TN"],
    "Region 5": ["IL", "IN", "MI", "MN", "OH", "WI"],
    "Region 6": ["AR", "LA", "NM", "OK", "TX"],
    "Region 7": ["IA", "KS", "MO", "NE"],
    "Region 8": ["CO", "MT", "ND", "SD", "UT", "WY"],
    "Region 9": ["AZ", "CA", "HI", "NV"],
    "Region 10": ["AK", "ID", "OR", "WA"],
    "NASTO": ["CT", "DE", "DC", "ME", "MD", "MA", "NH", "NJ", "NY", "PA", "RI", "VT"],
    "SASHTO": ["AL", "AR", "FL", "GA", "KY", "LA", "MS", "NC", "SC", "TN", "VA", "WV"],
    "MAASTO": ["IL", "IN", "IA", "KS", "MI", "MN", "MO", "OH", "WI"],
    "WASHTO": [
        "AK", "AZ", "CA", "CO", "HI", "ID", "MT", "NE", "NV",
        "NM", "ND", "OK", "OR", "SD", "TX", "UT", "WA", "WY",
    ],
}

# 50 states + DC; anything else is bucketed as UNKNOWN_GROUP
KNOWN_REGION_CODES = frozenset(
    [
        "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "DC", "FL", "GA",
        "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD", "MA",
        "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ", "NM", "NY",
        "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC", "SD", "TN", "TX",
        "UT", "VT", "VA", "WA", "WV", "WI", "WY",
    ]
)

# Weather vocabularies ########################

FAIR_WEATHER_CONDITIONS = frozenset(
    ["fair", "clear", "mostly clear", "partly cloudy", "cloudy"]
)

POOR_WEATHER_HINTS = (
    "rain", "shower", "drizzle", "thunder", "storm", "snow", "sleet", "ice",
    "hail", "fog", "mist", "haze", "smoke", "dust", "sand", "squall",
    "tornado", "hurricane", "wintry", "freezing", "blowing", "heavy", "t-storm",
)

# Input columns ########################
# US Accidents CSV column -> canonical record field

CSV_COLUMN_MAP = {
    "ID": "id",
    "Severity": "severity",
    "Start_Time": "timestamp",
    "State": "region_code",
    "Weather_Condition": "weather_condition",
    "Temperature(F)": "temperature",
    "Humidity(%)": "humidity",
}

# Canonical schema keys -> record field
SCHEMA_KEY_MAP = {
    "id": "id",
    "severity": "severity",
    "timestamp": "timestamp",
    "regionCode": "region_code",
    "weatherCondition": "weather_condition",
    "temperature": "temperature",
    "humidity": "humidity",
}

"""
Record loading.

Turns tabular accident data (US Accidents CSV columns or the canonical
schema keys) into the immutable working set of Records. Rows whose start
time can't be parsed, or whose severity is outside 1-4, never enter the
working set; they are counted and logged instead.

Usage:
    result = load_records("data/US_Accidents_March23_sampled_500k.csv")
    records = result.records
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Mapping, Optional, Tuple, Union

import pandas as pd

from roadwatch import config as cfg
from roadwatch.models.incident import Record
from roadwatch.utils.log_util import app_logger
from roadwatch.utils.weather_utils import normalize_condition

logger = app_logger(__name__)

REQUIRED_FIELDS = ("timestamp", "severity", "region_code")


@dataclass(frozen=True)
class LoadResult:
    records: Tuple[Record, ...]
    total_rows: int
    dropped_timestamp: int = 0
    dropped_severity: int = 0

    @property
    def dropped(self) -> int:
        return self.dropped_timestamp + self.dropped_severity

    def date_extent(self) -> Optional[Tuple[datetime, datetime]]:
        if not self.records:
            return None
        stamps = [r.timestamp for r in self.records]
        return min(stamps), max(stamps)


def _known_column(name: str) -> bool:
    name = name.strip()
    return name in cfg.CSV_COLUMN_MAP or name in cfg.SCHEMA_KEY_MAP


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Strip header whitespace and rename source columns to record fields."""
    df = df.copy()
    df.columns = [str(c).strip() for c in df.columns]
    df = df.rename(columns={**cfg.CSV_COLUMN_MAP, **cfg.SCHEMA_KEY_MAP})

    missing = [f for f in REQUIRED_FIELDS if f not in df.columns]
    if missing:
        raise ValueError(f"Input is missing required columns for: {missing}")

    if "id" not in df.columns:
        df["id"] = df.index.astype(str)
    for optional in ("weather_condition", "temperature", "humidity"):
        if optional not in df.columns:
            df[optional] = None
    return df


def _none_if_nan(value) -> Optional[float]:
    return None if pd.isna(value) else float(value)


def _region_code(value) -> str:
    if not isinstance(value, str) or not value.strip():
        return cfg.UNKNOWN_GROUP
    return value.strip()


def load_records(source: Union[str, Path, pd.DataFrame]) -> LoadResult:
    """
    Load the working set from a CSV path or a DataFrame.

    :param source: CSV file path or DataFrame with accident columns
    :return: LoadResult with the records and exclusion counts
    :raises FileNotFoundError: if a CSV path does not exist
    :raises ValueError: if required columns are missing
    """
    if isinstance(source, pd.DataFrame):
        raw_df = source
    else:
        raw_df = pd.read_csv(source, usecols=_known_column, low_memory=False)
        logger.info(f"Read {len(raw_df)} rows from {source}")

    df = _normalize_columns(raw_df)
    total_rows = len(df)

    # offsets are normalized to UTC wall time; naive stamps are taken as already UTC
    df["timestamp"] = pd.to_datetime(
        df["timestamp"], errors="coerce", format="mixed", utc=True
    ).dt.tz_convert(None)
    bad_time = df["timestamp"].isna()
    df = df[~bad_time].copy()

    df["severity"] = pd.to_numeric(df["severity"], errors="coerce")
    bad_severity = ~df["severity"].isin(cfg.SEVERITY_LEVELS)
    df = df[~bad_severity].copy()

    df["temperature"] = pd.to_numeric(df["temperature"], errors="coerce")
    df["humidity"] = pd.to_numeric(df["humidity"], errors="coerce")

    records = tuple(
        Record(
            id=str(row.id),
            timestamp=row.timestamp.to_pydatetime(),
            severity=int(row.severity),
            region_code=_region_code(row.region_code),
            weather_condition=normalize_condition(row.weather_condition),
            temperature=_none_if_nan(row.temperature),
            humidity=_none_if_nan(row.humidity),
        )
        for row in df.itertuples(index=False)
    )

    result = LoadResult(
        records=records,
        total_rows=total_rows,
        dropped_timestamp=int(bad_time.sum()),
        dropped_severity=int(bad_severity.sum()),
    )
    logger.info(
        f"Loaded {len(records)} records "
        f"(dropped {result.dropped_timestamp} bad timestamps, {result.dropped_severity} bad severities)"
    )
    return result


def records_from_rows(rows: Iterable[Mapping]) -> LoadResult:
    """Load records from dict rows in the canonical input schema."""
    rows = list(rows)
    if not rows:
        return LoadResult(records=(), total_rows=0)
    return load_records(pd.DataFrame(rows))

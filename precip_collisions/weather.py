"""
weather.py
==========
NOAA Local Climatological Data (LCD) ingestion

One LCD export mixes hourly observations (FM-15 / FM-16), daily summaries
(SOD) and monthly summaries (SOM). The report uses one row per calendar day:

- precipitation, snowfall, snow_depth come from the SOD rows
- days without a daily precipitation total fall back to the sum of the
  hourly precipitation values for that day
- 'T' (trace) becomes a configurable value, trailing quality flags
  ('0.12s') are stripped, 'M' and blanks are missing
- whatever is still missing after that is zero
"""

import logging
import numpy as np
import pandas as pd
from pathlib import Path
from typing import Any, Dict, Tuple, Union

from .models.base_model import DataContractError

logger = logging.getLogger(__name__)

# Older LCD exports use the upper-case / misspelled names
COLUMN_ALIASES = {
    'REPORTTPYE': 'REPORT_TYPE',
    'DAILYPrecip': 'DailyPrecipitation',
    'DAILYSnowfall': 'DailySnowfall',
    'DAILYSnowDepth': 'DailySnowDepth',
    'HOURLYPrecip': 'HourlyPrecipitation',
}

DAILY_FIELDS = {
    'precipitation': 'DailyPrecipitation',
    'snowfall': 'DailySnowfall',
    'snow_depth': 'DailySnowDepth',
}

HOURLY_REPORT_TYPES = ('FM-15', 'FM-16')
DAILY_REPORT_TYPE = 'SOD'


def read_weather_csv(path: Union[str, Path]) -> pd.DataFrame:
    """Read an LCD export wholesale, every column as text"""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Weather file not found: {path}")
    frame = pd.read_csv(path, dtype=str, keep_default_na=False, low_memory=False)
    logger.info(f"Loaded {len(frame):,} weather rows from {path.name}")
    return frame


def normalise_weather_columns(frame: pd.DataFrame) -> pd.DataFrame:
    """Rename legacy column names; DATE and REPORT_TYPE are required"""
    renamed = frame.rename(columns={k: v for k, v in COLUMN_ALIASES.items()
                                    if k in frame.columns and v not in frame.columns})
    missing = [c for c in ('DATE', 'REPORT_TYPE') if c not in renamed.columns]
    if missing:
        raise DataContractError(f"weather: missing required columns {missing}")
    return renamed


def parse_measurement(values: pd.Series, trace_value: float = 0.0) -> pd.Series:
    """
    Parse LCD measurement strings to floats

    Args:
        values: Raw column ('0.12', '0.12s', 'T', 'Ts', 'M', '', ...)
        trace_value: Substituted for 'T'

    Returns:
        Float series on the same index, NaN where missing
    """
    text = values.astype(str).str.strip()
    # 'T' may carry a flag of its own ('Ts')
    is_trace = text.str.upper().str.fullmatch(r'T[A-Z*]*')
    cleaned = text.str.replace(r'[A-Za-z*]+$', '', regex=True)
    parsed = pd.to_numeric(cleaned, errors='coerce').astype(float)
    parsed.loc[is_trace] = float(trace_value)
    return parsed


def _daily_table(frame: pd.DataFrame, trace_value: float) -> pd.DataFrame:
    """Daily measurements plus a flag for days filled from hourly data"""
    frame = normalise_weather_columns(frame)
    dates = pd.to_datetime(frame['DATE'], errors='coerce')
    n_bad = int(dates.isna().sum())
    if n_bad:
        logger.warning(f"Dropping {n_bad:,} weather rows with an unparseable DATE")

    work = pd.DataFrame({
        'date': dates.dt.normalize(),
        'report_type': frame['REPORT_TYPE'].astype(str).str.strip(),
    }, index=frame.index)
    for name, column in DAILY_FIELDS.items():
        work[name] = (parse_measurement(frame[column], trace_value)
                      if column in frame.columns else np.nan)
    work['hourly_precipitation'] = (
        parse_measurement(frame['HourlyPrecipitation'], trace_value)
        if 'HourlyPrecipitation' in frame.columns else np.nan)
    work = work.dropna(subset=['date'])

    if work.empty:
        raise DataContractError("weather: no rows with a valid DATE")

    days = pd.date_range(work['date'].min(), work['date'].max(), freq='D')

    # Several SOD rows for one day: the last one wins
    daily = (work.loc[work['report_type'] == DAILY_REPORT_TYPE]
             .drop_duplicates(subset='date', keep='last')
             .set_index('date')
             .reindex(days))

    hourly = (work.loc[work['report_type'].isin(HOURLY_REPORT_TYPES)]
              .groupby('date')['hourly_precipitation']
              .sum(min_count=1)
              .reindex(days))

    filled_from_hourly = daily['precipitation'].isna() & hourly.notna()
    table = pd.DataFrame({
        'date': days,
        'precipitation': daily['precipitation'].where(~filled_from_hourly, hourly).to_numpy(),
        'snowfall': daily['snowfall'].to_numpy(),
        'snow_depth': daily['snow_depth'].to_numpy(),
        'has_daily_summary': daily['report_type'].notna().to_numpy(),
        'filled_from_hourly': filled_from_hourly.to_numpy(),
    })
    return table


def _weather_days(table: pd.DataFrame) -> pd.DataFrame:
    n_filled = int(table['filled_from_hourly'].sum())
    n_missing = int(table[list(DAILY_FIELDS)].isna().any(axis=1).sum())

    result = table[['date'] + list(DAILY_FIELDS)].copy()
    result[list(DAILY_FIELDS)] = result[list(DAILY_FIELDS)].fillna(0.0)

    logger.info(f"Weather days: {len(result):,} "
                f"({result['date'].min().date()} to {result['date'].max().date()})")
    logger.info(f"  Filled from hourly precipitation: {n_filled:,}")
    logger.info(f"  Days with a remaining gap (set to 0): {n_missing:,}")
    return result


def _weather_quality(frame: pd.DataFrame, table: pd.DataFrame) -> Dict[str, Any]:
    counts = normalise_weather_columns(frame)['REPORT_TYPE'].astype(str).str.strip().value_counts()
    return {
        'rows': int(len(frame)),
        'rows_by_report_type': {str(k): int(v) for k, v in counts.items()},
        'days': int(len(table)),
        'days_with_daily_summary': int(table['has_daily_summary'].sum()),
        'days_filled_from_hourly': int(table['filled_from_hourly'].sum()),
        'missing_share': {name: float(table[name].isna().mean()) for name in DAILY_FIELDS},
    }


def load_weather(frame: pd.DataFrame,
                 trace_value: float = 0.0) -> Tuple[pd.DataFrame, Dict[str, Any]]:
    """
    Daily weather and its quality summary from a single pass over the export

    Returns:
        (daily_weather frame, weather_quality_report dict)
    """
    table = _daily_table(frame, trace_value)
    return _weather_days(table), _weather_quality(frame, table)


def daily_weather(frame: pd.DataFrame, trace_value: float = 0.0) -> pd.DataFrame:
    """
    One row per calendar day with precipitation, snowfall and snow_depth

    Args:
        frame: Raw LCD table (see read_weather_csv)
        trace_value: Value used for trace ('T') readings

    Returns:
        DataFrame with columns date, precipitation, snowfall, snow_depth
    """
    return _weather_days(_daily_table(frame, trace_value))


def weather_quality_report(frame: pd.DataFrame, trace_value: float = 0.0) -> Dict[str, Any]:
    """
    Data-quality summary of an LCD export

    Returns:
        Dict with row counts by report type, days with a daily summary,
        days filled from hourly data and the share of missing values per
        daily measurement (before zero-filling)
    """
    return _weather_quality(frame, _daily_table(frame, trace_value))

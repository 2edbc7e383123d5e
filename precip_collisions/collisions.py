"""
collisions.py
=============
NYPD Motor Vehicle Collisions ingestion

Quality checks (logged, and returned by collision_quality_report and
load_collisions):
- duplicate incident ids: dropped
- unparseable crash dates: dropped
- missing borough: counted (those rows cannot match the borough filter)
- negative casualty counts: counted and kept as reported
"""

import logging
import pandas as pd
from pathlib import Path
from typing import Any, Dict, Tuple, Union

from .models.base_model import DataContractError

logger = logging.getLogger(__name__)

COLUMN_ALIASES = {
    'CRASH DATE': 'date',
    'DATE': 'date',
    'COLLISION_ID': 'collision_id',
    'UNIQUE KEY': 'collision_id',
    'BOROUGH': 'borough',
    'NUMBER OF PERSONS INJURED': 'persons_injured',
    'NUMBER OF PERSONS KILLED': 'persons_killed',
    'NUMBER OF PEDESTRIANS INJURED': 'pedestrians_injured',
    'NUMBER OF PEDESTRIANS KILLED': 'pedestrians_killed',
    'NUMBER OF CYCLIST INJURED': 'cyclists_injured',
    'NUMBER OF CYCLIST KILLED': 'cyclists_killed',
    'NUMBER OF MOTORIST INJURED': 'motorists_injured',
    'NUMBER OF MOTORIST KILLED': 'motorists_killed',
}

CASUALTY_COLUMNS = [
    'persons_injured', 'persons_killed',
    'pedestrians_injured', 'pedestrians_killed',
    'cyclists_injured', 'cyclists_killed',
    'motorists_injured', 'motorists_killed',
]

REQUIRED_COLUMNS = ['date', 'collision_id', 'borough']


def read_collisions_csv(path: Union[str, Path]) -> pd.DataFrame:
    """Read an NYPD collisions export wholesale, every column as text"""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Collisions file not found: {path}")
    frame = pd.read_csv(path, dtype=str, keep_default_na=False, low_memory=False)
    logger.info(f"Loaded {len(frame):,} collision rows from {path.name}")
    return frame


def normalise_collision_columns(frame: pd.DataFrame) -> pd.DataFrame:
    """Map export headers to snake_case names; date, id and borough are required"""
    mapping = {}
    for raw in frame.columns:
        target = COLUMN_ALIASES.get(str(raw).strip().upper())
        if target is not None and target not in mapping.values():
            mapping[raw] = target
    renamed = frame.loc[:, list(mapping)].rename(columns=mapping)

    missing = [c for c in REQUIRED_COLUMNS if c not in renamed.columns]
    if missing:
        raise DataContractError(f"collisions: missing required columns {missing}")

    for column in CASUALTY_COLUMNS:
        if column not in renamed.columns:
            logger.warning(f"collisions: column '{column}' absent, treated as zero")
            renamed[column] = 0
    return renamed


def clean_collisions(frame: pd.DataFrame) -> Tuple[pd.DataFrame, Dict[str, Any]]:
    """
    Apply the quality checks

    Args:
        frame: Raw collisions table

    Returns:
        Tuple of (clean table with typed columns, quality counts)
    """
    data = normalise_collision_columns(frame)
    n_rows = len(data)

    data['collision_id'] = data['collision_id'].astype(str).str.strip()
    duplicated = data['collision_id'].duplicated(keep='first')
    n_duplicates = int(duplicated.sum())
    data = data.loc[~duplicated].copy()

    data['date'] = pd.to_datetime(data['date'], errors='coerce').dt.normalize()
    bad_dates = data['date'].isna()
    n_bad_dates = int(bad_dates.sum())
    data = data.loc[~bad_dates].copy()

    data['borough'] = data['borough'].astype(str).str.strip().str.upper()
    n_missing_borough = int(data['borough'].isin(['', 'NAN', 'NONE']).sum())

    for column in CASUALTY_COLUMNS:
        data[column] = pd.to_numeric(data[column], errors='coerce').fillna(0).astype(int)
    negatives = {c: int((data[c] < 0).sum()) for c in CASUALTY_COLUMNS if (data[c] < 0).any()}

    quality = {
        'rows': int(n_rows),
        'duplicate_ids_dropped': n_duplicates,
        'bad_dates_dropped': n_bad_dates,
        'missing_borough': n_missing_borough,
        'negative_counts': negatives,
        'rows_clean': int(len(data)),
    }

    if n_duplicates:
        logger.warning(f"Dropped {n_duplicates:,} duplicate collision ids")
    if n_bad_dates:
        logger.warning(f"Dropped {n_bad_dates:,} rows with an unparseable crash date")
    if n_missing_borough:
        logger.info(f"{n_missing_borough:,} rows have no borough")
    for column, count in negatives.items():
        logger.warning(f"{count:,} negative values in {column} (kept)")

    return data, quality


def collision_quality_report(frame: pd.DataFrame) -> Dict[str, Any]:
    """Quality counts of a raw collisions table"""
    return clean_collisions(frame)[1]


def _borough_days(data: pd.DataFrame, borough: str, start: str, end: str) -> pd.DataFrame:
    start_ts, end_ts = pd.Timestamp(start), pd.Timestamp(end)
    if start_ts > end_ts:
        raise ValueError(f"Study window is empty: {start} > {end}")

    in_scope = data.loc[(data['borough'] == borough.strip().upper())
                        & (data['date'] >= start_ts)
                        & (data['date'] <= end_ts)]

    daily = (in_scope.groupby('date')
             .agg(collisions=('collision_id', 'size'),
                  **{c: (c, 'sum') for c in CASUALTY_COLUMNS})
             .reset_index())
    daily[['collisions'] + CASUALTY_COLUMNS] = daily[['collisions'] + CASUALTY_COLUMNS].astype(int)

    logger.info(f"{borough.upper()}: {len(in_scope):,} collisions on {len(daily):,} days "
                f"({start_ts.date()} to {end_ts.date()})")
    return daily


def load_collisions(frame: pd.DataFrame, borough: str = 'BROOKLYN',
                    start: str = '2013-01-01',
                    end: str = '2021-12-31') -> Tuple[pd.DataFrame, Dict[str, Any]]:
    """Daily counts and quality counts from one cleaning pass"""
    data, quality = clean_collisions(frame)
    return _borough_days(data, borough, start, end), quality


def daily_collisions(frame: pd.DataFrame, borough: str = 'BROOKLYN',
                     start: str = '2013-01-01', end: str = '2021-12-31') -> pd.DataFrame:
    """
    Daily incident counts and casualty sums for one borough

    Args:
        frame: Raw collisions table (see read_collisions_csv)
        borough: Borough name, matched case-insensitively
        start, end: Inclusive study window

    Returns:
        DataFrame with date, collisions and the casualty sums; only days with
        at least one incident appear
    """
    return load_collisions(frame, borough, start, end)[0]

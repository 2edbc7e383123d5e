"""
panel.py
========
Daily observation panel and the train/test partition

One row per day with at least one collision: the collision outcomes, the
weather measurements of that day and calendar fields.
"""

import logging
import pandas as pd
from dataclasses import dataclass

from .models.base_model import DataContractError

logger = logging.getLogger(__name__)

WEATHER_COLUMNS = ['precipitation', 'snowfall', 'snow_depth']


def build_daily_panel(collisions_daily: pd.DataFrame, weather_daily: pd.DataFrame) -> pd.DataFrame:
    """
    Left join collision days onto weather days

    Args:
        collisions_daily: Output of daily_collisions
        weather_daily: Output of daily_weather

    Returns:
        Panel with weather gaps filled with zero plus year, month,
        day_of_week and wet_day (precipitation > 0)

    Raises:
        DataContractError: If either input has more than one row per day
    """
    for label, frame in (('collisions', collisions_daily), ('weather', weather_daily)):
        if 'date' not in frame.columns:
            raise DataContractError(f"{label}: missing 'date' column")
        if frame['date'].duplicated().any():
            raise DataContractError(f"{label}: more than one row per day")

    weather = weather_daily.loc[:, ['date'] + WEATHER_COLUMNS]
    panel = collisions_daily.merge(weather, on='date', how='left', validate='one_to_one')

    n_without_weather = int(panel[WEATHER_COLUMNS].isna().any(axis=1).sum())
    if n_without_weather:
        logger.warning(f"{n_without_weather:,} collision days have no weather record (set to 0)")
    panel[WEATHER_COLUMNS] = panel[WEATHER_COLUMNS].fillna(0.0)

    panel = panel.sort_values('date').reset_index(drop=True)
    panel['year'] = panel['date'].dt.year
    panel['month'] = panel['date'].dt.month
    panel['day_of_week'] = panel['date'].dt.dayofweek
    panel['wet_day'] = panel['precipitation'] > 0

    logger.info(f"Panel: {len(panel):,} days, {int(panel['wet_day'].sum()):,} wet")
    return panel


@dataclass(frozen=True)
class Partition:
    """Disjoint training and testing rows of one panel"""
    train: pd.DataFrame
    test: pd.DataFrame
    key: str
    fraction: float
    seed: int


def train_test_partition(panel: pd.DataFrame, fraction: float = 0.75,
                         seed: int = 42, key: str = 'date') -> Partition:
    """
    Seeded random split

    Training rows are drawn uniformly without replacement
    (round(fraction * n) of them); the testing rows are the rest, picked by
    the key column.

    Raises:
        ValueError: If fraction is not strictly between 0 and 1
        DataContractError: If the key is missing or not unique, or either
            partition would be empty
    """
    if not 0.0 < fraction < 1.0:
        raise ValueError(f"fraction must lie strictly between 0 and 1, got {fraction}")
    if key not in panel.columns:
        raise DataContractError(f"partition key '{key}' not in table")
    if panel[key].duplicated().any():
        raise DataContractError(f"partition key '{key}' is not unique")

    n_train = int(round(fraction * len(panel)))
    if n_train == 0 or n_train == len(panel):
        raise DataContractError(
            f"partition of {len(panel)} rows at fraction {fraction} leaves an empty side")

    train = panel.sample(n=n_train, replace=False, random_state=seed)
    test = panel.loc[~panel[key].isin(train[key])]

    return Partition(train=train.copy(), test=test.copy(), key=key,
                     fraction=fraction, seed=seed)

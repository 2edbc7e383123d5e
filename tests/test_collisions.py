import pandas as pd
import pytest

from precip_collisions import collisions
from precip_collisions.collisions import (
    CASUALTY_COLUMNS,
    collision_quality_report,
    daily_collisions,
    load_collisions,
)
from precip_collisions.models import DataContractError

HEADER = ['CRASH DATE', 'CRASH TIME', 'BOROUGH', 'COLLISION_ID',
          'NUMBER OF PERSONS INJURED', 'NUMBER OF PERSONS KILLED',
          'NUMBER OF PEDESTRIANS INJURED', 'NUMBER OF PEDESTRIANS KILLED',
          'NUMBER OF CYCLIST INJURED', 'NUMBER OF CYCLIST KILLED',
          'NUMBER OF MOTORIST INJURED', 'NUMBER OF MOTORIST KILLED']

ROWS = [
    ('01/05/2015', '08:00', 'BROOKLYN', '1', '2', '0', '1', '0', '0', '0', '1', '0'),
    ('01/05/2015', '09:30', 'Brooklyn', '2', '1', '1', '0', '0', '1', '0', '0', '1'),
    ('01/05/2015', '09:30', 'Brooklyn', '2', '1', '1', '0', '0', '1', '0', '0', '1'),
    ('01/06/2015', '12:00', 'BROOKLYN', '3', '0', '0', '0', '0', '0', '0', '0', '0'),
    ('01/06/2015', '13:00', 'QUEENS', '4', '5', '0', '0', '0', '0', '0', '5', '0'),
    ('not a date', '13:00', 'BROOKLYN', '5', '0', '0', '0', '0', '0', '0', '0', '0'),
    ('01/07/2015', '14:00', '', '6', '0', '0', '0', '0', '0', '0', '0', '0'),
    ('12/31/2012', '23:00', 'BROOKLYN', '7', '1', '0', '0', '0', '0', '0', '1', '0'),
    ('01/08/2015', '10:00', 'BROOKLYN', '8', '-1', '0', '0', '0', '0', '0', '0', '0'),
]


@pytest.fixture
def raw():
    return pd.DataFrame(ROWS, columns=HEADER)


def test_daily_aggregation_for_borough(raw):
    daily = daily_collisions(raw, 'brooklyn', '2013-01-01', '2021-12-31')
    assert list(daily.columns) == ['date', 'collisions'] + CASUALTY_COLUMNS
    assert list(daily['date'].dt.day) == [5, 6, 8]
    assert list(daily['collisions']) == [2, 1, 1]

    first = daily.iloc[0]
    assert first['persons_injured'] == 3
    assert first['persons_killed'] == 1
    assert first['cyclists_injured'] == 1
    assert first['motorists_killed'] == 1


def test_negative_counts_are_kept(raw):
    daily = daily_collisions(raw).set_index('date')
    assert daily.loc[pd.Timestamp('2015-01-08'), 'persons_injured'] == -1


def test_window_excludes_out_of_range_days(raw):
    daily = daily_collisions(raw, 'BROOKLYN', '2015-01-06', '2015-01-07')
    assert list(daily['date'].dt.day) == [6]


def test_quality_report(raw):
    quality = collision_quality_report(raw)
    assert quality['rows'] == len(ROWS)
    assert quality['duplicate_ids_dropped'] == 1
    assert quality['bad_dates_dropped'] == 1
    assert quality['missing_borough'] == 1
    assert quality['negative_counts'] == {'persons_injured': 1}
    assert quality['rows_clean'] == len(ROWS) - 2


def test_legacy_headers(raw):
    legacy = raw.rename(columns={'CRASH DATE': 'DATE', 'COLLISION_ID': 'UNIQUE KEY'})
    assert len(daily_collisions(legacy)) == 3


def test_missing_required_column_is_fatal(raw):
    with pytest.raises(DataContractError):
        daily_collisions(raw.drop(columns=['BOROUGH']))


def test_empty_window_rejected(raw):
    with pytest.raises(ValueError):
        daily_collisions(raw, start='2016-01-01', end='2015-01-01')


def test_load_collisions_cleans_once(raw, monkeypatch):
    calls = []
    original = collisions.clean_collisions

    def counting(frame):
        calls.append(1)
        return original(frame)

    monkeypatch.setattr(collisions, 'clean_collisions', counting)
    daily, quality = load_collisions(raw, 'brooklyn', '2015-01-01', '2015-12-31')

    assert len(calls) == 1
    assert quality['duplicate_ids_dropped'] == 1
    assert quality['negative_counts'] == {'persons_injured': 1}
    pd.testing.assert_frame_equal(daily, daily_collisions(raw, 'brooklyn', '2015-01-01', '2015-12-31'))

import numpy as np
import pandas as pd
import pytest


def make_panel(n_days=20, seed=0, start='2015-01-01'):
    """Daily panel with count outcomes loosely driven by precipitation"""
    rs = np.random.RandomState(seed)
    dates = pd.date_range(start, periods=n_days, freq='D')
    precipitation = np.round(rs.exponential(0.2, n_days) * (rs.rand(n_days) < 0.4), 2)
    snowfall = np.round(rs.exponential(0.5, n_days) * (rs.rand(n_days) < 0.2), 1)
    snow_depth = np.round(rs.uniform(0, 3, n_days), 0)
    collisions = rs.poisson(30 + 20 * precipitation) + 1
    persons_injured = rs.poisson(8 + 5 * precipitation, n_days)
    return pd.DataFrame({
        'date': dates,
        'collisions': collisions,
        'persons_injured': persons_injured,
        'precipitation': precipitation,
        'snowfall': snowfall,
        'snow_depth': snow_depth,
        'wet_day': precipitation > 0,
    })


@pytest.fixture
def panel():
    return make_panel()


@pytest.fixture
def large_panel():
    return make_panel(n_days=120, seed=3)

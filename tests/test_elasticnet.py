import numpy as np
import pytest
from sklearn.model_selection import KFold
from sklearn.preprocessing import StandardScaler

from precip_collisions.models import ModelSpec
from precip_collisions.models.model_8_elasticnet import (
    Model8ElasticNet,
    elastic_net_grid,
    elastic_net_grid_search,
    first_minimum,
)


def test_default_grid_has_19_points_without_drift():
    grid = elastic_net_grid()
    assert len(grid) == 19
    assert grid[0] == 0.05
    assert grid[-1] == 0.95
    assert grid[8] == 0.45


def test_grid_rejects_non_positive_step():
    with pytest.raises(ValueError):
        elastic_net_grid(step=0.0)


def test_first_minimum_keeps_earliest_tie():
    assert first_minimum([3.0, 1.0, 2.0, 1.0]) == 1


def test_first_minimum_skips_nan():
    assert first_minimum([np.nan, 2.0, 1.5]) == 2


def test_first_minimum_all_nan_raises():
    with pytest.raises(ValueError):
        first_minimum([np.nan, np.nan])


def _scaled_split(large_panel):
    spec = ModelSpec('collisions', ['precipitation', 'snowfall', 'snow_depth'])
    X, y = spec.design(large_panel)
    scaler = StandardScaler().fit(X[:90])
    return scaler.transform(X[:90]), y[:90], scaler.transform(X[90:]), y[90:]


def test_search_evaluates_every_grid_point(large_panel):
    X_train, y_train, X_test, y_test = _scaled_split(large_panel)
    grid = elastic_net_grid(0.1, 0.9, 0.2)
    search = elastic_net_grid_search(X_train, y_train, X_test, y_test, grid,
                                     cv_factory=lambda: KFold(5, shuffle=True, random_state=0))
    assert [point[0] for point in search.grid] == grid
    assert all(np.isfinite(point[2]) for point in search.grid)


def test_search_returns_first_minimum_of_its_grid(large_panel):
    X_train, y_train, X_test, y_test = _scaled_split(large_panel)
    grid = elastic_net_grid(0.1, 0.9, 0.2)
    search = elastic_net_grid_search(X_train, y_train, X_test, y_test, grid,
                                     cv_factory=lambda: KFold(5, shuffle=True, random_state=0))
    scores = [point[2] for point in search.grid]
    assert search.rmse == min(scores)
    assert search.l1_ratio == grid[scores.index(min(scores))]


def test_search_rejects_empty_grid(large_panel):
    X_train, y_train, X_test, y_test = _scaled_split(large_panel)
    with pytest.raises(ValueError):
        elastic_net_grid_search(X_train, y_train, X_test, y_test, [],
                                cv_factory=lambda: KFold(5))


def test_model_records_grid_in_details(large_panel):
    spec = ModelSpec('collisions', ['precipitation', 'snowfall', 'snow_depth'])
    X, y = spec.design(large_panel)
    model = Model8ElasticNet(l1_ratios=[0.2, 0.8], random_state=np.random.RandomState(0), cv_folds=5)
    result = model.evaluate(X[:90], y[:90], X[90:], y[90:])
    assert [p['l1_ratio'] for p in result.details['grid']] == [0.2, 0.8]
    assert result.details['l1_ratio'] in (0.2, 0.8)
    assert result.rmse == min(p['rmse'] for p in result.details['grid'])


def test_fit_alone_picks_mixing_weight_by_cv(large_panel):
    spec = ModelSpec('collisions', ['precipitation', 'snowfall', 'snow_depth'])
    X, y = spec.design(large_panel)
    model = Model8ElasticNet(l1_ratios=[0.2, 0.8], random_state=np.random.RandomState(0), cv_folds=5)
    predictions = model.fit(X[:90], y[:90]).predict(X[90:])

    assert predictions.shape == (30,)
    assert np.all(np.isfinite(predictions))
    assert model.details['l1_ratio'] in (0.2, 0.8)
    assert model.details['alpha'] > 0
    assert 'grid' not in model.details

import numpy as np
import pytest

from precip_collisions.models import ModelSpec
from precip_collisions.models.model_5_tweedie import (
    TWEEDIE_POWER_GRID,
    Model5GLMTweedie,
    estimate_tweedie_power,
)


def test_power_grid():
    assert len(TWEEDIE_POWER_GRID) == 19
    assert TWEEDIE_POWER_GRID[0] == 1.05
    assert TWEEDIE_POWER_GRID[-1] == 1.95


def test_estimated_power_lies_in_unit_interval(large_panel):
    X, y = ModelSpec('persons_injured', ['precipitation', 'snowfall']).design(large_panel)
    power, diagnostics = estimate_tweedie_power(X, y)
    assert 1.0 <= power <= 2.0
    assert len(diagnostics['profile_loglike']) == len(TWEEDIE_POWER_GRID)
    assert diagnostics['loglike'] >= np.nanmax(diagnostics['profile_loglike'])


def test_model_profiles_on_training_data_by_default(large_panel):
    X, y = ModelSpec('persons_injured', ['precipitation', 'snowfall']).design(large_panel)
    result = Model5GLMTweedie().evaluate(X[:90], y[:90], X[90:], y[90:])
    assert result.details['profile_source'] == 'train'
    assert 1.0 <= result.details['var_power'] <= 2.0
    assert result.rmse >= 0


def test_model_profiles_on_supplied_table(large_panel):
    X, y = ModelSpec('persons_injured', ['precipitation', 'snowfall']).design(large_panel)
    result = Model5GLMTweedie(profile_X=X, profile_y=y).evaluate(X[:90], y[:90], X[90:], y[90:])
    assert result.details['profile_source'] == 'supplied'


def test_model_records_profile_label_it_is_given(large_panel):
    X, y = ModelSpec('persons_injured', ['precipitation', 'snowfall']).design(large_panel)
    model = Model5GLMTweedie(profile_X=X, profile_y=y, profile_source='full')
    result = model.evaluate(X[:90], y[:90], X[90:], y[90:])
    assert result.details['profile_source'] == 'full'


def test_profile_table_needs_both_arrays(large_panel):
    X, _ = ModelSpec('persons_injured', ['precipitation', 'snowfall']).design(large_panel)
    with pytest.raises(ValueError):
        Model5GLMTweedie(profile_X=X)

import numpy as np
import pandas as pd
import pytest

from precip_collisions.models import DataContractError, FamilyPreconditionError, ModelResult, ModelSpec, rmse
from precip_collisions.models.model_1_ols import Model1OLS
from precip_collisions.models.model_4_gamma import Model4GLMGamma


def test_rmse_hand_example():
    assert rmse([1, 2, 3], [1, 2, 5]) == pytest.approx(1.1547, abs=1e-4)


def test_rmse_perfect_fit_is_zero():
    assert rmse([4.0, 5.0], [4.0, 5.0]) == 0.0


def test_rmse_rejects_length_mismatch():
    with pytest.raises(ValueError):
        rmse([1, 2, 3], [1, 2])


def test_rmse_rejects_empty_input():
    with pytest.raises(ValueError):
        rmse([], [])


def test_spec_freezes_predictors_to_tuple():
    spec = ModelSpec('collisions', ['precipitation', 'snowfall'])
    assert spec.independents == ('precipitation', 'snowfall')
    assert spec.columns == ('collisions', 'precipitation', 'snowfall')


@pytest.mark.parametrize('independents', [[], ['collisions'], ['snowfall', 'snowfall']])
def test_spec_rejects_bad_predictor_lists(independents):
    with pytest.raises(ValueError):
        ModelSpec('collisions', independents)


def test_validate_missing_column(panel):
    spec = ModelSpec('collisions', ['precipitation', 'wind_speed'])
    with pytest.raises(DataContractError, match='wind_speed'):
        spec.validate(panel, 'train')


def test_validate_non_numeric_column(panel):
    frame = panel.assign(precipitation=panel['precipitation'].astype(str))
    with pytest.raises(DataContractError, match='non-numeric'):
        ModelSpec('collisions', ['precipitation']).validate(frame)


def test_validate_missing_values(panel):
    frame = panel.copy()
    frame.loc[3, 'snowfall'] = np.nan
    with pytest.raises(DataContractError, match='missing values'):
        ModelSpec('collisions', ['snowfall']).validate(frame)


def test_validate_empty_table(panel):
    with pytest.raises(DataContractError):
        ModelSpec('collisions', ['snowfall']).validate(panel.iloc[0:0])


def test_design_returns_copies(panel):
    spec = ModelSpec('collisions', ['precipitation', 'snowfall'])
    X, y = spec.design(panel)
    X[:] = -1.0
    y[:] = -1.0
    assert (panel['precipitation'] >= 0).all()
    assert (panel['collisions'] > 0).all()


def test_failure_result_has_nan_rmse():
    result = ModelResult.failure('GLM Gamma', 'bad data')
    assert result.failed
    assert np.isnan(result.rmse)


def test_ols_evaluate_reports_rmse(panel):
    spec = ModelSpec('collisions', ['precipitation', 'snowfall', 'snow_depth'])
    X, y = spec.design(panel)
    result = Model1OLS().evaluate(X[:15], y[:15], X[15:], y[15:])
    assert not result.failed
    assert result.rmse >= 0
    assert len(result.details['coefficients']) == 4


def test_predict_before_fit_raises():
    with pytest.raises(ValueError):
        Model1OLS().predict(np.zeros((2, 1)))


def test_gamma_rejects_zero_outcome():
    X = np.arange(10, dtype=float).reshape(-1, 1)
    y = np.ones(10)
    y[4] = 0.0
    with pytest.raises(FamilyPreconditionError):
        Model4GLMGamma().fit(X, y)

import numpy as np
import pandas as pd
import pytest

from precip_collisions.models import FAMILY_NAMES, DataContractError, ModelComparisonHarness, ModelSpec
from precip_collisions.models.harness import PROMOTED_WARNINGS
from precip_collisions.panel import train_test_partition

ROSTER_ORDER = ['OLS', 'GLM Gaussian', 'GLM Poisson', 'GLM Gamma', 'GLM Tweedie',
                'Lasso', 'Ridge', 'Elastic Net', 'Random Forest', 'Neural Net']

SPEC = ModelSpec('collisions', ['precipitation', 'snowfall', 'snow_depth'])


def test_roster_labels_and_order():
    assert FAMILY_NAMES == ROSTER_ORDER


def test_twenty_day_run_returns_full_roster(panel):
    partition = train_test_partition(panel, fraction=0.75, seed=42)
    harness = ModelComparisonHarness(seed=42, cv_folds=10)
    results = harness.run(SPEC, partition)

    assert [r.family for r in results] == ROSTER_ORDER
    for result in results:
        assert result.failed or (np.isfinite(result.rmse) and result.rmse >= 0)

    frame = harness.to_frame(results)
    assert list(frame.columns) == ['family', 'rmse', 'status', 'error']
    assert list(frame['family']) == ROSTER_ORDER
    assert set(frame['status']) <= {'ok', 'failed'}


def test_train_and_test_tables_accepted_directly(panel):
    results = ModelComparisonHarness(cv_folds=3).run(SPEC, panel.iloc[:15], panel.iloc[15:])
    assert len(results) == 10


def test_gamma_with_zero_outcome_is_marked_failed(panel):
    zeros = panel.assign(persons_injured=0)
    spec = ModelSpec('persons_injured', ['precipitation', 'snowfall', 'snow_depth'])
    results = ModelComparisonHarness(cv_folds=3).run(spec, zeros.iloc[:15], zeros.iloc[15:])

    by_family = {r.family: r for r in results}
    assert len(results) == 10
    assert by_family['GLM Gamma'].failed
    assert 'non-positive' in by_family['GLM Gamma'].error
    assert np.isnan(by_family['GLM Gamma'].rmse)
    assert not by_family['OLS'].failed


def test_same_seed_gives_same_results(large_panel):
    partition = train_test_partition(large_panel, seed=5)
    first = ModelComparisonHarness(seed=11, cv_folds=5).run(SPEC, partition)
    second = ModelComparisonHarness(seed=11, cv_folds=5).run(SPEC, partition)
    pd.testing.assert_frame_equal(ModelComparisonHarness.to_frame(first),
                                  ModelComparisonHarness.to_frame(second))


def test_inputs_are_not_modified(panel):
    partition = train_test_partition(panel, seed=42)
    train_before, test_before = partition.train.copy(), partition.test.copy()
    ModelComparisonHarness(cv_folds=3).run(SPEC, partition)
    pd.testing.assert_frame_equal(partition.train, train_before)
    pd.testing.assert_frame_equal(partition.test, test_before)


def test_contract_violation_raises_before_fitting(panel):
    bad = panel.drop(columns=['snow_depth'])
    with pytest.raises(DataContractError, match='snow_depth'):
        ModelComparisonHarness().run(SPEC, bad.iloc[:15], bad.iloc[15:])


def test_alternating_rain_scenario_scores_every_linear_family():
    panel = pd.DataFrame({
        'date': pd.date_range('2015-01-01', periods=20, freq='D'),
        'precipitation': [0.0, 0.5] * 10,
        'collisions': [10, 12] * 10,
    })
    spec = ModelSpec('collisions', ['precipitation'])
    partition = train_test_partition(panel, fraction=0.75, seed=42)
    results = ModelComparisonHarness(seed=42).run(spec, partition)

    assert [r.family for r in results] == ROSTER_ORDER
    by_family = {r.family: r for r in results}
    for family in ('OLS', 'GLM Gaussian'):
        assert not by_family[family].failed, by_family[family].error
        assert by_family[family].rmse >= 0
    for result in results:
        assert result.failed or result.rmse >= 0
        assert 'PerfectSeparation' not in (result.error or '')


def test_perfect_separation_is_not_promoted():
    assert 'PerfectSeparationWarning' not in [w.__name__ for w in PROMOTED_WARNINGS]


def test_elastic_net_row_is_best_of_its_grid(large_panel):
    partition = train_test_partition(large_panel, seed=42)
    harness = ModelComparisonHarness(seed=42, cv_folds=5, elastic_net_grid=[0.1, 0.5, 0.9])
    elastic_net = [r for r in harness.run(SPEC, partition) if r.family == 'Elastic Net'][0]

    assert not elastic_net.failed
    grid_scores = [point['rmse'] for point in elastic_net.details['grid']]
    assert [point['l1_ratio'] for point in elastic_net.details['grid']] == [0.1, 0.5, 0.9]
    assert elastic_net.rmse == min(grid_scores)
    assert all(elastic_net.rmse <= score for score in grid_scores)


def _tweedie(results):
    return [r for r in results if r.family == 'GLM Tweedie'][0]


def test_tweedie_profiles_on_full_data_by_default(large_panel):
    partition = train_test_partition(large_panel, seed=42)
    tweedie = _tweedie(ModelComparisonHarness(cv_folds=3).run(SPEC, partition))
    assert not tweedie.failed, tweedie.error
    assert tweedie.details['profile_source'] == 'full'


def test_tweedie_train_only_profile_is_opt_in(large_panel):
    partition = train_test_partition(large_panel, seed=42)
    harness = ModelComparisonHarness(cv_folds=3, tweedie_profile_source='train')
    assert _tweedie(harness.run(SPEC, partition)).details['profile_source'] == 'train'


def test_tweedie_profile_frame_is_labelled_supplied(large_panel):
    partition = train_test_partition(large_panel, seed=42)
    results = ModelComparisonHarness(cv_folds=3).run(SPEC, partition, profile_frame=large_panel)
    assert _tweedie(results).details['profile_source'] == 'supplied'


def test_unknown_tweedie_profile_source_rejected():
    with pytest.raises(ValueError, match='tweedie_profile_source'):
        ModelComparisonHarness(tweedie_profile_source='test')

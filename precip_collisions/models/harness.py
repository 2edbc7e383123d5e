"""
harness.py
==========
Model Comparison Harness: fit every regression family on one training
partition and score it on the held-out partition

Design Principles:
- Fixed roster, fixed order
- Continues execution if individual families fail (failure is recorded,
  never raised)
- One seeded generator per run, shared by every randomised fit in roster order
- No logging, no printing, inputs are never modified
"""

import warnings
import numpy as np
import pandas as pd
from typing import List, Optional, Sequence, Type
from sklearn.exceptions import ConvergenceWarning as SklearnConvergenceWarning
from statsmodels.tools.sm_exceptions import ConvergenceWarning as StatsmodelsConvergenceWarning

from .base_model import BaseRegressionModel, ModelResult, ModelSpec
from .model_1_ols import Model1OLS
from .model_2_glm_gaussian import Model2GLMGaussian
from .model_3_poisson import Model3GLMPoisson
from .model_4_gamma import Model4GLMGamma
from .model_5_tweedie import Model5GLMTweedie
from .model_6_lasso import Model6Lasso
from .model_7_ridge import Model7Ridge
from .model_8_elasticnet import Model8ElasticNet, elastic_net_grid as default_elastic_net_grid
from .model_9_random_forest import Model9RandomForest
from .model_10_neural import Model10NeuralNet

# ============================================================================
# ROSTER
# ============================================================================

ROSTER: List[Type[BaseRegressionModel]] = [
    Model1OLS,
    Model2GLMGaussian,
    Model3GLMPoisson,
    Model4GLMGamma,
    Model5GLMTweedie,
    Model6Lasso,
    Model7Ridge,
    Model8ElasticNet,
    Model9RandomForest,
    Model10NeuralNet,
]

FAMILY_NAMES = [model_class.family_name for model_class in ROSTER]

# statsmodels PerfectSeparationWarning stays a warning: exact fits are scored
PROMOTED_WARNINGS = (
    SklearnConvergenceWarning,
    StatsmodelsConvergenceWarning,
)

TWEEDIE_PROFILE_SOURCES = ('full', 'train')


class ModelComparisonHarness:
    """
    Runs the full roster on one (train, test) pair

    Args:
        seed: Seed of the generator created at the start of every run
        cv_folds: Folds for the cross-validated penalty searches
        elastic_net_grid: Mixing weights for the elastic net sweep
            (default 0.05 .. 0.95 step 0.05)
        tweedie_profile_source: 'full' profiles the Tweedie power on train
            and test rows together, 'train' on the training rows only
    """

    def __init__(self, seed: int = 42, cv_folds: int = 10,
                 elastic_net_grid: Optional[Sequence[float]] = None,
                 tweedie_profile_source: str = 'full'):
        if cv_folds < 2:
            raise ValueError(f"cv_folds must be at least 2, got {cv_folds}")
        if tweedie_profile_source not in TWEEDIE_PROFILE_SOURCES:
            raise ValueError(f"tweedie_profile_source must be one of {TWEEDIE_PROFILE_SOURCES}, "
                             f"got {tweedie_profile_source!r}")
        self.seed = seed
        self.cv_folds = cv_folds
        self.elastic_net_grid = (list(elastic_net_grid) if elastic_net_grid is not None
                                 else default_elastic_net_grid())
        self.tweedie_profile_source = tweedie_profile_source

    def run(self, spec: ModelSpec, partition_or_train, test: Optional[pd.DataFrame] = None,
            profile_frame: Optional[pd.DataFrame] = None) -> List[ModelResult]:
        """
        Fit and score every family

        Args:
            spec: Outcome and ordered predictors
            partition_or_train: A Partition (train/test attributes) or the
                training table, in which case `test` is required
            test: Held-out table when a training table is given
            profile_frame: Explicit table for the Tweedie power profile;
                overrides tweedie_profile_source

        Returns:
            One ModelResult per family, in roster order

        Raises:
            DataContractError: If either table breaks the modeling contract
        """
        if test is None:
            if not hasattr(partition_or_train, 'train') or not hasattr(partition_or_train, 'test'):
                raise TypeError("Pass a Partition or both train and test tables")
            train, test = partition_or_train.train, partition_or_train.test
        else:
            train = partition_or_train

        spec.validate(train, 'train')
        spec.validate(test, 'test')
        if profile_frame is not None:
            spec.validate(profile_frame, 'profile')

        X_train, y_train = spec.design(train)
        X_test, y_test = spec.design(test)
        if profile_frame is not None:
            profile = spec.design(profile_frame) + ('supplied',)
        elif self.tweedie_profile_source == 'full':
            profile = (np.vstack([X_train, X_test]), np.concatenate([y_train, y_test]), 'full')
        else:
            profile = (None, None, 'train')

        random_state = np.random.RandomState(self.seed)
        results = []
        for model_class in ROSTER:
            model = self._build(model_class, random_state, profile)
            results.append(self._evaluate_one(model, X_train, y_train, X_test, y_test))
        return results

    def _build(self, model_class: Type[BaseRegressionModel],
               random_state: np.random.RandomState, profile) -> BaseRegressionModel:
        kwargs = {'random_state': random_state, 'cv_folds': self.cv_folds}
        if model_class is Model5GLMTweedie:
            kwargs['profile_X'], kwargs['profile_y'], kwargs['profile_source'] = profile
        elif model_class is Model8ElasticNet:
            kwargs['l1_ratios'] = self.elastic_net_grid
        return model_class(**kwargs)

    @staticmethod
    def _evaluate_one(model: BaseRegressionModel,
                      X_train: np.ndarray, y_train: np.ndarray,
                      X_test: np.ndarray, y_test: np.ndarray) -> ModelResult:
        """One family; any failure becomes a failed ModelResult"""
        try:
            with warnings.catch_warnings():
                warnings.simplefilter('ignore')
                for category in PROMOTED_WARNINGS:
                    warnings.simplefilter('error', category)
                result = model.evaluate(X_train, y_train, X_test, y_test)
        except Exception as e:
            message = str(e) or type(e).__name__
            return ModelResult.failure(model.family_name, f"{type(e).__name__}: {message}")

        if not np.isfinite(result.rmse):
            return ModelResult.failure(model.family_name, "non-finite RMSE")
        return result

    @staticmethod
    def to_frame(results: Sequence[ModelResult]) -> pd.DataFrame:
        """Comparison table: family, rmse, status, error (roster order kept)"""
        rows = [{
            'family': r.family,
            'rmse': r.rmse,
            'status': 'failed' if r.failed else 'ok',
            'error': r.error if r.failed else '',
        } for r in results]
        return pd.DataFrame(rows, columns=['family', 'rmse', 'status', 'error'])


__all__ = ['ROSTER', 'FAMILY_NAMES', 'PROMOTED_WARNINGS', 'TWEEDIE_PROFILE_SOURCES', 'ModelComparisonHarness']

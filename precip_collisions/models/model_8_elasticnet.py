"""
model_8_elasticnet.py
=====================
Model 8: Elastic Net Regression
Combined L1 and L2 regularization with a two-level hyperparameter search

Search:
- Outer level: the L1/L2 mixing weight is swept over a fixed grid
  (0.05 to 0.95 in steps of 0.05 by default)
- Inner level: for each mixing weight the penalty strength is chosen by
  seeded k-fold CV on the training partition (ElasticNetCV)
- Each candidate is scored on the held-out partition; the kept point is the
  first minimum in grid order. Every grid point is evaluated.
"""

import numpy as np
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple
from sklearn.linear_model import ElasticNetCV
from sklearn.model_selection import KFold
from sklearn.preprocessing import StandardScaler

from .base_model import BaseRegressionModel, ModelResult, rmse


def elastic_net_grid(start: float = 0.05, stop: float = 0.95, step: float = 0.05) -> List[float]:
    """
    Mixing-weight grid built from integer steps

    Returns:
        [start, start + step, ..., stop], each value rounded to 10 decimals
    """
    if step <= 0:
        raise ValueError(f"Grid step must be positive, got {step}")
    n_points = int(round((stop - start) / step)) + 1
    if n_points < 1:
        raise ValueError(f"Empty grid: start={start}, stop={stop}")
    grid = [round(start + i * step, 10) for i in range(n_points)]
    out_of_range = [r for r in grid if not 0.0 < r <= 1.0]
    if out_of_range:
        raise ValueError(f"Mixing weights must lie in (0, 1], got {out_of_range}")
    return grid


def first_minimum(scores: Sequence[float]) -> int:
    """Index of the first minimum in order; NaN scores never win"""
    best_idx = None
    for idx, score in enumerate(scores):
        if np.isnan(score):
            continue
        if best_idx is None or score < scores[best_idx]:
            best_idx = idx
    if best_idx is None:
        raise ValueError("No finite score to select from")
    return best_idx


@dataclass(frozen=True)
class ElasticNetSearchResult:
    """Outcome of the mixing-weight sweep"""
    l1_ratio: float
    alpha: float
    rmse: float
    grid: Tuple[Tuple[float, float, float], ...]   # (l1_ratio, alpha, held-out RMSE)
    model: Any = None


def elastic_net_grid_search(X_train: np.ndarray, y_train: np.ndarray,
                            X_test: np.ndarray, y_test: np.ndarray,
                            l1_ratios: Sequence[float],
                            cv_factory: Callable[[], KFold],
                            max_iter: int = 10000) -> ElasticNetSearchResult:
    """
    Sweep the mixing weight, tune the penalty by CV at each point, keep the
    first point with the lowest held-out RMSE

    Args:
        X_train, y_train: Training partition (predictors already scaled)
        X_test, y_test: Held-out partition (scaled with the training scaler)
        l1_ratios: Mixing weights in grid order
        cv_factory: Returns the k-fold splitter used for each grid point
        max_iter: Coordinate descent iteration cap

    Returns:
        ElasticNetSearchResult for the kept grid point, with the full grid
    """
    if len(l1_ratios) == 0:
        raise ValueError("Elastic net grid is empty")

    fitted = []
    for l1_ratio in l1_ratios:
        model = ElasticNetCV(
            l1_ratio=l1_ratio,
            cv=cv_factory(),
            max_iter=max_iter,
            selection='cyclic'
        )
        model.fit(X_train, y_train)
        score = rmse(y_test, model.predict(X_test))
        fitted.append((float(l1_ratio), float(model.alpha_), score, model))

    best_idx = first_minimum([score for _, _, score, _ in fitted])
    l1_ratio, alpha, score, model = fitted[best_idx]
    return ElasticNetSearchResult(
        l1_ratio=l1_ratio,
        alpha=alpha,
        rmse=score,
        grid=tuple((r, a, s) for r, a, s, _ in fitted),
        model=model,
    )


class Model8ElasticNet(BaseRegressionModel):
    """
    Model 8: Elastic Net

    evaluate() runs the held-out grid search. fit() alone (no held-out data)
    lets ElasticNetCV pick both the mixing weight and the penalty by CV.
    """

    family_name = "Elastic Net"

    max_iter = 10000

    def __init__(self, l1_ratios: Optional[Sequence[float]] = None, **kwargs):
        super().__init__(**kwargs)
        self.l1_ratios = list(l1_ratios) if l1_ratios is not None else elastic_net_grid()
        self.scaler = StandardScaler()
        self.alpha = None
        self.l1_ratio = None
        self.search: Optional[ElasticNetSearchResult] = None

    def _fit_core(self, X: np.ndarray, y: np.ndarray) -> None:
        X_scaled = self.scaler.fit_transform(X)
        self.model = ElasticNetCV(
            l1_ratio=self.l1_ratios,
            cv=self._kfold(len(y)),
            max_iter=self.max_iter,
            selection='cyclic'
        )
        self.model.fit(X_scaled, y)
        self.alpha = float(self.model.alpha_)
        self.l1_ratio = float(self.model.l1_ratio_)
        self.details.update({'alpha': self.alpha, 'l1_ratio': self.l1_ratio})

    def _predict_core(self, X: np.ndarray) -> np.ndarray:
        return self.model.predict(self.scaler.transform(X))

    def evaluate(self,
                 X_train: np.ndarray, y_train: np.ndarray,
                 X_test: np.ndarray, y_test: np.ndarray) -> ModelResult:
        self.check_preconditions(y_train)
        X_train_scaled = self.scaler.fit_transform(X_train)
        X_test_scaled = self.scaler.transform(X_test)

        self.search = elastic_net_grid_search(
            X_train_scaled, y_train, X_test_scaled, y_test,
            l1_ratios=self.l1_ratios,
            cv_factory=lambda: self._kfold(len(y_train)),
            max_iter=self.max_iter
        )
        self.model = self.search.model
        self.alpha = self.search.alpha
        self.l1_ratio = self.search.l1_ratio
        self.details.update({
            'alpha': self.alpha,
            'l1_ratio': self.l1_ratio,
            'grid': [{'l1_ratio': r, 'alpha': a, 'rmse': s} for r, a, s in self.search.grid],
        })
        return ModelResult(family=self.family_name, rmse=self.search.rmse,
                           details=dict(self.details))

"""
base_model.py
=============
Base class and data contracts for the collision regression families

- ModelSpec: outcome column + ordered predictor columns
- ModelResult: family label + held-out RMSE (or the reason the family failed)
- BaseRegressionModel: fit / predict / evaluate template methods

Child classes implement:
- _fit_core(X, y) -> fit model
- _predict_core(X) -> predict on the outcome scale
"""

import numpy as np
import pandas as pd
from typing import Any, Dict, Optional, Sequence, Tuple
from dataclasses import dataclass, field
from abc import ABC, abstractmethod
from pandas.api.types import is_numeric_dtype
import statsmodels.api as sm
from sklearn.metrics import mean_squared_error
from sklearn.model_selection import KFold


class DataContractError(ValueError):
    """Raised when a table does not satisfy the modeling contract"""


class FamilyPreconditionError(ValueError):
    """Raised when training data violates a family's distributional assumptions"""


# ============================================================================
# DATA CONTRACTS
# ============================================================================

@dataclass(frozen=True)
class ModelSpec:
    """Dependent variable plus an ordered, fixed list of predictors"""
    dependent: str
    independents: Tuple[str, ...]

    def __post_init__(self):
        # Lists coming from the JSON config are frozen into tuples
        object.__setattr__(self, 'independents', tuple(self.independents))
        if not self.independents:
            raise ValueError("ModelSpec needs at least one independent variable")
        if self.dependent in self.independents:
            raise ValueError(f"Dependent '{self.dependent}' is also listed as a predictor")
        if len(set(self.independents)) != len(self.independents):
            raise ValueError(f"Duplicate predictors in {list(self.independents)}")

    @property
    def columns(self) -> Tuple[str, ...]:
        return (self.dependent,) + self.independents

    def validate(self, frame: pd.DataFrame, label: str = "data") -> None:
        """
        Check that every named column exists, is numeric and has no missing values

        Args:
            frame: Table holding the modeled columns
            label: Name used in error messages (e.g. 'train', 'test')

        Raises:
            DataContractError: If any check fails
        """
        if len(frame) == 0:
            raise DataContractError(f"{label}: no rows")

        missing = [c for c in self.columns if c not in frame.columns]
        if missing:
            raise DataContractError(f"{label}: missing columns {missing}")

        non_numeric = [c for c in self.columns if not is_numeric_dtype(frame[c])]
        if non_numeric:
            raise DataContractError(f"{label}: non-numeric columns {non_numeric}")

        null_counts = frame.loc[:, list(self.columns)].isna().sum()
        with_nulls = {c: int(n) for c, n in null_counts.items() if n > 0}
        if with_nulls:
            raise DataContractError(f"{label}: missing values in {with_nulls}")

    def design(self, frame: pd.DataFrame) -> Tuple[np.ndarray, np.ndarray]:
        """Return (X, y) as float copies so fits never touch the caller's table"""
        X = frame.loc[:, list(self.independents)].to_numpy(dtype=float, copy=True)
        y = frame[self.dependent].to_numpy(dtype=float, copy=True)
        return X, y


@dataclass(frozen=True)
class ModelResult:
    """Held-out score of one fitted family"""
    family: str
    rmse: float
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def failed(self) -> bool:
        return self.error is not None

    @classmethod
    def failure(cls, family: str, error: str) -> 'ModelResult':
        return cls(family=family, rmse=float('nan'), error=error)


def rmse(y_true: Sequence[float], y_pred: Sequence[float]) -> float:
    """
    Root-mean-squared error on raw residuals (no clipping)

    Args:
        y_true: Observed outcome values
        y_pred: Predicted values

    Returns:
        sqrt(mean((y_true - y_pred)^2))
    """
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)
    if y_true.shape != y_pred.shape:
        raise ValueError(f"Shape mismatch: {y_true.shape} vs {y_pred.shape}")
    if y_true.size == 0:
        raise ValueError("RMSE of an empty set is undefined")
    return float(np.sqrt(mean_squared_error(y_true, y_pred)))


# ============================================================================
# BASE MODEL
# ============================================================================

class BaseRegressionModel(ABC):
    """
    Base class for the regression families compared by the harness

    Handles all common functionality:
    - Distributional precondition checks
    - Fit / predict template methods
    - Held-out evaluation (RMSE)
    - Seeded k-fold splitters for families that tune by cross-validation

    Families never log or print; anything worth reporting goes into
    `self.details` and travels back in the ModelResult.
    """

    family_name: str = ""

    def __init__(self,
                 random_state: Optional[np.random.RandomState] = None,
                 cv_folds: int = 10):
        """
        Initialize base model

        Args:
            random_state: Generator handle shared across the roster for one run
            cv_folds: Number of folds for cross-validated penalty selection
        """
        self.random_state = random_state
        self.cv_folds = cv_folds
        self.model = None
        self.details: Dict[str, Any] = {}

    # ========================================================================
    # PRECONDITIONS
    # ========================================================================

    def check_preconditions(self, y: np.ndarray) -> None:
        """Families with distributional assumptions extend this"""
        if not np.all(np.isfinite(y)):
            raise FamilyPreconditionError(f"{self.family_name}: outcome has non-finite values")

    def _require_non_negative(self, y: np.ndarray) -> None:
        n_negative = int(np.sum(y < 0))
        if n_negative:
            raise FamilyPreconditionError(
                f"{self.family_name}: {n_negative} negative outcome values")

    def _require_positive(self, y: np.ndarray) -> None:
        n_non_positive = int(np.sum(y <= 0))
        if n_non_positive:
            raise FamilyPreconditionError(
                f"{self.family_name}: {n_non_positive} non-positive outcome values "
                f"(family requires y > 0)")

    def _kfold(self, n_samples: int) -> KFold:
        """Shuffled k-fold splitter drawing from the shared generator"""
        if n_samples < 2:
            raise ValueError(f"{self.family_name}: need at least 2 rows for cross-validation")
        n_splits = min(self.cv_folds, n_samples)
        return KFold(n_splits=n_splits, shuffle=True, random_state=self.random_state)

    # ========================================================================
    # ABSTRACT METHODS - Child classes must implement
    # ========================================================================

    @abstractmethod
    def _fit_core(self, X: np.ndarray, y: np.ndarray) -> None:
        """Core model fitting logic (child implements)"""
        pass

    @abstractmethod
    def _predict_core(self, X: np.ndarray) -> np.ndarray:
        """Core prediction logic (child implements)"""
        pass

    # ========================================================================
    # TEMPLATE METHODS
    # ========================================================================

    def fit(self, X: np.ndarray, y: np.ndarray) -> 'BaseRegressionModel':
        """Check preconditions, then fit (template method)"""
        self.check_preconditions(y)
        self._fit_core(X, y)
        return self

    def predict(self, X: np.ndarray) -> np.ndarray:
        """Predictions on the outcome scale; negative values are passed through"""
        if self.model is None:
            raise ValueError("Model must be fitted before prediction")
        return np.asarray(self._predict_core(X), dtype=float).ravel()

    def evaluate(self,
                 X_train: np.ndarray, y_train: np.ndarray,
                 X_test: np.ndarray, y_test: np.ndarray) -> ModelResult:
        """
        Fit on the training partition and score on the held-out partition

        Returns:
            ModelResult with the held-out RMSE and any fit details
        """
        self.fit(X_train, y_train)
        predictions = self.predict(X_test)
        if not np.all(np.isfinite(predictions)):
            raise ValueError(f"{self.family_name}: non-finite predictions")
        return ModelResult(family=self.family_name,
                           rmse=rmse(y_test, predictions),
                           details=dict(self.details))


class BaseGLMModel(BaseRegressionModel):
    """
    statsmodels GLM with an intercept column

    Children supply the distribution family via _make_family(). IRLS
    non-convergence is raised so the harness marks the family failed.
    """

    maxiter: int = 200

    @abstractmethod
    def _make_family(self):
        """Return a statsmodels family instance"""
        pass

    def _fit_core(self, X: np.ndarray, y: np.ndarray) -> None:
        X_with_const = sm.add_constant(X, has_constant='add')
        glm = sm.GLM(y, X_with_const, family=self._make_family())
        results = glm.fit(maxiter=self.maxiter, disp=0)
        if not getattr(results, 'converged', True):
            raise RuntimeError(f"{self.family_name}: IRLS did not converge "
                               f"in {self.maxiter} iterations")
        self.model = results
        self.details.update({
            'coefficients': [float(b) for b in results.params],
            'deviance': float(results.deviance),
            'dispersion': float(results.scale),
        })

    def _predict_core(self, X: np.ndarray) -> np.ndarray:
        return self.model.predict(sm.add_constant(X, has_constant='add'))

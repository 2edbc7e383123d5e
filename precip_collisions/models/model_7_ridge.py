"""
model_7_ridge.py
================
Model 7: L2-penalized (Ridge) linear regression

Same procedure as the Lasso with the mixing weight at the ridge extreme:
standardised predictors, penalty chosen by seeded k-fold CV (minimum MSE)
over a log-spaced grid.
"""

import numpy as np
from sklearn.linear_model import RidgeCV
from sklearn.preprocessing import StandardScaler

from .base_model import BaseRegressionModel


class Model7Ridge(BaseRegressionModel):
    """Model 7: RidgeCV on standardised predictors"""

    family_name = "Ridge"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.scaler = StandardScaler()
        self.alphas = np.logspace(-4, 4, 100)  # Alpha search range
        self.alpha = None

    def _fit_core(self, X: np.ndarray, y: np.ndarray) -> None:
        X_scaled = self.scaler.fit_transform(X)
        self.model = RidgeCV(
            alphas=self.alphas,
            cv=self._kfold(len(y)),
            fit_intercept=True,
            scoring='neg_mean_squared_error'
        )
        self.model.fit(X_scaled, y)

        self.alpha = float(self.model.alpha_)
        self.details.update({
            'alpha': self.alpha,
            'coefficients': [float(b) for b in self.model.coef_],
        })

    def _predict_core(self, X: np.ndarray) -> np.ndarray:
        return self.model.predict(self.scaler.transform(X))

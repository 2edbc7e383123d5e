"""
model_6_lasso.py
================
Model 6: L1-penalized (Lasso) linear regression

Predictors are standardised before penalisation. The penalty strength is
the value with minimum k-fold cross-validated MSE on the training partition.
"""

import numpy as np
from sklearn.linear_model import LassoCV
from sklearn.preprocessing import StandardScaler

from .base_model import BaseRegressionModel


class Model6Lasso(BaseRegressionModel):
    """Model 6: LassoCV on standardised predictors"""

    family_name = "Lasso"

    max_iter = 10000

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.scaler = StandardScaler()
        self.alpha = None

    def _fit_core(self, X: np.ndarray, y: np.ndarray) -> None:
        X_scaled = self.scaler.fit_transform(X)
        self.model = LassoCV(
            cv=self._kfold(len(y)),
            max_iter=self.max_iter,
            selection='cyclic'
        )
        self.model.fit(X_scaled, y)

        self.alpha = float(self.model.alpha_)
        self.details.update({
            'alpha': self.alpha,
            'coefficients': [float(b) for b in self.model.coef_],
            'n_selected': int(np.sum(np.abs(self.model.coef_) > 1e-10)),
        })

    def _predict_core(self, X: np.ndarray) -> np.ndarray:
        return self.model.predict(self.scaler.transform(X))

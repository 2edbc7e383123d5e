"""
model_1_ols.py
==============
Model 1: Ordinary Least Squares
Baseline linear fit of the outcome on the weather predictors, no hyperparameters
"""

import numpy as np
import statsmodels.api as sm

from .base_model import BaseRegressionModel


class Model1OLS(BaseRegressionModel):
    """
    Model 1: OLS with intercept (statsmodels)
    """

    family_name = "OLS"

    def _fit_core(self, X: np.ndarray, y: np.ndarray) -> None:
        """
        Core OLS fitting

        Args:
            X: Predictor matrix (training partition)
            y: Outcome values
        """
        X_with_const = sm.add_constant(X, has_constant='add')
        self.model = sm.OLS(y, X_with_const).fit()

        self.details.update({
            'coefficients': [float(b) for b in self.model.params],
            'r2_train': float(self.model.rsquared),
        })

    def _predict_core(self, X: np.ndarray) -> np.ndarray:
        return self.model.predict(sm.add_constant(X, has_constant='add'))

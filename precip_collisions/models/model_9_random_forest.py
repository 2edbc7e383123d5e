"""
model_9_random_forest.py
========================
Model 9: Random Forest regression

scikit-learn defaults, seeded from the shared generator so bootstrap draws and
feature subsampling repeat across runs with the same seed.
"""

import numpy as np
from sklearn.ensemble import RandomForestRegressor

from .base_model import BaseRegressionModel


class Model9RandomForest(BaseRegressionModel):
    """Model 9: RandomForestRegressor with default settings"""

    family_name = "Random Forest"

    def _fit_core(self, X: np.ndarray, y: np.ndarray) -> None:
        self.model = RandomForestRegressor(random_state=self.random_state)
        self.model.fit(X, y)
        self.details.update({
            'n_estimators': int(self.model.n_estimators),
            'feature_importances': [float(v) for v in self.model.feature_importances_],
        })

    def _predict_core(self, X: np.ndarray) -> np.ndarray:
        return self.model.predict(X)

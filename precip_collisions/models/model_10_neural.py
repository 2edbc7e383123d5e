"""
model_10_neural.py
==================
Model 10: Feed-forward neural network

Two small hidden layers (3 and 2 units, logistic activation) on standardised
predictors, fit with L-BFGS. Weight initialisation draws from the shared
generator.
"""

import numpy as np
from sklearn.neural_network import MLPRegressor
from sklearn.preprocessing import StandardScaler

from .base_model import BaseRegressionModel


class Model10NeuralNet(BaseRegressionModel):
    """Model 10: MLPRegressor with hidden layers (3, 2)"""

    family_name = "Neural Net"

    hidden_layer_sizes = (3, 2)
    max_iter = 5000

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.scaler = StandardScaler()

    def _fit_core(self, X: np.ndarray, y: np.ndarray) -> None:
        X_scaled = self.scaler.fit_transform(X)
        self.model = MLPRegressor(
            hidden_layer_sizes=self.hidden_layer_sizes,
            activation='logistic',
            solver='lbfgs',
            max_iter=self.max_iter,
            random_state=self.random_state
        )
        self.model.fit(X_scaled, y)
        self.details.update({
            'n_iter': int(self.model.n_iter_),
            'loss': float(self.model.loss_),
        })

    def _predict_core(self, X: np.ndarray) -> np.ndarray:
        return self.model.predict(self.scaler.transform(X))

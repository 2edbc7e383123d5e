"""
model_4_gamma.py
================
Model 4: GLM with Gamma distribution and log link

Key characteristics:
- Log link keeps predictions positive
- Quadratic variance function (Var ~ mu^2)
- Requires y > 0. Daily casualty counts are often zero, so this family
  is frequently undefined for the injury outcomes. The harness then records
  it as failed instead of fitting on adjusted values.
"""

import numpy as np
import statsmodels.api as sm
from statsmodels.genmod.families.links import Log

from .base_model import BaseGLMModel


class Model4GLMGamma(BaseGLMModel):
    """Model 4: GLM-Gamma (log link)"""

    family_name = "GLM Gamma"

    def check_preconditions(self, y: np.ndarray) -> None:
        super().check_preconditions(y)
        self._require_positive(y)

    def _make_family(self):
        return sm.families.Gamma(link=Log())

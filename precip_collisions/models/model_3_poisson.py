"""
model_3_poisson.py
==================
Model 3: GLM with Poisson family and log link

Natural choice for daily counts (collisions, injuries). No dispersion
parameter is estimated; negative outcomes violate the family.
"""

import numpy as np
import statsmodels.api as sm
from statsmodels.genmod.families.links import Log

from .base_model import BaseGLMModel


class Model3GLMPoisson(BaseGLMModel):
    """Model 3: GLM-Poisson (log link)"""

    family_name = "GLM Poisson"

    def check_preconditions(self, y: np.ndarray) -> None:
        super().check_preconditions(y)
        self._require_non_negative(y)

    def _make_family(self):
        return sm.families.Poisson(link=Log())

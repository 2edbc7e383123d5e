"""
model_2_glm_gaussian.py
=======================
Model 2: GLM with Gaussian family and identity link

Same mean model as OLS, fit by IRLS instead of least squares.
"""

import statsmodels.api as sm
from statsmodels.genmod.families.links import Identity

from .base_model import BaseGLMModel


class Model2GLMGaussian(BaseGLMModel):
    """Model 2: GLM-Gaussian (identity link)"""

    family_name = "GLM Gaussian"

    def _make_family(self):
        return sm.families.Gaussian(link=Identity())

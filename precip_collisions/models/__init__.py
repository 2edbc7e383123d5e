"""Regression families and the harness that compares them"""

from .base_model import (
    BaseRegressionModel,
    DataContractError,
    FamilyPreconditionError,
    ModelResult,
    ModelSpec,
    rmse,
)
from .harness import FAMILY_NAMES, ROSTER, ModelComparisonHarness
from .model_8_elasticnet import elastic_net_grid

__all__ = [
    'BaseRegressionModel',
    'DataContractError',
    'FamilyPreconditionError',
    'ModelResult',
    'ModelSpec',
    'rmse',
    'FAMILY_NAMES',
    'ROSTER',
    'ModelComparisonHarness',
    'elastic_net_grid',
]

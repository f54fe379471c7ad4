"""
Modeling layer
--------------

Regression, variance decomposition and k-fold cross-validation over a
prepared (country, predictor, response) dataset. Pure computation: no
file, network or console I/O happens in this package.
"""

from .cross_validation import (  # noqa: F401
    CrossValidationReport,
    CrossValidationStage,
    FoldResult,
    cross_validate,
)
from .dataset import Dataset, Observation  # noqa: F401
from .errors import (  # noqa: F401
    DegenerateInputError,
    InsufficientDataError,
    ModelingError,
    ZeroVarianceError,
)
from .folds import DEFAULT_MIN_PER_FOLD, FoldAssignment, partition  # noqa: F401
from .in_sample import InSampleFit, fit_in_sample  # noqa: F401
from .regression import FittedModel, ResponseTransform, fit, predict  # noqa: F401
from .variance import VarianceDecomposition, decompose  # noqa: F401

__all__ = [
    "DEFAULT_MIN_PER_FOLD",
    "Observation",
    "Dataset",
    "ModelingError",
    "DegenerateInputError",
    "ZeroVarianceError",
    "InsufficientDataError",
    "ResponseTransform",
    "FittedModel",
    "fit",
    "predict",
    "VarianceDecomposition",
    "decompose",
    "FoldAssignment",
    "partition",
    "CrossValidationStage",
    "FoldResult",
    "CrossValidationReport",
    "cross_validate",
    "InSampleFit",
    "fit_in_sample",
]

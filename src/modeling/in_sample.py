from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .dataset import Dataset
from .regression import FittedModel, fit
from .variance import VarianceDecomposition, decompose


@dataclass(frozen=True)
class InSampleFit:
    """Full-dataset fit plus its variance decomposition, in the fitted space."""

    model: FittedModel
    decomposition: VarianceDecomposition
    pearson_r: float
    n: int


def fit_in_sample(dataset: Dataset, transform_response: bool = True) -> InSampleFit:
    model = fit(dataset.observations, transform_response=transform_response)
    x = dataset.predictors()
    observed = model.transform.apply(dataset.responses())
    predicted = model.predict(x)
    decomposition = decompose(observed, predicted)

    # Defined once fit() and decompose() have ruled out constant x and y.
    pearson_r = float(np.corrcoef(x, observed)[0, 1])

    return InSampleFit(
        model=model,
        decomposition=decomposition,
        pearson_r=pearson_r,
        n=len(dataset),
    )


__all__ = ["InSampleFit", "fit_in_sample"]

"""
Ordinary least squares of a (possibly log10-transformed) response on a
single predictor.

The fit is computed in closed form on centered sums, which is the
numerically stable form of the normal equations:

    slope     = Σ(x - x̄)(y - ȳ) / Σ(x - x̄)²
    intercept = ȳ - slope · x̄

Rows are sorted by (predictor, response) before summing, so the result
does not depend on the order in which the caller hands them over.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Union

import numpy as np

from .dataset import Observation
from .errors import DegenerateInputError

ArrayLike = Union[float, Sequence[float], np.ndarray]


class ResponseTransform(str, Enum):
    IDENTITY = "identity"
    LOG10 = "log10"

    def apply(self, values: ArrayLike) -> np.ndarray:
        arr = np.asarray(values, dtype=float)
        if self is ResponseTransform.IDENTITY:
            return arr
        if np.any(arr <= 0):
            raise ValueError("log10 transform requires strictly positive response values")
        return np.log10(arr)

    def invert(self, values: ArrayLike) -> np.ndarray:
        arr = np.asarray(values, dtype=float)
        if self is ResponseTransform.IDENTITY:
            return arr
        return np.power(10.0, arr)


@dataclass(frozen=True)
class FittedModel:
    intercept: float
    slope: float
    transform: ResponseTransform
    n_obs: int

    def predict(self, predictor: ArrayLike) -> Union[float, np.ndarray]:
        """Prediction in the space the model was fit in (log10 space for LOG10)."""
        x = np.asarray(predictor, dtype=float)
        y = self.intercept + self.slope * x
        if y.ndim == 0:
            return float(y)
        return y

    def to_response_scale(self, predicted: ArrayLike) -> Union[float, np.ndarray]:
        """Map predictions back to the raw response scale (10**v for LOG10)."""
        y = self.transform.invert(predicted)
        if y.ndim == 0:
            return float(y)
        return y


def fit(rows: Sequence[Observation], transform_response: bool) -> FittedModel:
    n = len(rows)
    if n == 0:
        raise DegenerateInputError("cannot fit a line to zero rows", n_rows=0)

    transform = ResponseTransform.LOG10 if transform_response else ResponseTransform.IDENTITY
    x = np.array([r.predictor for r in rows], dtype=float)
    y = transform.apply([r.response for r in rows])

    order = np.lexsort((y, x))
    x = x[order]
    y = y[order]

    if np.unique(x).size < 2:
        raise DegenerateInputError(
            "fewer than 2 distinct predictor values; slope is undefined",
            n_rows=n,
        )

    x_mean = x.mean()
    y_mean = y.mean()
    dx = x - x_mean
    sxx = float(np.dot(dx, dx))
    sxy = float(np.dot(dx, y - y_mean))
    slope = sxy / sxx
    intercept = float(y_mean - slope * x_mean)

    return FittedModel(
        intercept=intercept,
        slope=float(slope),
        transform=transform,
        n_obs=n,
    )


def predict(model: FittedModel, predictor: ArrayLike) -> Union[float, np.ndarray]:
    return model.predict(predictor)


__all__ = ["ResponseTransform", "FittedModel", "fit", "predict"]
